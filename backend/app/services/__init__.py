from app.services.auth import (
    TokenPayload,
    hash_password,
    verify_password,
    create_access_token,
    decode_access_token,
    generate_secret_code,
)
from app.services.email import EmailSender, EmailMessage, EmailDeliveryError
from app.services.search import SearchIndex

__all__ = [
    "TokenPayload",
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_access_token",
    "generate_secret_code",
    "EmailSender",
    "EmailMessage",
    "EmailDeliveryError",
    "SearchIndex",
]
