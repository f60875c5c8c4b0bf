import secrets
import string
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from passlib.context import CryptContext
from jose import jwt, ExpiredSignatureError, JWTError

from app.config import get_settings
from app.errors import UnauthenticatedError

settings = get_settings()

JWT_ALGORITHM = "HS256"
SECRET_CODE_LENGTH = 32
_SECRET_ALPHABET = string.ascii_letters + string.digits

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass
class TokenPayload:
    id: str
    email: str
    issued_at: datetime
    expired_at: datetime


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(email: str, duration: timedelta | None = None) -> tuple[str, TokenPayload]:
    """Create a signed access token for an account email.

    The token lifetime defaults to ACCESS_TOKEN_DURATION.
    """
    issued_at = datetime.now(timezone.utc).replace(microsecond=0)
    expired_at = issued_at + (duration if duration is not None else settings.access_token_duration)
    payload = TokenPayload(
        id=str(uuid.uuid4()),
        email=email,
        issued_at=issued_at,
        expired_at=expired_at,
    )
    claims = {
        "id": payload.id,
        "email": payload.email,
        "iat": int(issued_at.timestamp()),
        "exp": int(expired_at.timestamp()),
    }
    token = jwt.encode(claims, settings.token_symmetric_key, algorithm=JWT_ALGORITHM)
    return token, payload


def decode_access_token(token: str) -> TokenPayload:
    """Verify a token and return its payload. Raises UnauthenticatedError."""
    try:
        claims = jwt.decode(token, settings.token_symmetric_key, algorithms=[JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise UnauthenticatedError("token has expired")
    except JWTError:
        raise UnauthenticatedError("token is invalid")

    try:
        return TokenPayload(
            id=claims["id"],
            email=claims["email"],
            issued_at=datetime.fromtimestamp(claims["iat"], tz=timezone.utc),
            expired_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )
    except (KeyError, TypeError, ValueError):
        raise UnauthenticatedError("token is invalid")


def generate_secret_code(length: int = SECRET_CODE_LENGTH) -> str:
    """Random alphanumeric code for email verification links."""
    return "".join(secrets.choice(_SECRET_ALPHABET) for _ in range(length))
