"""Task handlers, independent of Celery so they can be called directly."""

import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.config import Settings
from app.database import exec_tx
from app.models import User, VerifyEmail
from app.services.accounts import find_account
from app.services.auth import generate_secret_code
from app.services.email import build_confirmation_email, build_verification_email
from app.store import verify_emails as verify_email_store

logger = logging.getLogger(__name__)


class SkipRetry(Exception):
    """Permanent failure. The task is dropped instead of retried."""


def _require_fields(payload, *fields: str) -> dict:
    if not isinstance(payload, dict):
        raise SkipRetry(f"failed to unmarshal payload: {payload!r}")
    missing = [f for f in fields if not payload.get(f)]
    if missing:
        raise SkipRetry(f"failed to unmarshal payload: missing {', '.join(missing)}")
    return payload


def verification_url(settings: Settings, account, verify_email: VerifyEmail) -> str:
    kind = "users" if isinstance(account, User) else "employers"
    return (
        f"{settings.app_url}/api/v1/{kind}/verify-email"
        f"?id={verify_email.id}&code={verify_email.secret_code}"
    )


def process_send_verification_email(db: Session, mailer, payload, settings: Settings) -> VerifyEmail:
    """Create a verification code for the account and email the link to it."""
    payload = _require_fields(payload, "email")
    account = find_account(db, payload["email"].lower())
    if account is None:
        raise SkipRetry(f"no user or employer with email {payload['email']}")

    with exec_tx(db):
        verify_email = verify_email_store.create_verify_email(
            db,
            email=account.email,
            secret_code=generate_secret_code(),
            expired_at=datetime.utcnow() + timedelta(minutes=settings.verify_email_expiry_minutes),
        )

    message = build_verification_email(
        to_email=account.email,
        full_name=account.full_name,
        verify_url=verification_url(settings, account, verify_email),
        expiry_minutes=settings.verify_email_expiry_minutes,
    )
    mailer.send(message)
    logger.info("Processed verification email task for %s", account.email)
    return verify_email


def process_send_confirmation_email(mailer, payload) -> None:
    payload = _require_fields(payload, "email", "full_name", "position", "company_name")
    message = build_confirmation_email(
        to_email=payload["email"],
        full_name=payload["full_name"],
        position=payload["position"],
        company_name=payload["company_name"],
    )
    mailer.send(message)
    logger.info("Processed confirmation email task for %s", payload["email"])
