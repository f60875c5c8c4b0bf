from datetime import datetime

from sqlalchemy.orm import Session

from app.models import VerifyEmail


def create_verify_email(db: Session, email: str, secret_code: str, expired_at: datetime) -> VerifyEmail:
    row = VerifyEmail(email=email, secret_code=secret_code, expired_at=expired_at)
    db.add(row)
    db.flush()
    return row


def consume_verify_email(db: Session, verify_email_id: int, secret_code: str) -> VerifyEmail | None:
    """Mark a verification row used if it is still valid.

    The update is guarded on id, code, unused and unexpired in a single
    statement, so concurrent attempts consume a row at most once. Returns
    None when nothing matched.
    """
    updated = (
        db.query(VerifyEmail)
        .filter(
            VerifyEmail.id == verify_email_id,
            VerifyEmail.secret_code == secret_code,
            VerifyEmail.is_used == False,
            VerifyEmail.expired_at > datetime.utcnow(),
        )
        .update({VerifyEmail.is_used: True}, synchronize_session=False)
    )
    if updated == 0:
        return None
    return db.query(VerifyEmail).filter(VerifyEmail.id == verify_email_id).populate_existing().one()
