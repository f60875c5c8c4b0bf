from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import AlreadyExistsError, is_unique_violation


def flush_or_conflict(db: Session, conflict_message: str) -> None:
    """Flush pending writes, reporting a unique constraint hit as AlreadyExistsError."""
    try:
        db.flush()
    except IntegrityError as exc:
        if is_unique_violation(exc):
            raise AlreadyExistsError(conflict_message) from exc
        raise

