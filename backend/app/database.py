import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.config import get_settings
from app.errors import InternalError, ServiceError

logger = logging.getLogger(__name__)

settings = get_settings()

_engine_kwargs = {"pool_pre_ping": True}
if settings.database_url.startswith("sqlite"):
    _engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    _engine_kwargs["pool_recycle"] = 3600

engine = create_engine(settings.database_url, **_engine_kwargs)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Iterator[Session]:
    """Request-scoped session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for work outside a request (scheduler jobs, task handlers)."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def exec_tx(db: Session) -> Iterator[Session]:
    """Run a block of store calls atomically.

    Commits when the block finishes, rolls back on any exception and
    re-raises it. If the rollback itself fails, both errors are reported in
    a single InternalError.
    """
    try:
        yield db
        db.commit()
    except Exception as exc:
        try:
            db.rollback()
        except Exception as rollback_exc:
            logger.exception("Rollback failed after: %s", exc)
            raise InternalError(f"tx err: {exc}, rb err: {rollback_exc}") from exc
        if isinstance(exc, ServiceError):
            raise
        logger.exception("Transaction failed")
        raise InternalError("internal server error") from exc
