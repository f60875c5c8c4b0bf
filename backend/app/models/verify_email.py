from sqlalchemy import BigInteger, Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from app.database import Base


class VerifyEmail(Base):
    """Single-use verification code sent to a user or employer address."""

    __tablename__ = "verify_emails"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, index=True)
    secret_code = Column(String(255), nullable=False)
    is_used = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())
    expired_at = Column(DateTime, nullable=False)
