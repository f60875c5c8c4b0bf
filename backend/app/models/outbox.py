from sqlalchemy import JSON, BigInteger, Column, DateTime, Integer, String, Text, Index
from sqlalchemy.sql import func

from app.database import Base


class OutboxEvent(Base):
    """A side effect recorded in the same transaction as the change that caused it.

    Rows stay pending (``dispatched_at`` is NULL) until the dispatcher has
    applied them to the search index or handed them to the task queue.
    An event that keeps failing is parked with ``failed_at`` set and is no
    longer picked up.
    """

    __tablename__ = "outbox_events"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    event_type = Column(String(64), nullable=False)
    payload = Column(JSON, nullable=False)
    attempts = Column(Integer, nullable=False, default=0)
    last_error = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    dispatched_at = Column(DateTime, nullable=True)
    failed_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("ix_outbox_events_pending", "dispatched_at", "id"),
        Index("ix_outbox_events_dispatched_at", "dispatched_at"),
    )
