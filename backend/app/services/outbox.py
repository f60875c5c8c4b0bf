"""Transactional outbox for side effects of store writes.

Workflows call the ``record_*`` helpers inside their transaction, so an
event exists if and only if the change that caused it committed. The
``OutboxDispatcher`` later applies pending events to the search index or
hands them to the task queue. A failed event stays pending and is retried
on the next drain until it has used up ``max_attempts``; then it is parked
with ``failed_at`` set. Every handler is idempotent, so redelivery is
harmless.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, ContextManager

from sqlalchemy.orm import Session

from app.models import OutboxEvent
from app.services.search import SearchIndex, build_job_document

logger = logging.getLogger(__name__)

JOB_UPSERT = "job.upsert"
JOB_DELETE = "job.delete"
EMAIL_VERIFY = "email.verify"
EMAIL_CONFIRM = "email.confirm"

MAX_ERROR_LENGTH = 1000


def record_event(db: Session, event_type: str, payload: dict) -> OutboxEvent:
    event = OutboxEvent(event_type=event_type, payload=payload, attempts=0)
    db.add(event)
    return event


def record_job_upsert(db: Session, job_id: int) -> OutboxEvent:
    return record_event(db, JOB_UPSERT, {"job_id": job_id})


def record_job_delete(db: Session, job_id: int) -> OutboxEvent:
    return record_event(db, JOB_DELETE, {"job_id": job_id})


def record_verification_email(db: Session, email: str) -> OutboxEvent:
    return record_event(db, EMAIL_VERIFY, {"email": email})


def record_confirmation_email(
    db: Session, email: str, full_name: str, position: str, company_name: str
) -> OutboxEvent:
    return record_event(
        db,
        EMAIL_CONFIRM,
        {
            "email": email,
            "full_name": full_name,
            "position": position,
            "company_name": company_name,
        },
    )


def _pending(query):
    return query.filter(OutboxEvent.dispatched_at.is_(None), OutboxEvent.failed_at.is_(None))


def count_pending_events(db: Session) -> int:
    return _pending(db.query(OutboxEvent)).count()


def purge_dispatched_events(db: Session, older_than_days: int) -> int:
    """Delete events dispatched more than ``older_than_days`` ago.

    Parked events are kept so their ``last_error`` can be inspected.
    """
    threshold = datetime.utcnow() - timedelta(days=older_than_days)
    return (
        db.query(OutboxEvent)
        .filter(OutboxEvent.dispatched_at.is_not(None))
        .filter(OutboxEvent.dispatched_at < threshold)
        .delete(synchronize_session=False)
    )


class OutboxDispatcher:
    def __init__(
        self,
        session_factory: Callable[[], ContextManager[Session]],
        search_index: SearchIndex,
        distributor,
        batch_size: int = 100,
        max_attempts: int = 10,
    ):
        self.session_factory = session_factory
        self.search_index = search_index
        self.distributor = distributor
        self.batch_size = batch_size
        self.max_attempts = max_attempts

    def dispatch_pending(self) -> int:
        """Apply one batch of pending events. Returns how many succeeded."""
        with self.session_factory() as db:
            events = (
                _pending(db.query(OutboxEvent))
                .order_by(OutboxEvent.id)
                .limit(self.batch_size)
                .with_for_update(skip_locked=True)
                .all()
            )
            if not events:
                db.commit()
                return 0

            dispatched = 0
            for event in events:
                event.attempts = (event.attempts or 0) + 1
                try:
                    self._apply(db, event)
                except Exception as e:
                    event.last_error = str(e)[:MAX_ERROR_LENGTH]
                    if event.attempts >= self.max_attempts:
                        event.failed_at = datetime.utcnow()
                        logger.error(
                            f"Outbox event {event.id} ({event.event_type}) parked after {event.attempts} attempts: {e}"
                        )
                    else:
                        logger.warning(
                            f"Outbox event {event.id} ({event.event_type}) failed on attempt {event.attempts}: {e}"
                        )
                    continue
                event.dispatched_at = datetime.utcnow()
                event.last_error = None
                dispatched += 1

            db.commit()
            logger.info(f"Outbox dispatch: {dispatched}/{len(events)} events applied")
            return dispatched

    def _apply(self, db: Session, event: OutboxEvent) -> None:
        payload = event.payload or {}
        if event.event_type == JOB_UPSERT:
            job_id = payload["job_id"]
            document = build_job_document(db, job_id)
            if document is None:
                # Job was deleted after the event was written.
                self.search_index.delete(job_id)
            else:
                self.search_index.upsert(job_id, document)
        elif event.event_type == JOB_DELETE:
            self.search_index.delete(payload["job_id"])
        elif event.event_type == EMAIL_VERIFY:
            self.distributor.distribute_send_verification_email(payload)
        elif event.event_type == EMAIL_CONFIRM:
            self.distributor.distribute_send_confirmation_email(payload)
        else:
            raise ValueError(f"unknown outbox event type {event.event_type!r}")


def drain_outbox(dispatcher: OutboxDispatcher) -> None:
    """Best-effort drain. Whatever fails stays pending for the scheduler."""
    try:
        dispatcher.dispatch_pending()
    except Exception:
        logger.exception("Outbox drain failed")
