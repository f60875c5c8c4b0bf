import logging

from app.config import get_settings
from app.database import session_scope
from app.services.email import EmailSender
from worker import processor
from worker.celery_app import celery_app
from worker.distributor import (
    DEFAULT_MAX_RETRY,
    TASK_SEND_CONFIRMATION_EMAIL,
    TASK_SEND_VERIFICATION_EMAIL,
)
from worker.processor import SkipRetry

logger = logging.getLogger(__name__)

RETRY_BASE_SECONDS = 10
RETRY_MAX_SECONDS = 3600


def retry_backoff(retries: int) -> int:
    """Exponential backoff in seconds for the given number of past retries."""
    return min(RETRY_BASE_SECONDS * 2 ** retries, RETRY_MAX_SECONDS)


def run_task(task, handler, payload, max_retry: int):
    """Run a handler with the queue's retry policy.

    SkipRetry drops the task. Any other error is retried with backoff until
    ``max_retry`` retries have been used, after which the task fails and is
    left in Celery's failed state.
    """
    try:
        return handler(payload)
    except SkipRetry as e:
        logger.warning(f"Task {task.name} dropped without retry: {e}")
        return None
    except Exception as e:
        retries = task.request.retries
        if retries >= max_retry:
            logger.error(f"Task {task.name} failed after {retries} retries, giving up: {e}")
            raise
        countdown = retry_backoff(retries)
        logger.warning(f"Task {task.name} failed (attempt {retries + 1}), retrying in {countdown}s: {e}")
        raise task.retry(exc=e, countdown=countdown, max_retries=max_retry)


def _send_verification_email(payload):
    with session_scope() as db:
        processor.process_send_verification_email(db, EmailSender(), payload, get_settings())


def _send_confirmation_email(payload):
    processor.process_send_confirmation_email(EmailSender(), payload)


@celery_app.task(bind=True, name=TASK_SEND_VERIFICATION_EMAIL)
def send_verification_email(self, payload, max_retry=DEFAULT_MAX_RETRY):
    return run_task(self, _send_verification_email, payload, max_retry)


@celery_app.task(bind=True, name=TASK_SEND_CONFIRMATION_EMAIL)
def send_confirmation_email(self, payload, max_retry=DEFAULT_MAX_RETRY):
    return run_task(self, _send_confirmation_email, payload, max_retry)
