"""Celery application for the email task queue.

Run the consumer with:

    celery -A worker.celery_app:celery_app worker -Q critical,default

Queues are consumed in the order given, so ``critical`` is drained first.
"""

from celery import Celery
from kombu import Queue

from app.config import get_settings

settings = get_settings()

QUEUE_CRITICAL = "critical"
QUEUE_DEFAULT = "default"

celery_app = Celery("job_search", broker=settings.redis_url, include=["worker.tasks"])
celery_app.conf.update(
    task_queues=(Queue(QUEUE_CRITICAL), Queue(QUEUE_DEFAULT)),
    task_default_queue=QUEUE_DEFAULT,
    task_serializer="json",
    accept_content=["json"],
    # At-least-once delivery: acknowledge after the handler finishes.
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    broker_connection_retry_on_startup=True,
)
