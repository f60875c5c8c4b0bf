import logging
from dataclasses import dataclass

from celery import Celery

from worker.celery_app import QUEUE_CRITICAL, QUEUE_DEFAULT, celery_app

logger = logging.getLogger(__name__)

TASK_SEND_VERIFICATION_EMAIL = "task:send_verification_email"
TASK_SEND_CONFIRMATION_EMAIL = "task:send_confirmation_email"

DEFAULT_MAX_RETRY = 25


@dataclass(frozen=True)
class TaskOptions:
    queue: str = QUEUE_DEFAULT
    max_retry: int = DEFAULT_MAX_RETRY
    process_in: int = 0  # seconds


EMAIL_TASK_OPTIONS = TaskOptions(queue=QUEUE_CRITICAL, max_retry=10, process_in=10)


class TaskDistributor:
    """Producer side of the task queue."""

    def __init__(self, celery: Celery | None = None):
        self.celery = celery or celery_app

    def enqueue(self, task_type: str, payload: dict, options: TaskOptions = TaskOptions()) -> str:
        result = self.celery.send_task(
            task_type,
            args=[payload],
            kwargs={"max_retry": options.max_retry},
            queue=options.queue,
            countdown=options.process_in or None,
        )
        logger.info(
            f"Enqueued task {task_type} id={result.id} queue={options.queue} "
            f"max_retry={options.max_retry} payload={payload}"
        )
        return result.id

    def distribute_send_verification_email(self, payload: dict, options: TaskOptions = EMAIL_TASK_OPTIONS) -> str:
        return self.enqueue(TASK_SEND_VERIFICATION_EMAIL, {"email": payload["email"]}, options)

    def distribute_send_confirmation_email(self, payload: dict, options: TaskOptions = EMAIL_TASK_OPTIONS) -> str:
        return self.enqueue(
            TASK_SEND_CONFIRMATION_EMAIL,
            {
                "email": payload["email"],
                "full_name": payload["full_name"],
                "position": payload["position"],
                "company_name": payload["company_name"],
            },
            options,
        )
