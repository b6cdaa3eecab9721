"""
Background work for the coaching apps, behind one facade.

Callers never talk to Celery or SQS directly:

    from apps.core.task_service import TaskService

    # Mail a user's pending notifications once the digest window has passed
    TaskService.send_notification_digest(recipient_id, delay_seconds=30, trigger_item_id=item.id)

    # Re-apply a stored Cal.com delivery
    TaskService.process_booking_webhook(webhook_id)

TASK_BACKEND picks where the work runs:
    local   in-process and synchronous (development, tests)
    lambda  SQS queue drained by lambda_handlers.sqs_task_handler
    celery  Celery workers on Redis
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from uuid import UUID

from django.conf import settings

logger = logging.getLogger(__name__)


class TaskServiceInterface(ABC):
    """What every backend implements: hand a named task and its payload off."""

    @abstractmethod
    def send_task(
        self,
        task_name: str,
        payload: Dict[str, Any],
        delay_seconds: int = 0,
    ) -> str:
        """
        Run or enqueue `task_name` with `payload` as keyword arguments.
        Payload values must be JSON-serialisable. Returns a task id.
        """


def _get_backend() -> TaskServiceInterface:
    backend = getattr(settings, 'TASK_BACKEND', 'local')

    if backend == 'local':
        from apps.core.backends.local_backend import LocalTaskService
        return LocalTaskService()
    elif backend == 'lambda':
        from apps.core.backends.lambda_backend import LambdaTaskService
        return LambdaTaskService()
    elif backend == 'celery':
        from apps.core.backends.celery_backend import CeleryTaskService
        return CeleryTaskService()
    else:
        raise ValueError(f"Unknown TASK_BACKEND: {backend}")


def _send(task_name: str, payload: Optional[Dict[str, Any]] = None, delay_seconds: int = 0) -> str:
    task_id = _get_backend().send_task(task_name=task_name, payload=payload or {}, delay_seconds=delay_seconds)
    logger.info("Queued %s as %s (delay %ss)", task_name, task_id, delay_seconds)
    return task_id


class TaskService:
    """One static method per task; each returns the backend's task id."""

    @staticmethod
    def send_notification_digest(
        recipient_id: UUID,
        delay_seconds: int = 0,
        trigger_item_id: Optional[UUID] = None,
    ) -> str:
        """
        Mail recipient_id's unsent digest items after `delay_seconds`.

        The run does nothing when an item newer than trigger_item_id is
        pending, since that item scheduled its own run.
        """
        return _send(
            "send_notification_digest",
            {
                "recipient_id": str(recipient_id),
                "trigger_item_id": str(trigger_item_id) if trigger_item_id else None,
            },
            delay_seconds,
        )

    @staticmethod
    def flush_pending_digests() -> str:
        return _send("flush_pending_digests")

    @staticmethod
    def process_booking_webhook(webhook_id: UUID) -> str:
        """Apply a stored booking webhook again (admin replay)."""
        return _send("process_booking_webhook", {"webhook_id": str(webhook_id)})

    @staticmethod
    def purge_expired_drafts() -> str:
        return _send("purge_expired_drafts")
