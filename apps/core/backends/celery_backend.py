"""
Celery task backend (TASK_BACKEND=celery).

Tasks are sent by name, so the web process never imports the task modules;
workers started from config.celery pick them up through autodiscovery.
"""

import logging
import uuid
from typing import Any, Dict

from celery import current_app

from apps.core.task_service import TaskServiceInterface

logger = logging.getLogger(__name__)


CELERY_TASKS = {
    "send_notification_digest": "apps.notifications.tasks.send_notification_digest",
    "flush_pending_digests": "apps.notifications.tasks.flush_pending_digests",
    "process_booking_webhook": "apps.scheduling.tasks.process_booking_webhook",
    "purge_expired_drafts": "apps.tracker.tasks.purge_expired_drafts",
}


class CeleryTaskService(TaskServiceInterface):
    """Payload keys become task kwargs; the delay becomes the countdown."""

    def send_task(
        self,
        task_name: str,
        payload: Dict[str, Any],
        delay_seconds: int = 0,
    ) -> str:
        path = CELERY_TASKS.get(task_name)
        if path is None:
            raise ValueError(f"No Celery task mapped for: {task_name}")

        task_id = str(uuid.uuid4())
        options = {"kwargs": payload, "task_id": task_id}
        if delay_seconds > 0:
            options["countdown"] = delay_seconds

        current_app.send_task(path, **options)
        logger.info("[CELERY] Sent %s (id=%s)", path, task_id)
        return task_id
