"""
In-process task backend (TASK_BACKEND=local).

Runs the handler right away, inside the caller's request, and ignores any
delay. Digest debouncing therefore collapses to "send on every item" unless
the caller defers scheduling to transaction.on_commit.
"""

import logging
import uuid
from typing import Any, Dict

from apps.core.task_handlers import TASK_HANDLERS
from apps.core.task_service import TaskServiceInterface

logger = logging.getLogger(__name__)


class LocalTaskService(TaskServiceInterface):

    def send_task(
        self,
        task_name: str,
        payload: Dict[str, Any],
        delay_seconds: int = 0,
    ) -> str:
        task_id = str(uuid.uuid4())

        handler = TASK_HANDLERS.get(task_name)
        if handler is None:
            logger.warning("[LOCAL] No handler registered for task %s", task_name)
            return task_id

        if delay_seconds:
            logger.debug("[LOCAL] Running %s now instead of in %ss", task_name, delay_seconds)

        try:
            result = handler(**payload)
        except Exception:
            logger.exception("[LOCAL] Task %s (id=%s) failed", task_name, task_id)
            raise
        logger.info("[LOCAL] Task %s (id=%s) finished: %s", task_name, task_id, result)
        return task_id
