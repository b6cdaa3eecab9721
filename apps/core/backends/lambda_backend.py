"""
SQS task backend (TASK_BACKEND=lambda).

Every task is one SQS message read by lambda_handlers.sqs_task_handler.
The queue comes from TASK_QUEUE_URL and the client region from AWS_REGION.
"""

import json
import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

import boto3

from apps.core.task_service import TaskServiceInterface

logger = logging.getLogger(__name__)

# DelaySeconds is capped at 15 minutes by SQS
SQS_MAX_DELAY_SECONDS = 900


def build_message(task_id: str, task_name: str, payload: Dict[str, Any]) -> str:
    return json.dumps({
        "task_id": task_id,
        "task_name": task_name,
        "payload": payload,
        "queued_at": datetime.now(timezone.utc).isoformat(),
    })


class LambdaTaskService(TaskServiceInterface):

    def __init__(self):
        self._queue_url = os.getenv("TASK_QUEUE_URL")
        self._sqs_client = None

    @property
    def sqs_client(self):
        if self._sqs_client is None:
            self._sqs_client = boto3.client("sqs", region_name=os.getenv("AWS_REGION", "us-east-1"))
        return self._sqs_client

    def send_task(
        self,
        task_name: str,
        payload: Dict[str, Any],
        delay_seconds: int = 0,
    ) -> str:
        if not self._queue_url:
            raise RuntimeError("TASK_QUEUE_URL must be set when TASK_BACKEND=lambda")

        task_id = str(uuid.uuid4())
        delay = min(max(delay_seconds, 0), SQS_MAX_DELAY_SECONDS)
        if delay < delay_seconds:
            logger.info("[SQS] Delay for %s capped at %ss", task_name, delay)

        response = self.sqs_client.send_message(
            QueueUrl=self._queue_url,
            MessageBody=build_message(task_id, task_name, payload),
            DelaySeconds=delay,
            MessageAttributes={
                "TaskName": {"DataType": "String", "StringValue": task_name},
            },
        )
        logger.info("[SQS] Queued %s (id=%s, message=%s)", task_name, task_id, response["MessageId"])
        return task_id
