"""
AWS Lambda entry points.

    sqs_task_handler         task queue consumer (TASK_BACKEND=lambda)
    scheduled_purge_drafts   EventBridge, hourly
    scheduled_flush_digests  EventBridge, every 15 minutes
    api_handler              API Gateway, through Mangum
"""
import json
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

import django  # noqa: E402

django.setup()

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def _ok(**body):
    return {'statusCode': 200, 'body': json.dumps(body)}


def sqs_task_handler(event, context):
    """
    Run every queued task in the batch.

    Records naming an unknown task are skipped and logged. A failing handler
    re-raises so SQS redelivers the batch and eventually dead-letters it.
    """
    from apps.core.task_handlers import TASK_HANDLERS

    processed = skipped = 0
    for record in event.get('Records', []):
        message = json.loads(record['body'])
        task_name = message['task_name']
        task_id = message.get('task_id', 'unknown')

        handler = TASK_HANDLERS.get(task_name)
        if handler is None:
            logger.error("Unknown task %s (id=%s)", task_name, task_id)
            skipped += 1
            continue

        try:
            result = handler(**message.get('payload', {}))
        except Exception:
            logger.exception("Task %s (id=%s) failed", task_name, task_id)
            raise
        logger.info("Task %s (id=%s) done: %s", task_name, task_id, result)
        processed += 1

    return _ok(processed=processed, skipped=skipped)


def scheduled_purge_drafts(event, context):
    from apps.tracker import draft_service

    return _ok(purged_count=draft_service.purge_expired_drafts())


def scheduled_flush_digests(event, context):
    from apps.notifications import digest_service

    return _ok(users_notified=digest_service.flush_pending_digests())


def api_handler(event, context):
    from config.asgi import lambda_handler

    return lambda_handler(event, context)
