"""
Tests for the task service facade and its backends.
"""
import json
from unittest.mock import MagicMock, patch
from uuid import uuid4

from django.test import TestCase, override_settings

from apps.core import task_handlers
from apps.core.backends.celery_backend import CeleryTaskService
from apps.core.backends.lambda_backend import LambdaTaskService, SQS_MAX_DELAY_SECONDS
from apps.core.task_service import TaskService
from config.celery import task_routes


class LocalBackendTest(TestCase):
    @override_settings(TASK_BACKEND='local')
    def test_runs_registered_handler(self):
        with patch.dict(task_handlers.TASK_HANDLERS, {"flush_pending_digests": MagicMock(return_value="ok")}):
            task_id = TaskService.flush_pending_digests()
            task_handlers.TASK_HANDLERS["flush_pending_digests"].assert_called_once_with()
        self.assertTrue(task_id)

    @override_settings(TASK_BACKEND='local')
    def test_payload_is_passed_as_kwargs(self):
        handler = MagicMock(return_value="done")
        recipient_id = uuid4()
        with patch.dict(task_handlers.TASK_HANDLERS, {"send_notification_digest": handler}):
            TaskService.send_notification_digest(recipient_id, delay_seconds=30)
        handler.assert_called_once_with(recipient_id=str(recipient_id), trigger_item_id=None)

    @override_settings(TASK_BACKEND='local')
    def test_handler_errors_propagate(self):
        handler = MagicMock(side_effect=RuntimeError("boom"))
        with patch.dict(task_handlers.TASK_HANDLERS, {"purge_expired_drafts": handler}):
            with self.assertRaises(RuntimeError):
                TaskService.purge_expired_drafts()

    @override_settings(TASK_BACKEND='carrier-pigeon')
    def test_unknown_backend(self):
        with self.assertRaises(ValueError):
            TaskService.purge_expired_drafts()


class CeleryBackendTest(TestCase):
    def test_delay_maps_to_countdown(self):
        with patch("apps.core.backends.celery_backend.current_app") as app:
            task_id = CeleryTaskService().send_task(
                "send_notification_digest",
                {"recipient_id": "r1", "trigger_item_id": "i1"},
                delay_seconds=30,
            )
        app.send_task.assert_called_once_with(
            "apps.notifications.tasks.send_notification_digest",
            kwargs={"recipient_id": "r1", "trigger_item_id": "i1"},
            task_id=task_id,
            countdown=30,
        )

    def test_unmapped_task(self):
        with self.assertRaises(ValueError):
            CeleryTaskService().send_task("mine_bitcoin", {})

    def test_notifications_share_the_default_queue_unless_configured(self):
        self.assertEqual(task_routes(""), {})
        self.assertEqual(
            task_routes("mail"),
            {"apps.notifications.tasks.*": {"queue": "mail"}},
        )


class LambdaBackendTest(TestCase):
    @patch.dict("os.environ", {"TASK_QUEUE_URL": "https://sqs.example/queue"})
    def test_sends_sqs_message_with_capped_delay(self):
        service = LambdaTaskService()
        service._sqs_client = MagicMock()
        service._sqs_client.send_message.return_value = {"MessageId": "m-1"}

        task_id = service.send_task("purge_expired_drafts", {}, delay_seconds=5000)

        kwargs = service._sqs_client.send_message.call_args.kwargs
        self.assertEqual(kwargs["QueueUrl"], "https://sqs.example/queue")
        self.assertEqual(kwargs["DelaySeconds"], SQS_MAX_DELAY_SECONDS)
        body = json.loads(kwargs["MessageBody"])
        self.assertEqual(body["task_name"], "purge_expired_drafts")
        self.assertEqual(body["task_id"], task_id)

    @patch.dict("os.environ", {}, clear=True)
    def test_missing_queue_url(self):
        with self.assertRaises(RuntimeError):
            LambdaTaskService().send_task("purge_expired_drafts", {})
