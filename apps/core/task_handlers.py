"""
Task name -> callable registry shared by the local backend and the SQS
Lambda consumer. Payload keys arrive as keyword arguments, ids as strings.
"""
from typing import Callable, Dict

TASK_HANDLERS: Dict[str, Callable] = {}


def register_handler(task_name: str):
    def decorator(func):
        TASK_HANDLERS[task_name] = func
        return func
    return decorator


@register_handler("send_notification_digest")
def handle_send_notification_digest(recipient_id: str, trigger_item_id: str = None):
    from apps.notifications import digest_service

    sent = digest_service.send_digest(recipient_id, trigger_item_id=trigger_item_id)
    return f"Sent {sent} digest item(s) to user {recipient_id}"


@register_handler("flush_pending_digests")
def handle_flush_pending_digests():
    from apps.notifications import digest_service

    count = digest_service.flush_pending_digests()
    return f"Flushed digests for {count} user(s)"


@register_handler("process_booking_webhook")
def handle_process_booking_webhook(webhook_id: str):
    from apps.scheduling import webhook_service

    return webhook_service.process_stored_webhook(webhook_id).message


@register_handler("purge_expired_drafts")
def handle_purge_expired_drafts():
    from apps.tracker import draft_service

    count = draft_service.purge_expired_drafts()
    return f"Purged {count} expired draft(s)"
