"""
E-mail digest: bundles a user's notifications into one message.

queue_digest_item() stores an item and schedules send_notification_digest
after NOTIFICATION_DIGEST_DELAY_SECONDS. Each scheduled run carries the id
of the item that scheduled it; a run whose item is no longer the newest
pending one does nothing, so only the last task in a burst sends.
"""
import logging
from collections import OrderedDict
from typing import Optional
from uuid import UUID

import boto3
from django.conf import settings
from django.db import transaction
from django.template.loader import render_to_string
from django.utils import timezone

from apps.identity.models import User
from .models import DigestItem, NotificationType

logger = logging.getLogger(__name__)

TYPE_TITLES = {
    NotificationType.JOB_RECOMMENDATION: "Job Recommendations",
    NotificationType.FILE_UPLOAD: "New Files",
    NotificationType.MESSAGE: "Messages",
    NotificationType.TODO_ASSIGNMENT: "Task Assignments",
    NotificationType.SESSION: "Sessions",
}

_ses_client = None


def get_ses_client():
    """Lazy SES client, created once per process."""
    global _ses_client
    if _ses_client is None:
        _ses_client = boto3.client('ses', region_name=settings.SES_REGION)
    return _ses_client


def queue_digest_item(recipient_id: UUID, type: str, title: str, details: str = "") -> DigestItem:
    """
    Store a digest item and schedule the recipient's digest e-mail once the
    surrounding transaction commits.

    Scheduling problems are logged, never raised: the beat flush picks up
    anything whose task was lost.
    """
    from apps.core.task_service import TaskService

    item = DigestItem.objects.create(recipient_id=recipient_id, type=type, title=title, details=details)

    def _schedule():
        try:
            TaskService.send_notification_digest(
                recipient_id=recipient_id,
                delay_seconds=settings.NOTIFICATION_DIGEST_DELAY_SECONDS,
                trigger_item_id=item.id,
            )
        except Exception:
            logger.exception("Could not schedule notification digest for user %s", recipient_id)

    transaction.on_commit(_schedule)
    return item


def _group_by_type(items) -> "OrderedDict[str, list]":
    groups = OrderedDict()
    for item in items:
        groups.setdefault(item.type, []).append(item)
    return groups


def build_digest_email(recipient: User, items: list) -> dict:
    """Subject plus text and HTML bodies for a list of digest items."""
    count = len(items)
    plural = "s" if count > 1 else ""
    sections = [
        {"title": TYPE_TITLES.get(item_type, "Notifications"), "items": group}
        for item_type, group in _group_by_type(items).items()
    ]
    context = {
        "name": recipient.first_name or recipient.full_name,
        "count": count,
        "plural": plural,
        "sections": sections,
        "dashboard_url": settings.APP_BASE_URL,
    }
    return {
        "subject": f"Platform Updates - {count} New Notification{plural}",
        "text": render_to_string("notifications/digest_email.txt", context),
        "html": render_to_string("notifications/digest_email.html", context),
    }


def send_email(to_address: str, subject: str, text: str, html: str) -> Optional[str]:
    """
    Send one e-mail through SES. Returns the SES message id.

    With SES_ENABLED off (development, tests) the mail is only logged.
    SES errors propagate so the task backend can retry.
    """
    if not settings.SES_ENABLED:
        logger.info("SES disabled; would send '%s' to %s", subject, to_address)
        return None

    response = get_ses_client().send_email(
        Source=settings.NOTIFICATION_FROM_EMAIL,
        Destination={'ToAddresses': [to_address]},
        Message={
            'Subject': {'Data': subject, 'Charset': 'UTF-8'},
            'Body': {
                'Text': {'Data': text, 'Charset': 'UTF-8'},
                'Html': {'Data': html, 'Charset': 'UTF-8'},
            },
        },
    )
    return response.get('MessageId')


def send_digest(recipient_id, trigger_item_id=None) -> int:
    """
    Mail every unsent item of the recipient in one e-mail. Returns the
    number of items sent (0 when the run was skipped).
    """
    pending = DigestItem.objects.filter(recipient_id=recipient_id, sent_at__isnull=True).order_by('created_at')

    if trigger_item_id:
        trigger = DigestItem.objects.filter(id=trigger_item_id).first()
        if trigger is not None and pending.filter(created_at__gt=trigger.created_at).exists():
            logger.debug("Newer digest item pending for user %s; skipping run", recipient_id)
            return 0

    items = list(pending)
    if not items:
        return 0

    recipient = User.objects.filter(id=recipient_id, is_active=True).first()
    if recipient is None or not recipient.email:
        logger.warning("Dropping %d digest item(s) for unreachable user %s", len(items), recipient_id)
        DigestItem.objects.filter(id__in=[i.id for i in items]).update(sent_at=timezone.now())
        return 0

    email = build_digest_email(recipient, items)
    message_id = send_email(recipient.email, email["subject"], email["text"], email["html"])

    DigestItem.objects.filter(id__in=[i.id for i in items]).update(sent_at=timezone.now())
    logger.info("Sent digest of %d item(s) to user %s (message %s)", len(items), recipient_id, message_id)
    return len(items)


def flush_pending_digests() -> int:
    """Send every recipient's unsent items regardless of the debounce window."""
    recipient_ids = list(
        DigestItem.objects.filter(sent_at__isnull=True)
        .order_by()
        .values_list('recipient_id', flat=True)
        .distinct()
    )
    flushed = 0
    for recipient_id in recipient_ids:
        try:
            if send_digest(recipient_id):
                flushed += 1
        except Exception:
            logger.exception("Digest flush failed for user %s", recipient_id)
    return flushed
