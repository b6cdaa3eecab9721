"""
In-app notification services.

The notify_* helpers build the wording for each notification type; callers
only pass the domain facts.
"""
import logging
from typing import Optional
from uuid import UUID

from django.utils import timezone

from .models import Notification, NotificationType

logger = logging.getLogger(__name__)

MESSAGE_PREVIEW_LENGTH = 100


def create_notification(
    *,
    user_id: UUID,
    title: str,
    message: str,
    type: str = NotificationType.GENERAL,
    action_url: str = "",
    metadata: Optional[dict] = None,
    conversation_id: Optional[UUID] = None,
    message_ref_id: Optional[UUID] = None,
) -> Notification:
    notification = Notification.objects.create(
        user_id=user_id,
        title=title,
        message=message,
        type=type,
        action_url=action_url or "",
        metadata=metadata or {},
        conversation_id=conversation_id,
        message_ref_id=message_ref_id,
    )
    logger.info("Created %s notification %s for user %s", type, notification.id, user_id)
    return notification


def notify_job_recommendation(user_id: UUID, job_title: str, company_name: str) -> Notification:
    return create_notification(
        user_id=user_id,
        title="New Job Recommendation",
        message=f"New job opportunity: {job_title} at {company_name}",
        type=NotificationType.JOB_RECOMMENDATION,
        action_url="/dashboard",
        metadata={"job_title": job_title, "company_name": company_name},
    )


def notify_file_upload(user_id: UUID, file_name: str) -> Notification:
    return create_notification(
        user_id=user_id,
        title="New File Available",
        message=f"A new file has been uploaded: {file_name}",
        type=NotificationType.FILE_UPLOAD,
        action_url="/dashboard",
        metadata={"file_name": file_name},
    )


def message_preview(content: str) -> str:
    if len(content) > MESSAGE_PREVIEW_LENGTH:
        return content[:MESSAGE_PREVIEW_LENGTH] + "..."
    return content


def notify_message(
    user_id: UUID,
    content: str,
    sender_name: str = "",
    conversation_id: Optional[UUID] = None,
    message_id: Optional[UUID] = None,
) -> Notification:
    title = f"New message from {sender_name}" if sender_name else "New Message"
    return create_notification(
        user_id=user_id,
        title=title,
        message=message_preview(content),
        type=NotificationType.MESSAGE,
        action_url="/messages",
        metadata={"sender_name": sender_name},
        conversation_id=conversation_id,
        message_ref_id=message_id,
    )


def todo_assignment_message(todo_title: Optional[str] = None, count: Optional[int] = None) -> str:
    if count and count > 1:
        return f"{count} new tasks have been assigned"
    if todo_title:
        return f"New task assigned: {todo_title}"
    return "New task has been assigned"


def notify_todo_assignment(user_id: UUID, todo_title: Optional[str] = None, count: Optional[int] = None) -> Notification:
    return create_notification(
        user_id=user_id,
        title="New Task Assigned",
        message=todo_assignment_message(todo_title, count),
        type=NotificationType.TODO_ASSIGNMENT,
        action_url="/todos",
        metadata={"todo_title": todo_title, "count": count},
    )


def notify_session(user_id: UUID, session_event: str, message: str) -> Notification:
    return create_notification(
        user_id=user_id,
        title=f"Session {session_event}",
        message=message,
        type=NotificationType.SESSION,
        action_url="/sessions",
        metadata={"session_event": session_event},
    )


# =============================================================================
# Reading side
# =============================================================================

def list_notifications(user, unread_only: bool = False, limit: int = 50):
    qs = Notification.objects.filter(user=user)
    if unread_only:
        qs = qs.filter(is_read=False)
    return list(qs[:max(1, min(limit, 200))])


def unread_count(user) -> int:
    return Notification.objects.filter(user=user, is_read=False).count()


def mark_read(user, notification_id: UUID) -> Optional[Notification]:
    notification = Notification.objects.filter(user=user, id=notification_id).first()
    if notification is None:
        return None
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = timezone.now()
        notification.save(update_fields=['is_read', 'read_at', 'updated_at'])
    return notification


def mark_all_read(user) -> int:
    # update() skips auto_now, so updated_at is set explicitly for the change feed
    now = timezone.now()
    return Notification.objects.filter(user=user, is_read=False).update(
        is_read=True, read_at=now, updated_at=now
    )


def mark_conversation_read(user, conversation_id: UUID) -> int:
    now = timezone.now()
    return Notification.objects.filter(
        user=user, conversation_id=conversation_id, is_read=False
    ).update(is_read=True, read_at=now, updated_at=now)


def delete_notification(user, notification_id: UUID) -> bool:
    deleted, _ = Notification.objects.filter(user=user, id=notification_id).delete()
    return deleted > 0


CHANGE_PAGE_SIZE = 200


def changes_since(user, since, limit: int = CHANGE_PAGE_SIZE):
    """
    Notifications created or updated after `since`, oldest change first.

    Returns (rows, has_more). A page never ends in the middle of rows sharing
    one updated_at (mark-all-read stamps them together), so the last row's
    updated_at is a safe `since` for the next page.
    """
    qs = Notification.objects.filter(user=user)
    if since is not None:
        qs = qs.filter(updated_at__gt=since)
    qs = qs.order_by('updated_at', 'id')

    rows = list(qs[:limit + 1])
    if len(rows) <= limit:
        return rows, False

    rows = rows[:limit]
    boundary = rows[-1].updated_at
    rows += list(qs.filter(updated_at=boundary).exclude(id__in=[r.id for r in rows]))
    return rows, qs.filter(updated_at__gt=boundary).exists()
