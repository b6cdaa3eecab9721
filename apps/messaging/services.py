"""
Messaging services: mentee/coach conversations and their messages.
"""
import logging
from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count, OuterRef, Q, Subquery
from django.utils import timezone

from apps.identity.models import User, UserRole
from apps.mentoring.services import active_mentee_ids, first_active_coach
from apps.notifications import services as notification_service
from apps.notifications.digest_service import queue_digest_item
from apps.notifications.models import NotificationType
from .models import Conversation, ConversationStatus, Message, MessageAttachment, SenderType

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


def _visible_conversations(user: User):
    conversations = Conversation.objects.select_related('mentee', 'coach')
    if user.role == UserRole.ADMIN:
        return conversations
    if user.role == UserRole.MENTEE:
        return conversations.filter(mentee=user)
    return conversations.filter(Q(coach=user) | Q(mentee_id__in=active_mentee_ids(user)))


def get_conversation(user: User, conversation_id: UUID) -> Optional[Conversation]:
    return _visible_conversations(user).filter(id=conversation_id).first()


def list_conversations(user: User, status: Optional[str] = None) -> List[Conversation]:
    """
    Conversations the caller may see, most recently active first. Each row
    carries last_message, last_message_at and unread_count for the caller.
    """
    latest = Message.objects.filter(conversation=OuterRef('pk')).order_by('-created_at')
    conversations = _visible_conversations(user).annotate(
        last_message=Subquery(latest.values('content')[:1]),
        last_message_at=Subquery(latest.values('created_at')[:1]),
        unread_count=Count(
            'messages',
            filter=Q(messages__read_status=False) & ~Q(messages__sender=user),
        ),
    )
    if status:
        conversations = conversations.filter(status=status)
    return list(conversations.order_by('-updated_at'))


def create_conversation(mentee: User, subject: str = "", coach_id: Optional[UUID] = None) -> Conversation:
    """Start a conversation. The coach defaults to the mentee's first active coach."""
    coach = None
    if coach_id:
        coach = User.objects.filter(id=coach_id, role=UserRole.COACH, is_active=True).first()
        if coach is None:
            raise ValueError("Coach not found")
    else:
        coach = first_active_coach(mentee.id)

    conversation = Conversation.objects.create(mentee=mentee, coach=coach, subject=subject.strip())
    logger.info("Mentee %s opened conversation %s", mentee.id, conversation.id)
    return conversation


def update_status(conversation: Conversation, status: str) -> Conversation:
    if status not in ConversationStatus.values:
        raise ValueError(f"Invalid status: {status}")
    conversation.status = status
    conversation.save(update_fields=['status', 'updated_at'])
    return conversation


def list_messages(
    conversation: Conversation,
    before: Optional[datetime] = None,
    limit: int = DEFAULT_PAGE_SIZE,
) -> List[Message]:
    """
    One page of messages in ascending order. `before` pages backwards from
    the oldest message the client already has.
    """
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    messages = conversation.messages.select_related('sender').prefetch_related('attachments')
    if before is not None:
        messages = messages.filter(created_at__lt=before)
    page = list(messages.order_by('-created_at')[:limit])
    page.reverse()
    return page


def _recipient_of(conversation: Conversation, sender: User) -> Optional[User]:
    if sender.id == conversation.mentee_id:
        return conversation.coach or first_active_coach(conversation.mentee_id)
    return conversation.mentee


@transaction.atomic
def send_message(
    sender: User,
    conversation: Conversation,
    content: str,
    attachments: Iterable[dict] = (),
    message_type: str = 'text',
) -> Message:
    content = (content or "").strip()
    attachments = list(attachments)
    if not content and not attachments:
        raise ValueError("Message cannot be empty")
    if conversation.status == ConversationStatus.CLOSED:
        raise ValueError("Conversation is closed")

    sender_type = SenderType.MENTEE if sender.id == conversation.mentee_id else SenderType.COACH
    message = Message.objects.create(
        conversation=conversation,
        sender=sender,
        sender_type=sender_type,
        content=content,
        message_type=message_type,
    )
    for attachment in attachments:
        MessageAttachment.objects.create(
            message=message,
            file_name=attachment['file_name'],
            file_url=attachment['file_url'],
            file_type=attachment.get('file_type') or "",
            file_size=attachment.get('file_size') or 0,
        )

    # A coach answering an unowned thread takes it over
    if sender_type == SenderType.COACH and conversation.coach_id is None:
        conversation.coach = sender
    conversation.save()

    recipient = _recipient_of(conversation, sender)
    if recipient is not None:
        preview = content or f"Sent {len(attachments)} attachment(s)"
        notification_service.notify_message(
            recipient.id,
            preview,
            sender_name=sender.full_name,
            conversation_id=conversation.id,
            message_id=message.id,
        )
        if recipient.role == UserRole.MENTEE:
            queue_digest_item(
                recipient.id,
                NotificationType.MESSAGE,
                f"New message from {sender.full_name}",
                notification_service.message_preview(preview),
            )

    return message


def mark_conversation_read(user: User, conversation: Conversation) -> int:
    """Mark every message the caller did not send as read, plus the matching notifications."""
    updated = conversation.messages.filter(read_status=False).exclude(sender=user).update(
        read_status=True, read_at=timezone.now()
    )
    notification_service.mark_conversation_read(user, conversation.id)
    return updated


def total_unread(user: User) -> int:
    conversation_ids = _visible_conversations(user).values('id')
    return Message.objects.filter(
        conversation_id__in=conversation_ids, read_status=False
    ).exclude(sender=user).count()
