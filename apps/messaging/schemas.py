from datetime import datetime
from typing import List, Optional
from uuid import UUID

from ninja import Schema


class ConversationIn(Schema):
    subject: str = ""
    coach_id: Optional[UUID] = None


class ConversationStatusIn(Schema):
    status: str


class ConversationOut(Schema):
    id: UUID
    mentee_id: UUID
    coach_id: Optional[UUID] = None
    mentee_name: str
    coach_name: Optional[str] = None
    subject: str
    status: str
    created_at: datetime
    updated_at: datetime
    last_message: Optional[str] = None
    last_message_at: Optional[datetime] = None
    unread_count: int = 0

    @staticmethod
    def resolve_mentee_name(obj):
        return obj.mentee.full_name

    @staticmethod
    def resolve_coach_name(obj):
        return obj.coach.full_name if obj.coach else None

    @staticmethod
    def resolve_last_message(obj):
        from apps.notifications.services import message_preview
        last = getattr(obj, 'last_message', None)
        return message_preview(last) if last else None

    @staticmethod
    def resolve_last_message_at(obj):
        return getattr(obj, 'last_message_at', None)

    @staticmethod
    def resolve_unread_count(obj):
        return getattr(obj, 'unread_count', 0)


class AttachmentIn(Schema):
    file_name: str
    file_url: str
    file_type: Optional[str] = None
    file_size: Optional[int] = None


class AttachmentOut(Schema):
    id: UUID
    file_name: str
    file_url: str
    file_type: str
    file_size: int


class MessageIn(Schema):
    content: str = ""
    message_type: str = "text"
    attachments: List[AttachmentIn] = []


class MessageOut(Schema):
    id: UUID
    conversation_id: UUID
    sender_id: UUID
    sender_name: str
    sender_type: str
    content: str
    message_type: str
    read_status: bool
    read_at: Optional[datetime] = None
    created_at: datetime
    attachments: List[AttachmentOut] = []

    @staticmethod
    def resolve_sender_name(obj):
        return obj.sender.full_name

    @staticmethod
    def resolve_attachments(obj):
        return list(obj.attachments.all())


class UnreadOut(Schema):
    unread_count: int


class MarkReadOut(Schema):
    updated: int


class UploadedAttachmentOut(Schema):
    file_name: str
    file_url: str
    file_type: str
    file_size: int
