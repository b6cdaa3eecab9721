from typing import Any, List, Optional
from uuid import UUID
from datetime import datetime
from ninja import Schema


class NotificationOut(Schema):
    id: UUID
    type: str
    title: str
    message: str
    action_url: str
    metadata: Any
    conversation_id: Optional[UUID] = None
    message_ref_id: Optional[UUID] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class UnreadCountOut(Schema):
    unread_count: int


class ChangeFeedOut(Schema):
    """Poll with since=<server_time of the previous response>."""
    server_time: datetime
    has_more: bool = False
    unread_count: int
    notifications: List[NotificationOut]
