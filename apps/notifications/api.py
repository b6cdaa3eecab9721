"""
Notifications API.

Besides the usual list / read / delete endpoints, GET /changes is the polled
change feed that replaces a realtime subscription: clients pass the
server_time of their previous poll and re-fetch whatever changed.
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from django.http import HttpRequest
from django.utils import timezone
from ninja import Router
from ninja.errors import HttpError

from apps.identity.decorators import require_auth
from .schemas import NotificationOut, UnreadCountOut, ChangeFeedOut
from . import services

router = Router(tags=["Notifications"])


@router.get("/", response=List[NotificationOut], auth=None)
def list_notifications(request: HttpRequest, unread_only: bool = False, limit: int = 50):
    user = require_auth(request)
    return services.list_notifications(user, unread_only=unread_only, limit=limit)


@router.get("/unread-count", response=UnreadCountOut, auth=None)
def get_unread_count(request: HttpRequest):
    user = require_auth(request)
    return {"unread_count": services.unread_count(user)}


@router.get("/changes", response=ChangeFeedOut, auth=None)
def get_changes(request: HttpRequest, since: Optional[datetime] = None):
    """
    Notifications created or updated after `since`, plus the unread count.

    With has_more set, server_time is the last returned change and the
    client polls again straight away to drain the rest.
    """
    user = require_auth(request)
    server_time = timezone.now()
    if since is not None and timezone.is_naive(since):
        since = timezone.make_aware(since)
    notifications, has_more = services.changes_since(user, since)
    if has_more:
        server_time = notifications[-1].updated_at
    return {
        "server_time": server_time,
        "has_more": has_more,
        "unread_count": services.unread_count(user),
        "notifications": notifications,
    }


@router.post("/read-all", auth=None)
def mark_all_read(request: HttpRequest):
    user = require_auth(request)
    return {"updated": services.mark_all_read(user)}


@router.post("/{notification_id}/read", response=NotificationOut, auth=None)
def mark_read(request: HttpRequest, notification_id: UUID):
    user = require_auth(request)
    notification = services.mark_read(user, notification_id)
    if notification is None:
        raise HttpError(404, "Notification not found")
    return notification


@router.delete("/{notification_id}", response={204: None}, auth=None)
def delete_notification(request: HttpRequest, notification_id: UUID):
    user = require_auth(request)
    if not services.delete_notification(user, notification_id):
        raise HttpError(404, "Notification not found")
    return 204
