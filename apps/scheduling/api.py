"""
Scheduling API endpoints: availability, sessions and the Cal.com webhook.
"""
from datetime import date
from typing import List, Optional
from uuid import UUID

from django.http import HttpRequest
from ninja import Router
from ninja.errors import HttpError

from apps.core.task_service import TaskService
from apps.identity.decorators import require_auth, require_permission, require_role
from apps.identity.models import User, UserRole
from apps.identity.permissions import Permissions
from .models import BookingWebhook
from .schemas import (
    AvailabilityDay, AvailabilityIn, BlockedDateIn, BlockedDateOut, SlotsOut,
    SessionIn, ConfirmSessionIn, SessionOut, SessionListOut,
    WebhookAckOut, BookingWebhookOut, ReplayOut,
)
from . import services, webhook_service

router = Router(tags=["Scheduling"])


# =============================================================================
# Availability
# =============================================================================

@router.get("/availability", response=List[AvailabilityDay], auth=None)
def get_my_availability(request: HttpRequest):
    coach = require_permission(request, Permissions.SCHEDULING_MANAGE)
    return services.get_availability(coach.id)


@router.put("/availability", response=List[AvailabilityDay], auth=None)
def replace_availability(request: HttpRequest, payload: AvailabilityIn):
    """Replace the caller's whole weekly schedule."""
    coach = require_permission(request, Permissions.SCHEDULING_MANAGE)
    try:
        return services.replace_availability(coach, [d.dict() for d in payload.days])
    except ValueError as e:
        raise HttpError(400, str(e))


@router.get("/blocked-dates", response=List[BlockedDateOut], auth=None)
def list_blocked_dates(request: HttpRequest, from_date: Optional[date] = None):
    coach = require_permission(request, Permissions.SCHEDULING_MANAGE)
    return services.list_blocked_dates(coach, from_date)


@router.post("/blocked-dates", response={201: BlockedDateOut}, auth=None)
def add_blocked_date(request: HttpRequest, payload: BlockedDateIn):
    coach = require_permission(request, Permissions.SCHEDULING_MANAGE)
    try:
        return 201, services.add_blocked_date(coach, payload.dict())
    except ValueError as e:
        raise HttpError(400, str(e))


@router.delete("/blocked-dates/{blocked_id}", response={204: None}, auth=None)
def remove_blocked_date(request: HttpRequest, blocked_id: UUID):
    coach = require_permission(request, Permissions.SCHEDULING_MANAGE)
    if not services.remove_blocked_date(coach, blocked_id):
        raise HttpError(404, "Blocked date not found")
    return 204


@router.get("/coaches/{coach_id}/slots", response=SlotsOut, auth=None)
def coach_slots(request: HttpRequest, coach_id: UUID, day: date):
    """Open 30-minute slots for a coach on the given day."""
    require_auth(request)
    if not User.objects.filter(id=coach_id, role=UserRole.COACH, is_active=True).exists():
        raise HttpError(404, "Coach not found")
    return {"coach_id": coach_id, "date": day, "slots": services.open_slots(coach_id, day)}


# =============================================================================
# Sessions
# =============================================================================

@router.post("/sessions", response={201: SessionOut}, auth=None)
def book_session(request: HttpRequest, payload: SessionIn):
    mentee = require_permission(request, Permissions.SCHEDULING_BOOK)
    try:
        return 201, services.book_session(mentee, payload.dict())
    except ValueError as e:
        raise HttpError(400, str(e))


@router.get("/sessions", response=SessionListOut, auth=None)
def list_sessions(request: HttpRequest, status: Optional[str] = None):
    user = require_auth(request)
    return {
        "upcoming": services.list_sessions(user, when='upcoming', status=status),
        "past": services.list_sessions(user, when='past', status=status),
    }


def _get_session(user, session_id: UUID):
    session = services.get_session(user, session_id)
    if session is None:
        raise HttpError(404, "Session not found")
    return session


@router.post("/sessions/{session_id}/confirm", response=SessionOut, auth=None)
def confirm_session(request: HttpRequest, session_id: UUID, payload: ConfirmSessionIn):
    coach = require_permission(request, Permissions.SCHEDULING_MANAGE)
    session = _get_session(coach, session_id)
    try:
        return services.confirm_session(coach, session, payload.meeting_link or "")
    except PermissionError as e:
        raise HttpError(403, str(e))
    except ValueError as e:
        raise HttpError(400, str(e))


@router.post("/sessions/{session_id}/cancel", response=SessionOut, auth=None)
def cancel_session(request: HttpRequest, session_id: UUID):
    user = require_auth(request)
    session = _get_session(user, session_id)
    try:
        return services.cancel_session(user, session)
    except ValueError as e:
        raise HttpError(400, str(e))


@router.post("/sessions/{session_id}/complete", response=SessionOut, auth=None)
def complete_session(request: HttpRequest, session_id: UUID):
    coach = require_permission(request, Permissions.SCHEDULING_MANAGE)
    session = _get_session(coach, session_id)
    try:
        return services.complete_session(coach, session)
    except ValueError as e:
        raise HttpError(400, str(e))


# =============================================================================
# Cal.com Webhook
# =============================================================================

@router.post("/webhooks/calcom", response=WebhookAckOut, auth=None)
def calcom_webhook(request: HttpRequest):
    """
    Public endpoint for Cal.com booking events.

    The X-Cal-Signature-256 header is checked when CALCOM_WEBHOOK_SECRET is set.
    """
    try:
        result = webhook_service.receive_webhook(
            request.body, request.META.get(webhook_service.SIGNATURE_HEADER)
        )
    except webhook_service.WebhookRejected as e:
        raise HttpError(e.status_code, e.message)
    return {"message": result.message}


@router.get("/webhooks", response=List[BookingWebhookOut], auth=None)
def list_webhooks(request: HttpRequest, processed: Optional[bool] = None):
    require_role(request, UserRole.ADMIN)
    webhooks = BookingWebhook.objects.all()
    if processed is not None:
        webhooks = webhooks.filter(processed=processed)
    return webhooks[:100]


@router.post("/webhooks/{webhook_id}/replay", response={202: ReplayOut}, auth=None)
def replay_webhook(request: HttpRequest, webhook_id: UUID):
    """Queue a stored delivery for processing again."""
    require_role(request, UserRole.ADMIN)
    if not BookingWebhook.objects.filter(id=webhook_id).exists():
        raise HttpError(404, "Webhook not found")
    return 202, {"task_id": TaskService.process_booking_webhook(webhook_id)}
