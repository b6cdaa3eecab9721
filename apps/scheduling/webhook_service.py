"""
Cal.com booking webhooks.

Each delivery is stored as a BookingWebhook row, then applied to the
coaching session it refers to. A session matches when its start is within
30 minutes of the booking's startTime and its mentee is one of the
attendees.
"""
import hashlib
import hmac
import json
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.utils.dateparse import parse_datetime

from apps.audit.audit_service import AuditAction, log_action
from .models import BookingWebhook, CoachingSession, SessionStatus

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = 'HTTP_X_CAL_SIGNATURE_256'
MATCH_WINDOW = timedelta(minutes=30)

BOOKING_CREATED = 'BOOKING_CREATED'
BOOKING_CANCELLED = 'BOOKING_CANCELLED'
BOOKING_RESCHEDULED = 'BOOKING_RESCHEDULED'

MSG_PROCESSED = "Webhook processed successfully"
MSG_NOT_HANDLED = "Event type not handled"
MSG_NO_MATCH = "No matching session found"


class WebhookRejected(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


@dataclass(frozen=True)
class WebhookResult:
    message: str
    session_id: Optional[UUID] = None


def verify_signature(body: bytes, signature: Optional[str]) -> bool:
    """HMAC-SHA256 of the raw body. Always passes when no secret is configured."""
    secret = settings.CALCOM_WEBHOOK_SECRET
    if not secret:
        return True
    if not signature:
        return False
    expected = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature.strip().lower())


def parse_payload(body: bytes) -> dict:
    try:
        data = json.loads(body or b"")
    except (ValueError, UnicodeDecodeError):
        raise WebhookRejected(400, "Invalid JSON body")

    if not isinstance(data, dict) or not data.get('triggerEvent'):
        raise WebhookRejected(400, "Missing triggerEvent")
    payload = data.get('payload')
    if not isinstance(payload, dict) or not isinstance(payload.get('booking'), dict):
        raise WebhookRejected(400, "Missing payload.booking")
    return data


def _meeting_link(booking: dict) -> str:
    return booking.get('location') or f"https://cal.com/meeting/{booking.get('uid')}"


def _session_update(event: str, booking: dict) -> Optional[dict]:
    if event == BOOKING_CREATED:
        return {
            'status': SessionStatus.CONFIRMED,
            'cal_com_booking_id': booking.get('uid') or "",
            'meeting_link': _meeting_link(booking),
        }
    if event == BOOKING_CANCELLED:
        return {'status': SessionStatus.CANCELLED}
    if event == BOOKING_RESCHEDULED:
        return {
            'status': SessionStatus.CONFIRMED,
            'session_date': parse_datetime(booking.get('startTime') or ""),
            'cal_com_booking_id': booking.get('uid') or "",
            'meeting_link': _meeting_link(booking),
        }
    return None


def find_matching_session(booking: dict) -> Optional[CoachingSession]:
    start = parse_datetime(booking.get('startTime') or "")
    if start is None:
        return None
    emails = {
        (a.get('email') or "").lower()
        for a in booking.get('attendees') or []
        if isinstance(a, dict)
    }
    emails.discard("")
    if not emails:
        return None

    candidates = CoachingSession.objects.select_related('mentee').filter(
        session_date__gte=start - MATCH_WINDOW,
        session_date__lte=start + MATCH_WINDOW,
    ).order_by('session_date')
    return next((s for s in candidates if s.mentee.email.lower() in emails), None)


@transaction.atomic
def apply_webhook(data: dict) -> WebhookResult:
    event = data['triggerEvent']
    booking = data['payload']['booking']

    update = _session_update(event, booking)
    if update is None:
        logger.info("Ignoring Cal.com event %s", event)
        return WebhookResult(MSG_NOT_HANDLED)
    if 'session_date' in update and update['session_date'] is None:
        raise WebhookRejected(400, "Invalid startTime")

    session = find_matching_session(booking)
    if session is None:
        logger.info("No session matches Cal.com booking %s", booking.get('uid'))
        return WebhookResult(MSG_NO_MATCH)

    for field, value in update.items():
        setattr(session, field, value)
    session.save()

    uid = booking.get('uid')
    if uid:
        BookingWebhook.objects.filter(booking_id=uid).update(processed=True)

    log_action(
        action=AuditAction.PROCESS_WEBHOOK,
        target_type="CoachingSession",
        target_id=session.id,
        target_label=event,
        context={"booking_uid": uid, "status": session.status},
    )
    logger.info("Cal.com %s applied to session %s", event, session.id)
    return WebhookResult(MSG_PROCESSED, session.id)


def receive_webhook(body: bytes, signature: Optional[str]) -> WebhookResult:
    """
    Entry point for the public endpoint: verify, store, then apply.
    Raises WebhookRejected for deliveries that must not be accepted.
    """
    if not verify_signature(body, signature):
        raise WebhookRejected(401, "Invalid signature")

    data = parse_payload(body)
    booking = data['payload']['booking']
    BookingWebhook.objects.create(
        event_type=data['triggerEvent'],
        booking_id=str(booking.get('uid') or ""),
        event_data=data,
    )
    return apply_webhook(data)


def process_stored_webhook(webhook_id) -> WebhookResult:
    """Re-apply a stored delivery (admin replay through the task backend)."""
    webhook = BookingWebhook.objects.get(id=webhook_id)
    result = apply_webhook(webhook.event_data)
    # Deliveries without a uid are not covered by the booking_id update
    if result.session_id and not webhook.processed:
        BookingWebhook.objects.filter(id=webhook.id).update(processed=True)
    return result
