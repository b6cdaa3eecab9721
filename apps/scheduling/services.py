"""
Scheduling services: coach availability, open slots and coaching sessions.

Times are interpreted in the project time zone (settings.TIME_ZONE).
"""
import logging
import secrets
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from apps.audit.audit_service import AuditAction, log_action
from apps.identity.models import User, UserRole
from apps.mentoring.services import active_coach_ids, active_mentee_ids
from apps.notifications.digest_service import queue_digest_item
from apps.notifications.models import NotificationType
from apps.notifications.services import notify_session
from .models import BlockedDate, CoachAvailability, CoachingSession, SessionStatus

logger = logging.getLogger(__name__)

SLOT_MINUTES = 30
MEETING_LINK_BASE = "https://meet.google.com/"

# Monday-Friday, 09:00-17:00 (0 = Sunday)
DEFAULT_WORKING_DAYS = (1, 2, 3, 4, 5)
DEFAULT_START = time(9, 0)
DEFAULT_END = time(17, 0)

ACTIVE_STATUSES = (SessionStatus.PENDING, SessionStatus.CONFIRMED)


def day_of_week(day: date) -> int:
    """Sunday-based weekday number."""
    return (day.weekday() + 1) % 7


# =============================================================================
# Availability
# =============================================================================

def default_week() -> List[dict]:
    return [
        {
            'day_of_week': day,
            'start_time': DEFAULT_START,
            'end_time': DEFAULT_END,
            'is_available': day in DEFAULT_WORKING_DAYS,
        }
        for day in range(7)
    ]


def get_availability(coach_id: UUID) -> List[dict]:
    rows = list(CoachAvailability.objects.filter(coach_id=coach_id))
    if not rows:
        return default_week()
    return [
        {
            'day_of_week': r.day_of_week,
            'start_time': r.start_time,
            'end_time': r.end_time,
            'is_available': r.is_available,
        }
        for r in rows
    ]


@transaction.atomic
def replace_availability(coach: User, days: Iterable[dict]) -> List[dict]:
    days = list(days)
    seen = set()
    for day in days:
        if not 0 <= day['day_of_week'] <= 6:
            raise ValueError("day_of_week must be between 0 (Sunday) and 6 (Saturday)")
        if day['day_of_week'] in seen:
            raise ValueError("Each day can only appear once")
        if day['start_time'] >= day['end_time']:
            raise ValueError("start_time must be before end_time")
        seen.add(day['day_of_week'])

    CoachAvailability.objects.filter(coach=coach).delete()
    CoachAvailability.objects.bulk_create([
        CoachAvailability(
            coach=coach,
            day_of_week=day['day_of_week'],
            start_time=day['start_time'],
            end_time=day['end_time'],
            is_available=day.get('is_available', True),
        )
        for day in days
    ])
    return get_availability(coach.id)


def _hours_for(coach_id: UUID, day: date):
    """(start, end) working hours on `day`, or None when the coach is off."""
    weekday = day_of_week(day)
    rows = CoachAvailability.objects.filter(coach_id=coach_id)
    if not rows.exists():
        if weekday in DEFAULT_WORKING_DAYS:
            return DEFAULT_START, DEFAULT_END
        return None
    row = rows.filter(day_of_week=weekday, is_available=True).first()
    return (row.start_time, row.end_time) if row else None


def list_blocked_dates(coach: User, from_date: Optional[date] = None) -> List[BlockedDate]:
    blocked = BlockedDate.objects.filter(coach=coach)
    if from_date:
        blocked = blocked.filter(blocked_date__gte=from_date)
    return list(blocked)


def add_blocked_date(coach: User, data: dict) -> BlockedDate:
    start, end = data.get('start_time'), data.get('end_time')
    if (start is None) != (end is None):
        raise ValueError("Provide both start_time and end_time, or neither")
    if start is not None and start >= end:
        raise ValueError("start_time must be before end_time")
    return BlockedDate.objects.create(
        coach=coach,
        blocked_date=data['blocked_date'],
        start_time=start,
        end_time=end,
        reason=data.get('reason') or "",
    )


def remove_blocked_date(coach: User, blocked_id: UUID) -> bool:
    deleted, _ = BlockedDate.objects.filter(coach=coach, id=blocked_id).delete()
    return deleted > 0


# =============================================================================
# Slots
# =============================================================================

def _aware(day: date, at: time) -> datetime:
    return timezone.make_aware(datetime.combine(day, at))


def _coach_sessions(coach_id: UUID, start: datetime, end: datetime, exclude_id=None):
    # A session can run at most a day, so look back that far for overlaps
    sessions = CoachingSession.objects.filter(
        Q(coach_id=coach_id) | Q(coach__isnull=True, preferred_coach_id=coach_id),
        status__in=ACTIVE_STATUSES,
        session_date__lt=end,
        session_date__gte=start - timedelta(days=1),
    )
    if exclude_id:
        sessions = sessions.exclude(id=exclude_id)
    return [
        s for s in sessions
        if s.session_date + timedelta(minutes=s.duration) > start
    ]


def is_slot_open(coach_id: UUID, start: datetime, duration: int = SLOT_MINUTES, exclude_id=None) -> bool:
    """
    True when [start, start + duration) lies inside the coach's hours, is not
    blocked and does not overlap a pending or confirmed session.
    """
    start = timezone.localtime(start)
    end = start + timedelta(minutes=duration)
    day = start.date()

    hours = _hours_for(coach_id, day)
    if hours is None:
        return False
    if start < _aware(day, hours[0]) or end > _aware(day, hours[1]):
        return False

    for block in BlockedDate.objects.filter(coach_id=coach_id, blocked_date=day):
        if block.start_time is None:
            return False
        if start < _aware(day, block.end_time) and end > _aware(day, block.start_time):
            return False

    return not _coach_sessions(coach_id, start, end, exclude_id=exclude_id)


def open_slots(coach_id: UUID, day: date) -> List[datetime]:
    """Open 30-minute slot start times for the coach on `day`, skipping the past."""
    hours = _hours_for(coach_id, day)
    if hours is None:
        return []

    now = timezone.now()
    slot = _aware(day, hours[0])
    last_start = _aware(day, hours[1]) - timedelta(minutes=SLOT_MINUTES)
    slots = []
    while slot <= last_start:
        if slot > now and is_slot_open(coach_id, slot):
            slots.append(slot)
        slot += timedelta(minutes=SLOT_MINUTES)
    return slots


# =============================================================================
# Sessions
# =============================================================================

def _fmt(when: datetime) -> str:
    return timezone.localtime(when).strftime("%b %d, %Y at %H:%M")


def _notify(user_id: UUID, event: str, message: str, digest: bool = False):
    notify_session(user_id, event, message)
    if digest:
        queue_digest_item(user_id, NotificationType.SESSION, f"Session {event.lower()}", message)


@transaction.atomic
def book_session(mentee: User, data: dict) -> CoachingSession:
    """
    Request a session. It starts out pending; when a coach is named the
    requested time must be open in their calendar.
    """
    session_date = data['session_date']
    if timezone.is_naive(session_date):
        session_date = timezone.make_aware(session_date)
    if session_date <= timezone.now():
        raise ValueError("Session must be in the future")
    duration = data.get('duration') or 60

    coach = None
    coach_id = data.get('coach_id')
    if coach_id:
        coach = User.objects.filter(id=coach_id, role=UserRole.COACH, is_active=True).first()
        if coach is None:
            raise ValueError("Coach not found")
        if not is_slot_open(coach.id, session_date, duration):
            raise ValueError("The selected time is not available")

    session = CoachingSession.objects.create(
        mentee=mentee,
        preferred_coach=coach,
        session_type=data['session_type'],
        session_date=session_date,
        duration=duration,
        notes=data.get('notes') or "",
    )

    message = f"{mentee.full_name} requested a {session.session_type} session on {_fmt(session_date)}"
    coach_ids = [coach.id] if coach else active_coach_ids(mentee.id)
    for cid in coach_ids:
        _notify(cid, "Requested", message)

    logger.info("Mentee %s booked session %s", mentee.id, session.id)
    return session


def _visible_sessions(user: User):
    """
    Mentees see their own sessions. Coaches see their sessions plus pending
    requests nobody has taken yet from their mentees or addressed to them.
    """
    sessions = CoachingSession.objects.select_related('mentee', 'coach', 'preferred_coach')
    if user.role == UserRole.MENTEE:
        return sessions.filter(mentee=user)
    if user.role == UserRole.COACH:
        unclaimed = Q(coach__isnull=True, status=SessionStatus.PENDING) & (
            Q(preferred_coach=user)
            | Q(preferred_coach__isnull=True, mentee_id__in=active_mentee_ids(user))
        )
        return sessions.filter(Q(coach=user) | unclaimed)
    return sessions


def list_sessions(user: User, when: Optional[str] = None, status: Optional[str] = None) -> List[CoachingSession]:
    """`when` is "upcoming" or "past"."""
    sessions = _visible_sessions(user)

    now = timezone.now()
    if when == 'upcoming':
        sessions = sessions.filter(session_date__gte=now).order_by('session_date')
    elif when == 'past':
        sessions = sessions.filter(session_date__lt=now).order_by('-session_date')
    if status:
        sessions = sessions.filter(status=status)
    return list(sessions)


def get_session(user: User, session_id: UUID) -> Optional[CoachingSession]:
    return _visible_sessions(user).filter(id=session_id).first()


def generate_meeting_link() -> str:
    return MEETING_LINK_BASE + secrets.token_hex(4)


@transaction.atomic
def confirm_session(coach: User, session: CoachingSession, meeting_link: str = "") -> CoachingSession:
    if session.status != SessionStatus.PENDING:
        raise ValueError("Only pending sessions can be confirmed")
    if session.coach_id and session.coach_id != coach.id and coach.role != UserRole.ADMIN:
        raise PermissionError("Session belongs to another coach")

    session.coach = session.coach or coach
    session.status = SessionStatus.CONFIRMED
    session.meeting_link = meeting_link or session.meeting_link or generate_meeting_link()
    session.save()

    _notify(
        session.mentee_id,
        "Confirmed",
        f"Your {session.session_type} session on {_fmt(session.session_date)} "
        f"with {session.coach.full_name} is confirmed",
        digest=True,
    )
    log_action(
        action=AuditAction.CONFIRM_SESSION,
        target_type="CoachingSession",
        target_id=session.id,
        target_label=session.session_type,
        performed_by=coach,
    )
    return session


@transaction.atomic
def cancel_session(user: User, session: CoachingSession) -> CoachingSession:
    if session.status in (SessionStatus.CANCELLED, SessionStatus.COMPLETED):
        raise ValueError(f"Session is already {session.status}")

    session.status = SessionStatus.CANCELLED
    session.save(update_fields=['status', 'updated_at'])

    message = f"The {session.session_type} session on {_fmt(session.session_date)} was cancelled"
    if user.id == session.mentee_id:
        other = session.coach_id or session.preferred_coach_id
        if other:
            _notify(other, "Cancelled", f"{user.full_name} cancelled: {message}")
    else:
        _notify(session.mentee_id, "Cancelled", message, digest=True)

    log_action(
        action=AuditAction.CANCEL_SESSION,
        target_type="CoachingSession",
        target_id=session.id,
        target_label=session.session_type,
        performed_by=user,
    )
    return session


def complete_session(coach: User, session: CoachingSession) -> CoachingSession:
    if session.status != SessionStatus.CONFIRMED:
        raise ValueError("Only confirmed sessions can be completed")
    session.status = SessionStatus.COMPLETED
    session.save(update_fields=['status', 'updated_at'])
    return session
