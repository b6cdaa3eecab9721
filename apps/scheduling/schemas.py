from datetime import date, datetime, time
from typing import List, Optional
from uuid import UUID

from ninja import Schema


class AvailabilityDay(Schema):
    day_of_week: int
    start_time: time
    end_time: time
    is_available: bool = True


class AvailabilityIn(Schema):
    days: List[AvailabilityDay]


class BlockedDateIn(Schema):
    blocked_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    reason: str = ""


class BlockedDateOut(Schema):
    id: UUID
    blocked_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    reason: str


class SlotsOut(Schema):
    coach_id: UUID
    date: date
    slots: List[datetime]


class SessionIn(Schema):
    session_type: str
    session_date: datetime
    duration: int = 60
    notes: str = ""
    coach_id: Optional[UUID] = None


class ConfirmSessionIn(Schema):
    meeting_link: Optional[str] = None


class SessionOut(Schema):
    id: UUID
    mentee_id: UUID
    mentee_name: str
    coach_id: Optional[UUID] = None
    coach_name: Optional[str] = None
    preferred_coach_id: Optional[UUID] = None
    session_type: str
    session_date: datetime
    duration: int
    notes: str
    status: str
    meeting_link: str
    cal_com_booking_id: str
    created_at: datetime

    @staticmethod
    def resolve_mentee_name(obj):
        return obj.mentee.full_name

    @staticmethod
    def resolve_coach_name(obj):
        return obj.coach.full_name if obj.coach else None


class SessionListOut(Schema):
    upcoming: List[SessionOut]
    past: List[SessionOut]


class WebhookAckOut(Schema):
    message: str


class BookingWebhookOut(Schema):
    id: UUID
    event_type: str
    booking_id: str
    processed: bool
    created_at: datetime


class ReplayOut(Schema):
    task_id: str
