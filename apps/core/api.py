"""
Dashboard API endpoints.
"""
from typing import List

from django.http import HttpRequest
from ninja import Router, Schema

from apps.identity.decorators import require_coach, require_mentee
from apps.scheduling.schemas import SessionOut
from apps.tracker.schemas import CoachJobApplicationOut
from . import dashboard_service

router = Router(tags=["Dashboard"])


class MenteeDashboardOut(Schema):
    applications_this_month: int
    active_tasks: int
    course_progress: int
    upcoming_sessions: List[SessionOut]
    unread_messages: int
    unread_notifications: int


class CoachDashboardOut(Schema):
    active_mentees: int
    pending_sessions: int
    upcoming_sessions: List[SessionOut]
    recent_applications: List[CoachJobApplicationOut]
    tasks_in_progress: int
    unread_messages: int


@router.get("/mentee", response=MenteeDashboardOut, auth=None)
def mentee_dashboard(request: HttpRequest):
    mentee = require_mentee(request)
    return dashboard_service.mentee_dashboard(mentee)


@router.get("/coach", response=CoachDashboardOut, auth=None)
def coach_dashboard(request: HttpRequest):
    coach = require_coach(request)
    return dashboard_service.coach_dashboard(coach)
