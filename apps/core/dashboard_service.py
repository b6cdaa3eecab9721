"""
Dashboard aggregates. Read-only: every figure is computed from the owning
apps' models on request.
"""
from django.db.models import Q
from django.utils import timezone

from apps.courses.services import get_progress_summaries
from apps.identity.models import User
from apps.mentoring.services import active_mentee_ids
from apps.messaging.services import total_unread
from apps.notifications.services import unread_count
from apps.scheduling.models import CoachingSession, SessionStatus
from apps.scheduling.services import list_sessions
from apps.todos.models import PersonalTodo, TodoAssignment, TodoStatus
from apps.tracker.models import JobApplication
from apps.tracker.services import applied_this_month

OPEN_TASK_STATUSES = (TodoStatus.PENDING, TodoStatus.IN_PROGRESS)


def mentee_dashboard(mentee: User) -> dict:
    active_tasks = (
        TodoAssignment.objects.filter(mentee=mentee, status__in=OPEN_TASK_STATUSES).count()
        + PersonalTodo.objects.filter(owner=mentee, status__in=OPEN_TASK_STATUSES).count()
    )
    summary = get_progress_summaries([mentee.id])[mentee.id]
    upcoming = [
        s for s in list_sessions(mentee, when='upcoming')
        if s.status in (SessionStatus.PENDING, SessionStatus.CONFIRMED)
    ][:3]

    return {
        "applications_this_month": applied_this_month(mentee),
        "active_tasks": active_tasks,
        "course_progress": summary.overall_progress,
        "upcoming_sessions": upcoming,
        "unread_messages": total_unread(mentee),
        "unread_notifications": unread_count(mentee),
    }


def coach_dashboard(coach: User) -> dict:
    mentee_ids = active_mentee_ids(coach)
    now = timezone.now()

    pending = CoachingSession.objects.filter(
        Q(coach=coach) | Q(coach__isnull=True, preferred_coach=coach)
        | Q(coach__isnull=True, preferred_coach__isnull=True, mentee_id__in=mentee_ids),
        status=SessionStatus.PENDING,
        session_date__gte=now,
    ).count()
    upcoming = list(
        CoachingSession.objects.select_related('mentee', 'coach')
        .filter(coach=coach, status=SessionStatus.CONFIRMED, session_date__gte=now)
        .order_by('session_date')[:5]
    )
    recent_applications = list(
        JobApplication.objects.select_related('mentee')
        .filter(mentee_id__in=mentee_ids)
        .order_by('-created_at')[:5]
    )

    return {
        "active_mentees": len(mentee_ids),
        "pending_sessions": pending,
        "upcoming_sessions": upcoming,
        "recent_applications": recent_applications,
        "tasks_in_progress": TodoAssignment.objects.filter(
            coach=coach, mentee_id__in=mentee_ids, status=TodoStatus.IN_PROGRESS
        ).count(),
        "unread_messages": total_unread(coach),
    }
