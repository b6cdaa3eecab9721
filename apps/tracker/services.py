"""
Job application services.

Mentees manage their own applications; coaches review the applications of
their assigned mentees and may hide rows from their own list.
"""
import logging
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from django.db.models import Count, Q
from django.utils import timezone

from apps.audit.audit_service import log_action, AuditAction
from apps.identity.models import User, UserRole
from apps.mentoring.services import active_mentee_ids, is_assigned
from .models import JobApplication, HiddenApplication, ApplicationStatus

logger = logging.getLogger(__name__)

MENTEE_EDITABLE_FIELDS = (
    'company_name', 'job_title', 'date_applied', 'application_status',
    'job_link', 'interview_stage', 'recruiter_name', 'mentee_notes',
)
COACH_EDITABLE_FIELDS = ('coach_notes', 'application_status', 'interview_stage')


def _validate_status(status: Optional[str]):
    if status is not None and status not in ApplicationStatus.values:
        raise ValueError(f"Invalid application status: {status}")


# =============================================================================
# Mentee side
# =============================================================================

def list_applications(
    mentee: User,
    search: Optional[str] = None,
    status: Optional[str] = None,
) -> List[JobApplication]:
    """
    The mentee's applications, newest first.
    Search matches company, title or recruiter (case-insensitive).
    """
    qs = JobApplication.objects.filter(mentee=mentee)

    if search:
        term = search.strip()
        qs = qs.filter(
            Q(company_name__icontains=term) |
            Q(job_title__icontains=term) |
            Q(recruiter_name__icontains=term)
        )
    if status and status != 'all':
        qs = qs.filter(application_status=status)

    return list(qs.order_by('-created_at'))


def get_own_application(mentee: User, application_id: UUID) -> Optional[JobApplication]:
    return JobApplication.objects.filter(id=application_id, mentee=mentee).first()


def create_application(mentee: User, data: dict) -> JobApplication:
    _validate_status(data.get('application_status'))
    fields = {k: (v if v is not None else '') for k, v in data.items() if k in MENTEE_EDITABLE_FIELDS}
    application = JobApplication.objects.create(mentee=mentee, **fields)
    logger.info("Mentee %s added application %s", mentee.id, application.id)
    return application


def update_application(application: JobApplication, data: dict, allowed=MENTEE_EDITABLE_FIELDS) -> JobApplication:
    """Apply a partial update, limited to the allowed fields."""
    _validate_status(data.get('application_status'))

    changed = []
    for key, value in data.items():
        if key not in allowed or value is None:
            continue
        setattr(application, key, value)
        changed.append(key)

    if changed:
        application.save(update_fields=changed + ['updated_at'])
    return application


def delete_application(mentee: User, application_id: UUID) -> bool:
    deleted, _ = JobApplication.objects.filter(id=application_id, mentee=mentee).delete()
    return deleted > 0


def get_stats(mentee: User) -> dict:
    qs = JobApplication.objects.filter(mentee=mentee)
    counts = dict(qs.values_list('application_status').annotate(n=Count('id')))

    stats = {status: counts.get(status, 0) for status in ApplicationStatus.values}
    stats['total'] = sum(counts.values())
    stats['this_month'] = applied_this_month(mentee)
    return stats


def applied_this_month(mentee: User) -> int:
    """Applications dated in the current calendar month."""
    today = timezone.localdate()
    return JobApplication.objects.filter(
        mentee=mentee, date_applied__year=today.year, date_applied__month=today.month
    ).count()


def count_applications_by_mentee(mentee_ids: Iterable[UUID]) -> Dict[UUID, int]:
    rows = (
        JobApplication.objects.filter(mentee_id__in=list(mentee_ids))
        .values('mentee_id')
        .annotate(n=Count('id'))
    )
    return {row['mentee_id']: row['n'] for row in rows}


# =============================================================================
# Coach side
# =============================================================================

def list_applications_for_coach(coach: User, status: Optional[str] = None) -> List[JobApplication]:
    """
    Applications of the coach's assigned active mentees, minus the ones the
    coach has hidden. Administrators see every application.
    """
    qs = JobApplication.objects.select_related('mentee')

    if coach.role != UserRole.ADMIN:
        qs = qs.filter(mentee_id__in=active_mentee_ids(coach))

    hidden = HiddenApplication.objects.filter(coach=coach).values('application_id')
    qs = qs.exclude(id__in=hidden)

    if status and status != 'all':
        qs = qs.filter(application_status=status)

    return list(qs.order_by('-date_applied', '-created_at'))


def get_application_for_coach(coach: User, application_id: UUID) -> Optional[JobApplication]:
    application = JobApplication.objects.select_related('mentee').filter(id=application_id).first()
    if application is None or not is_assigned(coach, application.mentee_id):
        return None
    return application


def coach_update_application(coach: User, application: JobApplication, data: dict) -> JobApplication:
    updated = update_application(application, data, allowed=COACH_EDITABLE_FIELDS)
    log_action(
        action=AuditAction.UPDATE_APPLICATION,
        target_type="JobApplication",
        target_id=application.id,
        target_label=str(application),
        performed_by=coach,
        context={k: v for k, v in data.items() if k in COACH_EDITABLE_FIELDS and v is not None},
    )
    return updated


def hide_application(coach: User, application: JobApplication) -> bool:
    """Hide for this coach only. Returns False when it was already hidden."""
    _, created = HiddenApplication.objects.get_or_create(coach=coach, application=application)
    if created:
        log_action(
            action=AuditAction.HIDE_APPLICATION,
            target_type="JobApplication",
            target_id=application.id,
            target_label=str(application),
            performed_by=coach,
            context={"mentee_id": str(application.mentee_id)},
        )
    return created
