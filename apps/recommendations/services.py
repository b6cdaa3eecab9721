"""
Weekly job recommendations from coaches to mentees.
"""
import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.audit.audit_service import AuditAction, log_action
from apps.identity.models import User, UserRole
from apps.mentoring.services import is_assigned
from apps.notifications.digest_service import queue_digest_item
from apps.notifications.models import NotificationType
from apps.notifications.services import notify_job_recommendation
from apps.tracker.models import ApplicationStatus, JobApplication
from .models import JobRecommendation, RecommendationStatus

logger = logging.getLogger(__name__)


def week_start(day: Optional[date] = None) -> date:
    """Monday of the week containing `day` (today by default)."""
    day = day or timezone.localdate()
    return day - timedelta(days=day.weekday())


@transaction.atomic
def create_recommendations(coach: User, data: dict, mentee_ids: Iterable[UUID]) -> List[JobRecommendation]:
    """One recommendation per mentee; every mentee must be assigned to the coach."""
    mentee_ids = list(dict.fromkeys(mentee_ids))
    if not mentee_ids:
        raise ValueError("Select at least one mentee")
    job_title = (data.get('job_title') or "").strip()
    company_name = (data.get('company_name') or "").strip()
    if not job_title or not company_name:
        raise ValueError("Job title and company name are required")

    mentees = list(User.objects.filter(id__in=mentee_ids, role=UserRole.MENTEE, is_active=True))
    if len(mentees) != len(mentee_ids):
        raise ValueError("Mentee not found")
    for mentee in mentees:
        if not is_assigned(coach, mentee.id):
            raise PermissionError("Mentee is not assigned to you")

    week = week_start(data.get('week_start_date'))
    created = []
    for mentee in mentees:
        recommendation = JobRecommendation.objects.create(
            coach=coach,
            mentee=mentee,
            job_title=job_title,
            company_name=company_name,
            job_link=data.get('job_link') or "",
            description=data.get('description') or "",
            week_start_date=week,
        )
        notify_job_recommendation(mentee.id, job_title, company_name)
        queue_digest_item(
            mentee.id,
            NotificationType.JOB_RECOMMENDATION,
            f"{job_title} at {company_name}",
            recommendation.job_link,
        )
        created.append(recommendation)

    log_action(
        action=AuditAction.CREATE_RECOMMENDATION,
        target_type="JobRecommendation",
        target_label=f"{job_title} at {company_name}",
        performed_by=coach,
        context={"mentee_ids": [str(m.id) for m in mentees]},
    )
    logger.info("Coach %s recommended %s to %d mentee(s)", coach.id, job_title, len(created))
    return created


def _visible(user: User):
    recommendations = JobRecommendation.objects.select_related('coach', 'mentee')
    if user.role == UserRole.MENTEE:
        return recommendations.filter(mentee=user)
    if user.role == UserRole.COACH:
        return recommendations.filter(coach=user)
    return recommendations


def list_recommendations(user: User, status: Optional[str] = None, mentee_id: Optional[UUID] = None):
    recommendations = _visible(user)
    if status:
        recommendations = recommendations.filter(status=status)
    if mentee_id and user.role != UserRole.MENTEE:
        recommendations = recommendations.filter(mentee_id=mentee_id)
    return list(recommendations)


def grouped(user: User) -> dict:
    """Active recommendations split into this week and earlier weeks."""
    current = week_start()
    rows = list_recommendations(user, status=RecommendationStatus.ACTIVE)
    return {
        "week_start_date": current,
        "current_week": [r for r in rows if r.week_start_date >= current],
        "previous_weeks": [r for r in rows if r.week_start_date < current],
    }


def get_recommendation(user: User, recommendation_id: UUID) -> Optional[JobRecommendation]:
    return _visible(user).filter(id=recommendation_id).first()


@transaction.atomic
def mark_applied(recommendation: JobRecommendation, application_stage: str = "") -> JobRecommendation:
    """
    Record that the mentee applied, and add the job to their tracker unless
    an application for the same company and title already exists.
    """
    now = timezone.now()
    recommendation.status = RecommendationStatus.APPLIED
    recommendation.applied_date = now
    recommendation.application_stage = application_stage or "applied"
    recommendation.archived = True
    recommendation.save()

    exists = JobApplication.objects.filter(
        mentee_id=recommendation.mentee_id,
        company_name__iexact=recommendation.company_name,
        job_title__iexact=recommendation.job_title,
    ).exists()
    if not exists:
        JobApplication.objects.create(
            mentee_id=recommendation.mentee_id,
            company_name=recommendation.company_name,
            job_title=recommendation.job_title,
            job_link=recommendation.job_link,
            date_applied=timezone.localdate(),
            application_status=ApplicationStatus.APPLIED,
            mentee_notes=recommendation.description,
        )
    return recommendation


def archive(recommendation: JobRecommendation) -> JobRecommendation:
    recommendation.status = RecommendationStatus.ARCHIVED
    recommendation.archived = True
    recommendation.save(update_fields=['status', 'archived', 'updated_at'])
    return recommendation


def reactivate(recommendation: JobRecommendation) -> JobRecommendation:
    recommendation.status = RecommendationStatus.ACTIVE
    recommendation.archived = False
    recommendation.applied_date = None
    recommendation.application_stage = ""
    recommendation.save()
    return recommendation


def delete_recommendation(coach: User, recommendation_id: UUID) -> bool:
    recommendations = JobRecommendation.objects.filter(id=recommendation_id)
    if coach.role != UserRole.ADMIN:
        recommendations = recommendations.filter(coach=coach)
    deleted, _ = recommendations.delete()
    return deleted > 0
