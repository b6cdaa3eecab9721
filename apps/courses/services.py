"""Course progress services."""
import logging
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from django.utils import timezone

from apps.identity.models import User
from .models import CourseProgress, ModuleFeedback, STANDARD_COURSE_MODULES
from .dtos import ProgressSummaryDTO

logger = logging.getLogger(__name__)


def get_progress(user: User) -> dict:
    """
    The user's stored module progress. Users without any rows get the
    standard modules at 0% and has_real_data=False.
    """
    rows = list(CourseProgress.objects.filter(user=user))
    if rows:
        return {"has_real_data": True, "modules": rows}

    return {
        "has_real_data": False,
        "modules": [
            {"module_title": title, "progress_percentage": 0, "completed": False}
            for title in STANDARD_COURSE_MODULES
        ],
    }


def update_progress(
    user: User,
    module_title: str,
    progress_percentage: int,
    completed: Optional[bool] = None,
) -> CourseProgress:
    """
    Upsert one module's progress. A module counts as completed when asked
    to or when it reaches 100%.
    """
    module_title = module_title.strip()
    if not module_title:
        raise ValueError("Module title is required")

    percentage = max(0, min(100, int(progress_percentage)))
    is_completed = bool(completed) or percentage >= 100

    progress, _ = CourseProgress.objects.get_or_create(user=user, module_title=module_title)
    progress.progress_percentage = percentage
    if is_completed and not progress.completed_at:
        progress.completed_at = timezone.now()
    elif not is_completed:
        progress.completed_at = None
    progress.completed = is_completed
    progress.save()
    return progress


def _summarize(mentee_id: UUID, rows: List[CourseProgress]) -> ProgressSummaryDTO:
    if not rows:
        return ProgressSummaryDTO(
            mentee_id=mentee_id,
            overall_progress=0,
            completed_modules=0,
            total_modules=len(STANDARD_COURSE_MODULES),
            has_real_data=False,
        )

    average = sum(r.progress_percentage for r in rows) / len(rows)
    return ProgressSummaryDTO(
        mentee_id=mentee_id,
        overall_progress=int(round(average)),
        completed_modules=sum(1 for r in rows if r.completed),
        total_modules=max(len(rows), len(STANDARD_COURSE_MODULES)),
        has_real_data=True,
    )


def get_progress_summaries(mentee_ids: Iterable[UUID]) -> Dict[UUID, ProgressSummaryDTO]:
    """Summaries keyed by mentee id; every requested id gets an entry."""
    mentee_ids = list(mentee_ids)
    by_mentee: Dict[UUID, List[CourseProgress]] = {mid: [] for mid in mentee_ids}
    for row in CourseProgress.objects.filter(user_id__in=mentee_ids):
        by_mentee[row.user_id].append(row)
    return {mid: _summarize(mid, rows) for mid, rows in by_mentee.items()}


def submit_feedback(mentee: User, module_title: str, comments: str, rating: Optional[int] = None) -> ModuleFeedback:
    """
    Store module feedback and let the mentee's coaches know, in-app and
    through their e-mail digest.
    """
    from apps.mentoring.services import active_coach_ids
    from apps.notifications.services import create_notification
    from apps.notifications.digest_service import queue_digest_item
    from apps.notifications.models import NotificationType

    comments = comments.strip()
    if not comments:
        raise ValueError("Feedback cannot be empty")

    feedback = ModuleFeedback.objects.create(
        mentee=mentee, module_title=module_title, comments=comments, rating=rating
    )

    title = f"Module feedback from {mentee.full_name}"
    details = f"{module_title}: {comments}"
    if rating:
        details = f"{module_title} ({rating}/5): {comments}"

    for coach_id in active_coach_ids(mentee.id):
        create_notification(
            user_id=coach_id,
            title=title,
            message=details,
            type=NotificationType.GENERAL,
            action_url="/coach/mentees",
            metadata={"mentee_id": str(mentee.id), "module_title": module_title},
        )
        queue_digest_item(coach_id, NotificationType.GENERAL, title, details)

    logger.info("Mentee %s left feedback on %s", mentee.id, module_title)
    return feedback
