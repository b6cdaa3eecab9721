from typing import List
from uuid import UUID

from django.http import HttpRequest
from ninja import Router, Query, Schema
from ninja.errors import HttpError

from apps.identity.decorators import require_auth, require_permission
from apps.identity.permissions import Permissions
from apps.mentoring.services import is_assigned
from .models import STANDARD_COURSE_MODULES
from .schemas import (
    MyProgressOut, ModuleProgressOut, ProgressUpdateIn,
    ProgressSummaryOut, FeedbackIn, FeedbackOut,
)
from . import services

router = Router(tags=["Courses"])


class SummaryFilters(Schema):
    mentee_ids: List[UUID] = []


@router.get("/modules", response=List[str], auth=None)
def list_modules(request: HttpRequest):
    require_auth(request)
    return STANDARD_COURSE_MODULES


@router.get("/progress", response=MyProgressOut, auth=None)
def my_progress(request: HttpRequest):
    user = require_permission(request, Permissions.COURSES_TRACK_PROGRESS)
    return services.get_progress(user)


@router.put("/progress", response=ModuleProgressOut, auth=None)
def update_progress(request: HttpRequest, payload: ProgressUpdateIn):
    user = require_permission(request, Permissions.COURSES_TRACK_PROGRESS)
    try:
        return services.update_progress(user, payload.module_title, payload.progress_percentage, payload.completed)
    except ValueError as e:
        raise HttpError(400, str(e))


@router.get("/progress/summaries", response=List[ProgressSummaryOut], auth=None)
def progress_summaries(request: HttpRequest, filters: Query[SummaryFilters]):
    """Progress summaries of the given mentees; unassigned mentees are skipped."""
    user = require_permission(request, Permissions.COURSES_VIEW_MENTEE_PROGRESS)
    allowed = [mid for mid in filters.mentee_ids if is_assigned(user, mid)]
    return list(services.get_progress_summaries(allowed).values())


@router.post("/feedback", response={201: FeedbackOut}, auth=None)
def submit_feedback(request: HttpRequest, payload: FeedbackIn):
    user = require_permission(request, Permissions.COURSES_TRACK_PROGRESS)
    try:
        return 201, services.submit_feedback(user, payload.module_title, payload.comments, payload.rating)
    except ValueError as e:
        raise HttpError(400, str(e))
