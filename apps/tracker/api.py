"""
Tracker API endpoints.

Mentee endpoints live under /applications, coach review endpoints under
/coach/applications, autosaved edits under /drafts.
"""
from typing import List, Optional
from uuid import UUID

from django.http import HttpRequest
from ninja import Router
from ninja.errors import HttpError
from pydantic import ValidationError

from apps.identity.decorators import require_auth, require_permission
from apps.identity.permissions import Permissions
from .schemas import (
    JobApplicationIn, JobApplicationUpdate, CoachApplicationUpdate,
    JobApplicationOut, CoachJobApplicationOut, ApplicationStatsOut,
    DraftIn, DraftOut,
)
from . import services, draft_service

router = Router(tags=["Tracker"])


# =============================================================================
# Mentee Endpoints
# =============================================================================

@router.get("/applications", response=List[JobApplicationOut], auth=None)
def list_applications(request: HttpRequest, search: Optional[str] = None, status: Optional[str] = None):
    user = require_permission(request, Permissions.TRACKER_MANAGE_OWN)
    return services.list_applications(user, search=search, status=status)


@router.post("/applications", response={201: JobApplicationOut}, auth=None)
def create_application(request: HttpRequest, payload: JobApplicationIn):
    user = require_permission(request, Permissions.TRACKER_MANAGE_OWN)
    try:
        return 201, services.create_application(user, payload.dict())
    except ValueError as e:
        raise HttpError(400, str(e))


@router.get("/applications/stats", response=ApplicationStatsOut, auth=None)
def application_stats(request: HttpRequest):
    user = require_permission(request, Permissions.TRACKER_MANAGE_OWN)
    return services.get_stats(user)


@router.patch("/applications/{application_id}", response=JobApplicationOut, auth=None)
def update_application(request: HttpRequest, application_id: UUID, payload: JobApplicationUpdate):
    user = require_permission(request, Permissions.TRACKER_MANAGE_OWN)
    application = services.get_own_application(user, application_id)
    if application is None:
        raise HttpError(404, "Application not found")
    try:
        return services.update_application(application, payload.dict(exclude_unset=True))
    except ValueError as e:
        raise HttpError(400, str(e))


@router.delete("/applications/{application_id}", response={204: None}, auth=None)
def delete_application(request: HttpRequest, application_id: UUID):
    user = require_permission(request, Permissions.TRACKER_MANAGE_OWN)
    if not services.delete_application(user, application_id):
        raise HttpError(404, "Application not found")
    draft_service.clear_draft(user.id, application_id)
    return 204


# =============================================================================
# Coach Endpoints
# =============================================================================

@router.get("/coach/applications", response=List[CoachJobApplicationOut], auth=None)
def list_mentee_applications(request: HttpRequest, status: Optional[str] = None):
    """Applications of the caller's mentees, without the ones they have hidden."""
    user = require_permission(request, Permissions.TRACKER_REVIEW_MENTEES)
    return services.list_applications_for_coach(user, status=status)


@router.patch("/coach/applications/{application_id}", response=CoachJobApplicationOut, auth=None)
def review_application(request: HttpRequest, application_id: UUID, payload: CoachApplicationUpdate):
    user = require_permission(request, Permissions.TRACKER_REVIEW_MENTEES)
    application = services.get_application_for_coach(user, application_id)
    if application is None:
        raise HttpError(404, "Application not found")
    try:
        services.coach_update_application(user, application, payload.dict(exclude_unset=True))
    except ValueError as e:
        raise HttpError(400, str(e))
    return application


@router.post("/coach/applications/{application_id}/hide", auth=None)
def hide_application(request: HttpRequest, application_id: UUID):
    user = require_permission(request, Permissions.TRACKER_REVIEW_MENTEES)
    application = services.get_application_for_coach(user, application_id)
    if application is None:
        raise HttpError(404, "Application not found")
    created = services.hide_application(user, application)
    return {"hidden": True, "already_hidden": not created}


# =============================================================================
# Draft Endpoints
# =============================================================================

@router.get("/drafts", response=List[DraftOut], auth=None)
def list_drafts(request: HttpRequest):
    """Unexpired drafts of the caller, most recently saved first."""
    user = require_auth(request)
    return draft_service.load_drafts(user.id)


@router.get("/drafts/{application_id}", response=DraftOut, auth=None)
def get_draft(request: HttpRequest, application_id: UUID):
    user = require_auth(request)
    draft = draft_service.get_draft(user.id, application_id)
    if draft is None:
        raise HttpError(404, "Draft not found")
    return draft


@router.put("/drafts/{application_id}", response={200: DraftOut, 204: None}, auth=None)
def save_draft(request: HttpRequest, application_id: UUID, payload: DraftIn):
    """Merge a partial edit into the draft. Returns 204 while nothing is saved."""
    user = require_auth(request)
    draft = draft_service.save_draft(user.id, application_id, payload.data)
    if draft is None:
        return 204, None
    return 200, draft


@router.delete("/drafts/{application_id}", response={204: None}, auth=None)
def clear_draft(request: HttpRequest, application_id: UUID):
    user = require_auth(request)
    draft_service.clear_draft(user.id, application_id)
    return 204


@router.post("/drafts/{application_id}/commit", response=JobApplicationOut, auth=None)
def commit_draft(request: HttpRequest, application_id: UUID):
    """Apply the saved draft to the application and clear it."""
    user = require_permission(request, Permissions.TRACKER_MANAGE_OWN)
    application = services.get_own_application(user, application_id)
    if application is None:
        raise HttpError(404, "Application not found")

    draft = draft_service.get_draft(user.id, application_id)
    if draft is None:
        raise HttpError(404, "Draft not found")

    try:
        update = JobApplicationUpdate(**draft["data"]).dict(exclude_unset=True)
        application = services.update_application(application, update)
    except (ValidationError, ValueError) as e:
        raise HttpError(400, str(e))

    draft_service.clear_draft(user.id, application_id)
    return application
