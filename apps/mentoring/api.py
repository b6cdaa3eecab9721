"""
Mentoring API endpoints.

Coach <-> mentee assignments and the coach's private notes on mentees.
"""
from typing import List
from uuid import UUID
from django.http import HttpRequest
from ninja import Router
from ninja.errors import HttpError

from apps.identity.decorators import require_permission, require_mentee
from apps.identity.models import UserRole
from apps.identity.permissions import Permissions
from .dtos import MenteeSummaryDTO, CoachSummaryDTO
from .schemas import (
    AssignMenteesIn, UnassignMenteeIn, AssignmentOut,
    MenteeNoteIn, MenteeNoteOut, UnassignedMenteeOut,
)
from . import services

router = Router(tags=["Mentoring"])


def _check_assigning_coach(user, coach_id: UUID):
    """Coaches may only assign mentees to themselves; admins to anyone."""
    if user.role != UserRole.ADMIN and user.id != coach_id:
        raise HttpError(403, "Coaches can only manage their own mentees")


@router.get("/mentees", response=List[MenteeSummaryDTO], auth=None)
def list_my_mentees(request: HttpRequest):
    """The caller's active mentees with progress and application counts."""
    user = require_permission(request, Permissions.MENTORING_VIEW_MENTEES)
    return services.list_mentees_for_coach(user)


@router.get("/mentees/unassigned", response=List[UnassignedMenteeOut], auth=None)
def list_unassigned(request: HttpRequest):
    require_permission(request, Permissions.MENTORING_ASSIGN_MENTEES)
    return [
        {"id": m.id, "full_name": m.full_name, "email": m.email}
        for m in services.list_unassigned_mentees()
    ]


@router.get("/coaches", response=List[CoachSummaryDTO], auth=None)
def list_my_coaches(request: HttpRequest):
    """Coaches currently assigned to the calling mentee."""
    user = require_mentee(request)
    return services.list_coaches_for_mentee(user)


@router.post("/assignments", response=List[AssignmentOut], auth=None)
def assign(request: HttpRequest, payload: AssignMenteesIn):
    user = require_permission(request, Permissions.MENTORING_ASSIGN_MENTEES)
    _check_assigning_coach(user, payload.coach_id)

    try:
        return services.assign_mentees(payload.coach_id, payload.mentee_ids, performed_by=user)
    except ValueError as e:
        raise HttpError(400, str(e))


@router.post("/assignments/claim-unassigned", auth=None)
def claim_unassigned(request: HttpRequest):
    """Assign every mentee without an active coach to the calling coach."""
    user = require_permission(request, Permissions.MENTORING_ASSIGN_MENTEES)
    if user.role != UserRole.COACH:
        raise HttpError(403, "Only coaches can claim mentees")
    return {"assigned": services.claim_unassigned_mentees(user)}


@router.post("/assignments/unassign", response={204: None}, auth=None)
def unassign(request: HttpRequest, payload: UnassignMenteeIn):
    user = require_permission(request, Permissions.MENTORING_ASSIGN_MENTEES)
    _check_assigning_coach(user, payload.coach_id)

    if not services.unassign_mentee(payload.coach_id, payload.mentee_id, performed_by=user):
        raise HttpError(404, "Assignment not found")
    return 204


@router.get("/mentees/{mentee_id}/notes", response=MenteeNoteOut, auth=None)
def get_mentee_note(request: HttpRequest, mentee_id: UUID):
    user = require_permission(request, Permissions.MENTORING_MANAGE_NOTES)
    if not services.is_assigned(user, mentee_id):
        raise HttpError(404, "Mentee not found")

    note = services.get_note(user, mentee_id)
    if note is None:
        return MenteeNoteOut(mentee_id=mentee_id, coach_id=user.id, notes="")
    return note


@router.put("/mentees/{mentee_id}/notes", response=MenteeNoteOut, auth=None)
def save_mentee_note(request: HttpRequest, mentee_id: UUID, payload: MenteeNoteIn):
    user = require_permission(request, Permissions.MENTORING_MANAGE_NOTES)
    if not services.is_assigned(user, mentee_id):
        raise HttpError(404, "Mentee not found")
    return services.upsert_note(user, mentee_id, payload.notes)
