"""
Todos API endpoints.

/personal is available to every signed-in user, /coach-todos to coaches,
/assignments to both sides of an assignment.
"""
from typing import List, Optional
from uuid import UUID

from django.http import HttpRequest
from ninja import Router
from ninja.errors import HttpError

from apps.identity.decorators import require_auth, require_permission
from apps.identity.models import UserRole
from apps.identity.permissions import Permissions
from .schemas import (
    PersonalTodoIn, PersonalTodoUpdate, PersonalTodoOut,
    CoachTodoIn, CoachTodoOut, SendTodosIn, SendResultOut,
    AssignmentOut, AssignmentStatusIn, AssignmentOverrideIn, BoardOut,
)
from . import services

router = Router(tags=["Todos"])


# =============================================================================
# Personal Todos
# =============================================================================

@router.get("/personal", response=List[PersonalTodoOut], auth=None)
def list_personal(request: HttpRequest, status: Optional[str] = None):
    user = require_auth(request)
    return services.list_personal_todos(user, status)


@router.post("/personal", response={201: PersonalTodoOut}, auth=None)
def create_personal(request: HttpRequest, payload: PersonalTodoIn):
    user = require_auth(request)
    try:
        return 201, services.create_personal_todo(user, payload.dict())
    except ValueError as e:
        raise HttpError(400, str(e))


@router.patch("/personal/{todo_id}", response=PersonalTodoOut, auth=None)
def update_personal(request: HttpRequest, todo_id: UUID, payload: PersonalTodoUpdate):
    user = require_auth(request)
    try:
        todo = services.update_personal_todo(user, todo_id, payload.dict(exclude_unset=True))
    except ValueError as e:
        raise HttpError(400, str(e))
    if todo is None:
        raise HttpError(404, "Todo not found")
    return todo


@router.delete("/personal/{todo_id}", response={204: None}, auth=None)
def delete_personal(request: HttpRequest, todo_id: UUID):
    user = require_auth(request)
    if not services.delete_personal_todo(user, todo_id):
        raise HttpError(404, "Todo not found")
    return 204


# =============================================================================
# Coach Todos
# =============================================================================

@router.get("/coach-todos", response=List[CoachTodoOut], auth=None)
def list_coach_todos(request: HttpRequest):
    coach = require_permission(request, Permissions.TODOS_ASSIGN)
    return services.list_coach_todos(coach)


@router.post("/coach-todos", response={201: SendResultOut}, auth=None)
def create_coach_todo(request: HttpRequest, payload: CoachTodoIn):
    """Create a todo, and send it to the listed mentees when there are any."""
    coach = require_permission(request, Permissions.TODOS_ASSIGN)
    data = payload.dict(exclude={'mentee_ids'})
    try:
        if payload.mentee_ids:
            created = services.create_and_send(coach, data, payload.mentee_ids)
        else:
            services.create_coach_todo(coach, data)
            created = []
    except PermissionError as e:
        raise HttpError(403, str(e))
    except ValueError as e:
        raise HttpError(400, str(e))
    return 201, {"created": len(created), "assignments": created}


@router.delete("/coach-todos/{todo_id}", response={204: None}, auth=None)
def delete_coach_todo(request: HttpRequest, todo_id: UUID):
    coach = require_permission(request, Permissions.TODOS_ASSIGN)
    if not services.delete_coach_todo(coach, todo_id):
        raise HttpError(404, "Todo not found")
    return 204


@router.post("/send", response=SendResultOut, auth=None)
def send_todos(request: HttpRequest, payload: SendTodosIn):
    """Send existing todos to several mentees. Already-sent pairs are skipped."""
    coach = require_permission(request, Permissions.TODOS_ASSIGN)
    try:
        created = services.send_todos(coach, payload.todo_ids, payload.mentee_ids)
    except PermissionError as e:
        raise HttpError(403, str(e))
    except ValueError as e:
        raise HttpError(400, str(e))
    return {"created": len(created), "assignments": created}


# =============================================================================
# Assignments
# =============================================================================

@router.get("/assignments", response=List[AssignmentOut], auth=None)
def list_assignments(request: HttpRequest, status: Optional[str] = None, mentee_id: Optional[UUID] = None):
    user = require_auth(request)
    return services.list_assignments(user, status=status, mentee_id=mentee_id)


@router.get("/assignments/board", response=BoardOut, auth=None)
def assignment_board(request: HttpRequest, mentee_id: Optional[UUID] = None):
    user = require_auth(request)
    return services.board(user, mentee_id=mentee_id)


def _get_assignment(user, assignment_id: UUID):
    assignment = services.get_assignment(user, assignment_id)
    if assignment is None:
        raise HttpError(404, "Assignment not found")
    return assignment


@router.patch("/assignments/{assignment_id}/status", response=AssignmentOut, auth=None)
def update_assignment_status(request: HttpRequest, assignment_id: UUID, payload: AssignmentStatusIn):
    user = require_auth(request)
    assignment = _get_assignment(user, assignment_id)
    try:
        return services.update_assignment_status(assignment, payload.status)
    except ValueError as e:
        raise HttpError(400, str(e))


@router.patch("/assignments/{assignment_id}", response=AssignmentOut, auth=None)
def update_assignment(request: HttpRequest, assignment_id: UUID, payload: AssignmentOverrideIn):
    """Mentees adjust title, description, priority or due date for themselves."""
    user = require_auth(request)
    assignment = _get_assignment(user, assignment_id)
    if user.role != UserRole.MENTEE:
        raise HttpError(403, "Only the mentee can edit their copy of a task")
    try:
        return services.update_assignment_overrides(assignment, payload.dict(exclude_unset=True))
    except ValueError as e:
        raise HttpError(400, str(e))


@router.delete("/assignments/{assignment_id}", response={204: None}, auth=None)
def delete_assignment(request: HttpRequest, assignment_id: UUID):
    coach = require_permission(request, Permissions.TODOS_ASSIGN)
    if not services.delete_assignment(coach, assignment_id):
        raise HttpError(404, "Assignment not found")
    return 204
