"""
Todo services: personal todos, coach todos and their assignments to mentees.
"""
import logging
from collections import OrderedDict, defaultdict
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.audit.audit_service import AuditAction, log_action
from apps.identity.models import User, UserRole
from apps.mentoring.services import is_assigned
from apps.notifications.digest_service import queue_digest_item
from apps.notifications.models import NotificationType
from apps.notifications.services import notify_todo_assignment, todo_assignment_message
from .models import CoachTodo, PersonalTodo, TodoAssignment, TodoPriority, TodoStatus

logger = logging.getLogger(__name__)

PERSONAL_FIELDS = ('title', 'description', 'status', 'priority', 'due_date')
OVERRIDE_FIELDS = ('mentee_title', 'mentee_description', 'mentee_priority', 'mentee_due_date')


def _validate(status: Optional[str] = None, priority: Optional[str] = None):
    if status and status not in TodoStatus.values:
        raise ValueError(f"Invalid status: {status}")
    if priority and priority not in TodoPriority.values:
        raise ValueError(f"Invalid priority: {priority}")


# =============================================================================
# Personal todos
# =============================================================================

def list_personal_todos(owner: User, status: Optional[str] = None) -> List[PersonalTodo]:
    todos = PersonalTodo.objects.filter(owner=owner)
    if status:
        todos = todos.filter(status=status)
    return list(todos)


def create_personal_todo(owner: User, data: dict) -> PersonalTodo:
    title = (data.get('title') or "").strip()
    if not title:
        raise ValueError("Title is required")
    _validate(data.get('status'), data.get('priority'))
    fields = {k: v for k, v in data.items() if k in PERSONAL_FIELDS and v is not None}
    fields['title'] = title
    return PersonalTodo.objects.create(owner=owner, **fields)


def update_personal_todo(owner: User, todo_id: UUID, data: dict) -> Optional[PersonalTodo]:
    todo = PersonalTodo.objects.filter(owner=owner, id=todo_id).first()
    if todo is None:
        return None
    _validate(data.get('status'), data.get('priority'))
    for key, value in data.items():
        if key in PERSONAL_FIELDS and (value is not None or key == 'due_date'):
            setattr(todo, key, value)
    if not todo.title.strip():
        raise ValueError("Title is required")
    todo.save()
    return todo


def delete_personal_todo(owner: User, todo_id: UUID) -> bool:
    deleted, _ = PersonalTodo.objects.filter(owner=owner, id=todo_id).delete()
    return deleted > 0


# =============================================================================
# Coach todos and assignments
# =============================================================================

def list_coach_todos(coach: User) -> List[CoachTodo]:
    return list(CoachTodo.objects.filter(coach=coach))


def create_coach_todo(coach: User, data: dict) -> CoachTodo:
    title = (data.get('title') or "").strip()
    if not title:
        raise ValueError("Title is required")
    _validate(priority=data.get('priority'))
    return CoachTodo.objects.create(
        coach=coach,
        title=title,
        description=data.get('description') or "",
        priority=data.get('priority') or TodoPriority.MEDIUM,
        due_date=data.get('due_date'),
    )


def delete_coach_todo(coach: User, todo_id: UUID) -> bool:
    deleted, _ = CoachTodo.objects.filter(coach=coach, id=todo_id).delete()
    return deleted > 0


def _notify_assignees(created: List[TodoAssignment]):
    """One notification per mentee, summarising how many todos they received."""
    by_mentee: Dict[UUID, List[TodoAssignment]] = defaultdict(list)
    for assignment in created:
        by_mentee[assignment.mentee_id].append(assignment)

    for mentee_id, assignments in by_mentee.items():
        count = len(assignments)
        title = assignments[0].todo.title if count == 1 else None
        notify_todo_assignment(mentee_id, todo_title=title, count=count)
        queue_digest_item(
            mentee_id,
            NotificationType.TODO_ASSIGNMENT,
            todo_assignment_message(title, count),
            ", ".join(a.todo.title for a in assignments),
        )


@transaction.atomic
def send_todos(coach: User, todo_ids: Iterable[UUID], mentee_ids: Iterable[UUID]) -> List[TodoAssignment]:
    """
    Send the coach's todos to their assigned mentees. Pairs that already
    exist are skipped. Returns the newly created assignments.
    """
    todo_ids = list(dict.fromkeys(todo_ids))
    mentee_ids = list(dict.fromkeys(mentee_ids))
    if not todo_ids or not mentee_ids:
        raise ValueError("Select at least one todo and one mentee")

    todos = list(CoachTodo.objects.filter(id__in=todo_ids, coach=coach))
    if len(todos) != len(todo_ids):
        raise ValueError("Todo not found")

    mentees = User.objects.filter(id__in=mentee_ids, role=UserRole.MENTEE, is_active=True)
    if mentees.count() != len(mentee_ids):
        raise ValueError("Mentee not found")
    for mentee_id in mentee_ids:
        if not is_assigned(coach, mentee_id):
            raise PermissionError("Mentee is not assigned to you")

    existing = set(
        TodoAssignment.objects.filter(todo_id__in=todo_ids, mentee_id__in=mentee_ids)
        .values_list('todo_id', 'mentee_id')
    )
    created = []
    for todo in todos:
        for mentee_id in mentee_ids:
            if (todo.id, mentee_id) in existing:
                continue
            created.append(TodoAssignment.objects.create(todo=todo, coach=coach, mentee_id=mentee_id))

    _notify_assignees(created)
    if created:
        log_action(
            action=AuditAction.SEND_TODO,
            target_type="CoachTodo",
            target_id=todos[0].id if len(todos) == 1 else None,
            target_label=", ".join(t.title for t in todos),
            performed_by=coach,
            context={"mentee_ids": [str(m) for m in mentee_ids], "created": len(created)},
        )
    logger.info("Coach %s sent %d todo assignment(s)", coach.id, len(created))
    return created


def create_and_send(coach: User, data: dict, mentee_ids: Iterable[UUID]) -> List[TodoAssignment]:
    with transaction.atomic():
        todo = create_coach_todo(coach, data)
        return send_todos(coach, [todo.id], mentee_ids)


def list_assignments(user: User, status: Optional[str] = None, mentee_id: Optional[UUID] = None) -> List[TodoAssignment]:
    assignments = TodoAssignment.objects.select_related('todo', 'mentee', 'coach')
    if user.role == UserRole.MENTEE:
        assignments = assignments.filter(mentee=user)
    else:
        if user.role != UserRole.ADMIN:
            assignments = assignments.filter(coach=user)
        if mentee_id:
            assignments = assignments.filter(mentee_id=mentee_id)
    if status:
        assignments = assignments.filter(status=status)
    return list(assignments)


def get_assignment(user: User, assignment_id: UUID) -> Optional[TodoAssignment]:
    assignment = TodoAssignment.objects.select_related('todo', 'mentee', 'coach').filter(id=assignment_id).first()
    if assignment is None:
        return None
    if user.role == UserRole.ADMIN or user.id in (assignment.mentee_id, assignment.coach_id):
        return assignment
    return None


def apply_status(assignment: TodoAssignment, status: str):
    """Move an assignment to `status`, keeping started_at/completed_at consistent."""
    _validate(status=status)
    now = timezone.now()
    if status == TodoStatus.IN_PROGRESS:
        assignment.started_at = assignment.started_at or now
        assignment.completed_at = None
    elif status == TodoStatus.COMPLETED:
        assignment.started_at = assignment.started_at or now
        assignment.completed_at = now
    else:
        assignment.started_at = None
        assignment.completed_at = None
    assignment.status = status


def update_assignment_status(assignment: TodoAssignment, status: str) -> TodoAssignment:
    apply_status(assignment, status)
    assignment.save(update_fields=['status', 'started_at', 'completed_at'])
    return assignment


def update_assignment_overrides(assignment: TodoAssignment, data: dict) -> TodoAssignment:
    """Mentee-side edits. Empty values fall back to the coach's todo."""
    _validate(priority=data.get('mentee_priority'))
    for key, value in data.items():
        if key in OVERRIDE_FIELDS:
            if key == 'mentee_due_date':
                setattr(assignment, key, value)
            else:
                setattr(assignment, key, value or "")
    assignment.save(update_fields=list(OVERRIDE_FIELDS))
    return assignment


def delete_assignment(coach: User, assignment_id: UUID) -> bool:
    assignments = TodoAssignment.objects.filter(id=assignment_id)
    if coach.role != UserRole.ADMIN:
        assignments = assignments.filter(coach=coach)
    deleted, _ = assignments.delete()
    return deleted > 0


def board(user: User, mentee_id: Optional[UUID] = None) -> "OrderedDict[str, List[TodoAssignment]]":
    """Assignments grouped into pending, in_progress and completed columns."""
    columns = OrderedDict((status, []) for status in TodoStatus.values)
    for assignment in list_assignments(user, mentee_id=mentee_id):
        columns[assignment.status].append(assignment)
    return columns
