from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from ninja import Schema


class PersonalTodoIn(Schema):
    title: str
    description: str = ""
    status: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[date] = None


class PersonalTodoUpdate(Schema):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[date] = None


class PersonalTodoOut(Schema):
    id: UUID
    title: str
    description: str
    status: str
    priority: str
    due_date: Optional[date] = None
    created_at: datetime
    updated_at: datetime


class CoachTodoIn(Schema):
    title: str
    description: str = ""
    priority: Optional[str] = None
    due_date: Optional[date] = None
    # When given, the new todo is sent to these mentees straight away
    mentee_ids: List[UUID] = []


class CoachTodoOut(Schema):
    id: UUID
    title: str
    description: str
    priority: str
    due_date: Optional[date] = None
    created_at: datetime


class SendTodosIn(Schema):
    todo_ids: List[UUID]
    mentee_ids: List[UUID]


class AssignmentOut(Schema):
    id: UUID
    todo_id: UUID
    coach_id: UUID
    mentee_id: UUID
    mentee_name: str
    coach_name: str
    title: str
    description: str
    priority: str
    due_date: Optional[date] = None
    status: str
    assigned_at: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    mentee_title: str
    mentee_description: str
    mentee_priority: str
    mentee_due_date: Optional[date] = None

    @staticmethod
    def resolve_mentee_name(obj):
        return obj.mentee.full_name

    @staticmethod
    def resolve_coach_name(obj):
        return obj.coach.full_name

    @staticmethod
    def resolve_title(obj):
        return obj.display_title

    @staticmethod
    def resolve_description(obj):
        return obj.display_description

    @staticmethod
    def resolve_priority(obj):
        return obj.display_priority

    @staticmethod
    def resolve_due_date(obj):
        return obj.display_due_date


class AssignmentStatusIn(Schema):
    status: str


class AssignmentOverrideIn(Schema):
    mentee_title: Optional[str] = None
    mentee_description: Optional[str] = None
    mentee_priority: Optional[str] = None
    mentee_due_date: Optional[date] = None


class SendResultOut(Schema):
    created: int
    assignments: List[AssignmentOut]


class BoardOut(Schema):
    pending: List[AssignmentOut]
    in_progress: List[AssignmentOut]
    completed: List[AssignmentOut]
