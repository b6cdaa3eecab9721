from typing import List, Optional
from uuid import UUID
from datetime import datetime
from ninja import Schema


class AssignMenteesIn(Schema):
    coach_id: UUID
    mentee_ids: List[UUID]


class UnassignMenteeIn(Schema):
    coach_id: UUID
    mentee_id: UUID


class AssignmentOut(Schema):
    id: UUID
    coach_id: UUID
    mentee_id: UUID
    is_active: bool
    assigned_at: datetime


class MenteeNoteIn(Schema):
    notes: str


class MenteeNoteOut(Schema):
    mentee_id: UUID
    coach_id: UUID
    notes: str
    updated_at: Optional[datetime] = None


class UnassignedMenteeOut(Schema):
    id: UUID
    full_name: str
    email: str
