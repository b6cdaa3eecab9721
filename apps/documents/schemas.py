from datetime import datetime
from uuid import UUID

from ninja import Schema


class CVFileOut(Schema):
    id: UUID
    coach_id: UUID
    mentee_id: UUID
    coach_name: str
    mentee_name: str
    file_name: str
    file_url: str
    file_size: int
    uploaded_at: datetime

    @staticmethod
    def resolve_coach_name(obj):
        return obj.coach.full_name

    @staticmethod
    def resolve_mentee_name(obj):
        return obj.mentee.full_name


class ModuleFileOut(CVFileOut):
    module_type: str
