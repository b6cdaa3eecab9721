from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from ninja import Schema


class AuditLogOut(Schema):
    id: UUID
    action: str
    target_type: str
    target_id: Optional[UUID] = None
    target_label: str
    performed_by_id: Optional[UUID] = None
    performed_by_name: Optional[str] = None
    performed_at: datetime
    context: Dict[str, Any] = {}

    @staticmethod
    def resolve_performed_by_name(obj):
        return obj.performed_by.full_name if obj.performed_by else None
