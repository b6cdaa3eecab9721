from datetime import date
from typing import List, Optional
from uuid import UUID

from django.shortcuts import get_object_or_404
from ninja import Router

from apps.identity.decorators import require_permission
from apps.identity.permissions import Permissions
from .models import AuditLog
from .schemas import AuditLogOut

router = Router(tags=["Audit"])

MAX_LIMIT = 500


def _filtered(action, target_type, start_date, end_date):
    filters = {
        'action': action,
        'target_type': target_type,
        'performed_at__date__gte': start_date,
        'performed_at__date__lte': end_date,
    }
    return AuditLog.objects.select_related('performed_by').filter(
        **{key: value for key, value in filters.items() if value}
    )


@router.get("/logs", response=List[AuditLogOut], auth=None)
def list_logs(
    request,
    action: Optional[str] = None,
    target_type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = 100,
):
    """Newest entries first. Admin only; at most 500 rows per call."""
    require_permission(request, Permissions.AUDIT_VIEW)
    limit = max(1, min(limit, MAX_LIMIT))
    return list(_filtered(action, target_type, start_date, end_date)[:limit])


@router.get("/logs/{log_id}", response=AuditLogOut, auth=None)
def get_log(request, log_id: UUID):
    require_permission(request, Permissions.AUDIT_VIEW)
    return get_object_or_404(AuditLog.objects.select_related('performed_by'), id=log_id)
