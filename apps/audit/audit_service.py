"""
Audit trail writer.

    log_action(
        action=AuditAction.HIDE_APPLICATION,
        target_type="JobApplication",
        target_id=application.id,
        target_label=f"{application.company_name} - {application.job_title}",
        performed_by=coach,
        context={"mentee_id": str(application.mentee_id)},
    )

Failures are logged at WARNING and never reach the caller.
"""
import logging
from typing import Optional
from uuid import UUID

from django.db import transaction

from .models import AuditLog

logger = logging.getLogger(__name__)


class AuditAction:
    """Values stored in AuditLog.action."""
    # Identity
    USER_LOGIN = "USER_LOGIN"
    DEACTIVATE_USER = "DEACTIVATE_USER"

    # Mentoring
    ASSIGN_MENTEE = "ASSIGN_MENTEE"
    UNASSIGN_MENTEE = "UNASSIGN_MENTEE"

    # Tracker
    UPDATE_APPLICATION = "UPDATE_APPLICATION"
    HIDE_APPLICATION = "HIDE_APPLICATION"

    # Documents
    UPLOAD_FILE = "UPLOAD_FILE"
    DELETE_FILE = "DELETE_FILE"

    # Todos
    SEND_TODO = "SEND_TODO"

    # Scheduling
    CONFIRM_SESSION = "CONFIRM_SESSION"
    CANCEL_SESSION = "CANCEL_SESSION"
    PROCESS_WEBHOOK = "PROCESS_WEBHOOK"

    # Recommendations
    CREATE_RECOMMENDATION = "CREATE_RECOMMENDATION"

    # Community
    REMOVE_POST = "REMOVE_POST"
    REMOVE_COMMENT = "REMOVE_COMMENT"


def log_action(
    *,
    action: str,
    target_type: str,
    target_id: Optional[UUID] = None,
    performed_by=None,
    target_label: str = "",
    context: Optional[dict] = None,
) -> Optional[AuditLog]:
    """
    Record one action. target_id is None when the action spans several
    objects; performed_by is None for system work such as webhooks.
    Returns the row, or None when it could not be written.
    """
    try:
        # Savepoint, so a failed insert leaves the caller's transaction usable
        with transaction.atomic():
            return AuditLog.objects.create(
                action=action,
                target_type=target_type,
                target_id=target_id,
                target_label=target_label[:255],
                performed_by=performed_by,
                context=context or {},
            )
    except Exception:
        logger.warning("Failed to write audit log %s for %s %s", action, target_type, target_id, exc_info=True)
        return None
