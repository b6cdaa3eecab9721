"""
Coach <-> mentee relationship services.

Every other app asks this module whether a coach may act on a mentee.
"""
import logging
from typing import Iterable, List, Optional
from uuid import UUID

from django.db import transaction

from apps.audit.audit_service import log_action, AuditAction
from apps.identity.models import User, UserRole
from .models import CoachMenteeAssignment, MenteeNote
from .dtos import MenteeSummaryDTO, CoachSummaryDTO

logger = logging.getLogger(__name__)


def active_mentee_ids(coach: User) -> List[UUID]:
    return list(
        CoachMenteeAssignment.objects.filter(coach=coach, is_active=True)
        .values_list('mentee_id', flat=True)
    )


def active_coach_ids(mentee_id: UUID) -> List[UUID]:
    return list(
        CoachMenteeAssignment.objects.filter(mentee_id=mentee_id, is_active=True)
        .order_by('assigned_at')
        .values_list('coach_id', flat=True)
    )


def first_active_coach(mentee_id: UUID) -> Optional[User]:
    assignment = (
        CoachMenteeAssignment.objects.filter(mentee_id=mentee_id, is_active=True)
        .select_related('coach')
        .order_by('assigned_at')
        .first()
    )
    return assignment.coach if assignment else None


def is_assigned(coach: User, mentee_id: UUID) -> bool:
    """True when the coach has an active assignment to the mentee. Admins always pass."""
    if coach.role == UserRole.ADMIN:
        return True
    return CoachMenteeAssignment.objects.filter(
        coach=coach, mentee_id=mentee_id, is_active=True
    ).exists()


def can_access_mentee(user: User, mentee_id: UUID) -> bool:
    """Mentees may see themselves; coaches their assigned mentees; admins everyone."""
    if user.role == UserRole.MENTEE:
        return user.id == mentee_id
    return is_assigned(user, mentee_id)


def _get_user_with_role(user_id: UUID, role: str) -> User:
    try:
        return User.objects.get(id=user_id, role=role, is_active=True)
    except User.DoesNotExist:
        raise ValueError(f"No active {role.lower()} with id {user_id}")


@transaction.atomic
def assign_mentees(coach_id: UUID, mentee_ids: Iterable[UUID], performed_by: User) -> List[CoachMenteeAssignment]:
    """
    Assign mentees to a coach. Existing inactive pairs are re-activated,
    active pairs are left untouched.
    """
    coach = _get_user_with_role(coach_id, UserRole.COACH)
    assignments = []

    for mentee_id in dict.fromkeys(mentee_ids):
        mentee = _get_user_with_role(mentee_id, UserRole.MENTEE)
        assignment, created = CoachMenteeAssignment.objects.get_or_create(
            coach=coach, mentee=mentee, defaults={'is_active': True}
        )
        if not created and not assignment.is_active:
            assignment.is_active = True
            assignment.save(update_fields=['is_active', 'updated_at'])
            created = True

        if created:
            logger.info("Assigned mentee %s to coach %s", mentee.id, coach.id)
            log_action(
                action=AuditAction.ASSIGN_MENTEE,
                target_type="CoachMenteeAssignment",
                target_id=assignment.id,
                target_label=f"{mentee.full_name} -> {coach.full_name}",
                performed_by=performed_by,
                context={"coach_id": str(coach.id), "mentee_id": str(mentee.id)},
            )
        assignments.append(assignment)

    return assignments


def unassign_mentee(coach_id: UUID, mentee_id: UUID, performed_by: User) -> bool:
    updated = CoachMenteeAssignment.objects.filter(
        coach_id=coach_id, mentee_id=mentee_id, is_active=True
    ).first()
    if not updated:
        return False

    updated.is_active = False
    updated.save(update_fields=['is_active', 'updated_at'])
    log_action(
        action=AuditAction.UNASSIGN_MENTEE,
        target_type="CoachMenteeAssignment",
        target_id=updated.id,
        performed_by=performed_by,
        context={"coach_id": str(coach_id), "mentee_id": str(mentee_id)},
    )
    return True


def list_unassigned_mentees() -> List[User]:
    assigned = CoachMenteeAssignment.objects.filter(is_active=True).values('mentee_id')
    return list(
        User.objects.filter(role=UserRole.MENTEE, is_active=True)
        .exclude(id__in=assigned)
        .order_by('first_name', 'last_name')
    )


def claim_unassigned_mentees(coach: User) -> int:
    """Assign every mentee that has no active coach to the given coach."""
    mentee_ids = [m.id for m in list_unassigned_mentees()]
    if mentee_ids:
        assign_mentees(coach.id, mentee_ids, performed_by=coach)
    return len(mentee_ids)


def list_mentees_for_coach(coach: User) -> List[MenteeSummaryDTO]:
    """
    The coach's active mentees with course progress and application counts.
    Admins see every mentee.
    """
    from apps.courses.services import get_progress_summaries
    from apps.tracker.services import count_applications_by_mentee

    if coach.role == UserRole.ADMIN:
        mentees = list(User.objects.filter(role=UserRole.MENTEE, is_active=True))
        assigned_at = {}
    else:
        rows = (
            CoachMenteeAssignment.objects.filter(coach=coach, is_active=True, mentee__is_active=True)
            .select_related('mentee')
        )
        mentees = [row.mentee for row in rows]
        assigned_at = {row.mentee_id: row.assigned_at for row in rows}

    mentee_ids = [m.id for m in mentees]
    progress = get_progress_summaries(mentee_ids)
    app_counts = count_applications_by_mentee(mentee_ids)
    notes = dict(
        MenteeNote.objects.filter(coach=coach, mentee_id__in=mentee_ids).values_list('mentee_id', 'notes')
    )

    result = []
    for mentee in mentees:
        summary = progress[mentee.id]
        result.append(MenteeSummaryDTO(
            id=mentee.id,
            full_name=mentee.full_name,
            email=mentee.email,
            phone=mentee.phone,
            assigned_at=assigned_at.get(mentee.id, mentee.date_joined),
            overall_progress=summary.overall_progress,
            completed_modules=summary.completed_modules,
            total_modules=summary.total_modules,
            application_count=app_counts.get(mentee.id, 0),
            notes=notes.get(mentee.id),
        ))
    result.sort(key=lambda m: m.full_name.lower())
    return result


def list_coaches_for_mentee(mentee: User) -> List[CoachSummaryDTO]:
    rows = (
        CoachMenteeAssignment.objects.filter(mentee=mentee, is_active=True)
        .select_related('coach')
        .order_by('assigned_at')
    )
    return [
        CoachSummaryDTO(
            id=row.coach.id,
            full_name=row.coach.full_name,
            email=row.coach.email,
            profile_picture_url=row.coach.profile_picture_url,
            assigned_at=row.assigned_at,
        )
        for row in rows
    ]


def get_note(coach: User, mentee_id: UUID) -> Optional[MenteeNote]:
    return MenteeNote.objects.filter(coach=coach, mentee_id=mentee_id).first()


def upsert_note(coach: User, mentee_id: UUID, notes: str) -> MenteeNote:
    note, _ = MenteeNote.objects.update_or_create(
        coach=coach, mentee_id=mentee_id, defaults={'notes': notes}
    )
    return note
