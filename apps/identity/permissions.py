from typing import List, Dict
from .models import UserRole, User

# Define all available permissions here for reference
class Permissions:
    # Identity
    IDENTITY_VIEW_USER = "identity.view_user"
    IDENTITY_MANAGE_USER = "identity.manage_user"

    # Mentoring
    MENTORING_VIEW_MENTEES = "mentoring.view_mentees"
    MENTORING_ASSIGN_MENTEES = "mentoring.assign_mentees"
    MENTORING_MANAGE_NOTES = "mentoring.manage_notes"

    # Tracker
    TRACKER_MANAGE_OWN = "tracker.manage_own"
    TRACKER_REVIEW_MENTEES = "tracker.review_mentees"

    # Courses
    COURSES_TRACK_PROGRESS = "courses.track_progress"
    COURSES_VIEW_MENTEE_PROGRESS = "courses.view_mentee_progress"

    # Documents
    DOCUMENTS_UPLOAD = "documents.upload"

    # Todos
    TODOS_ASSIGN = "todos.assign"

    # Scheduling
    SCHEDULING_BOOK = "scheduling.book"
    SCHEDULING_MANAGE = "scheduling.manage"

    # Recommendations
    RECOMMENDATIONS_CREATE = "recommendations.create"

    # Community
    COMMUNITY_PARTICIPATE = "community.participate"
    COMMUNITY_MODERATE = "community.moderate"

    # Audit
    AUDIT_VIEW = "audit.view"


# Static Role -> Permission Mapping
ROLE_PERMISSIONS: Dict[str, List[str]] = {
    UserRole.ADMIN: [
        # Identity
        Permissions.IDENTITY_VIEW_USER,
        Permissions.IDENTITY_MANAGE_USER,
        # Coaching - everything a coach can do, across all mentees
        Permissions.MENTORING_VIEW_MENTEES,
        Permissions.MENTORING_ASSIGN_MENTEES,
        Permissions.MENTORING_MANAGE_NOTES,
        Permissions.TRACKER_REVIEW_MENTEES,
        Permissions.COURSES_VIEW_MENTEE_PROGRESS,
        Permissions.DOCUMENTS_UPLOAD,
        Permissions.TODOS_ASSIGN,
        Permissions.SCHEDULING_MANAGE,
        Permissions.RECOMMENDATIONS_CREATE,
        Permissions.COMMUNITY_PARTICIPATE,
        Permissions.COMMUNITY_MODERATE,
        # Audit
        Permissions.AUDIT_VIEW,
    ],
    UserRole.COACH: [
        Permissions.IDENTITY_VIEW_USER,
        Permissions.MENTORING_VIEW_MENTEES,
        Permissions.MENTORING_ASSIGN_MENTEES,
        Permissions.MENTORING_MANAGE_NOTES,
        Permissions.TRACKER_REVIEW_MENTEES,
        Permissions.COURSES_VIEW_MENTEE_PROGRESS,
        Permissions.DOCUMENTS_UPLOAD,
        Permissions.TODOS_ASSIGN,
        Permissions.SCHEDULING_MANAGE,
        Permissions.RECOMMENDATIONS_CREATE,
        Permissions.COMMUNITY_PARTICIPATE,
    ],
    UserRole.MENTEE: [
        Permissions.TRACKER_MANAGE_OWN,
        Permissions.COURSES_TRACK_PROGRESS,
        Permissions.SCHEDULING_BOOK,
        Permissions.COMMUNITY_PARTICIPATE,
    ],
}

def get_user_permissions(user: User) -> List[str]:
    """
    Returns a list of permission strings for the given user based on their role.
    """
    if not user or not user.is_active:
        return []

    return ROLE_PERMISSIONS.get(user.role, [])
