"""Services for Identity app."""
import hmac
import logging

from django.conf import settings
from django.db import transaction

from .models import User, UserRole
from .dtos import UserDTO, CoachDTO, UserCreate, SignupIn
from .permissions import get_user_permissions
from apps.audit.audit_service import AuditAction, log_action

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    'first_name', 'last_name', 'phone', 'about',
    'location', 'website', 'profile_picture_url',
)
ADMIN_EDITABLE_FIELDS = ('email', 'first_name', 'last_name', 'role', 'phone', 'is_active')


def to_user_dto(user: User) -> UserDTO:
    return UserDTO(
        id=user.id,
        username=user.username,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        full_name=user.full_name,
        role=user.role,
        phone=user.phone,
        about=user.about,
        location=user.location,
        website=user.website,
        profile_picture_url=user.profile_picture_url,
        is_active=user.is_active,
        permissions=get_user_permissions(user),
    )


def create_user(payload: UserCreate) -> UserDTO:
    if payload.role not in UserRole.values:
        raise ValueError(f"Invalid role: {payload.role}")
    if User.objects.filter(username=payload.username).exists():
        raise ValueError("Username already taken")

    user = User.objects.create_user(
        username=payload.username,
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        role=payload.role,
        phone=payload.phone or "",
        is_active=True
    )
    logger.info("Created user %s with role %s", user.id, user.role)
    return to_user_dto(user)


def _coach_code_valid(code: str | None) -> bool:
    expected = settings.COACH_SIGNUP_CODE
    if not expected or not code:
        return False
    return hmac.compare_digest(code, expected)


@transaction.atomic
def signup(payload: SignupIn) -> User:
    """
    Self-service registration.

    Accounts are mentees unless a valid coach signup code is supplied.
    The e-mail address doubles as the username.
    """
    email = payload.email.strip().lower()
    if not email:
        raise ValueError("Email is required")
    if User.objects.filter(username=email).exists() or User.objects.filter(email__iexact=email).exists():
        raise ValueError("An account with this email already exists")

    role = UserRole.MENTEE
    if payload.coach_code:
        if not _coach_code_valid(payload.coach_code):
            raise ValueError("Invalid coach signup code")
        role = UserRole.COACH

    user = User.objects.create_user(
        username=email,
        email=email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone=payload.phone or "",
        role=role,
    )
    logger.info("User %s signed up as %s", user.id, role)
    return user


def list_users(role: str | None = None) -> list[UserDTO]:
    users = User.objects.all()
    if role:
        users = users.filter(role=role)
    return [to_user_dto(u) for u in users]


def list_coaches() -> list[CoachDTO]:
    coaches = User.objects.filter(role=UserRole.COACH, is_active=True).order_by('first_name', 'last_name')
    return [
        CoachDTO(
            id=c.id,
            full_name=c.full_name,
            email=c.email,
            about=c.about,
            profile_picture_url=c.profile_picture_url,
        )
        for c in coaches
    ]


def update_user(user_id, data: dict) -> UserDTO | None:
    try:
        user = User.objects.get(id=user_id)
    except User.DoesNotExist:
        return None

    if data.get('role') is not None and data['role'] not in UserRole.values:
        raise ValueError(f"Invalid role: {data['role']}")

    for key, value in data.items():
        if key in ADMIN_EDITABLE_FIELDS and value is not None:
            setattr(user, key, value)

    user.save()
    return to_user_dto(user)


def update_profile(user: User, data: dict) -> UserDTO:
    for key, value in data.items():
        if key in PROFILE_FIELDS and value is not None:
            setattr(user, key, value.strip() if isinstance(value, str) else value)
    user.save()
    return to_user_dto(user)


def deactivate_user(user_id, performed_by=None) -> bool:
    try:
        user = User.objects.get(id=user_id)
    except User.DoesNotExist:
        return False
    user.is_active = False  # soft delete: the account keeps its history
    user.save(update_fields=["is_active"])
    log_action(
        action=AuditAction.DEACTIVATE_USER,
        target_type="User",
        target_id=user.id,
        target_label=user.email or user.username,
        performed_by=performed_by,
    )
    logger.info("Deactivated user %s", user_id)
    return True
