from ninja.errors import HttpError
from django.http import HttpRequest

from .jwt_auth import get_current_user
from .models import User, UserRole
from .permissions import get_user_permissions


def require_auth(request: HttpRequest) -> User:
    """
    Require authentication. Raises 401 if not authenticated.
    """
    user = get_current_user(request)
    if not user:
        raise HttpError(401, "Authentication required")
    return user


def require_permission(request: HttpRequest, permission: str) -> User:
    """Require a specific permission. Returns the caller."""
    user = require_auth(request)
    if permission not in get_user_permissions(user):
        raise HttpError(403, f"Permission denied: {permission}")
    return user


def require_role(request: HttpRequest, *roles: str) -> User:
    user = require_auth(request)
    if user.role not in roles:
        raise HttpError(403, "Permission denied")
    return user


def require_mentee(request: HttpRequest) -> User:
    return require_role(request, UserRole.MENTEE)


def require_coach(request: HttpRequest) -> User:
    """Coaches and administrators."""
    return require_role(request, UserRole.COACH, UserRole.ADMIN)
