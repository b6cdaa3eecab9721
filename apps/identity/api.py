"""
Accounts: cookie login/logout/refresh, self-service signup, the caller's
profile, and admin user management.
"""
from typing import List, Optional
from uuid import UUID

from django.contrib.auth import authenticate
from django.contrib.auth.signals import user_logged_in
from django.http import HttpRequest, HttpResponse
from ninja import Router, Schema
from ninja.errors import HttpError

from .decorators import require_auth, require_permission
from .dtos import CoachDTO, ProfileUpdate, SignupIn, UserCreate, UserDTO, UserUpdate
from .jwt_auth import (
    ACCESS_COOKIE,
    REFRESH_COOKIE,
    cookie_settings,
    create_access_token,
    create_token_pair,
    get_user_id_from_token,
)
from .models import User
from .permissions import Permissions
from .services import (
    create_user, deactivate_user, list_coaches, list_users,
    signup, to_user_dto, update_profile, update_user,
)

router = Router(tags=["Identity"])


class LoginIn(Schema):
    # Username or e-mail address
    username: str
    password: str


class AuthOut(Schema):
    success: bool
    user: Optional[UserDTO] = None
    message: Optional[str] = None


def _json(body: AuthOut, status: int = 200) -> HttpResponse:
    # Plain HttpResponse so cookies can be attached
    return HttpResponse(body.model_dump_json(), content_type='application/json', status=status)


def _signed_in(user: User, status: int = 200) -> HttpResponse:
    access, refresh = create_token_pair(user.id, user.role)
    response = _json(AuthOut(success=True, user=to_user_dto(user)), status)
    response.set_cookie(ACCESS_COOKIE, access, **cookie_settings('access'))
    response.set_cookie(REFRESH_COOKIE, refresh, **cookie_settings('refresh'))
    return response


def _find_login(request: HttpRequest, login: str, password: str) -> Optional[User]:
    user = authenticate(request, username=login, password=password)
    if user is not None or '@' not in login:
        return user
    by_email = User.objects.filter(email__iexact=login.strip()).first()
    return authenticate(request, username=by_email.username, password=password) if by_email else None


# --- session --------------------------------------------------------------

@router.post("/login", response=AuthOut, auth=None)
def login(request: HttpRequest, payload: LoginIn):
    user = _find_login(request, payload.username, payload.password)
    if user is None or not user.is_active:
        raise HttpError(401, "Invalid credentials")
    user_logged_in.send(sender=User, request=request, user=user)
    return _signed_in(user)


@router.post("/signup", response={201: AuthOut}, auth=None)
def register(request: HttpRequest, payload: SignupIn):
    """New mentee account, or a coach account when a valid coach code is given."""
    try:
        user = signup(payload)
    except ValueError as e:
        raise HttpError(400, str(e))
    return _signed_in(user, status=201)


@router.post("/logout", response=AuthOut, auth=None)
def logout(request: HttpRequest):
    response = _json(AuthOut(success=True, message="Logged out"))
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(name, path='/')
    return response


@router.post("/refresh", response=AuthOut, auth=None)
def refresh(request: HttpRequest):
    """Swap a valid refresh cookie for a new access cookie."""
    token = request.COOKIES.get(REFRESH_COOKIE)
    user_id = get_user_id_from_token(token, token_type='refresh') if token else None
    user = User.objects.filter(id=user_id, is_active=True).first() if user_id else None
    if user is None:
        raise HttpError(401, "Refresh token missing or invalid")

    response = _json(AuthOut(success=True, user=to_user_dto(user)))
    response.set_cookie(ACCESS_COOKIE, create_access_token(user.id, user.role), **cookie_settings('access'))
    return response


# --- own profile ----------------------------------------------------------

@router.get("/me", response=UserDTO, auth=None)
def me(request: HttpRequest):
    return to_user_dto(require_auth(request))


@router.patch("/me", response=UserDTO, auth=None)
def edit_me(request: HttpRequest, payload: ProfileUpdate):
    return update_profile(require_auth(request), payload.dict(exclude_unset=True))


@router.get("/coaches", response=List[CoachDTO], auth=None)
def coaches(request: HttpRequest):
    """Active coaches; mentees pick a preferred one when booking."""
    require_auth(request)
    return list_coaches()


# --- administration -------------------------------------------------------

@router.get("/users", response=List[UserDTO], auth=None)
def users(request: HttpRequest, role: Optional[str] = None):
    require_permission(request, Permissions.IDENTITY_MANAGE_USER)
    return list_users(role)


@router.post("/users", response=UserDTO, auth=None)
def add_user(request: HttpRequest, payload: UserCreate):
    require_permission(request, Permissions.IDENTITY_MANAGE_USER)
    try:
        return create_user(payload)
    except ValueError as e:
        raise HttpError(400, str(e))


@router.put("/users/{user_id}", response=UserDTO, auth=None)
def edit_user(request: HttpRequest, user_id: UUID, payload: UserUpdate):
    require_permission(request, Permissions.IDENTITY_MANAGE_USER)
    try:
        result = update_user(user_id, payload.dict(exclude_unset=True))
    except ValueError as e:
        raise HttpError(400, str(e))
    if result is None:
        raise HttpError(404, "User not found")
    return result


@router.delete("/users/{user_id}", response={204: None}, auth=None)
def remove_user(request: HttpRequest, user_id: UUID):
    """Soft delete: the account is deactivated, its history stays."""
    admin = require_permission(request, Permissions.IDENTITY_MANAGE_USER)
    if admin.id == user_id:
        raise HttpError(400, "You cannot deactivate your own account")
    if not deactivate_user(user_id, performed_by=admin):
        raise HttpError(404, "User not found")
    return 204
