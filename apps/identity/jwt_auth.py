"""
Cookie-borne JWTs (PyJWT, HS256).

Two token kinds share one secret: a 15-minute access token carrying the
role, and a 7-day refresh token that can only mint new access tokens.
Both travel in httpOnly cookies so the SPA never touches them.
"""
import os
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from uuid import UUID

import jwt
from django.conf import settings
from django.http import HttpRequest

JWT_SECRET = os.getenv('JWT_SECRET', settings.SECRET_KEY)
JWT_ALGORITHM = 'HS256'

ACCESS_COOKIE = 'access_token'
REFRESH_COOKIE = 'refresh_token'

TOKEN_LIFETIMES = {
    'access': timedelta(minutes=15),
    'refresh': timedelta(days=7),
}


def _encode(user_id: UUID, token_type: str, **claims) -> str:
    issued = datetime.now(timezone.utc)
    payload = {
        'sub': str(user_id),
        'type': token_type,
        'iat': issued,
        'exp': issued + TOKEN_LIFETIMES[token_type],
        **claims,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def create_access_token(user_id: UUID, role: str) -> str:
    return _encode(user_id, 'access', role=role)


def create_token_pair(user_id: UUID, role: str) -> Tuple[str, str]:
    """(access, refresh) for a fresh login or signup."""
    return create_access_token(user_id, role), _encode(user_id, 'refresh')


def decode_token(token: str) -> Optional[dict]:
    """Payload of a well-signed, unexpired token; None for anything else."""
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError:
        return None


def get_user_id_from_token(token: str, token_type: str = 'access') -> Optional[UUID]:
    payload = decode_token(token) or {}
    if payload.get('type') != token_type:
        return None
    try:
        return UUID(payload.get('sub', ''))
    except ValueError:
        return None


def get_current_user(request: HttpRequest):
    """
    The caller behind the access cookie, or the Django session user
    (admin site, test client) when there is no valid cookie.
    """
    from .models import User

    token = request.COOKIES.get(ACCESS_COOKIE)
    user_id = get_user_id_from_token(token) if token else None
    if user_id:
        user = User.objects.filter(id=user_id, is_active=True).first()
        if user:
            return user

    session_user = getattr(request, 'user', None)
    if session_user is not None and session_user.is_authenticated and session_user.is_active:
        return session_user
    return None


def is_production() -> bool:
    return bool(os.getenv('AWS_LAMBDA_FUNCTION_NAME')) or not settings.DEBUG


def cookie_settings(token_type: str) -> dict:
    """Keyword arguments for HttpResponse.set_cookie; Secure outside development."""
    return {
        'max_age': int(TOKEN_LIFETIMES[token_type].total_seconds()),
        'httponly': True,
        'secure': is_production(),
        'samesite': 'Lax',
        'path': '/',
    }
