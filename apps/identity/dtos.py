"""DTOs for Identity app."""
from dataclasses import dataclass
from uuid import UUID
from typing import Optional, List


@dataclass(frozen=True)
class UserDTO:
    id: UUID
    username: str
    email: str
    first_name: str
    last_name: str
    full_name: str
    role: str
    phone: str
    about: str
    location: str
    website: str
    profile_picture_url: str
    is_active: bool
    permissions: List[str]


@dataclass(frozen=True)
class CoachDTO:
    id: UUID
    full_name: str
    email: str
    about: str
    profile_picture_url: str


from ninja import Schema
from .models import UserRole


class UserCreate(Schema):
    username: str
    email: str
    password: str
    first_name: str
    last_name: str
    role: str = UserRole.MENTEE
    phone: Optional[str] = None


class SignupIn(Schema):
    email: str
    password: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    # A valid code turns the account into a coach account
    coach_code: Optional[str] = None


class UserUpdate(Schema):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = None
    phone: Optional[str] = None
    is_active: Optional[bool] = None


class ProfileUpdate(Schema):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    about: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    profile_picture_url: Optional[str] = None
