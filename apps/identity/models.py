import uuid
from django.db import models
from django.contrib.auth.models import AbstractUser


class UserRole(models.TextChoices):
    ADMIN = 'ADMIN', 'Administrator'
    COACH = 'COACH', 'Coach'
    MENTEE = 'MENTEE', 'Mentee'


class User(AbstractUser):
    """
    Custom User model. A user is either a coach, a mentee or an administrator;
    the public profile (about, location, website, picture) lives on the same row.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.MENTEE
    )
    phone = models.CharField(max_length=20, blank=True)

    # Public profile
    about = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    website = models.URLField(blank=True)
    profile_picture_url = models.URLField(blank=True)

    class Meta:
        ordering = ['username']

    def __str__(self):
        return self.email or self.username

    @property
    def full_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.email or self.username

    @property
    def is_coach(self) -> bool:
        return self.role == UserRole.COACH

    @property
    def is_mentee(self) -> bool:
        return self.role == UserRole.MENTEE

    @property
    def is_admin_role(self) -> bool:
        return self.role == UserRole.ADMIN
