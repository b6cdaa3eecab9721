import uuid
from django.db import models


class CoachMenteeAssignment(models.Model):
    """
    Links a coach to a mentee. Unassigning keeps the row with is_active=False
    so reassigning the same pair re-activates it.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    coach = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='mentee_assignments')
    mentee = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='coach_assignments')
    is_active = models.BooleanField(default=True)
    assigned_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-assigned_at']
        unique_together = ['coach', 'mentee']
        verbose_name = "Coach-Mentee Assignment"
        verbose_name_plural = "Coach-Mentee Assignments"

    def __str__(self):
        state = "active" if self.is_active else "inactive"
        return f"{self.coach} -> {self.mentee} ({state})"


class MenteeNote(models.Model):
    """A coach's private notes about one of their mentees."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    coach = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='authored_mentee_notes')
    mentee = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='coach_notes')
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ['coach', 'mentee']

    def __str__(self):
        return f"Notes on {self.mentee} by {self.coach}"
