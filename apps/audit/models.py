import uuid

from django.conf import settings
from django.db import models


class AuditLog(models.Model):
    """One row per audited coaching action. Rows are never updated."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    action = models.CharField(max_length=50, db_index=True)
    target_type = models.CharField(max_length=50)
    # Null for actions spanning several objects (e.g. a recommendation sent to many mentees)
    target_id = models.UUIDField(null=True, blank=True)
    target_label = models.CharField(max_length=255, blank=True)
    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_entries',
    )
    performed_at = models.DateTimeField(auto_now_add=True, db_index=True)
    context = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ['-performed_at']
        indexes = [models.Index(fields=['target_type', 'target_id'])]

    def __str__(self):
        actor = self.performed_by or "system"
        return f"{self.action} {self.target_type}:{self.target_id or '-'} ({actor})"
