import uuid
from django.db import models


class NotificationType(models.TextChoices):
    JOB_RECOMMENDATION = 'job_recommendation', 'Job Recommendation'
    FILE_UPLOAD = 'file_upload', 'File Upload'
    MESSAGE = 'message', 'Message'
    TODO_ASSIGNMENT = 'todo_assignment', 'Task Assignment'
    SESSION = 'session', 'Session'
    GENERAL = 'general', 'General'


class Notification(models.Model):
    """
    In-app notification shown in the user's notification bell.
    Clients poll the change feed (updated_at) to refresh lists and counters.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='notifications')
    type = models.CharField(max_length=30, choices=NotificationType.choices, default=NotificationType.GENERAL)
    title = models.CharField(max_length=255)
    message = models.TextField()
    action_url = models.CharField(max_length=255, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    # Message notifications point back at the chat they came from
    conversation = models.ForeignKey(
        'messaging.Conversation', on_delete=models.CASCADE, null=True, blank=True, related_name='notifications'
    )
    message_ref = models.ForeignKey(
        'messaging.Message', on_delete=models.CASCADE, null=True, blank=True, related_name='notifications'
    )

    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True, db_index=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [models.Index(fields=['user', 'is_read'])]

    def __str__(self):
        return f"{self.type}: {self.title} -> {self.user}"


class DigestItem(models.Model):
    """
    One line of a user's bundled notification e-mail (mostly mentees;
    coaches receive module feedback this way).
    Items stay unsent until the digest task mails them together.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    recipient = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='digest_items')
    type = models.CharField(max_length=30, choices=NotificationType.choices)
    title = models.CharField(max_length=255)
    details = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    sent_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['created_at']

    def __str__(self):
        return f"{self.type}: {self.title} ({'sent' if self.sent_at else 'pending'})"
