import uuid
from django.db import models


class ConversationStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    ARCHIVED = 'archived', 'Archived'
    CLOSED = 'closed', 'Closed'


class SenderType(models.TextChoices):
    COACH = 'COACH', 'Coach'
    MENTEE = 'MENTEE', 'Mentee'


class Conversation(models.Model):
    """A thread between a mentee and a coach. updated_at moves with every message."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    mentee = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='mentee_conversations')
    coach = models.ForeignKey(
        'identity.User', on_delete=models.SET_NULL, null=True, blank=True,
        related_name='coach_conversations'
    )
    subject = models.CharField(max_length=255, blank=True, default="")
    status = models.CharField(max_length=20, choices=ConversationStatus.choices, default=ConversationStatus.ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True, db_index=True)

    class Meta:
        ordering = ['-updated_at']

    def __str__(self):
        return self.subject or f"Conversation {self.id}"


class Message(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    conversation = models.ForeignKey(Conversation, on_delete=models.CASCADE, related_name='messages')
    sender = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='sent_messages')
    sender_type = models.CharField(max_length=10, choices=SenderType.choices)
    content = models.TextField()
    message_type = models.CharField(max_length=20, default='text')
    read_status = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['conversation', 'read_status']),
        ]

    def __str__(self):
        return f"{self.sender_type}: {self.content[:40]}"


class MessageAttachment(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    message = models.ForeignKey(Message, on_delete=models.CASCADE, related_name='attachments')
    file_name = models.CharField(max_length=255)
    file_url = models.CharField(max_length=1000)
    file_type = models.CharField(max_length=100, blank=True, default="")
    file_size = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.file_name
