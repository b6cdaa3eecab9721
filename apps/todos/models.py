import uuid
from django.db import models


class TodoStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    IN_PROGRESS = 'in_progress', 'In Progress'
    COMPLETED = 'completed', 'Completed'


class TodoPriority(models.TextChoices):
    LOW = 'low', 'Low'
    MEDIUM = 'medium', 'Medium'
    HIGH = 'high', 'High'


class PersonalTodo(models.Model):
    """A task a user keeps for themselves."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='personal_todos')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    status = models.CharField(max_length=20, choices=TodoStatus.choices, default=TodoStatus.PENDING)
    priority = models.CharField(max_length=10, choices=TodoPriority.choices, default=TodoPriority.MEDIUM)
    due_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.title


class CoachTodo(models.Model):
    """A task a coach writes once and sends to one or more mentees."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    coach = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='coach_todos')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    priority = models.CharField(max_length=10, choices=TodoPriority.choices, default=TodoPriority.MEDIUM)
    due_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.title


class TodoAssignment(models.Model):
    """
    A coach todo sent to a mentee. The mentee_* fields hold the mentee's own
    edits and take precedence over the todo's values when set.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    todo = models.ForeignKey(CoachTodo, on_delete=models.CASCADE, related_name='assignments')
    coach = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='sent_todo_assignments')
    mentee = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='todo_assignments')
    status = models.CharField(max_length=20, choices=TodoStatus.choices, default=TodoStatus.PENDING)
    assigned_at = models.DateTimeField(auto_now_add=True)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    mentee_title = models.CharField(max_length=255, blank=True, default="")
    mentee_description = models.TextField(blank=True, default="")
    mentee_priority = models.CharField(max_length=10, choices=TodoPriority.choices, blank=True, default="")
    mentee_due_date = models.DateField(null=True, blank=True)

    class Meta:
        ordering = ['-assigned_at']
        unique_together = ['todo', 'mentee']

    def __str__(self):
        return f"{self.todo} -> {self.mentee} ({self.status})"

    @property
    def display_title(self):
        return self.mentee_title or self.todo.title

    @property
    def display_description(self):
        return self.mentee_description or self.todo.description

    @property
    def display_priority(self):
        return self.mentee_priority or self.todo.priority

    @property
    def display_due_date(self):
        return self.mentee_due_date or self.todo.due_date
