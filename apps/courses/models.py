import uuid
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


STANDARD_COURSE_MODULES = [
    'CV Optimization',
    'LinkedIn & Cover Letter',
    'Job Search Strategy',
    'Interview Preparation',
    'Feedback & Next Steps',
]


class CourseProgress(models.Model):
    """A mentee's progress through one course module."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='course_progress')
    module_title = models.CharField(max_length=255)
    progress_percentage = models.PositiveSmallIntegerField(
        default=0, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    completed = models.BooleanField(default=False)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['created_at']
        unique_together = ['user', 'module_title']
        verbose_name = "Course Progress"
        verbose_name_plural = "Course Progress"

    def __str__(self):
        return f"{self.user} - {self.module_title}: {self.progress_percentage}%"


class ModuleFeedback(models.Model):
    """Feedback a mentee leaves on a course module for their coaches."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    mentee = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='module_feedback')
    module_title = models.CharField(max_length=255)
    rating = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    comments = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Feedback on {self.module_title} by {self.mentee}"
