import uuid
from django.db import models


class RecommendationStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    APPLIED = 'applied', 'Applied'
    ARCHIVED = 'archived', 'Archived'


class JobRecommendation(models.Model):
    """A job a coach suggests to a mentee, grouped by the week it was posted."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    coach = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='given_recommendations')
    mentee = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='job_recommendations')
    job_title = models.CharField(max_length=255)
    company_name = models.CharField(max_length=255)
    job_link = models.CharField(max_length=1000, blank=True, default="")
    description = models.TextField(blank=True, default="")
    week_start_date = models.DateField(help_text="Monday of the week the recommendation belongs to")
    status = models.CharField(
        max_length=20, choices=RecommendationStatus.choices, default=RecommendationStatus.ACTIVE
    )
    archived = models.BooleanField(default=False)
    applied_date = models.DateTimeField(null=True, blank=True)
    application_stage = models.CharField(max_length=100, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-week_start_date', '-created_at']

    def __str__(self):
        return f"{self.job_title} at {self.company_name} for {self.mentee}"
