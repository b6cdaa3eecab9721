import uuid
from django.db import models


class ApplicationStatus(models.TextChoices):
    APPLIED = 'applied', 'Applied'
    INTERVIEWED = 'interviewed', 'Interviewed'
    OFFERED = 'offered', 'Offered'
    REJECTED = 'rejected', 'Rejected'
    WITHDRAWN = 'withdrawn', 'Withdrawn'


class JobApplication(models.Model):
    """
    A job a mentee applied for. Mentees own the row; their coaches may
    annotate it (coach_notes) and move it through the pipeline.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    mentee = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='job_applications')

    company_name = models.CharField(max_length=255)
    job_title = models.CharField(max_length=255)
    job_link = models.URLField(max_length=1000, blank=True)
    date_applied = models.DateField()
    application_status = models.CharField(
        max_length=20,
        choices=ApplicationStatus.choices,
        default=ApplicationStatus.APPLIED
    )
    interview_stage = models.CharField(max_length=100, blank=True)
    recruiter_name = models.CharField(max_length=255, blank=True)
    coach_notes = models.TextField(blank=True)
    mentee_notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = "Job Application"
        verbose_name_plural = "Job Applications"

    def __str__(self):
        return f"{self.job_title} at {self.company_name}"


class HiddenApplication(models.Model):
    """Removes an application from one coach's review list only."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    coach = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='hidden_applications')
    application = models.ForeignKey(JobApplication, on_delete=models.CASCADE, related_name='hidden_by')
    hidden_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ['coach', 'application']

    def __str__(self):
        return f"{self.application} hidden by {self.coach}"
