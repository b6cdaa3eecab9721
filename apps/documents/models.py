import uuid
from django.db import models


class ModuleType(models.TextChoices):
    CV_OPTIMIZATION = 'cv_optimization', 'CV Optimization'
    LINKEDIN = 'linkedin', 'LinkedIn & Cover Letter'
    JOB_SEARCH_STRATEGY = 'job_search_strategy', 'Job Search Strategy'
    INTERVIEW_PREPARATION = 'interview_preparation', 'Interview Preparation'


class CVFile(models.Model):
    """A CV or cover letter a coach uploaded for one of their mentees."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    coach = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='uploaded_cv_files')
    mentee = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='cv_files')
    file_name = models.CharField(max_length=255)
    file_path = models.CharField(max_length=500, help_text="Storage path of the uploaded file")
    file_url = models.CharField(max_length=1000)
    file_size = models.PositiveIntegerField(default=0)
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-uploaded_at']
        verbose_name = "CV File"
        verbose_name_plural = "CV Files"

    def __str__(self):
        return f"{self.file_name} for {self.mentee}"


class ModuleFile(models.Model):
    """Course material a coach uploaded for a mentee's module."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    coach = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='uploaded_module_files')
    mentee = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='module_files')
    module_type = models.CharField(max_length=40, choices=ModuleType.choices)
    file_name = models.CharField(max_length=255)
    file_path = models.CharField(max_length=500)
    file_url = models.CharField(max_length=1000)
    file_size = models.PositiveIntegerField(default=0)
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-uploaded_at']

    def __str__(self):
        return f"{self.module_type}: {self.file_name}"
