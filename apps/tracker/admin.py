from django.contrib import admin
from .models import JobApplication, HiddenApplication


@admin.register(JobApplication)
class JobApplicationAdmin(admin.ModelAdmin):
    list_display = ['job_title', 'company_name', 'mentee', 'application_status', 'date_applied']
    list_filter = ['application_status']
    search_fields = ['company_name', 'job_title', 'recruiter_name', 'mentee__email']
    date_hierarchy = 'date_applied'


admin.site.register(HiddenApplication)
