from django.contrib import admin
from .models import JobRecommendation


@admin.register(JobRecommendation)
class JobRecommendationAdmin(admin.ModelAdmin):
    list_display = ['job_title', 'company_name', 'mentee', 'coach', 'week_start_date', 'status']
    list_filter = ['status', 'archived']
    search_fields = ['job_title', 'company_name', 'mentee__email']
