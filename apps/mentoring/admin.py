from django.contrib import admin
from .models import CoachMenteeAssignment, MenteeNote


@admin.register(CoachMenteeAssignment)
class CoachMenteeAssignmentAdmin(admin.ModelAdmin):
    list_display = ['coach', 'mentee', 'is_active', 'assigned_at']
    list_filter = ['is_active']
    search_fields = ['coach__email', 'mentee__email']


admin.site.register(MenteeNote)
