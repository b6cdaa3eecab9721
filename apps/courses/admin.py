from django.contrib import admin
from .models import CourseProgress, ModuleFeedback


@admin.register(CourseProgress)
class CourseProgressAdmin(admin.ModelAdmin):
    list_display = ['user', 'module_title', 'progress_percentage', 'completed']
    list_filter = ['module_title', 'completed']


@admin.register(ModuleFeedback)
class ModuleFeedbackAdmin(admin.ModelAdmin):
    list_display = ['mentee', 'module_title', 'rating', 'created_at']
