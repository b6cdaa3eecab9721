from django.contrib import admin
from .models import PersonalTodo, CoachTodo, TodoAssignment


@admin.register(PersonalTodo)
class PersonalTodoAdmin(admin.ModelAdmin):
    list_display = ['title', 'owner', 'status', 'priority', 'due_date']
    list_filter = ['status', 'priority']


@admin.register(CoachTodo)
class CoachTodoAdmin(admin.ModelAdmin):
    list_display = ['title', 'coach', 'priority', 'due_date', 'created_at']


@admin.register(TodoAssignment)
class TodoAssignmentAdmin(admin.ModelAdmin):
    list_display = ['todo', 'mentee', 'coach', 'status', 'assigned_at', 'completed_at']
    list_filter = ['status']
