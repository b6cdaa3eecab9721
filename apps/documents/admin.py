from django.contrib import admin
from .models import CVFile, ModuleFile


@admin.register(CVFile)
class CVFileAdmin(admin.ModelAdmin):
    list_display = ['file_name', 'mentee', 'coach', 'file_size', 'uploaded_at']
    search_fields = ['file_name', 'mentee__email', 'coach__email']


@admin.register(ModuleFile)
class ModuleFileAdmin(admin.ModelAdmin):
    list_display = ['file_name', 'module_type', 'mentee', 'coach', 'uploaded_at']
    list_filter = ['module_type']
    search_fields = ['file_name', 'mentee__email']
