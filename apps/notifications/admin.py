from django.contrib import admin
from .models import Notification, DigestItem


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['title', 'type', 'user', 'is_read', 'created_at']
    list_filter = ['type', 'is_read']
    search_fields = ['title', 'message', 'user__email']


@admin.register(DigestItem)
class DigestItemAdmin(admin.ModelAdmin):
    list_display = ['title', 'type', 'recipient', 'created_at', 'sent_at']
    list_filter = ['type']
