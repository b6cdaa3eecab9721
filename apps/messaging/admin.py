from django.contrib import admin
from .models import Conversation, Message, MessageAttachment


class MessageInline(admin.TabularInline):
    model = Message
    extra = 0
    fields = ['sender', 'sender_type', 'content', 'read_status', 'created_at']
    readonly_fields = ['created_at']


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    list_display = ['subject', 'mentee', 'coach', 'status', 'updated_at']
    list_filter = ['status']
    search_fields = ['subject', 'mentee__email', 'coach__email']
    inlines = [MessageInline]


admin.site.register(MessageAttachment)
