from django.contrib import admin
from .models import CoachAvailability, BlockedDate, CoachingSession, BookingWebhook


@admin.register(CoachingSession)
class CoachingSessionAdmin(admin.ModelAdmin):
    list_display = ['session_type', 'mentee', 'coach', 'session_date', 'status']
    list_filter = ['status', 'session_type']
    search_fields = ['mentee__email', 'coach__email', 'cal_com_booking_id']
    date_hierarchy = 'session_date'


@admin.register(BookingWebhook)
class BookingWebhookAdmin(admin.ModelAdmin):
    list_display = ['event_type', 'booking_id', 'processed', 'created_at']
    list_filter = ['processed', 'event_type']
    readonly_fields = ['event_data']


admin.site.register(CoachAvailability)
admin.site.register(BlockedDate)
