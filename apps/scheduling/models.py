import uuid
from django.db import models


class SessionStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    CONFIRMED = 'confirmed', 'Confirmed'
    CANCELLED = 'cancelled', 'Cancelled'
    COMPLETED = 'completed', 'Completed'


class CoachAvailability(models.Model):
    """Weekly working hours. day_of_week: 0 = Sunday ... 6 = Saturday."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    coach = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='availability')
    day_of_week = models.PositiveSmallIntegerField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    is_available = models.BooleanField(default=True)

    class Meta:
        ordering = ['day_of_week']
        unique_together = ['coach', 'day_of_week']
        verbose_name_plural = "Coach availability"

    def __str__(self):
        return f"{self.coach} day {self.day_of_week} {self.start_time}-{self.end_time}"


class BlockedDate(models.Model):
    """A day (or part of a day when times are set) the coach is unavailable."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    coach = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='blocked_dates')
    blocked_date = models.DateField()
    start_time = models.TimeField(null=True, blank=True)
    end_time = models.TimeField(null=True, blank=True)
    reason = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['blocked_date', 'start_time']

    def __str__(self):
        return f"{self.coach} blocked {self.blocked_date}"


class CoachingSession(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    mentee = models.ForeignKey('identity.User', on_delete=models.CASCADE, related_name='booked_sessions')
    coach = models.ForeignKey(
        'identity.User', on_delete=models.SET_NULL, null=True, blank=True,
        related_name='coached_sessions'
    )
    preferred_coach = models.ForeignKey(
        'identity.User', on_delete=models.SET_NULL, null=True, blank=True,
        related_name='requested_sessions'
    )
    session_type = models.CharField(max_length=100)
    session_date = models.DateTimeField(db_index=True)
    duration = models.PositiveIntegerField(default=60, help_text="Minutes")
    notes = models.TextField(blank=True, default="")
    status = models.CharField(max_length=20, choices=SessionStatus.choices, default=SessionStatus.PENDING)
    meeting_link = models.CharField(max_length=500, blank=True, default="")
    cal_com_booking_id = models.CharField(max_length=100, blank=True, default="", db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['session_date']

    def __str__(self):
        return f"{self.session_type} for {self.mentee} at {self.session_date}"


class BookingWebhook(models.Model):
    """Raw booking-provider webhook, kept for replay and troubleshooting."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event_type = models.CharField(max_length=50)
    booking_id = models.CharField(max_length=100, blank=True, default="", db_index=True)
    event_data = models.JSONField(default=dict)
    processed = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.event_type} {self.booking_id}"
