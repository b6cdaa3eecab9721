"""Celery tasks for Scheduling app."""
import logging

from celery import shared_task

from . import webhook_service

logger = logging.getLogger(__name__)


@shared_task
def process_booking_webhook(webhook_id):
    """Apply a stored Cal.com delivery to its coaching session."""
    result = webhook_service.process_stored_webhook(webhook_id)
    logger.info("Booking webhook %s: %s", webhook_id, result.message)
    return result.message
