"""Celery tasks for Notifications app."""
import logging

from celery import shared_task

from . import digest_service

logger = logging.getLogger(__name__)


@shared_task(
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_backoff_max=600,
    max_retries=3,
)
def send_notification_digest(recipient_id, trigger_item_id=None):
    """
    Send a user's bundled notification e-mail.
    SES failures raise and are retried with exponential backoff.
    """
    return digest_service.send_digest(recipient_id, trigger_item_id=trigger_item_id)


@shared_task
def flush_pending_digests():
    count = digest_service.flush_pending_digests()
    logger.info("Flushed notification digests for %d user(s)", count)
    return count
