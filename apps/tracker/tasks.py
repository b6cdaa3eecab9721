"""Celery tasks for Tracker app."""
from celery import shared_task

from . import draft_service


@shared_task
def purge_expired_drafts():
    """Drop application drafts older than DRAFT_TTL_SECONDS."""
    return draft_service.purge_expired_drafts()
