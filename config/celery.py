"""
Celery app for CCMS, used when TASK_BACKEND=celery.

Beat runs the two safety nets: the hourly draft purge and the digest flush
that catches digests whose debounced task never ran.
"""
import os
from celery import Celery
from celery.schedules import crontab

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('ccms')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()


def task_routes(notifications_queue: str) -> dict:
    """
    Digest sends wait on SES, so they can get a queue of their own. When
    CELERY_NOTIFICATIONS_QUEUE is set, start workers that consume it too:

        celery -A config worker -Q celery,<queue>

    Unset, every task stays on the default queue.
    """
    if not notifications_queue:
        return {}
    return {'apps.notifications.tasks.*': {'queue': notifications_queue}}


app.conf.task_routes = task_routes(os.getenv('CELERY_NOTIFICATIONS_QUEUE', ''))

app.conf.beat_schedule = {
    'purge-expired-drafts': {
        'task': 'apps.tracker.tasks.purge_expired_drafts',
        'schedule': crontab(minute=0),
    },
    'flush-notification-digests': {
        'task': 'apps.notifications.tasks.flush_pending_digests',
        'schedule': crontab(minute=f"*/{os.getenv('DIGEST_FLUSH_INTERVAL_MINUTES', '15')}"),
    },
}
