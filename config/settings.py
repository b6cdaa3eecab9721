"""
Django settings for CCMS project.

All deployment-specific values come from environment variables (optionally
loaded from a .env file). See config/database.py and config/storage.py for
the database and file storage switches.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

from .database import get_database_config
from .storage import get_storage_settings

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / '.env')


def _env_bool(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).lower() in ('1', 'true', 'yes')


SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-ccms-development-key')
DEBUG = _env_bool('DJANGO_DEBUG', 'true')
ALLOWED_HOSTS = [h for h in os.getenv('DJANGO_ALLOWED_HOSTS', '*').split(',') if h]

# =============================================================================
# Applications
# =============================================================================

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'corsheaders',
    'apps.core',
    'apps.identity',
    'apps.audit',
    'apps.mentoring',
    'apps.tracker',
    'apps.courses',
    'apps.documents',
    'apps.messaging',
    'apps.notifications',
    'apps.todos',
    'apps.scheduling',
    'apps.recommendations',
    'apps.community',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'
ASGI_APPLICATION = 'config.asgi.application'

AUTH_USER_MODEL = 'identity.User'

DATABASES = {
    'default': get_database_config(BASE_DIR),
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
]

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

# =============================================================================
# File Storage
# =============================================================================

globals().update(get_storage_settings(BASE_DIR))

# =============================================================================
# Cache (draft autosave lives here)
# =============================================================================

CACHE_URL = os.getenv('CACHE_URL', '')
if CACHE_URL.startswith('redis'):
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.redis.RedisCache',
            'LOCATION': CACHE_URL,
        }
    }
else:
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
            'LOCATION': 'ccms-default',
        }
    }

DRAFT_TTL_SECONDS = int(os.getenv('DRAFT_TTL_SECONDS', '3600'))

# =============================================================================
# Background Tasks
# =============================================================================

TASK_BACKEND = os.getenv('TASK_BACKEND', 'local')

CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', 'redis://localhost:6379/0')
CELERY_RESULT_BACKEND = os.getenv('CELERY_RESULT_BACKEND', CELERY_BROKER_URL)
CELERY_TASK_SERIALIZER = 'json'
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TIMEZONE = TIME_ZONE
# CELERY_NOTIFICATIONS_QUEUE (read in config/celery.py) moves digest sends to their own queue

# =============================================================================
# Notifications / E-mail
# =============================================================================

SES_ENABLED = _env_bool('SES_ENABLED')
SES_REGION = os.getenv('SES_REGION', os.getenv('AWS_REGION', 'us-east-1'))
NOTIFICATION_FROM_EMAIL = os.getenv(
    'NOTIFICATION_FROM_EMAIL', 'Career Coaching <no-reply@example.com>'
)
NOTIFICATION_DIGEST_DELAY_SECONDS = int(os.getenv('NOTIFICATION_DIGEST_DELAY_SECONDS', '30'))
APP_BASE_URL = os.getenv('APP_BASE_URL', 'http://localhost:5173')
# Prefix for locally stored file URLs; empty keeps them relative
APP_API_URL = os.getenv('APP_API_URL', '')

# =============================================================================
# Integrations
# =============================================================================

CALCOM_WEBHOOK_SECRET = os.getenv('CALCOM_WEBHOOK_SECRET', '')
COACH_SIGNUP_CODE = os.getenv('COACH_SIGNUP_CODE', '')

# =============================================================================
# CORS
# =============================================================================

CORS_ALLOWED_ORIGINS = [o for o in os.getenv('CORS_ALLOWED_ORIGINS', APP_BASE_URL).split(',') if o]
CORS_ALLOW_CREDENTIALS = True

# =============================================================================
# Logging
# =============================================================================

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'apps': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
        'django.request': {
            'handlers': ['console'],
            'level': 'ERROR',
            'propagate': False,
        },
    },
}
