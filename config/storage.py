"""
File storage switch for CCMS.

Coach uploads (CVs, module material) and message attachments go to a
private S3 bucket in production and to MEDIA_ROOT during development.
"""
import os
from pathlib import Path


def use_s3() -> bool:
    return os.getenv('USE_S3_STORAGE', 'false').lower() == 'true'


def _s3_options() -> dict:
    return {
        'bucket_name': os.getenv('AWS_STORAGE_BUCKET_NAME', 'ccms-files'),
        'region_name': os.getenv('AWS_S3_REGION_NAME', 'us-east-1'),
        'custom_domain': os.getenv('AWS_S3_CUSTOM_DOMAIN') or None,
        'default_acl': 'private',
        'file_overwrite': False,
        # CVs are personal data: hand out short-lived signed URLs only
        'querystring_auth': True,
        'querystring_expire': int(os.getenv('AWS_QUERYSTRING_EXPIRE', '3600')),
        'object_parameters': {'CacheControl': 'private, max-age=3600'},
    }


def get_storage_settings(base_dir: Path) -> dict:
    """
    Settings to merge into the Django settings module: STORAGES plus
    MEDIA_URL / MEDIA_ROOT and the USE_S3_STORAGE flag the upload code reads.
    """
    static = {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'}

    if use_s3():
        # Credentials come from AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY or the instance role
        return {
            'USE_S3_STORAGE': True,
            'STORAGES': {
                'default': {
                    'BACKEND': 'storages.backends.s3boto3.S3Boto3Storage',
                    'OPTIONS': _s3_options(),
                },
                'staticfiles': static,
            },
            'MEDIA_URL': '/media/',
            'MEDIA_ROOT': base_dir / 'media',
        }

    return {
        'USE_S3_STORAGE': False,
        'STORAGES': {
            'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
            'staticfiles': static,
        },
        'MEDIA_URL': '/media/',
        'MEDIA_ROOT': Path(os.getenv('MEDIA_ROOT', base_dir / 'media')),
    }
