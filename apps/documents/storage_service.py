"""
File storage for uploads (CV files, module files, message attachments).
Uses S3 through django-storages when USE_S3_STORAGE is on, otherwise the
default storage (local filesystem in development).
"""
import logging
import os
import secrets
import time
from typing import Dict, Optional, Tuple

from django.conf import settings
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import UploadedFile

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB

DOCUMENT_TYPES = {
    'application/pdf': 'pdf',
    'application/msword': 'doc',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document': 'docx',
    'text/plain': 'txt',
}

IMAGE_TYPES = {
    'image/jpeg': 'jpg',
    'image/png': 'png',
}

DOCUMENT_AND_IMAGE_TYPES = {**DOCUMENT_TYPES, **IMAGE_TYPES}

# Browsers send octet-stream for some Office files; fall back to the extension
EXTENSION_TYPES = {
    'pdf': 'application/pdf',
    'doc': 'application/msword',
    'docx': 'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'txt': 'text/plain',
    'jpg': 'image/jpeg',
    'jpeg': 'image/jpeg',
    'png': 'image/png',
}


def _content_type(file: UploadedFile) -> str:
    content_type = (file.content_type or '').split(';')[0].strip().lower()
    if content_type and content_type != 'application/octet-stream':
        return content_type
    extension = os.path.splitext(file.name or '')[1].lstrip('.').lower()
    return EXTENSION_TYPES.get(extension, content_type)


def validate_upload_file(file: UploadedFile, allowed_types: Dict[str, str]) -> Tuple[bool, Optional[str]]:
    """
    Validate an uploaded file against a content type whitelist.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if file.size > MAX_FILE_SIZE:
        return False, f"File too large. Maximum size is {MAX_FILE_SIZE // (1024 * 1024)} MB"

    if file.size == 0:
        return False, "File is empty"

    content_type = _content_type(file)
    if content_type not in allowed_types:
        allowed = ", ".join(sorted(ext.upper() for ext in set(allowed_types.values())))
        return False, f"Invalid file type: {content_type or 'unknown'}. Allowed: {allowed}"

    return True, None


def build_path(prefix: str, file: UploadedFile, allowed_types: Dict[str, str]) -> str:
    """<prefix>/<epoch millis>-<random token>.<ext>, never derived from the client's name."""
    extension = allowed_types.get(_content_type(file), 'bin')
    return f"{prefix}/{int(time.time() * 1000)}-{secrets.token_hex(6)}.{extension}"


def save_file(file: UploadedFile, path: str) -> Tuple[str, str]:
    """
    Store the file. Returns (stored_path, url).
    """
    if getattr(settings, 'USE_S3_STORAGE', False):
        return _upload_to_s3(file, path)
    return _upload_to_local(file, path)


def _s3_storage():
    from storages.backends.s3boto3 import S3Boto3Storage

    return S3Boto3Storage(**settings.STORAGES['default'].get('OPTIONS', {}))


def _upload_to_s3(file: UploadedFile, path: str) -> Tuple[str, str]:
    storage = _s3_storage()
    try:
        saved_path = storage.save(path, file)
    except Exception as e:
        logger.error(f"S3 upload failed: {e}")
        raise ValueError(f"Failed to upload to S3: {str(e)}")
    return saved_path, storage.url(saved_path)


def _upload_to_local(file: UploadedFile, path: str) -> Tuple[str, str]:
    saved_path = default_storage.save(path, file)
    media_url = getattr(settings, 'MEDIA_URL', '/media/')
    url = f"{media_url}{saved_path}"
    base_url = getattr(settings, 'APP_API_URL', '')
    return saved_path, f"{base_url}{url}" if base_url else url


def delete_file(path: str):
    """Remove a stored file. Missing files are ignored."""
    if not path:
        return
    try:
        if getattr(settings, 'USE_S3_STORAGE', False):
            _s3_storage().delete(path)
        else:
            default_storage.delete(path)
    except Exception:
        logger.warning("Could not delete stored file %s", path, exc_info=True)
