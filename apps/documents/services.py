"""
Coach uploads for mentees: CV files and course module files.
"""
import logging
from contextlib import contextmanager
from typing import List, Optional
from uuid import UUID

from django.core.files.uploadedfile import UploadedFile
from django.db import transaction

from apps.audit.audit_service import AuditAction, log_action
from apps.identity.models import User, UserRole
from apps.mentoring.services import is_assigned
from apps.notifications.digest_service import queue_digest_item
from apps.notifications.models import NotificationType
from apps.notifications.services import notify_file_upload
from .models import CVFile, ModuleFile, ModuleType
from . import storage_service

logger = logging.getLogger(__name__)


def _check_mentee(coach: User, mentee_id: UUID) -> User:
    mentee = User.objects.filter(id=mentee_id, role=UserRole.MENTEE, is_active=True).first()
    if mentee is None:
        raise ValueError("Mentee not found")
    if not is_assigned(coach, mentee_id):
        raise PermissionError("Mentee is not assigned to you")
    return mentee


@contextmanager
def _removing_file_on_error(stored_path: str):
    """The outer transaction rolls back the row, not the stored object."""
    try:
        yield
    except Exception:
        logger.warning("Upload failed after storing %s; removing it", stored_path)
        storage_service.delete_file(stored_path)
        raise


def _announce(coach: User, mentee: User, record, label: str):
    notify_file_upload(mentee.id, record.file_name)
    queue_digest_item(
        mentee.id,
        NotificationType.FILE_UPLOAD,
        f"New file: {record.file_name}",
        f"{coach.full_name} uploaded {label}",
    )
    log_action(
        action=AuditAction.UPLOAD_FILE,
        target_type=record.__class__.__name__,
        target_id=record.id,
        target_label=record.file_name,
        performed_by=coach,
        context={"mentee_id": str(mentee.id)},
    )


@transaction.atomic
def upload_cv(coach: User, mentee_id: UUID, file: UploadedFile) -> CVFile:
    mentee = _check_mentee(coach, mentee_id)

    is_valid, error = storage_service.validate_upload_file(file, storage_service.DOCUMENT_TYPES)
    if not is_valid:
        raise ValueError(error)

    path = storage_service.build_path(f"cv-files/{coach.id}", file, storage_service.DOCUMENT_TYPES)
    stored_path, url = storage_service.save_file(file, path)
    with _removing_file_on_error(stored_path):
        cv_file = CVFile.objects.create(
            coach=coach,
            mentee=mentee,
            file_name=file.name,
            file_path=stored_path,
            file_url=url,
            file_size=file.size,
        )
        _announce(coach, mentee, cv_file, "a new CV")
    logger.info("Coach %s uploaded CV %s for mentee %s", coach.id, cv_file.id, mentee.id)
    return cv_file


def list_cv_files(user: User, mentee_id: Optional[UUID] = None) -> List[CVFile]:
    """Coaches see their own uploads; mentees see the files uploaded for them."""
    files = CVFile.objects.select_related('coach', 'mentee')
    if user.role == UserRole.MENTEE:
        return list(files.filter(mentee=user))
    if user.role != UserRole.ADMIN:
        files = files.filter(coach=user)
    if mentee_id:
        files = files.filter(mentee_id=mentee_id)
    return list(files)


def _delete(user: User, record) -> bool:
    if record is None:
        return False
    if record.coach_id != user.id and user.role != UserRole.ADMIN:
        raise PermissionError("Only the uploader can delete this file")

    storage_service.delete_file(record.file_path)
    log_action(
        action=AuditAction.DELETE_FILE,
        target_type=record.__class__.__name__,
        target_id=record.id,
        target_label=record.file_name,
        performed_by=user,
    )
    record.delete()
    return True


def delete_cv(user: User, file_id: UUID) -> bool:
    return _delete(user, CVFile.objects.filter(id=file_id).first())


@transaction.atomic
def upload_module_file(coach: User, mentee_id: UUID, module_type: str, file: UploadedFile) -> ModuleFile:
    if module_type not in ModuleType.values:
        raise ValueError(f"Invalid module type: {module_type}")
    mentee = _check_mentee(coach, mentee_id)

    allowed = storage_service.DOCUMENT_AND_IMAGE_TYPES
    is_valid, error = storage_service.validate_upload_file(file, allowed)
    if not is_valid:
        raise ValueError(error)

    path = storage_service.build_path(f"module-files/{mentee.id}/{module_type}", file, allowed)
    stored_path, url = storage_service.save_file(file, path)
    with _removing_file_on_error(stored_path):
        module_file = ModuleFile.objects.create(
            coach=coach,
            mentee=mentee,
            module_type=module_type,
            file_name=file.name,
            file_path=stored_path,
            file_url=url,
            file_size=file.size,
        )
        _announce(coach, mentee, module_file, f"material for {ModuleType(module_type).label}")
    return module_file


def list_module_files(
    user: User,
    mentee_id: Optional[UUID] = None,
    module_type: Optional[str] = None,
) -> List[ModuleFile]:
    files = ModuleFile.objects.select_related('coach', 'mentee')
    if user.role == UserRole.MENTEE:
        files = files.filter(mentee=user)
    else:
        if user.role != UserRole.ADMIN:
            files = files.filter(coach=user)
        if mentee_id:
            files = files.filter(mentee_id=mentee_id)
    if module_type:
        files = files.filter(module_type=module_type)
    return list(files)


def delete_module_file(user: User, file_id: UUID) -> bool:
    return _delete(user, ModuleFile.objects.filter(id=file_id).first())
