"""
Documents API endpoints: CV files and module files uploaded by coaches.
"""
from typing import List, Optional
from uuid import UUID

from django.http import HttpRequest
from ninja import Router, File, Form
from ninja.errors import HttpError
from ninja.files import UploadedFile

from apps.identity.decorators import require_auth, require_permission
from apps.identity.permissions import Permissions
from .schemas import CVFileOut, ModuleFileOut
from . import services

router = Router(tags=["Documents"])


def _run_upload(upload, *args):
    try:
        return upload(*args)
    except PermissionError as e:
        raise HttpError(403, str(e))
    except ValueError as e:
        raise HttpError(400, str(e))


# =============================================================================
# CV Files
# =============================================================================

@router.post("/cv-files", response={201: CVFileOut}, auth=None)
def upload_cv(request: HttpRequest, mentee_id: Form[UUID], file: UploadedFile = File(...)):
    """Upload a CV for an assigned mentee (PDF, DOC, DOCX or TXT, up to 10 MB)."""
    coach = require_permission(request, Permissions.DOCUMENTS_UPLOAD)
    return 201, _run_upload(services.upload_cv, coach, mentee_id, file)


@router.get("/cv-files", response=List[CVFileOut], auth=None)
def list_cv_files(request: HttpRequest, mentee_id: Optional[UUID] = None):
    user = require_auth(request)
    return services.list_cv_files(user, mentee_id)


@router.delete("/cv-files/{file_id}", response={204: None}, auth=None)
def delete_cv_file(request: HttpRequest, file_id: UUID):
    user = require_permission(request, Permissions.DOCUMENTS_UPLOAD)
    try:
        deleted = services.delete_cv(user, file_id)
    except PermissionError as e:
        raise HttpError(403, str(e))
    if not deleted:
        raise HttpError(404, "File not found")
    return 204


# =============================================================================
# Module Files
# =============================================================================

@router.post("/module-files", response={201: ModuleFileOut}, auth=None)
def upload_module_file(
    request: HttpRequest,
    mentee_id: Form[UUID],
    module_type: Form[str],
    file: UploadedFile = File(...),
):
    """Upload course material for a mentee; images are accepted as well."""
    coach = require_permission(request, Permissions.DOCUMENTS_UPLOAD)
    return 201, _run_upload(services.upload_module_file, coach, mentee_id, module_type, file)


@router.get("/module-files", response=List[ModuleFileOut], auth=None)
def list_module_files(
    request: HttpRequest,
    mentee_id: Optional[UUID] = None,
    module_type: Optional[str] = None,
):
    user = require_auth(request)
    return services.list_module_files(user, mentee_id=mentee_id, module_type=module_type)


@router.delete("/module-files/{file_id}", response={204: None}, auth=None)
def delete_module_file(request: HttpRequest, file_id: UUID):
    user = require_permission(request, Permissions.DOCUMENTS_UPLOAD)
    try:
        deleted = services.delete_module_file(user, file_id)
    except PermissionError as e:
        raise HttpError(403, str(e))
    if not deleted:
        raise HttpError(404, "File not found")
    return 204
