"""
Tests for CV and module file uploads.
"""
import os
import shutil
import tempfile
from unittest.mock import patch
from uuid import uuid4

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import IntegrityError
from django.test import TestCase, Client, override_settings

from apps.audit.audit_service import AuditAction
from apps.audit.models import AuditLog
from apps.documents import services, storage_service
from apps.documents.models import CVFile, ModuleFile
from apps.identity.models import UserRole
from apps.mentoring.services import assign_mentees
from apps.notifications.models import DigestItem, Notification, NotificationType


User = get_user_model()


def make_user(role, username=None):
    username = username or f"user_{uuid4().hex[:8]}"
    return User.objects.create_user(
        username=username, email=f"{username}@test.com", password="testpass123", role=role,
    )


def pdf(name="cv.pdf", content=b"%PDF-1.4 test"):
    return SimpleUploadedFile(name, content, content_type="application/pdf")


class StorageValidationTest(TestCase):
    def test_accepts_pdf(self):
        self.assertEqual(storage_service.validate_upload_file(pdf(), storage_service.DOCUMENT_TYPES), (True, None))

    def test_rejects_empty_file(self):
        ok, error = storage_service.validate_upload_file(pdf(content=b""), storage_service.DOCUMENT_TYPES)
        self.assertFalse(ok)
        self.assertEqual(error, "File is empty")

    def test_rejects_oversized_file(self):
        big = pdf(content=b"x" * (storage_service.MAX_FILE_SIZE + 1))
        ok, error = storage_service.validate_upload_file(big, storage_service.DOCUMENT_TYPES)
        self.assertFalse(ok)
        self.assertIn("File too large", error)

    def test_images_only_for_module_files(self):
        image = SimpleUploadedFile("photo.png", b"\x89PNG", content_type="image/png")
        self.assertFalse(storage_service.validate_upload_file(image, storage_service.DOCUMENT_TYPES)[0])
        self.assertTrue(storage_service.validate_upload_file(image, storage_service.DOCUMENT_AND_IMAGE_TYPES)[0])

    def test_octet_stream_falls_back_to_extension(self):
        docx = SimpleUploadedFile("cv.docx", b"PK", content_type="application/octet-stream")
        self.assertTrue(storage_service.validate_upload_file(docx, storage_service.DOCUMENT_TYPES)[0])

    def test_path_ignores_client_name(self):
        path = storage_service.build_path("cv-files/abc", pdf("../../etc/passwd.pdf"), storage_service.DOCUMENT_TYPES)
        self.assertTrue(path.startswith("cv-files/abc/"))
        self.assertTrue(path.endswith(".pdf"))
        self.assertNotIn("passwd", path)


class DocumentsAPITest(TestCase):
    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.media_root, ignore_errors=True)
        media = override_settings(MEDIA_ROOT=self.media_root, USE_S3_STORAGE=False)
        media.enable()
        self.addCleanup(media.disable)

        self.client = Client()
        self.admin = make_user(UserRole.ADMIN)
        self.coach = make_user(UserRole.COACH)
        self.mentee = make_user(UserRole.MENTEE)
        self.stranger = make_user(UserRole.MENTEE)
        assign_mentees(self.coach.id, [self.mentee.id], performed_by=self.admin)
        self.client.force_login(self.coach)

    def upload_cv(self, mentee=None, file=None):
        return self.client.post(
            "/api/documents/cv-files",
            {"mentee_id": str((mentee or self.mentee).id), "file": file or pdf()},
        )

    def test_upload_cv(self):
        response = self.upload_cv()
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data["file_name"], "cv.pdf")
        self.assertEqual(data["mentee_name"], self.mentee.full_name)
        self.assertTrue(data["file_url"].endswith(".pdf"))

        cv = CVFile.objects.get()
        self.assertTrue(cv.file_path.startswith(f"cv-files/{self.coach.id}/"))

    def test_upload_notifies_mentee_and_audits(self):
        self.upload_cv()
        notification = Notification.objects.get(user=self.mentee)
        self.assertEqual(notification.type, NotificationType.FILE_UPLOAD)
        self.assertEqual(notification.message, "A new file has been uploaded: cv.pdf")
        self.assertTrue(DigestItem.objects.filter(recipient=self.mentee, type=NotificationType.FILE_UPLOAD).exists())
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.UPLOAD_FILE).exists())

    def stored_files(self):
        return [name for _, _, names in os.walk(self.media_root) for name in names]

    def test_failed_row_insert_removes_stored_file(self):
        with patch("apps.documents.services.CVFile.objects.create", side_effect=IntegrityError("boom")):
            with self.assertRaises(IntegrityError):
                services.upload_cv(self.coach, self.mentee.id, pdf())
        self.assertEqual(self.stored_files(), [])
        self.assertFalse(CVFile.objects.exists())

    def test_failed_announcement_removes_stored_module_file(self):
        with patch("apps.documents.services.notify_file_upload", side_effect=RuntimeError("down")):
            with self.assertRaises(RuntimeError):
                services.upload_module_file(self.coach, self.mentee.id, "cv_optimization", pdf())
        self.assertEqual(self.stored_files(), [])
        self.assertFalse(ModuleFile.objects.exists())

    def test_upload_for_unassigned_mentee_forbidden(self):
        response = self.upload_cv(mentee=self.stranger)
        self.assertEqual(response.status_code, 403)
        self.assertFalse(CVFile.objects.exists())

    def test_upload_rejects_invalid_type(self):
        image = SimpleUploadedFile("cv.png", b"\x89PNG", content_type="image/png")
        response = self.upload_cv(file=image)
        self.assertEqual(response.status_code, 400)
        self.assertIn("Invalid file type", response.json()["detail"])

    def test_mentee_cannot_upload(self):
        self.client.force_login(self.mentee)
        self.assertEqual(self.upload_cv().status_code, 403)

    def test_mentee_lists_own_files(self):
        self.upload_cv()
        self.client.force_login(self.mentee)
        response = self.client.get("/api/documents/cv-files")
        self.assertEqual(len(response.json()), 1)

        self.client.force_login(self.stranger)
        self.assertEqual(self.client.get("/api/documents/cv-files").json(), [])

    def test_delete_cv(self):
        file_id = self.upload_cv().json()["id"]
        response = self.client.delete(f"/api/documents/cv-files/{file_id}")
        self.assertEqual(response.status_code, 204)
        self.assertFalse(CVFile.objects.exists())
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.DELETE_FILE).exists())

    def test_other_coach_cannot_delete(self):
        file_id = self.upload_cv().json()["id"]
        self.client.force_login(make_user(UserRole.COACH))
        self.assertEqual(self.client.delete(f"/api/documents/cv-files/{file_id}").status_code, 403)

    def test_module_file_upload_and_filter(self):
        image = SimpleUploadedFile("profile.jpg", b"\xff\xd8\xff", content_type="image/jpeg")
        response = self.client.post(
            "/api/documents/module-files",
            {"mentee_id": str(self.mentee.id), "module_type": "linkedin", "file": image},
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["module_type"], "linkedin")
        self.assertIn(f"module-files/{self.mentee.id}/linkedin/", ModuleFile.objects.get().file_path)

        self.client.force_login(self.mentee)
        self.assertEqual(len(self.client.get("/api/documents/module-files?module_type=linkedin").json()), 1)
        self.assertEqual(self.client.get("/api/documents/module-files?module_type=cv_optimization").json(), [])

    def test_module_file_rejects_unknown_module(self):
        response = self.client.post(
            "/api/documents/module-files",
            {"mentee_id": str(self.mentee.id), "module_type": "astrology", "file": pdf()},
        )
        self.assertEqual(response.status_code, 400)
