"""log_action, the admin audit endpoints, and one end-to-end write through the tracker API."""
import json
from datetime import date
from uuid import uuid4

from django.test import TestCase, Client
from django.contrib.auth import get_user_model

from apps.identity.models import UserRole
from apps.audit.models import AuditLog
from apps.audit.audit_service import log_action, AuditAction
from apps.mentoring.models import CoachMenteeAssignment
from apps.tracker.models import JobApplication


User = get_user_model()


def make_user(role=UserRole.ADMIN, username=None):
    """Create a test User with the given role."""
    username = username or f"user_{uuid4().hex[:8]}"
    return User.objects.create_user(
        username=username,
        email=f"{username}@test.com",
        password="testpass123",
        role=role,
    )


class AuditServiceTest(TestCase):

    def setUp(self):
        self.user = make_user()
        self.target_id = uuid4()

    def test_log_action_creates_audit_log(self):
        log = log_action(
            action=AuditAction.HIDE_APPLICATION,
            target_type="JobApplication",
            target_id=self.target_id,
            target_label="Acme - Engineer",
            performed_by=self.user,
            context={"mentee_id": "abc"},
        )
        self.assertIsNotNone(log)
        self.assertEqual(log.action, AuditAction.HIDE_APPLICATION)
        self.assertEqual(log.target_type, "JobApplication")
        self.assertEqual(log.target_id, self.target_id)
        self.assertEqual(log.performed_by, self.user)
        self.assertEqual(log.context["mentee_id"], "abc")

    def test_log_action_without_target_or_user(self):
        """System actions may omit the actor and the target id."""
        log = log_action(action=AuditAction.PROCESS_WEBHOOK, target_type="CoachingSession")
        self.assertIsNotNone(log)
        self.assertIsNone(log.performed_by)
        self.assertEqual(log.context, {})

    def test_log_action_never_raises_on_bad_input(self):
        """A context that cannot be stored is swallowed, not raised."""
        result = log_action(
            action=AuditAction.DELETE_FILE,
            target_type="CVFile",
            target_id=self.target_id,
            performed_by=self.user,
            context={"bad": object()},
        )
        self.assertIsNone(result)
        # The surrounding test transaction must still be usable
        self.assertEqual(AuditLog.objects.count(), 0)


class AuditLogAPITest(TestCase):

    def setUp(self):
        self.client = Client()
        self.admin = make_user(role=UserRole.ADMIN, username="audit_admin")
        self.coach = make_user(role=UserRole.COACH, username="audit_coach")
        self.target_id = uuid4()

        self.log1 = AuditLog.objects.create(
            action=AuditAction.ASSIGN_MENTEE,
            target_type="CoachMenteeAssignment",
            target_id=self.target_id,
            target_label="Coach -> Mentee",
            performed_by=self.admin,
        )
        self.log2 = AuditLog.objects.create(
            action=AuditAction.UPLOAD_FILE,
            target_type="CVFile",
            target_id=self.target_id,
            target_label="cv.pdf",
            performed_by=self.coach,
        )

    def test_list_audit_logs_requires_auth(self):
        response = self.client.get("/api/audit/logs")
        self.assertEqual(response.status_code, 401)

    def test_coach_cannot_list_audit_logs(self):
        self.client.force_login(self.coach)
        response = self.client.get("/api/audit/logs")
        self.assertEqual(response.status_code, 403)

    def test_admin_can_list_audit_logs(self):
        self.client.force_login(self.admin)
        response = self.client.get("/api/audit/logs")
        self.assertEqual(response.status_code, 200)
        ids = [d["id"] for d in response.json()]
        self.assertIn(str(self.log1.id), ids)
        self.assertIn(str(self.log2.id), ids)

    def test_filter_by_action(self):
        self.client.force_login(self.admin)
        response = self.client.get(f"/api/audit/logs?action={AuditAction.UPLOAD_FILE}")
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(len(data), 1)
        self.assertEqual(data[0]["action"], AuditAction.UPLOAD_FILE)
        self.assertEqual(data[0]["performed_by_name"], self.coach.full_name)

    def test_filter_by_target_type(self):
        self.client.force_login(self.admin)
        response = self.client.get("/api/audit/logs?target_type=CoachMenteeAssignment")
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(len(data), 1)
        self.assertEqual(data[0]["id"], str(self.log1.id))

    def test_filter_by_date_range(self):
        self.client.force_login(self.admin)
        response = self.client.get("/api/audit/logs?end_date=2000-01-01")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), [])

    def test_limit(self):
        self.client.force_login(self.admin)
        response = self.client.get("/api/audit/logs?limit=1")
        self.assertEqual(len(response.json()), 1)

    def test_get_audit_log_detail(self):
        self.client.force_login(self.admin)
        response = self.client.get(f"/api/audit/logs/{self.log1.id}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["action"], AuditAction.ASSIGN_MENTEE)

    def test_get_missing_audit_log_returns_404(self):
        self.client.force_login(self.admin)
        response = self.client.get(f"/api/audit/logs/{uuid4()}")
        self.assertEqual(response.status_code, 404)


class AuditWiringTest(TestCase):

    def setUp(self):
        self.client = Client()
        self.coach = make_user(role=UserRole.COACH, username="wire_coach")
        self.mentee = make_user(role=UserRole.MENTEE, username="wire_mentee")
        CoachMenteeAssignment.objects.create(coach=self.coach, mentee=self.mentee)
        self.application = JobApplication.objects.create(
            mentee=self.mentee,
            company_name="Acme",
            job_title="Engineer",
            date_applied=date.today(),
        )

    def test_hide_application_creates_audit_log(self):
        self.client.force_login(self.coach)
        response = self.client.post(
            f"/api/tracker/coach/applications/{self.application.id}/hide",
            data=json.dumps({}),
            content_type="application/json",
        )
        self.assertIn(response.status_code, (200, 204))

        log = AuditLog.objects.get(action=AuditAction.HIDE_APPLICATION)
        self.assertEqual(log.target_id, self.application.id)
        self.assertEqual(log.performed_by, self.coach)
