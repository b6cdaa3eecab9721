"""
Integration tests for tracker API endpoints: mentee applications and coach review.
"""
import json
from datetime import date
from uuid import uuid4

from django.test import TestCase, Client
from django.contrib.auth import get_user_model

from apps.identity.models import UserRole
from apps.mentoring.models import CoachMenteeAssignment
from apps.tracker.models import JobApplication, ApplicationStatus, HiddenApplication


User = get_user_model()


def make_user(role, username=None):
    username = username or f"user_{uuid4().hex[:8]}"
    return User.objects.create_user(
        username=username, email=f"{username}@test.com", password="testpass123", role=role,
    )


class MenteeApplicationAPITest(TestCase):
    def setUp(self):
        self.client = Client()
        self.mentee = make_user(UserRole.MENTEE)
        self.other_mentee = make_user(UserRole.MENTEE)
        self.client.force_login(self.mentee)

        self.app = JobApplication.objects.create(
            mentee=self.mentee, company_name="Acme", job_title="Backend Engineer",
            date_applied=date.today(), recruiter_name="Rita",
        )
        JobApplication.objects.create(
            mentee=self.mentee, company_name="Globex", job_title="Data Analyst",
            date_applied=date.today(), application_status=ApplicationStatus.REJECTED,
        )
        self.foreign = JobApplication.objects.create(
            mentee=self.other_mentee, company_name="Initech", job_title="Tester",
            date_applied=date.today(),
        )

    def test_list_requires_auth(self):
        self.client.logout()
        response = self.client.get("/api/tracker/applications")
        self.assertEqual(response.status_code, 401)

    def test_coach_cannot_use_mentee_endpoints(self):
        self.client.force_login(make_user(UserRole.COACH))
        response = self.client.get("/api/tracker/applications")
        self.assertEqual(response.status_code, 403)

    def test_list_only_own(self):
        response = self.client.get("/api/tracker/applications")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()), 2)

    def test_search_and_status_filter(self):
        response = self.client.get("/api/tracker/applications?search=rita")
        self.assertEqual([a["id"] for a in response.json()], [str(self.app.id)])

        response = self.client.get("/api/tracker/applications?status=rejected")
        self.assertEqual(response.json()[0]["company_name"], "Globex")

    def test_create(self):
        payload = {"company_name": "Hooli", "job_title": "SRE", "date_applied": str(date.today())}
        response = self.client.post("/api/tracker/applications", data=json.dumps(payload), content_type="application/json")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["application_status"], "applied")
        self.assertEqual(response.json()["job_link"], "")

    def test_create_invalid_status(self):
        payload = {
            "company_name": "Hooli", "job_title": "SRE",
            "date_applied": str(date.today()), "application_status": "ghosted",
        }
        response = self.client.post("/api/tracker/applications", data=json.dumps(payload), content_type="application/json")
        self.assertEqual(response.status_code, 400)

    def test_update_own(self):
        response = self.client.patch(
            f"/api/tracker/applications/{self.app.id}",
            data=json.dumps({"application_status": "interviewed", "interview_stage": "Onsite"}),
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 200)
        self.app.refresh_from_db()
        self.assertEqual(self.app.application_status, ApplicationStatus.INTERVIEWED)

    def test_cannot_touch_foreign_application(self):
        response = self.client.patch(
            f"/api/tracker/applications/{self.foreign.id}",
            data=json.dumps({"job_title": "x"}),
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 404)
        response = self.client.delete(f"/api/tracker/applications/{self.foreign.id}")
        self.assertEqual(response.status_code, 404)

    def test_delete(self):
        response = self.client.delete(f"/api/tracker/applications/{self.app.id}")
        self.assertEqual(response.status_code, 204)
        self.assertFalse(JobApplication.objects.filter(id=self.app.id).exists())

    def test_stats(self):
        response = self.client.get("/api/tracker/applications/stats")
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["total"], 2)
        self.assertEqual(data["applied"], 1)
        self.assertEqual(data["rejected"], 1)
        self.assertEqual(data["this_month"], 2)


class CoachReviewAPITest(TestCase):
    def setUp(self):
        self.client = Client()
        self.coach = make_user(UserRole.COACH)
        self.mentee = make_user(UserRole.MENTEE)
        self.stranger = make_user(UserRole.MENTEE)
        CoachMenteeAssignment.objects.create(coach=self.coach, mentee=self.mentee)

        self.app = JobApplication.objects.create(
            mentee=self.mentee, company_name="Acme", job_title="Engineer", date_applied=date.today(),
        )
        self.stranger_app = JobApplication.objects.create(
            mentee=self.stranger, company_name="Other", job_title="Engineer", date_applied=date.today(),
        )
        self.client.force_login(self.coach)

    def test_list_only_assigned_mentees(self):
        response = self.client.get("/api/tracker/coach/applications")
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual([a["id"] for a in data], [str(self.app.id)])
        self.assertEqual(data[0]["mentee_email"], self.mentee.email)

    def test_coach_notes(self):
        response = self.client.patch(
            f"/api/tracker/coach/applications/{self.app.id}",
            data=json.dumps({"coach_notes": "Follow up Friday", "job_title": "ignored"}),
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 200)
        self.app.refresh_from_db()
        self.assertEqual(self.app.coach_notes, "Follow up Friday")
        self.assertEqual(self.app.job_title, "Engineer")

    def test_cannot_review_unassigned(self):
        response = self.client.patch(
            f"/api/tracker/coach/applications/{self.stranger_app.id}",
            data=json.dumps({"coach_notes": "x"}),
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 404)

    def test_hide_removes_from_list(self):
        response = self.client.post(f"/api/tracker/coach/applications/{self.app.id}/hide")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(HiddenApplication.objects.filter(coach=self.coach, application=self.app).exists())
        self.assertEqual(self.client.get("/api/tracker/coach/applications").json(), [])

        response = self.client.post(f"/api/tracker/coach/applications/{self.app.id}/hide")
        self.assertTrue(response.json()["already_hidden"])
