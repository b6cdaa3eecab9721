"""
Tests for autosaved application drafts.
"""
import json
from datetime import date
from unittest.mock import patch
from uuid import uuid4

from django.core.cache import cache
from django.test import TestCase, Client, override_settings
from django.contrib.auth import get_user_model

from apps.identity.models import UserRole
from apps.tracker import draft_service
from apps.tracker.models import JobApplication


User = get_user_model()


@override_settings(DRAFT_TTL_SECONDS=3600)
class DraftServiceTest(TestCase):
    def setUp(self):
        cache.clear()
        self.user_id = uuid4()
        self.app_id = uuid4()

    def test_save_merges_partial_updates(self):
        draft_service.save_draft(self.user_id, self.app_id, {"job_title": "Engineer"})
        draft = draft_service.save_draft(self.user_id, self.app_id, {"company_name": "Acme"})
        self.assertEqual(draft["data"], {"job_title": "Engineer", "company_name": "Acme"})

    def test_last_write_wins(self):
        draft_service.save_draft(self.user_id, self.app_id, {"job_title": "Engineer"})
        draft_service.save_draft(self.user_id, self.app_id, {"job_title": "Lead Engineer"})
        self.assertEqual(draft_service.get_draft(self.user_id, self.app_id)["data"]["job_title"], "Lead Engineer")

    def test_empty_update_saves_nothing(self):
        self.assertIsNone(draft_service.save_draft(self.user_id, self.app_id, {}))
        self.assertEqual(draft_service.load_drafts(self.user_id), [])

    def test_expired_drafts_are_pruned_on_read(self):
        with patch("apps.tracker.draft_service.time.time", return_value=1000.0):
            draft_service.save_draft(self.user_id, self.app_id, {"job_title": "Old"})
        with patch("apps.tracker.draft_service.time.time", return_value=1000.0 + 3601):
            self.assertEqual(draft_service.load_drafts(self.user_id), [])
        self.assertIsNone(cache.get(f"drafts:{self.user_id}"))

    def test_index_with_bad_timestamp_is_discarded(self):
        cache.set(f"drafts:{self.user_id}", {"a": {"data": {}, "saved_at": "yesterday"}})
        self.assertEqual(draft_service.load_drafts(self.user_id), [])
        self.assertIsNone(cache.get(f"drafts:{self.user_id}"))

    def test_index_with_missing_data_is_discarded(self):
        cache.set(f"drafts:{self.user_id}", {"a": {"saved_at": 1.0}})
        self.assertIsNone(draft_service.get_draft(self.user_id, "a"))

    def test_clear_removes_index_when_empty(self):
        draft_service.save_draft(self.user_id, self.app_id, {"job_title": "x"})
        self.assertTrue(draft_service.clear_draft(self.user_id, self.app_id))
        self.assertIsNone(cache.get(f"drafts:{self.user_id}"))
        self.assertFalse(draft_service.clear_draft(self.user_id, self.app_id))

    def test_corrupt_index_is_discarded(self):
        cache.set(f"drafts:{self.user_id}", "not-a-dict")
        self.assertEqual(draft_service.load_drafts(self.user_id), [])
        self.assertIsNone(cache.get(f"drafts:{self.user_id}"))

    def test_purge_expired(self):
        stale_app, fresh_app = uuid4(), uuid4()
        with patch("apps.tracker.draft_service.time.time", return_value=1000.0):
            draft_service.save_draft(self.user_id, stale_app, {"job_title": "Old"})
        with patch("apps.tracker.draft_service.time.time", return_value=3000.0):
            draft_service.save_draft(self.user_id, fresh_app, {"job_title": "Fresh"})
        with patch("apps.tracker.draft_service.time.time", return_value=4700.0):
            removed = draft_service.purge_expired_drafts()
            remaining = [d["application_id"] for d in draft_service.load_drafts(self.user_id)]
        self.assertEqual(removed, 1)
        self.assertEqual(remaining, [str(fresh_app)])
        self.assertEqual(cache.get(draft_service.REGISTRY_KEY), [str(self.user_id)])


class DraftAPITest(TestCase):
    def setUp(self):
        cache.clear()
        self.client = Client()
        self.mentee = User.objects.create_user(username="drafter", password="pw", role=UserRole.MENTEE)
        self.app = JobApplication.objects.create(
            mentee=self.mentee, company_name="Acme", job_title="Engineer", date_applied=date.today(),
        )
        self.client.force_login(self.mentee)
        self.url = f"/api/tracker/drafts/{self.app.id}"

    def _put(self, data):
        return self.client.put(self.url, data=json.dumps({"data": data}), content_type="application/json")

    def test_save_and_list(self):
        response = self._put({"job_title": "Staff Engineer"})
        self.assertEqual(response.status_code, 200)
        listing = self.client.get("/api/tracker/drafts").json()
        self.assertEqual(len(listing), 1)
        self.assertEqual(listing[0]["application_id"], str(self.app.id))

    def test_missing_draft_404(self):
        self.assertEqual(self.client.get(self.url).status_code, 404)

    def test_commit_applies_and_clears(self):
        self._put({"job_title": "Staff Engineer", "interview_stage": "Phone screen"})
        response = self.client.post(f"{self.url}/commit")
        self.assertEqual(response.status_code, 200)
        self.app.refresh_from_db()
        self.assertEqual(self.app.job_title, "Staff Engineer")
        self.assertEqual(self.client.get(self.url).status_code, 404)

    def test_commit_invalid_draft(self):
        self._put({"date_applied": "not-a-date"})
        response = self.client.post(f"{self.url}/commit")
        self.assertEqual(response.status_code, 400)

    def test_deleting_application_clears_draft(self):
        self._put({"job_title": "x"})
        self.client.delete(f"/api/tracker/applications/{self.app.id}")
        self.assertEqual(self.client.get("/api/tracker/drafts").json(), [])
