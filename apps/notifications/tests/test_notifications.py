"""
Tests for in-app notifications and the polled change feed.
"""
from datetime import timedelta
from uuid import uuid4

from django.test import TestCase, Client
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.identity.models import UserRole
from apps.notifications import services
from apps.notifications.models import Notification, NotificationType


User = get_user_model()


def make_user(role=UserRole.MENTEE, username=None):
    username = username or f"user_{uuid4().hex[:8]}"
    return User.objects.create_user(
        username=username, email=f"{username}@test.com", password="testpass123", role=role,
    )


class NotificationHelpersTest(TestCase):
    def setUp(self):
        self.user = make_user()

    def test_message_preview_truncates(self):
        self.assertEqual(services.message_preview("short"), "short")
        long_text = "x" * 150
        self.assertEqual(services.message_preview(long_text), "x" * 100 + "...")

    def test_notify_message(self):
        n = services.notify_message(self.user.id, "y" * 120, sender_name="Coach Carla")
        self.assertEqual(n.type, NotificationType.MESSAGE)
        self.assertEqual(n.title, "New message from Coach Carla")
        self.assertTrue(n.message.endswith("..."))

    def test_todo_assignment_wording(self):
        self.assertEqual(services.todo_assignment_message(count=3), "3 new tasks have been assigned")
        self.assertEqual(services.todo_assignment_message("Update CV"), "New task assigned: Update CV")
        self.assertEqual(services.todo_assignment_message(), "New task has been assigned")
        self.assertEqual(services.todo_assignment_message("Update CV", count=1), "New task assigned: Update CV")

    def test_notify_job_recommendation(self):
        n = services.notify_job_recommendation(self.user.id, "Engineer", "Acme")
        self.assertEqual(n.message, "New job opportunity: Engineer at Acme")
        self.assertEqual(n.metadata["company_name"], "Acme")


class NotificationAPITest(TestCase):
    def setUp(self):
        self.client = Client()
        self.user = make_user()
        self.other = make_user()
        self.n1 = services.create_notification(user_id=self.user.id, title="One", message="first")
        self.n2 = services.create_notification(user_id=self.user.id, title="Two", message="second")
        services.create_notification(user_id=self.other.id, title="Not mine", message="-")
        self.client.force_login(self.user)

    def test_requires_auth(self):
        self.client.logout()
        self.assertEqual(self.client.get("/api/notifications/").status_code, 401)

    def test_list_newest_first(self):
        response = self.client.get("/api/notifications/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual([n["title"] for n in response.json()], ["Two", "One"])

    def test_unread_only_and_count(self):
        self.client.post(f"/api/notifications/{self.n1.id}/read")
        self.assertEqual(self.client.get("/api/notifications/unread-count").json()["unread_count"], 1)
        response = self.client.get("/api/notifications/?unread_only=true")
        self.assertEqual([n["title"] for n in response.json()], ["Two"])

    def test_mark_read_sets_read_at(self):
        response = self.client.post(f"/api/notifications/{self.n1.id}/read")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["is_read"])
        self.assertIsNotNone(response.json()["read_at"])

    def test_cannot_read_others_notification(self):
        foreign = Notification.objects.get(user=self.other)
        response = self.client.post(f"/api/notifications/{foreign.id}/read")
        self.assertEqual(response.status_code, 404)

    def test_mark_all_read(self):
        response = self.client.post("/api/notifications/read-all")
        self.assertEqual(response.json()["updated"], 2)
        self.assertEqual(services.unread_count(self.user), 0)

    def test_delete(self):
        response = self.client.delete(f"/api/notifications/{self.n1.id}")
        self.assertEqual(response.status_code, 204)
        self.assertFalse(Notification.objects.filter(id=self.n1.id).exists())

    def test_change_feed(self):
        first = self.client.get("/api/notifications/changes").json()
        self.assertEqual(len(first["notifications"]), 2)
        self.assertEqual(first["unread_count"], 2)

        # Push existing rows into the past so only fresh changes show up
        past = timezone.now() - timedelta(minutes=5)
        Notification.objects.filter(user=self.user).update(updated_at=past)
        since = (past + timedelta(minutes=1)).isoformat()

        services.create_notification(user_id=self.user.id, title="Three", message="third")
        services.mark_read(self.user, self.n1.id)

        response = self.client.get("/api/notifications/changes", {"since": since})
        data = response.json()
        self.assertEqual(sorted(n["title"] for n in data["notifications"]), ["One", "Three"])
        self.assertEqual(data["unread_count"], 2)


class ChangeFeedPagingTest(TestCase):
    def setUp(self):
        self.client = Client()
        self.user = make_user()
        self.client.force_login(self.user)
        self.start = timezone.now() - timedelta(hours=1)
        Notification.objects.bulk_create(
            Notification(user=self.user, title=f"N{i}", message="-") for i in range(250)
        )

    def _drain(self):
        since, seen, polls = self.start.isoformat(), set(), 0
        while True:
            polls += 1
            data = self.client.get("/api/notifications/changes", {"since": since}).json()
            seen.update(n["id"] for n in data["notifications"])
            since = data["server_time"]
            if not data["has_more"]:
                return seen, polls

    def test_all_changes_reach_the_client_across_pages(self):
        for i, pk in enumerate(Notification.objects.values_list("id", flat=True)):
            Notification.objects.filter(id=pk).update(updated_at=self.start + timedelta(seconds=i + 1))

        seen, polls = self._drain()
        self.assertEqual(len(seen), 250)
        self.assertEqual(polls, 2)

    def test_rows_sharing_a_timestamp_stay_on_one_page(self):
        services.mark_all_read(self.user)

        rows, has_more = services.changes_since(self.user, self.start)
        self.assertEqual(len(rows), 250)
        self.assertFalse(has_more)

    def test_small_pages_do_not_skip_rows(self):
        stamp = self.start + timedelta(minutes=1)
        Notification.objects.filter(user=self.user).update(updated_at=stamp)
        Notification.objects.filter(title__in=["N0", "N1"]).update(updated_at=self.start + timedelta(seconds=1))
        Notification.objects.filter(title="N2").update(updated_at=stamp + timedelta(minutes=1))

        rows, has_more = services.changes_since(self.user, self.start, limit=3)
        self.assertEqual(len(rows), 249)
        self.assertTrue(has_more)

        rows, has_more = services.changes_since(self.user, rows[-1].updated_at, limit=3)
        self.assertEqual([r.title for r in rows], ["N2"])
        self.assertFalse(has_more)
