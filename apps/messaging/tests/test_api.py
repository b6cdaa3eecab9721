"""
Tests for conversations and messages.
"""
import json
from datetime import timedelta
from uuid import uuid4

from django.contrib.auth import get_user_model
from django.test import TestCase, Client
from django.utils import timezone

from apps.identity.models import UserRole
from apps.mentoring.services import assign_mentees
from apps.messaging import services
from apps.messaging.models import Conversation, ConversationStatus, Message, SenderType
from apps.notifications.models import DigestItem, Notification, NotificationType


User = get_user_model()


def make_user(role, username=None):
    username = username or f"user_{uuid4().hex[:8]}"
    return User.objects.create_user(
        username=username, email=f"{username}@test.com", password="testpass123",
        first_name=username.title(), role=role,
    )


class ConversationServiceTest(TestCase):
    def setUp(self):
        self.admin = make_user(UserRole.ADMIN)
        self.coach = make_user(UserRole.COACH, "carla")
        self.mentee = make_user(UserRole.MENTEE, "mia")
        assign_mentees(self.coach.id, [self.mentee.id], performed_by=self.admin)

    def test_coach_defaults_to_first_active_coach(self):
        conversation = services.create_conversation(self.mentee, "  CV questions ")
        self.assertEqual(conversation.coach, self.coach)
        self.assertEqual(conversation.subject, "CV questions")

    def test_unassigned_mentee_gets_unowned_conversation(self):
        loner = make_user(UserRole.MENTEE)
        conversation = services.create_conversation(loner)
        self.assertIsNone(conversation.coach)

    def test_coach_reply_takes_over_unowned_conversation(self):
        conversation = Conversation.objects.create(mentee=self.mentee)
        services.send_message(self.coach, conversation, "Hi there")
        conversation.refresh_from_db()
        self.assertEqual(conversation.coach, self.coach)

    def test_empty_message_rejected(self):
        conversation = services.create_conversation(self.mentee)
        with self.assertRaises(ValueError):
            services.send_message(self.mentee, conversation, "   ")

    def test_attachment_only_message_allowed(self):
        conversation = services.create_conversation(self.mentee)
        message = services.send_message(
            self.mentee, conversation, "",
            attachments=[{"file_name": "cv.pdf", "file_url": "/media/cv.pdf", "file_size": 10}],
        )
        self.assertEqual(message.attachments.count(), 1)
        notification = Notification.objects.get(user=self.coach)
        self.assertEqual(notification.message, "Sent 1 attachment(s)")

    def test_closed_conversation_rejects_messages(self):
        conversation = services.create_conversation(self.mentee)
        services.update_status(conversation, ConversationStatus.CLOSED)
        with self.assertRaises(ValueError):
            services.send_message(self.mentee, conversation, "Hello?")

    def test_digest_queued_only_for_mentee_recipients(self):
        conversation = services.create_conversation(self.mentee)
        services.send_message(self.mentee, conversation, "Question for you")
        self.assertFalse(DigestItem.objects.exists())

        services.send_message(self.coach, conversation, "Answer")
        item = DigestItem.objects.get()
        self.assertEqual(item.recipient, self.mentee)
        self.assertEqual(item.type, NotificationType.MESSAGE)


class MessagingAPITest(TestCase):
    def setUp(self):
        self.client = Client()
        self.admin = make_user(UserRole.ADMIN)
        self.coach = make_user(UserRole.COACH, "carla")
        self.mentee = make_user(UserRole.MENTEE, "mia")
        self.other_mentee = make_user(UserRole.MENTEE)
        assign_mentees(self.coach.id, [self.mentee.id], performed_by=self.admin)
        self.conversation = services.create_conversation(self.mentee, "Interview prep")

    def post_message(self, content, conversation=None):
        conversation = conversation or self.conversation
        return self.client.post(
            f"/api/messaging/conversations/{conversation.id}/messages",
            data=json.dumps({"content": content}),
            content_type="application/json",
        )

    def test_mentee_creates_conversation(self):
        self.client.force_login(self.mentee)
        response = self.client.post(
            "/api/messaging/conversations",
            data=json.dumps({"subject": "Salary talk"}),
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["coach_id"], str(self.coach.id))

    def test_coach_cannot_create_conversation(self):
        self.client.force_login(self.coach)
        response = self.client.post(
            "/api/messaging/conversations", data=json.dumps({}), content_type="application/json",
        )
        self.assertEqual(response.status_code, 403)

    def test_send_and_list(self):
        self.client.force_login(self.mentee)
        response = self.post_message("Can we talk about my CV?")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["sender_type"], SenderType.MENTEE)

        self.client.force_login(self.coach)
        conversations = self.client.get("/api/messaging/conversations").json()
        self.assertEqual(len(conversations), 1)
        self.assertEqual(conversations[0]["last_message"], "Can we talk about my CV?")
        self.assertEqual(conversations[0]["unread_count"], 1)

    def test_other_mentee_cannot_see_conversation(self):
        self.client.force_login(self.other_mentee)
        self.assertEqual(self.client.get("/api/messaging/conversations").json(), [])
        self.assertEqual(self.post_message("hi").status_code, 404)

    def test_mark_read_clears_unread_and_notifications(self):
        self.client.force_login(self.mentee)
        self.post_message("one")
        self.post_message("two")

        self.client.force_login(self.coach)
        self.assertEqual(self.client.get("/api/messaging/unread-count").json()["unread_count"], 2)
        self.assertEqual(Notification.objects.filter(user=self.coach, is_read=False).count(), 2)

        response = self.client.post(f"/api/messaging/conversations/{self.conversation.id}/read")
        self.assertEqual(response.json()["updated"], 2)
        self.assertEqual(self.client.get("/api/messaging/unread-count").json()["unread_count"], 0)
        self.assertEqual(Notification.objects.filter(user=self.coach, is_read=False).count(), 0)

    def test_own_messages_are_not_unread(self):
        self.client.force_login(self.mentee)
        self.post_message("note to self")
        self.assertEqual(self.client.get("/api/messaging/unread-count").json()["unread_count"], 0)

    def test_pagination_pages_backwards(self):
        base = timezone.now() - timedelta(hours=1)
        for i in range(5):
            message = Message.objects.create(
                conversation=self.conversation, sender=self.mentee,
                sender_type=SenderType.MENTEE, content=f"m{i}",
            )
            Message.objects.filter(id=message.id).update(created_at=base + timedelta(minutes=i))

        self.client.force_login(self.mentee)
        url = f"/api/messaging/conversations/{self.conversation.id}/messages"
        page = self.client.get(url, {"limit": 2}).json()
        self.assertEqual([m["content"] for m in page], ["m3", "m4"])

        older = self.client.get(url, {"limit": 2, "before": page[0]["created_at"]}).json()
        self.assertEqual([m["content"] for m in older], ["m1", "m2"])

    def test_close_conversation(self):
        self.client.force_login(self.coach)
        response = self.client.patch(
            f"/api/messaging/conversations/{self.conversation.id}",
            data=json.dumps({"status": "closed"}),
            content_type="application/json",
        )
        self.assertEqual(response.json()["status"], "closed")
        self.assertEqual(self.post_message("late reply").status_code, 400)
