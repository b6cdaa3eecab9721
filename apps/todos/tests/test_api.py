"""
Tests for personal todos, coach todos and their assignments.
"""
import json
from datetime import date
from uuid import uuid4

from django.contrib.auth import get_user_model
from django.test import TestCase, Client

from apps.audit.audit_service import AuditAction
from apps.audit.models import AuditLog
from apps.identity.models import UserRole
from apps.mentoring.services import assign_mentees
from apps.notifications.models import DigestItem, Notification
from apps.todos import services
from apps.todos.models import CoachTodo, TodoAssignment, TodoStatus


User = get_user_model()


def make_user(role, username=None):
    username = username or f"user_{uuid4().hex[:8]}"
    return User.objects.create_user(
        username=username, email=f"{username}@test.com", password="testpass123", role=role,
    )


def as_json(data):
    return {"data": json.dumps(data), "content_type": "application/json"}


class PersonalTodoAPITest(TestCase):
    def setUp(self):
        self.client = Client()
        self.user = make_user(UserRole.MENTEE)
        self.client.force_login(self.user)

    def test_crud(self):
        response = self.client.post("/api/todos/personal", **as_json({"title": "  Polish CV  ", "priority": "high"}))
        self.assertEqual(response.status_code, 201)
        todo = response.json()
        self.assertEqual(todo["title"], "Polish CV")
        self.assertEqual(todo["status"], "pending")

        response = self.client.patch(
            f"/api/todos/personal/{todo['id']}",
            **as_json({"status": "completed", "due_date": "2026-11-01"}),
        )
        self.assertEqual(response.json()["status"], "completed")
        self.assertEqual(response.json()["priority"], "high")
        self.assertEqual(response.json()["due_date"], "2026-11-01")

        # Explicit null clears the due date
        response = self.client.patch(f"/api/todos/personal/{todo['id']}", **as_json({"due_date": None}))
        self.assertIsNone(response.json()["due_date"])

        self.assertEqual(self.client.delete(f"/api/todos/personal/{todo['id']}").status_code, 204)
        self.assertEqual(self.client.get("/api/todos/personal").json(), [])

    def test_blank_title_rejected(self):
        response = self.client.post("/api/todos/personal", **as_json({"title": "   "}))
        self.assertEqual(response.status_code, 400)

    def test_invalid_status_rejected(self):
        todo = services.create_personal_todo(self.user, {"title": "x"})
        response = self.client.patch(f"/api/todos/personal/{todo.id}", **as_json({"status": "someday"}))
        self.assertEqual(response.status_code, 400)

    def test_other_users_todos_invisible(self):
        todo = services.create_personal_todo(make_user(UserRole.MENTEE), {"title": "theirs"})
        self.assertEqual(self.client.get("/api/todos/personal").json(), [])
        self.assertEqual(self.client.delete(f"/api/todos/personal/{todo.id}").status_code, 404)


class SendTodosTest(TestCase):
    def setUp(self):
        self.admin = make_user(UserRole.ADMIN)
        self.coach = make_user(UserRole.COACH)
        self.mentee_a = make_user(UserRole.MENTEE)
        self.mentee_b = make_user(UserRole.MENTEE)
        assign_mentees(self.coach.id, [self.mentee_a.id, self.mentee_b.id], performed_by=self.admin)
        self.todo1 = services.create_coach_todo(self.coach, {"title": "Update LinkedIn"})
        self.todo2 = services.create_coach_todo(self.coach, {"title": "Apply to 5 jobs"})

    def test_single_todo_notification_names_the_task(self):
        services.send_todos(self.coach, [self.todo1.id], [self.mentee_a.id])
        notification = Notification.objects.get(user=self.mentee_a)
        self.assertEqual(notification.message, "New task assigned: Update LinkedIn")
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.SEND_TODO, target_id=self.todo1.id).exists())

    def test_bulk_send_one_notification_per_mentee(self):
        created = services.send_todos(
            self.coach, [self.todo1.id, self.todo2.id], [self.mentee_a.id, self.mentee_b.id]
        )
        self.assertEqual(len(created), 4)
        for mentee in (self.mentee_a, self.mentee_b):
            notification = Notification.objects.get(user=mentee)
            self.assertEqual(notification.message, "2 new tasks have been assigned")
            self.assertEqual(DigestItem.objects.filter(recipient=mentee).count(), 1)

    def test_duplicates_are_skipped(self):
        services.send_todos(self.coach, [self.todo1.id], [self.mentee_a.id])
        created = services.send_todos(self.coach, [self.todo1.id], [self.mentee_a.id, self.mentee_b.id])
        self.assertEqual([a.mentee_id for a in created], [self.mentee_b.id])
        self.assertEqual(TodoAssignment.objects.count(), 2)

    def test_unassigned_mentee_rejected(self):
        stranger = make_user(UserRole.MENTEE)
        with self.assertRaises(PermissionError):
            services.send_todos(self.coach, [self.todo1.id], [self.mentee_a.id, stranger.id])
        self.assertFalse(TodoAssignment.objects.exists())

    def test_other_coaches_todo_rejected(self):
        foreign = services.create_coach_todo(make_user(UserRole.COACH), {"title": "Not yours"})
        with self.assertRaises(ValueError):
            services.send_todos(self.coach, [foreign.id], [self.mentee_a.id])


class AssignmentAPITest(TestCase):
    def setUp(self):
        self.client = Client()
        self.admin = make_user(UserRole.ADMIN)
        self.coach = make_user(UserRole.COACH)
        self.mentee = make_user(UserRole.MENTEE)
        assign_mentees(self.coach.id, [self.mentee.id], performed_by=self.admin)

    def create_and_send(self):
        self.client.force_login(self.coach)
        response = self.client.post(
            "/api/todos/coach-todos",
            **as_json({"title": "Mock interview", "due_date": "2026-11-10", "mentee_ids": [str(self.mentee.id)]}),
        )
        self.assertEqual(response.status_code, 201)
        return response.json()["assignments"][0]

    def test_create_without_mentees_only_stores_todo(self):
        self.client.force_login(self.coach)
        response = self.client.post("/api/todos/coach-todos", **as_json({"title": "Template"}))
        self.assertEqual(response.json()["created"], 0)
        self.assertEqual(CoachTodo.objects.count(), 1)

    def test_mentee_cannot_create_coach_todos(self):
        self.client.force_login(self.mentee)
        response = self.client.post("/api/todos/coach-todos", **as_json({"title": "Nope"}))
        self.assertEqual(response.status_code, 403)

    def test_send_endpoint(self):
        todo = services.create_coach_todo(self.coach, {"title": "Network"})
        self.client.force_login(self.coach)
        payload = {"todo_ids": [str(todo.id)], "mentee_ids": [str(self.mentee.id)]}
        self.assertEqual(self.client.post("/api/todos/send", **as_json(payload)).json()["created"], 1)
        self.assertEqual(self.client.post("/api/todos/send", **as_json(payload)).json()["created"], 0)

    def test_status_transitions_stamp_times(self):
        assignment = self.create_and_send()
        self.client.force_login(self.mentee)
        url = f"/api/todos/assignments/{assignment['id']}/status"

        data = self.client.patch(url, **as_json({"status": "in_progress"})).json()
        self.assertIsNotNone(data["started_at"])
        self.assertIsNone(data["completed_at"])

        data = self.client.patch(url, **as_json({"status": "completed"})).json()
        self.assertIsNotNone(data["completed_at"])

        data = self.client.patch(url, **as_json({"status": "pending"})).json()
        self.assertIsNone(data["started_at"])
        self.assertIsNone(data["completed_at"])

    def test_completing_directly_sets_started_at(self):
        assignment = TodoAssignment.objects.get(id=self.create_and_send()["id"])
        services.update_assignment_status(assignment, TodoStatus.COMPLETED)
        self.assertIsNotNone(assignment.started_at)
        self.assertIsNotNone(assignment.completed_at)

    def test_mentee_overrides_fall_back_to_coach_values(self):
        assignment = self.create_and_send()
        self.client.force_login(self.mentee)
        url = f"/api/todos/assignments/{assignment['id']}"

        data = self.client.patch(url, **as_json({"mentee_title": "Mock interview with Sam"})).json()
        self.assertEqual(data["title"], "Mock interview with Sam")
        self.assertEqual(data["due_date"], "2026-11-10")

        data = self.client.patch(url, **as_json({"mentee_title": ""})).json()
        self.assertEqual(data["title"], "Mock interview")

    def test_coach_cannot_edit_mentee_copy(self):
        assignment = self.create_and_send()
        response = self.client.patch(
            f"/api/todos/assignments/{assignment['id']}", **as_json({"mentee_title": "x"}),
        )
        self.assertEqual(response.status_code, 403)

    def test_board_groups_by_status(self):
        assignment = self.create_and_send()
        services.update_assignment_status(TodoAssignment.objects.get(id=assignment["id"]), TodoStatus.IN_PROGRESS)
        self.client.force_login(self.mentee)
        board = self.client.get("/api/todos/assignments/board").json()
        self.assertEqual(board["pending"], [])
        self.assertEqual(len(board["in_progress"]), 1)
        self.assertEqual(board["completed"], [])

    def test_other_mentee_cannot_touch_assignment(self):
        assignment = self.create_and_send()
        self.client.force_login(make_user(UserRole.MENTEE))
        response = self.client.patch(
            f"/api/todos/assignments/{assignment['id']}/status", **as_json({"status": "completed"}),
        )
        self.assertEqual(response.status_code, 404)

    def test_coach_deletes_assignment(self):
        assignment = self.create_and_send()
        self.assertEqual(self.client.delete(f"/api/todos/assignments/{assignment['id']}").status_code, 204)
        self.assertFalse(TodoAssignment.objects.exists())
