import json

from django.test import TestCase, Client, override_settings

from apps.audit.models import AuditLog
from apps.audit.audit_service import AuditAction
from .models import User, UserRole
from .permissions import get_user_permissions, Permissions
from .jwt_auth import ACCESS_COOKIE, REFRESH_COOKIE, create_access_token, get_user_id_from_token


class RBACTest(TestCase):
    def test_mentee_permissions(self):
        user = User.objects.create_user(username="mentee", password="pw", role=UserRole.MENTEE)
        perms = get_user_permissions(user)
        self.assertIn(Permissions.TRACKER_MANAGE_OWN, perms)
        self.assertIn(Permissions.SCHEDULING_BOOK, perms)
        self.assertNotIn(Permissions.TRACKER_REVIEW_MENTEES, perms)

    def test_coach_permissions(self):
        user = User.objects.create_user(username="coach", password="pw", role=UserRole.COACH)
        perms = get_user_permissions(user)
        self.assertIn(Permissions.DOCUMENTS_UPLOAD, perms)
        self.assertIn(Permissions.MENTORING_ASSIGN_MENTEES, perms)
        self.assertNotIn(Permissions.AUDIT_VIEW, perms)
        self.assertNotIn(Permissions.IDENTITY_MANAGE_USER, perms)

    def test_admin_permissions(self):
        user = User.objects.create_user(username="admin", password="pw", role=UserRole.ADMIN)
        perms = get_user_permissions(user)
        self.assertIn(Permissions.AUDIT_VIEW, perms)
        self.assertIn(Permissions.IDENTITY_MANAGE_USER, perms)

    def test_inactive_user_has_no_permissions(self):
        user = User.objects.create_user(username="gone", password="pw", role=UserRole.ADMIN, is_active=False)
        self.assertEqual(get_user_permissions(user), [])


class TokenTest(TestCase):
    def test_access_token_round_trip(self):
        user = User.objects.create_user(username="tok", password="pw")
        token = create_access_token(user.id, user.role)
        self.assertEqual(get_user_id_from_token(token), user.id)

    def test_access_token_is_not_a_refresh_token(self):
        user = User.objects.create_user(username="tok2", password="pw")
        token = create_access_token(user.id, user.role)
        self.assertIsNone(get_user_id_from_token(token, token_type='refresh'))

    def test_garbage_token(self):
        self.assertIsNone(get_user_id_from_token("not-a-jwt"))


class AuthAPITest(TestCase):
    def setUp(self):
        self.client = Client()
        self.user = User.objects.create_user(
            username="jane", email="jane@example.com", password="secret123",
            first_name="Jane", last_name="Doe", role=UserRole.MENTEE,
        )

    def _post(self, path, payload=None):
        return self.client.post(path, data=json.dumps(payload or {}), content_type="application/json")

    def test_login_with_username_sets_cookies(self):
        response = self._post("/api/identity/login", {"username": "jane", "password": "secret123"})
        self.assertEqual(response.status_code, 200)
        self.assertIn(ACCESS_COOKIE, response.cookies)
        self.assertIn(REFRESH_COOKIE, response.cookies)
        self.assertEqual(response.json()["user"]["full_name"], "Jane Doe")

    def test_login_with_email(self):
        response = self._post("/api/identity/login", {"username": "JANE@example.com", "password": "secret123"})
        self.assertEqual(response.status_code, 200)

    def test_login_wrong_password(self):
        response = self._post("/api/identity/login", {"username": "jane", "password": "nope"})
        self.assertEqual(response.status_code, 401)

    def test_login_writes_audit_log(self):
        self._post("/api/identity/login", {"username": "jane", "password": "secret123"})
        self.assertTrue(
            AuditLog.objects.filter(action=AuditAction.USER_LOGIN, target_id=self.user.id).exists()
        )

    def test_me_with_access_cookie(self):
        self._post("/api/identity/login", {"username": "jane", "password": "secret123"})
        response = self.client.get("/api/identity/me")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["email"], "jane@example.com")

    def test_me_requires_auth(self):
        response = self.client.get("/api/identity/me")
        self.assertEqual(response.status_code, 401)

    def test_refresh_issues_new_access_token(self):
        self._post("/api/identity/login", {"username": "jane", "password": "secret123"})
        response = self._post("/api/identity/refresh")
        self.assertEqual(response.status_code, 200)
        self.assertIn(ACCESS_COOKIE, response.cookies)

    def test_refresh_without_cookie(self):
        response = self._post("/api/identity/refresh")
        self.assertEqual(response.status_code, 401)

    def test_logout_clears_cookies(self):
        self._post("/api/identity/login", {"username": "jane", "password": "secret123"})
        response = self._post("/api/identity/logout")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.cookies[ACCESS_COOKIE].value, "")

    def test_update_own_profile(self):
        self.client.force_login(self.user)
        response = self.client.patch(
            "/api/identity/me",
            data=json.dumps({"about": "  Career changer  ", "location": "Berlin"}),
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertEqual(self.user.about, "Career changer")
        self.assertEqual(self.user.location, "Berlin")


class SignupAPITest(TestCase):
    def setUp(self):
        self.client = Client()

    def _signup(self, **extra):
        payload = {
            "email": "New.User@Example.com",
            "password": "secret123",
            "first_name": "New",
            "last_name": "User",
        }
        payload.update(extra)
        return self.client.post("/api/identity/signup", data=json.dumps(payload), content_type="application/json")

    def test_signup_creates_mentee(self):
        response = self._signup()
        self.assertEqual(response.status_code, 201)
        user = User.objects.get(email="new.user@example.com")
        self.assertEqual(user.role, UserRole.MENTEE)
        self.assertEqual(user.username, "new.user@example.com")
        self.assertIn(ACCESS_COOKIE, response.cookies)

    @override_settings(COACH_SIGNUP_CODE="let-me-coach")
    def test_signup_with_coach_code(self):
        response = self._signup(coach_code="let-me-coach")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["user"]["role"], UserRole.COACH)

    @override_settings(COACH_SIGNUP_CODE="let-me-coach")
    def test_signup_with_wrong_coach_code(self):
        response = self._signup(coach_code="guess")
        self.assertEqual(response.status_code, 400)
        self.assertFalse(User.objects.exists())

    def test_duplicate_email_rejected(self):
        User.objects.create_user(username="someone", email="new.user@example.com", password="pw")
        response = self._signup()
        self.assertEqual(response.status_code, 400)


class UserManagementAPITest(TestCase):
    def setUp(self):
        self.client = Client()
        self.admin = User.objects.create_user(username="admin", password="pw", role=UserRole.ADMIN)
        self.coach = User.objects.create_user(username="coach", password="pw", role=UserRole.COACH)
        self.mentee = User.objects.create_user(username="mentee", password="pw", role=UserRole.MENTEE)

    def test_coach_cannot_manage_users(self):
        self.client.force_login(self.coach)
        response = self.client.get("/api/identity/users")
        self.assertEqual(response.status_code, 403)

    def test_list_users_by_role(self):
        self.client.force_login(self.admin)
        response = self.client.get("/api/identity/users?role=COACH")
        self.assertEqual(response.status_code, 200)
        self.assertEqual([u["username"] for u in response.json()], ["coach"])

    def test_create_user(self):
        self.client.force_login(self.admin)
        payload = {
            "username": "coach2", "email": "coach2@example.com", "password": "pw12345",
            "first_name": "Co", "last_name": "Ach", "role": UserRole.COACH,
        }
        response = self.client.post("/api/identity/users", data=json.dumps(payload), content_type="application/json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(User.objects.get(username="coach2").role, UserRole.COACH)

    def test_create_user_invalid_role(self):
        self.client.force_login(self.admin)
        payload = {
            "username": "x", "email": "x@example.com", "password": "pw",
            "first_name": "X", "last_name": "Y", "role": "RECRUITER",
        }
        response = self.client.post("/api/identity/users", data=json.dumps(payload), content_type="application/json")
        self.assertEqual(response.status_code, 400)

    def test_deactivate_user(self):
        self.client.force_login(self.admin)
        response = self.client.delete(f"/api/identity/users/{self.mentee.id}")
        self.assertEqual(response.status_code, 204)
        self.mentee.refresh_from_db()
        self.assertFalse(self.mentee.is_active)

    def test_cannot_deactivate_self(self):
        self.client.force_login(self.admin)
        response = self.client.delete(f"/api/identity/users/{self.admin.id}")
        self.assertEqual(response.status_code, 400)

    def test_coaches_listing(self):
        self.client.force_login(self.mentee)
        response = self.client.get("/api/identity/coaches")
        self.assertEqual(response.status_code, 200)
        self.assertEqual([c["id"] for c in response.json()], [str(self.coach.id)])
