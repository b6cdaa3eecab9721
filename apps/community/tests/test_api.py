"""
Tests for the community feed and mentee directory.
"""
import json
from uuid import uuid4

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.test import TestCase, Client

from apps.audit.models import AuditLog
from apps.community import services
from apps.community.models import Post, PostComment, PostLike
from apps.identity.models import UserRole


User = get_user_model()


def make_user(role, username=None, **extra):
    username = username or f"user_{uuid4().hex[:8]}"
    return User.objects.create_user(
        username=username, email=f"{username}@test.com", password="testpass123",
        first_name=username.title(), role=role, **extra,
    )


class CommunityServiceTest(TestCase):
    def setUp(self):
        self.mentee = make_user(UserRole.MENTEE, "mia")
        self.other = make_user(UserRole.MENTEE, "noah")

    def test_post_content_is_trimmed(self):
        post = services.create_post(self.mentee, "  Landed an interview!  ", " https://img.test/a.png ")
        self.assertEqual(post.content, "Landed an interview!")
        self.assertEqual(post.image_url, "https://img.test/a.png")

    def test_empty_post_rejected(self):
        with self.assertRaises(ValueError):
            services.create_post(self.mentee, "   ")
        self.assertFalse(Post.objects.exists())

    def test_like_is_recorded_once(self):
        post = services.create_post(self.mentee, "Hello")
        self.assertTrue(services.like_post(self.other, post))
        self.assertFalse(services.like_post(self.other, post))
        self.assertEqual(PostLike.objects.filter(post=post).count(), 1)

    def test_database_refuses_duplicate_like(self):
        post = services.create_post(self.mentee, "Hello")
        PostLike.objects.create(post=post, user=self.other)
        with self.assertRaises(IntegrityError), transaction.atomic():
            PostLike.objects.create(post=post, user=self.other)

    def test_unlike_without_like_is_harmless(self):
        post = services.create_post(self.mentee, "Hello")
        self.assertFalse(services.unlike_post(self.other, post))

    def test_feed_is_newest_first_with_counts(self):
        first = services.create_post(self.mentee, "First")
        second = services.create_post(self.other, "Second")
        services.like_post(self.mentee, first)
        services.like_post(self.other, first)
        services.add_comment(self.other, first, "Congrats")

        feed = services.list_posts(self.mentee)
        self.assertEqual([p.id for p in feed], [second.id, first.id])
        self.assertEqual(feed[1].like_count, 2)
        self.assertEqual(feed[1].comment_count, 1)
        self.assertTrue(feed[1].liked_by_me)
        self.assertFalse(feed[0].liked_by_me)

    def test_blank_comment_rejected(self):
        post = services.create_post(self.mentee, "Hello")
        with self.assertRaises(ValueError):
            services.add_comment(self.other, post, "  ")
        self.assertFalse(PostComment.objects.exists())


class CommunityAPITest(TestCase):
    def setUp(self):
        self.client = Client()
        self.admin = make_user(UserRole.ADMIN, "ada")
        self.coach = make_user(UserRole.COACH, "carla")
        self.mentee = make_user(UserRole.MENTEE, "mia", location="Leeds", about="Data analyst")
        self.other = make_user(UserRole.MENTEE, "noah")

    def post_json(self, url, body):
        return self.client.post(url, data=json.dumps(body), content_type="application/json")

    def create_post(self, user, content="Hello everyone"):
        self.client.force_login(user)
        response = self.post_json("/api/community/posts", {"content": content})
        self.assertEqual(response.status_code, 201)
        return response.json()

    def test_requires_login(self):
        response = self.client.get("/api/community/posts")
        self.assertEqual(response.status_code, 401)

    def test_create_and_list_posts(self):
        created = self.create_post(self.mentee, "  First week done  ")
        self.assertEqual(created["content"], "First week done")
        self.assertEqual(created["author_name"], "Mia")

        self.client.force_login(self.coach)
        response = self.client.get("/api/community/posts")
        self.assertEqual(response.status_code, 200)
        posts = response.json()
        self.assertEqual(len(posts), 1)
        self.assertEqual(posts[0]["id"], created["id"])
        self.assertEqual(posts[0]["comments"], [])

    def test_empty_post_returns_400(self):
        self.client.force_login(self.mentee)
        response = self.post_json("/api/community/posts", {"content": "  "})
        self.assertEqual(response.status_code, 400)

    def test_like_twice_then_unlike(self):
        post = self.create_post(self.mentee)
        self.client.force_login(self.other)
        url = f"/api/community/posts/{post['id']}/like"

        self.client.post(url)
        response = self.client.post(url)
        self.assertEqual(response.json(), {"liked": True, "like_count": 1})

        response = self.client.delete(url)
        self.assertEqual(response.json(), {"liked": False, "like_count": 0})

    def test_comments_are_listed_in_order(self):
        post = self.create_post(self.mentee)
        url = f"/api/community/posts/{post['id']}/comments"
        self.client.force_login(self.other)
        self.assertEqual(self.post_json(url, {"content": " Nice "}).status_code, 201)
        self.client.force_login(self.mentee)
        self.post_json(url, {"content": "Thanks"})

        response = self.client.get(url)
        comments = response.json()
        self.assertEqual([c["content"] for c in comments], ["Nice", "Thanks"])
        self.assertEqual(comments[0]["author_name"], "Noah")

    def test_only_author_deletes_post(self):
        post = self.create_post(self.mentee)
        self.client.force_login(self.other)
        response = self.client.delete(f"/api/community/posts/{post['id']}")
        self.assertEqual(response.status_code, 403)

        self.client.force_login(self.mentee)
        response = self.client.delete(f"/api/community/posts/{post['id']}")
        self.assertEqual(response.status_code, 204)
        self.assertFalse(Post.objects.exists())

    def test_admin_removal_is_audited(self):
        post = self.create_post(self.mentee)
        self.client.force_login(self.admin)
        response = self.client.delete(f"/api/community/posts/{post['id']}")
        self.assertEqual(response.status_code, 204)
        self.assertTrue(AuditLog.objects.filter(action="REMOVE_POST", target_id=post["id"]).exists())

    def test_coach_cannot_remove_mentee_comment(self):
        post = self.create_post(self.mentee)
        self.client.force_login(self.other)
        comment = self.post_json(f"/api/community/posts/{post['id']}/comments", {"content": "Hi"}).json()

        self.client.force_login(self.coach)
        response = self.client.delete(f"/api/community/posts/{post['id']}/comments/{comment['id']}")
        self.assertEqual(response.status_code, 403)
        self.assertEqual(PostComment.objects.count(), 1)

    def test_missing_post_returns_404(self):
        self.client.force_login(self.mentee)
        response = self.client.post(f"/api/community/posts/{uuid4()}/like")
        self.assertEqual(response.status_code, 404)

    def test_mentee_profiles_exclude_caller_and_count_activity(self):
        post = self.create_post(self.mentee)
        self.client.force_login(self.mentee)
        self.client.post(f"/api/community/posts/{post['id']}/like")
        self.post_json(f"/api/community/posts/{post['id']}/comments", {"content": "Bump"})
        make_user(UserRole.MENTEE, "gone", is_active=False)

        self.client.force_login(self.other)
        response = self.client.get("/api/community/mentees")
        self.assertEqual(response.status_code, 200)
        profiles = response.json()
        self.assertEqual([p["full_name"] for p in profiles], ["Mia"])
        self.assertEqual(profiles[0]["location"], "Leeds")
        self.assertEqual(
            (profiles[0]["post_count"], profiles[0]["like_count"], profiles[0]["comment_count"]),
            (1, 1, 1),
        )
