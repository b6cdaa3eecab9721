"""
Community API endpoints.
"""
from typing import List
from uuid import UUID

from django.http import HttpRequest
from ninja import Router
from ninja.errors import HttpError

from apps.identity.decorators import require_permission
from apps.identity.permissions import Permissions
from .schemas import CommentIn, CommentOut, LikeOut, MenteeProfileOut, PostIn, PostOut
from . import services

router = Router(tags=["Community"])


def _participant(request: HttpRequest):
    return require_permission(request, Permissions.COMMUNITY_PARTICIPATE)


def _get_post(user, post_id: UUID):
    post = services.get_post(user, post_id)
    if post is None:
        raise HttpError(404, "Post not found")
    return post


@router.get("/posts", response=List[PostOut], auth=None)
def list_posts(request: HttpRequest, limit: int = services.DEFAULT_PAGE_SIZE, offset: int = 0):
    user = _participant(request)
    return services.list_posts(user, limit=limit, offset=max(offset, 0))


@router.post("/posts", response={201: PostOut}, auth=None)
def create_post(request: HttpRequest, payload: PostIn):
    user = _participant(request)
    try:
        return 201, services.create_post(user, payload.content, payload.image_url)
    except ValueError as e:
        raise HttpError(400, str(e))


@router.delete("/posts/{post_id}", response={204: None}, auth=None)
def delete_post(request: HttpRequest, post_id: UUID):
    user = _participant(request)
    post = _get_post(user, post_id)
    try:
        services.delete_post(user, post)
    except PermissionError as e:
        raise HttpError(403, str(e))
    return 204, None


@router.post("/posts/{post_id}/like", response=LikeOut, auth=None)
def like_post(request: HttpRequest, post_id: UUID):
    user = _participant(request)
    post = _get_post(user, post_id)
    services.like_post(user, post)
    return {"liked": True, "like_count": post.likes.count()}


@router.delete("/posts/{post_id}/like", response=LikeOut, auth=None)
def unlike_post(request: HttpRequest, post_id: UUID):
    user = _participant(request)
    post = _get_post(user, post_id)
    services.unlike_post(user, post)
    return {"liked": False, "like_count": post.likes.count()}


@router.get("/posts/{post_id}/comments", response=List[CommentOut], auth=None)
def list_comments(request: HttpRequest, post_id: UUID):
    user = _participant(request)
    return services.list_comments(_get_post(user, post_id))


@router.post("/posts/{post_id}/comments", response={201: CommentOut}, auth=None)
def add_comment(request: HttpRequest, post_id: UUID, payload: CommentIn):
    user = _participant(request)
    post = _get_post(user, post_id)
    try:
        return 201, services.add_comment(user, post, payload.content)
    except ValueError as e:
        raise HttpError(400, str(e))


@router.delete("/posts/{post_id}/comments/{comment_id}", response={204: None}, auth=None)
def delete_comment(request: HttpRequest, post_id: UUID, comment_id: UUID):
    user = _participant(request)
    comment = services.get_comment(_get_post(user, post_id), comment_id)
    if comment is None:
        raise HttpError(404, "Comment not found")
    try:
        services.delete_comment(user, comment)
    except PermissionError as e:
        raise HttpError(403, str(e))
    return 204, None


@router.get("/mentees", response=List[MenteeProfileOut], auth=None)
def list_mentee_profiles(request: HttpRequest):
    user = _participant(request)
    return services.list_mentee_profiles(user)
