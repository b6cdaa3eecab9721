"""
Community services: the shared feed of posts, their likes and comments,
and the mentee directory shown beside it.
"""
import logging
from typing import List, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count, Exists, OuterRef, Prefetch

from apps.audit.audit_service import AuditAction, log_action
from apps.identity.models import User, UserRole
from apps.identity.permissions import Permissions, get_user_permissions
from .models import Post, PostComment, PostLike

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def can_moderate(user: User) -> bool:
    return Permissions.COMMUNITY_MODERATE in get_user_permissions(user)


def _posts_for(user: User):
    return Post.objects.select_related('author').annotate(
        like_count=Count('likes', distinct=True),
        comment_count=Count('comments', distinct=True),
        liked_by_me=Exists(PostLike.objects.filter(post=OuterRef('pk'), user=user)),
    )


def list_posts(user: User, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> List[Post]:
    """Newest first, with counts, the caller's like flag and comments attached."""
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    comments = PostComment.objects.select_related('author').order_by('created_at')
    posts = _posts_for(user).prefetch_related(Prefetch('comments', queryset=comments))
    return list(posts.order_by('-created_at', '-id')[offset:offset + limit])


def get_post(user: User, post_id: UUID) -> Optional[Post]:
    return _posts_for(user).filter(id=post_id).first()


def create_post(author: User, content: str, image_url: str = "") -> Post:
    content = (content or "").strip()
    if not content:
        raise ValueError("Post content is required")
    post = Post.objects.create(author=author, content=content, image_url=(image_url or "").strip())
    logger.info("User %s posted %s", author.id, post.id)
    return get_post(author, post.id)


def delete_post(user: User, post: Post) -> None:
    """Authors remove their own posts; moderators may remove any."""
    own = post.author_id == user.id
    if not own and not can_moderate(user):
        raise PermissionError("Only the author can delete this post")
    with transaction.atomic():
        if not own:
            log_action(
                action=AuditAction.REMOVE_POST,
                target_type="Post",
                target_id=post.id,
                performed_by=user,
                target_label=post.content[:80],
                context={"author_id": str(post.author_id)},
            )
        post.delete()


def like_post(user: User, post: Post) -> bool:
    """Returns True when a like was added, False when it already existed."""
    _, created = PostLike.objects.get_or_create(post=post, user=user)
    return created


def unlike_post(user: User, post: Post) -> bool:
    deleted, _ = PostLike.objects.filter(post=post, user=user).delete()
    return deleted > 0


def list_comments(post: Post) -> List[PostComment]:
    return list(post.comments.select_related('author').order_by('created_at'))


def add_comment(author: User, post: Post, content: str) -> PostComment:
    content = (content or "").strip()
    if not content:
        raise ValueError("Comment content is required")
    return PostComment.objects.create(post=post, author=author, content=content)


def get_comment(post: Post, comment_id: UUID) -> Optional[PostComment]:
    return post.comments.select_related('author').filter(id=comment_id).first()


def delete_comment(user: User, comment: PostComment) -> None:
    own = comment.author_id == user.id
    if not own and not can_moderate(user):
        raise PermissionError("Only the author can delete this comment")
    with transaction.atomic():
        if not own:
            log_action(
                action=AuditAction.REMOVE_COMMENT,
                target_type="PostComment",
                target_id=comment.id,
                performed_by=user,
                target_label=comment.content[:80],
                context={"post_id": str(comment.post_id), "author_id": str(comment.author_id)},
            )
        comment.delete()


def list_mentee_profiles(user: User) -> List[User]:
    """
    Active mentees other than the caller, each annotated with post_count,
    like_count (likes given) and comment_count (comments written).
    """
    return list(
        User.objects.filter(role=UserRole.MENTEE, is_active=True)
        .exclude(id=user.id)
        .annotate(
            post_count=Count('community_posts', distinct=True),
            like_count=Count('post_likes', distinct=True),
            comment_count=Count('post_comments', distinct=True),
        )
        .order_by('first_name', 'last_name', 'email')
    )
