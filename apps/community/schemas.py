from datetime import datetime
from typing import List
from uuid import UUID

from ninja import Schema


class PostIn(Schema):
    content: str
    image_url: str = ""


class CommentIn(Schema):
    content: str


class CommentOut(Schema):
    id: UUID
    post_id: UUID
    author_id: UUID
    author_name: str
    content: str
    created_at: datetime

    @staticmethod
    def resolve_author_name(obj):
        return obj.author.full_name


class PostOut(Schema):
    id: UUID
    author_id: UUID
    author_name: str
    content: str
    image_url: str
    created_at: datetime
    updated_at: datetime
    like_count: int = 0
    comment_count: int = 0
    liked_by_me: bool = False
    comments: List[CommentOut] = []

    @staticmethod
    def resolve_author_name(obj):
        return obj.author.full_name

    @staticmethod
    def resolve_like_count(obj):
        return getattr(obj, 'like_count', 0)

    @staticmethod
    def resolve_comment_count(obj):
        return getattr(obj, 'comment_count', 0)

    @staticmethod
    def resolve_liked_by_me(obj):
        return bool(getattr(obj, 'liked_by_me', False))

    @staticmethod
    def resolve_comments(obj):
        return list(obj.comments.all())


class LikeOut(Schema):
    liked: bool
    like_count: int


class MenteeProfileOut(Schema):
    id: UUID
    full_name: str
    about: str
    location: str
    profile_picture_url: str
    post_count: int = 0
    like_count: int = 0
    comment_count: int = 0
