"""
Post and like schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from blogapi.kernel.models.comment import Comment
from blogapi.kernel.models.post import Post
from blogapi.schemas.comment import CommentResponse


class PostCreate(BaseModel):
    """Post creation request."""

    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=100000)
    media_type: Optional[str] = Field(None, pattern=r"^(image|video|audio)?$")
    media_url: Optional[str] = Field(
        None,
        max_length=500,
        pattern=r"^(https?://.*|/uploads/.*)?$",
    )

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class PostUpdate(PostCreate):
    """Post edit request. Replaces title, content and media."""


class PostResponse(BaseModel):
    """Post as returned to clients."""

    id: uuid.UUID
    author: str
    title: str
    content: str
    media_type: Optional[str] = None
    media_url: Optional[str] = None
    hidden: bool
    like_count: int
    liked_by: List[str]
    comments: List[CommentResponse] = []
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_post(
        cls,
        post: Post,
        comments: Optional[List[Comment]] = None,
    ) -> "PostResponse":
        """
        Build the response. ``comments`` must already be filtered for the
        caller; list endpoints leave it out.
        """
        liked_by = [u.username for u in post.liked_by]
        return cls(
            id=post.id,
            author=post.author.username,
            title=post.title,
            content=post.content,
            media_type=post.media_type,
            media_url=post.media_url,
            hidden=post.hidden,
            like_count=len(liked_by),
            liked_by=liked_by,
            comments=[CommentResponse.from_comment(c) for c in comments or []],
            created_at=post.created_at,
            updated_at=post.updated_at,
        )


class LikesResponse(BaseModel):
    """Likes on a post."""

    post_id: uuid.UUID
    like_count: int
    liked_by: List[str]

    @classmethod
    def from_post(cls, post: Post) -> "LikesResponse":
        liked_by = [u.username for u in post.liked_by]
        return cls(post_id=post.id, like_count=len(liked_by), liked_by=liked_by)
