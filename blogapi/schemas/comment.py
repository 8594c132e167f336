"""
Comment schemas.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from blogapi.kernel.models.comment import Comment


class CommentCreate(BaseModel):
    """Comment creation request."""

    content: str = Field(..., min_length=1, max_length=2000)

    @field_validator("content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Comment content cannot be empty")
        return v


class CommentUpdate(CommentCreate):
    """Comment edit request."""


class CommentResponse(BaseModel):
    """Comment as returned to clients."""

    id: uuid.UUID
    post_id: uuid.UUID
    author: str
    content: str
    hidden: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        return cls(
            id=comment.id,
            post_id=comment.post_id,
            author=comment.author.username,
            content=comment.content,
            hidden=comment.hidden,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )
