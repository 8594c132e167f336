"""
Post model and the post_likes association table.
"""

import uuid
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Column, ForeignKey, String, Table, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blogapi.kernel.models.base import Base, HiddenFlagMixin, TimestampMixin, generate_uuid

if TYPE_CHECKING:
    from blogapi.kernel.models.comment import Comment
    from blogapi.kernel.models.user import User


post_likes = Table(
    "post_likes",
    Base.metadata,
    Column("post_id", Uuid(), ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Uuid(), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Post(Base, TimestampMixin, HiddenFlagMixin):
    """A blog post. Moderated through its hidden flag."""

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    media_url: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )
    media_type: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )

    # Relationships
    author: Mapped["User"] = relationship(
        "User",
        foreign_keys=[author_id],
        lazy="selectin",
    )
    liked_by: Mapped[List["User"]] = relationship(
        "User",
        secondary=post_likes,
        lazy="selectin",
    )
    comments: Mapped[List["Comment"]] = relationship(
        "Comment",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="Comment.created_at",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Post {self.title[:50]}>"
