"""
Comment model.
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blogapi.kernel.models.base import Base, HiddenFlagMixin, TimestampMixin, generate_uuid

if TYPE_CHECKING:
    from blogapi.kernel.models.post import Post
    from blogapi.kernel.models.user import User


class Comment(Base, TimestampMixin, HiddenFlagMixin):
    """A comment on a post. Visible only while its post is visible too."""

    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(
        String(2000),
        nullable=False,
    )

    # Relationships
    post: Mapped["Post"] = relationship(
        "Post",
        back_populates="comments",
        lazy="joined",
    )
    author: Mapped["User"] = relationship(
        "User",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Comment {self.id}>"
