"""
Report model: a user flagging a post or another user for admin review.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blogapi.kernel.models.base import Base, TimestampMixin, generate_uuid

if TYPE_CHECKING:
    from blogapi.kernel.models.post import Post
    from blogapi.kernel.models.user import User


class ReportType(str, Enum):
    """What the report is about."""
    POST = "post"
    USER = "user"


class ReportStatus(str, Enum):
    """Review state of a report."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReportAction(str, Enum):
    """What an admin does with a pending report."""
    DISMISS = "dismiss"
    HIDE_POST = "hide_post"
    BAN_USER = "ban_user"


class Report(Base, TimestampMixin):
    """
    A report against exactly one post or one user.

    Exactly one of ``reported_post_id`` and ``reported_user_id`` is set,
    matching ``type``. NULLs never collide in the unique constraints, so each
    reporter can report a given post or user once.
    """

    __tablename__ = "reports"
    __table_args__ = (
        UniqueConstraint("reporter_id", "reported_post_id", name="uq_report_post"),
        UniqueConstraint("reporter_id", "reported_user_id", name="uq_report_user"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    reporter_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[ReportType] = mapped_column(
        String(20),
        nullable=False,
    )
    reported_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    reported_post_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    reason: Mapped[str] = mapped_column(
        String(1000),
        nullable=False,
    )
    status: Mapped[ReportStatus] = mapped_column(
        String(20),
        default=ReportStatus.PENDING,
        nullable=False,
        index=True,
    )
    handled_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    admin_response: Mapped[Optional[str]] = mapped_column(
        String(1000),
        nullable=True,
    )
    handled_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationships
    reporter: Mapped["User"] = relationship(
        "User",
        foreign_keys=[reporter_id],
        lazy="selectin",
    )
    reported_user: Mapped[Optional["User"]] = relationship(
        "User",
        foreign_keys=[reported_user_id],
        lazy="selectin",
    )
    reported_post: Mapped[Optional["Post"]] = relationship(
        "Post",
        lazy="selectin",
    )
    handled_by: Mapped[Optional["User"]] = relationship(
        "User",
        foreign_keys=[handled_by_id],
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Report {self.type} {self.id}>"
