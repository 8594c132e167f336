"""
Data models.

SQLAlchemy models for users and the moderated content they author.
"""

from blogapi.kernel.models.base import Base, TimestampMixin, HiddenFlagMixin, generate_uuid
from blogapi.kernel.models.user import User, UserRole
from blogapi.kernel.models.post import Post, post_likes
from blogapi.kernel.models.comment import Comment
from blogapi.kernel.models.subscription import Subscription
from blogapi.kernel.models.report import Report, ReportAction, ReportStatus, ReportType

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "HiddenFlagMixin",
    "generate_uuid",
    # User
    "User",
    "UserRole",
    # Content
    "Post",
    "post_likes",
    "Comment",
    # Subscriptions
    "Subscription",
    # Moderation
    "Report",
    "ReportAction",
    "ReportStatus",
    "ReportType",
]
