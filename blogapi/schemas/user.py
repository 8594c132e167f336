"""
User profile and relationship schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from blogapi.kernel.models.post import Post
from blogapi.kernel.models.user import User, UserRole
from blogapi.schemas.post import PostResponse


class SubscriptionResponse(BaseModel):
    """Subscription state between the caller and another user."""

    user_id: uuid.UUID
    username: str
    subscribed: bool


class ProfileResponse(BaseModel):
    """
    Public profile of a user.

    ``email`` is only filled in for the user themself and for admins;
    ``posts`` must already be filtered for the caller.
    """

    id: uuid.UUID
    username: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    role: str
    banned: bool
    subscriptions: List[str]
    posts: List[PostResponse]
    created_at: datetime

    @classmethod
    def from_user(
        cls,
        user: User,
        posts: List[Post],
        subscriptions: List[str],
        show_email: bool = False,
    ) -> "ProfileResponse":
        return cls(
            id=user.id,
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email if show_email else None,
            role=UserRole(user.role).value,
            banned=user.banned,
            subscriptions=subscriptions,
            posts=[PostResponse.from_post(p) for p in posts],
            created_at=user.created_at,
        )
