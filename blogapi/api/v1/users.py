"""
User endpoints: profiles, subscriptions and admin moderation.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from blogapi.api.deps import AdminPrincipal, CurrentPrincipal, DbSession, OptionalPrincipal
from blogapi.api.errors import NOT_FOUND
from blogapi.kernel.identity.identity_service import IdentityService
from blogapi.kernel.identity.principal import Principal
from blogapi.kernel.models.post import Post
from blogapi.kernel.models.subscription import Subscription
from blogapi.kernel.models.user import User, UserRole
from blogapi.kernel.visibility.policy import filter_visible
from blogapi.logging_config import get_logger
from blogapi.schemas.auth import UserResponse
from blogapi.schemas.user import ProfileResponse, SubscriptionResponse

router = APIRouter()
logger = get_logger(__name__)


async def _get_user_or_404(identity_service: IdentityService, user_id: uuid.UUID) -> User:
    user = await identity_service.get_user_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=NOT_FOUND,
        )
    return user


async def _find_subscription(db, subscriber_id: uuid.UUID, subscribed_to_id: uuid.UUID):
    result = await db.execute(
        select(Subscription).where(
            Subscription.subscriber_id == subscriber_id,
            Subscription.subscribed_to_id == subscribed_to_id,
        )
    )
    return result.scalar_one_or_none()


async def _build_profile(db, user: User, principal: Optional[Principal]) -> ProfileResponse:
    """Profile with the posts ``principal`` can see; email only for the user and admins."""
    posts = await db.execute(
        select(Post).where(Post.author_id == user.id).order_by(Post.created_at.desc())
    )
    subscriptions = await db.execute(
        select(User.username)
        .join(Subscription, Subscription.subscribed_to_id == User.id)
        .where(Subscription.subscriber_id == user.id)
        .order_by(User.username)
    )
    show_email = principal is not None and (principal.is_admin or principal.id == user.id)

    return ProfileResponse.from_user(
        user,
        posts=filter_visible(posts.scalars().all(), principal),
        subscriptions=list(subscriptions.scalars().all()),
        show_email=show_email,
    )


@router.get("/username/{username}", response_model=ProfileResponse)
async def get_user_by_username(username: str, principal: OptionalPrincipal, db: DbSession):
    """A user's profile, looked up by username."""
    user = await IdentityService(db).get_user_by_username(username)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=NOT_FOUND,
        )
    return await _build_profile(db, user, principal)


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_user(user_id: uuid.UUID, principal: OptionalPrincipal, db: DbSession):
    """A user's profile."""
    user = await _get_user_or_404(IdentityService(db), user_id)
    return await _build_profile(db, user, principal)


@router.post("/{user_id}/subscription", response_model=SubscriptionResponse)
async def subscribe(user_id: uuid.UUID, principal: CurrentPrincipal, db: DbSession):
    """Follow another user; their posts show up in the caller's feed."""
    target = await _get_user_or_404(IdentityService(db), user_id)

    if target.id == principal.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot subscribe to yourself",
        )
    if await _find_subscription(db, principal.id, target.id) is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Already subscribed",
        )

    db.add(Subscription(subscriber_id=principal.id, subscribed_to_id=target.id))
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Already subscribed",
        )

    return SubscriptionResponse(user_id=target.id, username=target.username, subscribed=True)


@router.delete("/{user_id}/subscription", response_model=SubscriptionResponse)
async def unsubscribe(user_id: uuid.UUID, principal: CurrentPrincipal, db: DbSession):
    """Stop following a user."""
    target = await _get_user_or_404(IdentityService(db), user_id)

    subscription = await _find_subscription(db, principal.id, target.id)
    if subscription is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Not subscribed",
        )

    await db.delete(subscription)
    await db.flush()

    return SubscriptionResponse(user_id=target.id, username=target.username, subscribed=False)


@router.post("/{user_id}/ban", response_model=UserResponse)
async def ban_user(user_id: uuid.UUID, admin: AdminPrincipal, db: DbSession):
    """
    Ban a user (admin only).

    Takes effect on the user's next request: the authentication middleware
    re-reads the flag every time and rejects banned principals with 403.
    """
    if user_id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Administrators cannot ban themselves",
        )

    identity_service = IdentityService(db)
    await _get_user_or_404(identity_service, user_id)
    user = await identity_service.set_banned(user_id, True, changed_by=admin.id)
    await db.flush()
    await db.refresh(user)
    return UserResponse.model_validate(user)


@router.post("/{user_id}/unban", response_model=UserResponse)
async def unban_user(user_id: uuid.UUID, admin: AdminPrincipal, db: DbSession):
    """Lift a ban (admin only)."""
    identity_service = IdentityService(db)
    await _get_user_or_404(identity_service, user_id)
    user = await identity_service.set_banned(user_id, False, changed_by=admin.id)
    await db.flush()
    await db.refresh(user)
    return UserResponse.model_validate(user)


@router.post("/{user_id}/promote", response_model=UserResponse)
async def promote_user(user_id: uuid.UUID, admin: AdminPrincipal, db: DbSession):
    """Grant the admin role (admin only)."""
    identity_service = IdentityService(db)
    await _get_user_or_404(identity_service, user_id)
    user = await identity_service.change_role(user_id, UserRole.ADMIN, changed_by=admin.id)
    await db.flush()
    await db.refresh(user)
    return UserResponse.model_validate(user)
