"""
Like endpoints. Liking counts as interacting with the post, so a hidden post
cannot be liked or unliked by anyone but an admin.
"""

import uuid

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.exc import IntegrityError

from blogapi.api.deps import CurrentPrincipal, CurrentUser, DbSession, OptionalPrincipal, Visibility
from blogapi.kernel.visibility.policy import Action
from blogapi.schemas.post import LikesResponse

router = APIRouter()


@router.get("/{post_id}/likes", response_model=LikesResponse)
async def get_likes(post_id: uuid.UUID, principal: OptionalPrincipal, visibility: Visibility):
    """Who liked a post."""
    post = await visibility.require_post(post_id, principal)
    return LikesResponse.from_post(post)


@router.post("/{post_id}/likes", response_model=LikesResponse)
async def like_post(
    post_id: uuid.UUID,
    user: CurrentUser,
    principal: CurrentPrincipal,
    db: DbSession,
    visibility: Visibility,
):
    """Like a post."""
    post = await visibility.require_post(post_id, principal, Action.INTERACT)

    if any(u.id == user.id for u in post.liked_by):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Post already liked",
        )

    post.liked_by.append(user)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Post already liked",
        )
    return LikesResponse.from_post(post)


@router.delete("/{post_id}/likes", response_model=LikesResponse)
async def unlike_post(
    post_id: uuid.UUID,
    user: CurrentUser,
    principal: CurrentPrincipal,
    db: DbSession,
    visibility: Visibility,
):
    """Remove the caller's like."""
    post = await visibility.require_post(post_id, principal, Action.INTERACT)

    liked = next((u for u in post.liked_by if u.id == user.id), None)
    if liked is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Post not liked",
        )

    post.liked_by.remove(liked)
    await db.flush()
    return LikesResponse.from_post(post)
