"""
Post endpoints.

Every lookup goes through VisibilityService and every listing through
filter_visible, so a hidden post is absent from lists exactly when fetching
it by id would be a 404.
"""

import uuid
from typing import List

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import or_, select

from blogapi.api.deps import (
    AdminPrincipal,
    CurrentPrincipal,
    CurrentUser,
    DbSession,
    OptionalPrincipal,
    Visibility,
)
from blogapi.api.errors import NOT_FOUND
from blogapi.kernel.identity.identity_service import IdentityService
from blogapi.kernel.models.post import Post, post_likes
from blogapi.kernel.models.subscription import Subscription
from blogapi.kernel.visibility.policy import Action, filter_visible
from blogapi.logging_config import get_logger
from blogapi.schemas.common import SuccessResponse
from blogapi.schemas.post import PostCreate, PostResponse, PostUpdate

router = APIRouter()
logger = get_logger(__name__)

_newest_first = Post.created_at.desc()


@router.get("", response_model=List[PostResponse])
async def list_posts(principal: OptionalPrincipal, db: DbSession):
    """All posts the caller can see, newest first."""
    result = await db.execute(select(Post).order_by(_newest_first))
    posts = filter_visible(result.scalars().all(), principal)
    return [PostResponse.from_post(p) for p in posts]


@router.get("/feed", response_model=List[PostResponse])
async def get_feed(principal: CurrentPrincipal, db: DbSession):
    """The caller's posts and the posts of everyone they subscribe to."""
    subscribed_to = select(Subscription.subscribed_to_id).where(
        Subscription.subscriber_id == principal.id
    )
    query = (
        select(Post)
        .where(or_(Post.author_id == principal.id, Post.author_id.in_(subscribed_to)))
        .order_by(_newest_first)
    )
    result = await db.execute(query)
    posts = filter_visible(result.scalars().all(), principal)
    return [PostResponse.from_post(p) for p in posts]


@router.get("/mine", response_model=List[PostResponse])
async def list_my_posts(principal: CurrentPrincipal, db: DbSession):
    """The caller's own posts. Hidden ones are left out unless the caller is an admin."""
    result = await db.execute(
        select(Post).where(Post.author_id == principal.id).order_by(_newest_first)
    )
    posts = filter_visible(result.scalars().all(), principal)
    return [PostResponse.from_post(p) for p in posts]


@router.get("/liked", response_model=List[PostResponse])
async def list_liked_posts(principal: CurrentPrincipal, db: DbSession):
    """Posts the caller has liked that they can still see."""
    result = await db.execute(
        select(Post)
        .join(post_likes, post_likes.c.post_id == Post.id)
        .where(post_likes.c.user_id == principal.id)
        .order_by(_newest_first)
    )
    posts = filter_visible(result.scalars().all(), principal)
    return [PostResponse.from_post(p) for p in posts]


@router.get("/admin/all", response_model=List[PostResponse])
async def list_all_posts_admin(principal: AdminPrincipal, db: DbSession):
    """Every post including hidden ones (admin only)."""
    result = await db.execute(select(Post).order_by(_newest_first))
    posts = filter_visible(result.scalars().all(), principal)
    return [PostResponse.from_post(p) for p in posts]


@router.get("/by/{username}", response_model=List[PostResponse])
async def list_posts_by_author(username: str, principal: OptionalPrincipal, db: DbSession):
    """Posts written by ``username`` that the caller can see."""
    author = await IdentityService(db).get_user_by_username(username)
    if author is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=NOT_FOUND,
        )

    result = await db.execute(
        select(Post).where(Post.author_id == author.id).order_by(_newest_first)
    )
    posts = filter_visible(result.scalars().all(), principal)
    return [PostResponse.from_post(p) for p in posts]


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: uuid.UUID, principal: OptionalPrincipal, visibility: Visibility):
    """A single post with the comments the caller can see."""
    post = await visibility.require_post(post_id, principal)
    return PostResponse.from_post(post, comments=filter_visible(post.comments, principal))


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(data: PostCreate, user: CurrentUser, db: DbSession):
    """Publish a new post."""
    post = Post(
        author=user,
        title=data.title.strip(),
        content=data.content,
        media_type=data.media_type or None,
        media_url=data.media_url or None,
        liked_by=[],
        comments=[],
    )
    db.add(post)
    await db.flush()
    await db.refresh(post)

    logger.info("Post created", extra={"post_id": str(post.id), "user_id": str(user.id)})
    return PostResponse.from_post(post)


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: uuid.UUID,
    data: PostUpdate,
    principal: CurrentPrincipal,
    db: DbSession,
    visibility: Visibility,
):
    """Edit a post (author or admin)."""
    post = await visibility.require_post(post_id, principal, Action.MODIFY)

    post.title = data.title.strip()
    post.content = data.content
    post.media_type = data.media_type or None
    post.media_url = data.media_url or None
    await db.flush()
    await db.refresh(post)

    return PostResponse.from_post(post, comments=filter_visible(post.comments, principal))


@router.delete("/{post_id}", response_model=SuccessResponse)
async def delete_post(
    post_id: uuid.UUID,
    principal: CurrentPrincipal,
    db: DbSession,
    visibility: Visibility,
):
    """Delete a post with its comments and likes (author or admin)."""
    post = await visibility.require_post(post_id, principal, Action.MODIFY)

    await db.delete(post)
    await db.flush()

    logger.info("Post deleted", extra={"post_id": str(post_id), "user_id": str(principal.id)})
    return SuccessResponse(message="Post deleted successfully")


@router.put("/{post_id}/hide", response_model=PostResponse)
async def hide_post(
    post_id: uuid.UUID,
    principal: CurrentPrincipal,
    db: DbSession,
    visibility: Visibility,
):
    """Hide a post. Hiding a hidden post is a no-op."""
    post = await visibility.hide_post(post_id, principal)
    await db.refresh(post)
    return PostResponse.from_post(post)


@router.put("/{post_id}/unhide", response_model=PostResponse)
async def unhide_post(
    post_id: uuid.UUID,
    principal: CurrentPrincipal,
    db: DbSession,
    visibility: Visibility,
):
    """Make a hidden post visible again."""
    post = await visibility.unhide_post(post_id, principal)
    await db.refresh(post)
    return PostResponse.from_post(post, comments=filter_visible(post.comments, principal))
