"""
Comment endpoints.

A comment is reachable only through a post the caller can read; editing,
deleting or moderating it additionally needs ownership or the admin role.
"""

import uuid
from typing import List

from fastapi import APIRouter, status

from blogapi.api.deps import CurrentPrincipal, CurrentUser, DbSession, OptionalPrincipal, Visibility
from blogapi.kernel.models.comment import Comment
from blogapi.kernel.visibility.policy import Action, filter_visible
from blogapi.logging_config import get_logger
from blogapi.schemas.comment import CommentCreate, CommentResponse, CommentUpdate
from blogapi.schemas.common import SuccessResponse

router = APIRouter()
logger = get_logger(__name__)


@router.get("/posts/{post_id}/comments", response_model=List[CommentResponse])
async def list_comments(post_id: uuid.UUID, principal: OptionalPrincipal, visibility: Visibility):
    """Comments on a post, oldest first."""
    post = await visibility.require_post(post_id, principal)
    return [CommentResponse.from_comment(c) for c in filter_visible(post.comments, principal)]


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    post_id: uuid.UUID,
    data: CommentCreate,
    user: CurrentUser,
    principal: CurrentPrincipal,
    db: DbSession,
    visibility: Visibility,
):
    """Comment on a post."""
    post = await visibility.require_post(post_id, principal, Action.INTERACT)

    comment = Comment(post=post, author=user, content=data.content.strip())
    db.add(comment)
    await db.flush()
    await db.refresh(comment)

    logger.info(
        "Comment created",
        extra={"comment_id": str(comment.id), "post_id": str(post_id), "user_id": str(user.id)},
    )
    return CommentResponse.from_comment(comment)


@router.put("/comments/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: uuid.UUID,
    data: CommentUpdate,
    principal: CurrentPrincipal,
    db: DbSession,
    visibility: Visibility,
):
    """Edit a comment (author or admin)."""
    comment = await visibility.require_comment(comment_id, principal, Action.MODIFY)

    comment.content = data.content.strip()
    await db.flush()
    await db.refresh(comment)

    return CommentResponse.from_comment(comment)


@router.delete("/comments/{comment_id}", response_model=SuccessResponse)
async def delete_comment(
    comment_id: uuid.UUID,
    principal: CurrentPrincipal,
    db: DbSession,
    visibility: Visibility,
):
    """Delete a comment (author or admin)."""
    comment = await visibility.require_comment(comment_id, principal, Action.MODIFY)

    await db.delete(comment)
    await db.flush()

    logger.info(
        "Comment deleted",
        extra={"comment_id": str(comment_id), "user_id": str(principal.id)},
    )
    return SuccessResponse(message="Comment deleted successfully")


@router.put("/comments/{comment_id}/hide", response_model=CommentResponse)
async def hide_comment(
    comment_id: uuid.UUID,
    principal: CurrentPrincipal,
    db: DbSession,
    visibility: Visibility,
):
    """Hide a comment. Hiding a hidden comment is a no-op."""
    comment = await visibility.hide_comment(comment_id, principal)
    await db.refresh(comment)
    return CommentResponse.from_comment(comment)


@router.put("/comments/{comment_id}/unhide", response_model=CommentResponse)
async def unhide_comment(
    comment_id: uuid.UUID,
    principal: CurrentPrincipal,
    db: DbSession,
    visibility: Visibility,
):
    """Make a hidden comment visible again."""
    comment = await visibility.unhide_comment(comment_id, principal)
    await db.refresh(comment)
    return CommentResponse.from_comment(comment)
