"""
Visibility service: loads moderated content and enforces the policy.
"""

import uuid
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from blogapi.kernel.errors import VisibilityDenied
from blogapi.kernel.identity.principal import Principal
from blogapi.kernel.models.comment import Comment
from blogapi.kernel.models.post import Post
from blogapi.kernel.visibility.policy import Action, Decision, decide, decide_nested
from blogapi.logging_config import get_logger

logger = get_logger(__name__)

Moderatable = Union[Post, Comment]


class VisibilityService:
    """
    Gatekeeper between route handlers and posts/comments.

    Handlers never load a post or comment by id directly; they call
    ``require_post`` / ``require_comment`` and get either the entity or a
    ``VisibilityDenied`` carrying the decision.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_post(self, post_id: uuid.UUID) -> Optional[Post]:
        """Get a post by ID, ignoring visibility."""
        return await self.session.get(Post, post_id)

    async def find_comment(self, comment_id: uuid.UUID) -> Optional[Comment]:
        """Get a comment by ID, ignoring visibility."""
        return await self.session.get(Comment, comment_id)

    async def require_post(
        self,
        post_id: uuid.UUID,
        principal: Optional[Principal],
        action: Action = Action.READ,
    ) -> Post:
        """
        Load a post the principal may act on.

        Raises:
            VisibilityDenied: DENY_NOT_FOUND for missing or hidden posts,
                DENY_FORBIDDEN when MODIFY or MODERATE fails the ownership check
        """
        post = await self.find_post(post_id)
        self._enforce(decide(post, principal, action), "post", post_id, principal, action)
        return post

    async def require_comment(
        self,
        comment_id: uuid.UUID,
        principal: Optional[Principal],
        action: Action = Action.READ,
    ) -> Comment:
        """
        Load a comment the principal may act on.

        The parent post is checked first: a comment under a post the caller
        cannot read is reported as not found.
        """
        comment = await self.find_comment(comment_id)
        parent = await self.find_post(comment.post_id) if comment is not None else None
        self._enforce(
            decide_nested(parent, comment, principal, action),
            "comment",
            comment_id,
            principal,
            action,
        )
        return comment

    async def set_hidden(self, entity: Moderatable, hidden: bool) -> bool:
        """
        Persist the hidden flag. Idempotent.

        Returns:
            True if the flag changed, False if it already had that value
        """
        if entity.hidden == hidden:
            return False
        entity.hidden = hidden
        await self.session.flush()
        logger.info(
            "Visibility changed",
            extra={
                "entity_type": type(entity).__name__.lower(),
                "entity_id": str(entity.id),
                "hidden": hidden,
            },
        )
        return True

    async def hide_post(self, post_id: uuid.UUID, principal: Principal) -> Post:
        post = await self.require_post(post_id, principal, Action.MODERATE)
        await self.set_hidden(post, True)
        return post

    async def unhide_post(self, post_id: uuid.UUID, principal: Principal) -> Post:
        post = await self.require_post(post_id, principal, Action.MODERATE)
        await self.set_hidden(post, False)
        return post

    async def hide_comment(self, comment_id: uuid.UUID, principal: Principal) -> Comment:
        comment = await self.require_comment(comment_id, principal, Action.MODERATE)
        await self.set_hidden(comment, True)
        return comment

    async def unhide_comment(self, comment_id: uuid.UUID, principal: Principal) -> Comment:
        comment = await self.require_comment(comment_id, principal, Action.MODERATE)
        await self.set_hidden(comment, False)
        return comment

    @staticmethod
    def _enforce(
        decision: Decision,
        entity_type: str,
        entity_id: uuid.UUID,
        principal: Optional[Principal],
        action: Action,
    ) -> None:
        if decision.allowed:
            return
        logger.info(
            "Access denied",
            extra={
                "entity_type": entity_type,
                "entity_id": str(entity_id),
                "principal_id": str(principal.id) if principal else None,
                "action": action.value,
                "decision": decision.value,
            },
        )
        raise VisibilityDenied(decision)
