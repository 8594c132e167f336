"""
Visibility policy for moderated content.

One decision function answers every "may this principal see / touch this
post or comment?" question. Single-item fetches, list filtering, comment
creation, likes, edits, deletes and hide/unhide all call ``decide`` so the
rule cannot drift between endpoints.

Rules, in order:

1. Missing entity -> DENY_NOT_FOUND.
2. Hidden entity -> DENY_NOT_FOUND unless the principal is an admin. This
   includes the entity's own author: a hidden post answers exactly like a
   post that never existed. MODERATE is the one exception, so an author can
   still unhide (or re-hide) their own content.
3. READ and INTERACT stop here with ALLOW.
4. MODIFY and MODERATE additionally need ownership or admin; failing only
   that on a visible entity is DENY_FORBIDDEN.
"""

import uuid
from enum import Enum
from typing import Iterable, List, Optional, Protocol, TypeVar

from blogapi.kernel.identity.principal import Principal


class Decision(str, Enum):
    """Outcome of a visibility check."""
    ALLOW = "allow"
    DENY_NOT_FOUND = "deny_not_found"
    DENY_FORBIDDEN = "deny_forbidden"

    @property
    def allowed(self) -> bool:
        return self is Decision.ALLOW


class Action(str, Enum):
    """What the principal wants to do with the entity."""
    READ = "read"            # fetch or list
    INTERACT = "interact"    # comment on, like, unlike
    MODIFY = "modify"        # edit, delete
    MODERATE = "moderate"    # hide, unhide


class ModeratableEntity(Protocol):
    """The slice of a post or comment the policy looks at."""

    author_id: uuid.UUID
    hidden: bool


E = TypeVar("E", bound=ModeratableEntity)


def decide(
    entity: Optional[ModeratableEntity],
    principal: Optional[Principal],
    action: Action = Action.READ,
) -> Decision:
    """
    Decide whether ``principal`` may perform ``action`` on ``entity``.

    Args:
        entity: The post or comment, or None if the lookup found nothing
        principal: The authenticated caller, or None when anonymous
        action: READ, INTERACT, MODIFY or MODERATE

    Returns:
        The Decision; never raises
    """
    if entity is None:
        return Decision.DENY_NOT_FOUND

    is_admin = principal is not None and principal.is_admin
    is_owner = principal is not None and principal.id == entity.author_id

    if entity.hidden and not is_admin:
        if not (action is Action.MODERATE and is_owner):
            return Decision.DENY_NOT_FOUND

    if action in (Action.READ, Action.INTERACT):
        return Decision.ALLOW

    if principal is None:
        return Decision.DENY_FORBIDDEN
    if is_admin or is_owner:
        return Decision.ALLOW
    return Decision.DENY_FORBIDDEN


def decide_nested(
    parent: Optional[ModeratableEntity],
    child: Optional[ModeratableEntity],
    principal: Optional[Principal],
    action: Action = Action.READ,
) -> Decision:
    """
    Decide for an entity that lives inside another one (a comment on a post).

    The child is only reachable through a readable parent; a parent the
    principal cannot read hides the child as thoroughly as a missing one.
    """
    if child is None:
        return Decision.DENY_NOT_FOUND
    if not decide(parent, principal, Action.READ).allowed:
        return Decision.DENY_NOT_FOUND
    return decide(child, principal, action)


def filter_visible(
    entities: Iterable[E],
    principal: Optional[Principal],
) -> List[E]:
    """
    Keep the entities ``principal`` may read, preserving order.

    An item dropped here is exactly an item whose single fetch would be a 404.
    """
    return [e for e in entities if decide(e, principal, Action.READ).allowed]
