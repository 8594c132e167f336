"""Unit tests for the visibility decision function."""

import uuid
from dataclasses import dataclass, field

import pytest

from blogapi.kernel.identity.principal import Principal
from blogapi.kernel.models.user import UserRole
from blogapi.kernel.visibility.policy import (
    Action,
    Decision,
    decide,
    decide_nested,
    filter_visible,
)


@dataclass
class Entity:
    author_id: uuid.UUID
    hidden: bool = False
    id: uuid.UUID = field(default_factory=uuid.uuid4)


def _principal(role: UserRole = UserRole.USER) -> Principal:
    return Principal(id=uuid.uuid4(), username="someone", role=role)


@pytest.fixture
def author() -> Principal:
    return _principal()


@pytest.fixture
def stranger() -> Principal:
    return _principal()


@pytest.fixture
def admin() -> Principal:
    return _principal(UserRole.ADMIN)


class TestDecide:

    @pytest.mark.parametrize("action", list(Action))
    def test_missing_entity_is_not_found(self, author, action):
        assert decide(None, author, action) is Decision.DENY_NOT_FOUND

    @pytest.mark.parametrize("action", [Action.READ, Action.INTERACT])
    def test_visible_entity_allowed_for_everyone(self, author, stranger, admin, action):
        post = Entity(author_id=author.id)

        for principal in (None, author, stranger, admin):
            assert decide(post, principal, action) is Decision.ALLOW

    @pytest.mark.parametrize("action", [Action.READ, Action.INTERACT, Action.MODIFY])
    def test_hidden_entity_not_found_even_for_author(self, author, stranger, action):
        post = Entity(author_id=author.id, hidden=True)

        for principal in (None, author, stranger):
            assert decide(post, principal, action) is Decision.DENY_NOT_FOUND

    @pytest.mark.parametrize("action", list(Action))
    def test_hidden_entity_allowed_for_admin(self, author, admin, action):
        post = Entity(author_id=author.id, hidden=True)

        assert decide(post, admin, action) is Decision.ALLOW

    def test_modify_allowed_for_author(self, author):
        post = Entity(author_id=author.id)

        assert decide(post, author, Action.MODIFY) is Decision.ALLOW

    def test_modify_forbidden_for_other_users(self, author, stranger):
        post = Entity(author_id=author.id)

        assert decide(post, stranger, Action.MODIFY) is Decision.DENY_FORBIDDEN

    def test_modify_forbidden_for_anonymous(self, author):
        post = Entity(author_id=author.id)

        assert decide(post, None, Action.MODIFY) is Decision.DENY_FORBIDDEN

    def test_modify_allowed_for_admin(self, author, admin):
        post = Entity(author_id=author.id)

        assert decide(post, admin, Action.MODIFY) is Decision.ALLOW

    def test_hidden_beats_ownership(self, author, stranger):
        """A stranger modifying a hidden post learns nothing: 404, not 403."""
        post = Entity(author_id=author.id, hidden=True)

        assert decide(post, stranger, Action.MODIFY) is Decision.DENY_NOT_FOUND

    def test_author_moderates_own_hidden_entity(self, author):
        post = Entity(author_id=author.id, hidden=True)

        assert decide(post, author, Action.MODERATE) is Decision.ALLOW

    def test_moderate_hidden_entity_not_found_for_others(self, author, stranger):
        post = Entity(author_id=author.id, hidden=True)

        for principal in (None, stranger):
            assert decide(post, principal, Action.MODERATE) is Decision.DENY_NOT_FOUND

    def test_moderate_visible_entity_needs_ownership(self, author, stranger, admin):
        post = Entity(author_id=author.id)

        assert decide(post, author, Action.MODERATE) is Decision.ALLOW
        assert decide(post, admin, Action.MODERATE) is Decision.ALLOW
        assert decide(post, stranger, Action.MODERATE) is Decision.DENY_FORBIDDEN
        assert decide(post, None, Action.MODERATE) is Decision.DENY_FORBIDDEN

    def test_default_action_is_read(self, author):
        assert decide(Entity(author_id=author.id), None) is Decision.ALLOW


class TestDecideNested:

    def test_comment_on_hidden_post_not_found(self, author, stranger):
        post = Entity(author_id=author.id, hidden=True)
        comment = Entity(author_id=stranger.id)

        assert decide_nested(post, comment, stranger, Action.MODIFY) is Decision.DENY_NOT_FOUND

    def test_hidden_comment_on_visible_post_not_found(self, author, stranger):
        post = Entity(author_id=author.id)
        comment = Entity(author_id=stranger.id, hidden=True)

        assert decide_nested(post, comment, stranger) is Decision.DENY_NOT_FOUND

    def test_comment_ownership_checked_after_post(self, author, stranger):
        post = Entity(author_id=author.id)
        comment = Entity(author_id=stranger.id)

        # The post author does not own the comment
        assert decide_nested(post, comment, author, Action.MODIFY) is Decision.DENY_FORBIDDEN
        assert decide_nested(post, comment, stranger, Action.MODIFY) is Decision.ALLOW

    def test_missing_comment_not_found(self, author):
        assert decide_nested(Entity(author_id=author.id), None, author) is Decision.DENY_NOT_FOUND

    def test_comment_author_cannot_moderate_under_hidden_post(self, author, stranger):
        post = Entity(author_id=author.id, hidden=True)
        comment = Entity(author_id=stranger.id, hidden=True)

        assert decide_nested(post, comment, stranger, Action.MODERATE) is Decision.DENY_NOT_FOUND

    def test_comment_author_unhides_under_visible_post(self, author, stranger):
        post = Entity(author_id=author.id)
        comment = Entity(author_id=stranger.id, hidden=True)

        assert decide_nested(post, comment, stranger, Action.MODERATE) is Decision.ALLOW

    def test_admin_reaches_hidden_comment_on_hidden_post(self, author, admin):
        post = Entity(author_id=author.id, hidden=True)
        comment = Entity(author_id=author.id, hidden=True)

        assert decide_nested(post, comment, admin, Action.MODIFY) is Decision.ALLOW


class TestFilterVisible:

    def test_drops_hidden_for_non_admins_and_keeps_order(self, author, stranger):
        items = [
            Entity(author_id=author.id),
            Entity(author_id=author.id, hidden=True),
            Entity(author_id=stranger.id),
        ]

        for principal in (None, author, stranger):
            assert filter_visible(items, principal) == [items[0], items[2]]

    def test_admin_sees_everything(self, author, admin):
        items = [Entity(author_id=author.id, hidden=True), Entity(author_id=author.id)]

        assert filter_visible(items, admin) == items

    def test_agrees_with_single_decide(self, author, stranger):
        items = [Entity(author_id=author.id, hidden=h) for h in (False, True, False, True)]

        kept = filter_visible(items, stranger)

        for item in items:
            allowed = decide(item, stranger, Action.READ) is Decision.ALLOW
            assert (item in kept) == allowed
