"""Integration tests for subscriptions, the feed and admin user moderation."""

import asyncio
import uuid

from httpx import AsyncClient


class TestSubscriptionsAndFeed:

    async def test_feed_contains_own_and_subscribed_posts(
        self, client: AsyncClient, alice, bob, admin, headers_for, make_post,
    ):
        own = await make_post(alice, title="Mine")
        followed = await make_post(bob, title="Bob's")
        unfollowed = await make_post(admin, title="Admin's")

        response = await client.post(f"/api/v1/users/{bob.id}/subscription", headers=headers_for(alice))
        assert response.status_code == 200
        assert response.json()["subscribed"] is True

        feed = await client.get("/api/v1/posts/feed", headers=headers_for(alice))

        ids = {p["id"] for p in feed.json()}
        assert ids == {str(own.id), str(followed.id)}
        assert str(unfollowed.id) not in ids

    async def test_feed_drops_hidden_posts(self, client: AsyncClient, alice, bob, headers_for, make_post):
        visible = await make_post(bob)
        await make_post(bob, hidden=True)
        await make_post(alice, hidden=True)
        await client.post(f"/api/v1/users/{bob.id}/subscription", headers=headers_for(alice))

        feed = await client.get("/api/v1/posts/feed", headers=headers_for(alice))

        assert [p["id"] for p in feed.json()] == [str(visible.id)]

    async def test_feed_requires_authentication(self, client: AsyncClient):
        response = await client.get("/api/v1/posts/feed")

        assert response.status_code == 401

    async def test_unsubscribe(self, client: AsyncClient, alice, bob, headers_for, make_post):
        bobs = await make_post(bob)
        await client.post(f"/api/v1/users/{bob.id}/subscription", headers=headers_for(alice))

        response = await client.delete(f"/api/v1/users/{bob.id}/subscription", headers=headers_for(alice))

        assert response.status_code == 200
        assert response.json()["subscribed"] is False
        feed = await client.get("/api/v1/posts/feed", headers=headers_for(alice))
        assert str(bobs.id) not in {p["id"] for p in feed.json()}

    async def test_cannot_subscribe_twice_or_to_self(self, client: AsyncClient, alice, bob, headers_for):
        await client.post(f"/api/v1/users/{bob.id}/subscription", headers=headers_for(alice))

        twice = await client.post(f"/api/v1/users/{bob.id}/subscription", headers=headers_for(alice))
        self_sub = await client.post(f"/api/v1/users/{alice.id}/subscription", headers=headers_for(alice))

        assert twice.status_code == 400
        assert self_sub.status_code == 400

    async def test_concurrent_duplicate_subscription(self, client: AsyncClient, alice, bob, headers_for):
        url = f"/api/v1/users/{bob.id}/subscription"

        responses = await asyncio.gather(
            client.post(url, headers=headers_for(alice)),
            client.post(url, headers=headers_for(alice)),
        )

        assert sorted(r.status_code for r in responses) == [200, 400]

    async def test_subscribe_to_unknown_user(self, client: AsyncClient, alice, headers_for):
        response = await client.post(f"/api/v1/users/{uuid.uuid4()}/subscription", headers=headers_for(alice))

        assert response.status_code == 404


class TestModeration:

    async def test_promote_grants_admin_view(self, client: AsyncClient, alice, bob, admin, headers_for, make_post):
        hidden = await make_post(alice, hidden=True)
        bob_headers = headers_for(bob)
        assert (await client.get(f"/api/v1/posts/{hidden.id}", headers=bob_headers)).status_code == 404

        response = await client.post(f"/api/v1/users/{bob.id}/promote", headers=headers_for(admin))
        assert response.status_code == 200
        assert response.json()["role"] == "admin"

        # The role is re-read per request, so the old token now sees hidden posts
        assert (await client.get(f"/api/v1/posts/{hidden.id}", headers=bob_headers)).status_code == 200

    async def test_moderating_unknown_user(self, client: AsyncClient, admin, headers_for):
        for action in ("ban", "unban", "promote"):
            response = await client.post(f"/api/v1/users/{uuid.uuid4()}/{action}", headers=headers_for(admin))
            assert response.status_code == 404

    async def test_unban_is_idempotent(self, client: AsyncClient, alice, admin, headers_for):
        for _ in range(2):
            response = await client.post(f"/api/v1/users/{alice.id}/unban", headers=headers_for(admin))
            assert response.status_code == 200
            assert response.json()["banned"] is False


class TestHealth:

    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestProfiles:

    async def test_profile_by_id_and_username(self, client: AsyncClient, alice, bob, headers_for, make_post):
        visible = await make_post(alice)
        await make_post(alice, hidden=True)
        await client.post(f"/api/v1/users/{bob.id}/subscription", headers=headers_for(alice))

        by_id = await client.get(f"/api/v1/users/{alice.id}")
        by_name = await client.get("/api/v1/users/username/alice")

        assert by_id.status_code == by_name.status_code == 200
        assert by_id.json() == by_name.json()
        profile = by_id.json()
        assert profile["username"] == "alice"
        assert profile["subscriptions"] == ["bob"]
        assert [p["id"] for p in profile["posts"]] == [str(visible.id)]
        assert profile["email"] is None

    async def test_email_shown_to_self_and_admin(self, client: AsyncClient, alice, bob, admin, headers_for):
        own = await client.get(f"/api/v1/users/{alice.id}", headers=headers_for(alice))
        as_admin = await client.get(f"/api/v1/users/{alice.id}", headers=headers_for(admin))
        as_other = await client.get(f"/api/v1/users/{alice.id}", headers=headers_for(bob))

        assert own.json()["email"] == as_admin.json()["email"] == "alice@example.com"
        assert as_other.json()["email"] is None

    async def test_admin_profile_view_includes_hidden_posts(self, client: AsyncClient, alice, admin, headers_for, make_post):
        await make_post(alice)
        await make_post(alice, hidden=True)

        response = await client.get("/api/v1/users/username/alice", headers=headers_for(admin))

        assert len(response.json()["posts"]) == 2

    async def test_unknown_user(self, client: AsyncClient):
        by_id = await client.get(f"/api/v1/users/{uuid.uuid4()}")
        by_name = await client.get("/api/v1/users/username/nobody")

        assert by_id.status_code == by_name.status_code == 404
