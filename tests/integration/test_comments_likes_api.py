"""Integration tests for comments and likes, which inherit their post's visibility."""

import asyncio

from httpx import AsyncClient

NOT_FOUND = {"detail": "Not found"}


class TestComments:

    async def test_comment_on_visible_post(self, client: AsyncClient, alice, bob, headers_for, make_post):
        post = await make_post(alice)

        response = await client.post(
            f"/api/v1/posts/{post.id}/comments",
            json={"content": "Nice post"},
            headers=headers_for(bob),
        )

        assert response.status_code == 201
        assert response.json()["author"] == "bob"
        assert response.json()["post_id"] == str(post.id)

        listed = await client.get(f"/api/v1/posts/{post.id}/comments")
        assert [c["content"] for c in listed.json()] == ["Nice post"]

    async def test_comment_on_hidden_post_not_found(self, client: AsyncClient, alice, bob, headers_for, make_post):
        post = await make_post(alice, hidden=True)

        for user in (alice, bob):
            response = await client.post(
                f"/api/v1/posts/{post.id}/comments",
                json={"content": "Hello?"},
                headers=headers_for(user),
            )
            assert response.status_code == 404
            assert response.json() == NOT_FOUND

    async def test_comments_of_hidden_post_not_listed(self, client: AsyncClient, alice, bob, make_post, make_comment):
        post = await make_post(alice, hidden=True)
        await make_comment(post, bob)

        response = await client.get(f"/api/v1/posts/{post.id}/comments")

        assert response.status_code == 404

    async def test_edit_comment_on_hidden_post_not_found(
        self, client: AsyncClient, alice, bob, headers_for, make_post, make_comment,
    ):
        post = await make_post(alice, hidden=True)
        comment = await make_comment(post, bob)

        edit = await client.put(
            f"/api/v1/comments/{comment.id}",
            json={"content": "Edited"},
            headers=headers_for(bob),
        )
        delete = await client.delete(f"/api/v1/comments/{comment.id}", headers=headers_for(bob))

        assert edit.status_code == 404
        assert delete.status_code == 404
        assert edit.json() == delete.json() == NOT_FOUND

    async def test_comment_author_edits(self, client: AsyncClient, alice, bob, headers_for, make_post, make_comment):
        post = await make_post(alice)
        comment = await make_comment(post, bob)

        response = await client.put(
            f"/api/v1/comments/{comment.id}",
            json={"content": "Edited"},
            headers=headers_for(bob),
        )

        assert response.status_code == 200
        assert response.json()["content"] == "Edited"

    async def test_post_author_cannot_edit_others_comment(
        self, client: AsyncClient, alice, bob, headers_for, make_post, make_comment,
    ):
        post = await make_post(alice)
        comment = await make_comment(post, bob)

        response = await client.put(
            f"/api/v1/comments/{comment.id}",
            json={"content": "Edited"},
            headers=headers_for(alice),
        )

        assert response.status_code == 403

    async def test_delete_comment(self, client: AsyncClient, alice, bob, headers_for, make_post, make_comment):
        post = await make_post(alice)
        comment = await make_comment(post, bob)

        response = await client.delete(f"/api/v1/comments/{comment.id}", headers=headers_for(bob))

        assert response.status_code == 200
        listed = await client.get(f"/api/v1/posts/{post.id}/comments")
        assert listed.json() == []

    async def test_hidden_comment_dropped_from_post_and_list(
        self, client: AsyncClient, alice, bob, admin, headers_for, make_post, make_comment,
    ):
        post = await make_post(alice)
        visible = await make_comment(post, bob)
        hidden = await make_comment(post, bob, hidden=True)

        detail = await client.get(f"/api/v1/posts/{post.id}", headers=headers_for(bob))
        listed = await client.get(f"/api/v1/posts/{post.id}/comments", headers=headers_for(bob))
        as_admin = await client.get(f"/api/v1/posts/{post.id}/comments", headers=headers_for(admin))

        assert [c["id"] for c in detail.json()["comments"]] == [str(visible.id)]
        assert [c["id"] for c in listed.json()] == [str(visible.id)]
        assert {c["id"] for c in as_admin.json()} == {str(visible.id), str(hidden.id)}

    async def test_hide_comment_idempotent(self, client: AsyncClient, alice, bob, headers_for, make_post, make_comment):
        post = await make_post(alice)
        comment = await make_comment(post, bob)

        first = await client.put(f"/api/v1/comments/{comment.id}/hide", headers=headers_for(bob))
        second = await client.put(f"/api/v1/comments/{comment.id}/hide", headers=headers_for(bob))
        edit = await client.put(
            f"/api/v1/comments/{comment.id}",
            json={"content": "Edited"},
            headers=headers_for(bob),
        )
        unhidden = await client.put(f"/api/v1/comments/{comment.id}/unhide", headers=headers_for(bob))

        assert first.status_code == second.status_code == 200
        assert second.json()["hidden"] is True
        # Editing stays off limits while hidden
        assert edit.status_code == 404
        assert unhidden.status_code == 200
        assert unhidden.json()["hidden"] is False

    async def test_admin_unhides_comment(
        self, client: AsyncClient, alice, bob, admin, headers_for, make_post, make_comment,
    ):
        post = await make_post(alice)
        comment = await make_comment(post, bob, hidden=True)

        response = await client.put(f"/api/v1/comments/{comment.id}/unhide", headers=headers_for(admin))

        assert response.status_code == 200
        assert response.json()["hidden"] is False
        listed = await client.get(f"/api/v1/posts/{post.id}/comments")
        assert [c["id"] for c in listed.json()] == [str(comment.id)]


class TestLikes:

    async def test_like_and_unlike(self, client: AsyncClient, alice, bob, headers_for, make_post):
        post = await make_post(alice)

        liked = await client.post(f"/api/v1/posts/{post.id}/likes", headers=headers_for(bob))
        assert liked.status_code == 200
        assert liked.json()["like_count"] == 1
        assert liked.json()["liked_by"] == ["bob"]

        unliked = await client.delete(f"/api/v1/posts/{post.id}/likes", headers=headers_for(bob))
        assert unliked.status_code == 200
        assert unliked.json()["like_count"] == 0

    async def test_duplicate_like_rejected(self, client: AsyncClient, alice, bob, headers_for, make_post):
        post = await make_post(alice)
        await client.post(f"/api/v1/posts/{post.id}/likes", headers=headers_for(bob))

        response = await client.post(f"/api/v1/posts/{post.id}/likes", headers=headers_for(bob))

        assert response.status_code == 400

    async def test_concurrent_duplicate_like(self, client: AsyncClient, alice, bob, headers_for, make_post):
        post = await make_post(alice)
        url = f"/api/v1/posts/{post.id}/likes"

        responses = await asyncio.gather(
            client.post(url, headers=headers_for(bob)),
            client.post(url, headers=headers_for(bob)),
        )

        assert sorted(r.status_code for r in responses) == [200, 400]
        likes = await client.get(url)
        assert likes.json()["liked_by"] == ["bob"]

    async def test_unlike_without_like_rejected(self, client: AsyncClient, alice, bob, headers_for, make_post):
        post = await make_post(alice)

        response = await client.delete(f"/api/v1/posts/{post.id}/likes", headers=headers_for(bob))

        assert response.status_code == 400

    async def test_like_hidden_post_not_found(self, client: AsyncClient, alice, bob, headers_for, make_post):
        post = await make_post(alice, hidden=True)

        like = await client.post(f"/api/v1/posts/{post.id}/likes", headers=headers_for(bob))
        likes = await client.get(f"/api/v1/posts/{post.id}/likes")

        assert like.status_code == 404
        assert likes.status_code == 404
        assert like.json() == likes.json() == NOT_FOUND

    async def test_like_requires_authentication(self, client: AsyncClient, alice, make_post):
        post = await make_post(alice)

        response = await client.post(f"/api/v1/posts/{post.id}/likes")

        assert response.status_code == 401
