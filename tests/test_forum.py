"""API tests for forum posts, comments, votes and the comment rate limit."""

import pytest

from app.api.routes.forum_routes import get_comment_rate_limiter
from app.services.rate_limit import CommentRateLimiter

pytestmark = [pytest.mark.api]


def _post(client, user, title="Fair pay?", tags=None):
    response = client.post("/api/forum/posts", headers=user.headers, json={
        "title": title, "content": "How do you negotiate?", "tags": tags or ["salary"],
    })
    assert response.status_code == 201, response.text
    return response.json()


def _comment(client, user, post_id, content="Ask for ranges", parent=None):
    return client.post(f"/api/forum/posts/{post_id}/comments", headers=user.headers, json={
        "content": content, "parent_comment_id": parent,
    })


class TestPosts:
    def test_create_and_list(self, api, client):
        alice = api.user("alice")
        _post(client, alice, tags=["Salary"])
        _post(client, alice, title="Remote work", tags=["remote"])

        posts = client.get("/api/forum/posts").json()
        assert [p["title"] for p in posts] == ["Remote work", "Fair pay?"]

        tagged = client.get("/api/forum/posts", params={"tag": "salary"}).json()
        assert [p["title"] for p in tagged] == ["Fair pay?"]

    def test_only_author_can_edit(self, api, client):
        alice = api.user("alice")
        bob = api.user("bob")
        post = _post(client, alice)

        assert client.put(f"/api/forum/posts/{post['id']}", headers=bob.headers,
                          json={"title": "Hijacked"}).status_code == 403
        response = client.put(f"/api/forum/posts/{post['id']}", headers=alice.headers, json={"title": "Edited"})
        assert response.json()["title"] == "Edited"

    def test_edit_rejects_null_fields(self, api, client):
        alice = api.user("alice")
        post = _post(client, alice)

        response = client.put(f"/api/forum/posts/{post['id']}", headers=alice.headers,
                              json={"title": None, "content": "Still here"})
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert client.get(f"/api/forum/posts/{post['id']}").json()["content"] == post["content"]

    def test_admin_can_delete_any_post(self, api, client):
        alice = api.user("alice")
        admin = api.admin()
        post = _post(client, alice)

        assert client.delete(f"/api/forum/posts/{post['id']}", headers=admin.headers).status_code == 200
        missing = client.get(f"/api/forum/posts/{post['id']}")
        assert missing.status_code == 404
        assert missing.json()["code"] == "POST_NOT_FOUND"


class TestComments:
    def test_threaded_comments(self, api, client):
        alice = api.user("alice")
        bob = api.user("bob")
        post = _post(client, alice)

        parent = _comment(client, bob, post["id"]).json()
        reply = _comment(client, alice, post["id"], content="Thanks", parent=parent["id"])
        assert reply.status_code == 201
        assert reply.json()["parent_comment_id"] == parent["id"]

        detail = client.get(f"/api/forum/posts/{post['id']}").json()
        assert detail["comment_count"] == 2
        assert [c["content"] for c in detail["comments"]] == ["Ask for ranges", "Thanks"]

    def test_parent_from_another_post_rejected(self, api, client):
        alice = api.user("alice")
        first = _post(client, alice)
        second = _post(client, alice, title="Other")
        parent = _comment(client, alice, first["id"]).json()

        response = _comment(client, alice, second["id"], parent=parent["id"])
        assert response.status_code == 404
        assert response.json()["code"] == "COMMENT_NOT_FOUND"

    def test_rate_limit(self, api, client):
        from app.main import app as fastapi_app

        fastapi_app.dependency_overrides[get_comment_rate_limiter] = lambda: CommentRateLimiter(limit=2)
        alice = api.user("alice")
        post = _post(client, alice)

        assert _comment(client, alice, post["id"]).status_code == 201
        assert _comment(client, alice, post["id"]).status_code == 201
        limited = _comment(client, alice, post["id"])
        assert limited.status_code == 429
        assert limited.json()["code"] == "RATE_LIMITED"

        other = _post(client, alice, title="Another thread")
        assert _comment(client, alice, other["id"]).status_code == 201


class TestVotes:
    def test_one_vote_per_user_on_post(self, api, client):
        alice = api.user("alice")
        bob = api.user("bob")
        post = _post(client, alice)

        client.post(f"/api/forum/posts/{post['id']}/upvote", headers=bob.headers)
        voted = client.post(f"/api/forum/posts/{post['id']}/upvote", headers=bob.headers).json()
        assert voted["upvote_count"] == 1
        assert voted["has_user_upvoted"] is True

        switched = client.post(f"/api/forum/posts/{post['id']}/downvote", headers=bob.headers).json()
        assert switched["upvote_count"] == 0
        assert switched["downvote_count"] == 1
        assert switched["has_user_downvoted"] is True

        cleared = client.delete(f"/api/forum/posts/{post['id']}/downvote", headers=bob.headers).json()
        assert cleared["downvote_count"] == 0

    def test_comment_votes(self, api, client):
        alice = api.user("alice")
        bob = api.user("bob")
        post = _post(client, alice)
        comment = _comment(client, alice, post["id"]).json()

        voted = client.post(f"/api/forum/comments/{comment['id']}/upvote", headers=bob.headers).json()
        assert voted["upvote_count"] == 1

        removed = client.delete(f"/api/forum/comments/{comment['id']}/upvote", headers=bob.headers).json()
        assert removed["upvote_count"] == 0

    def test_vote_on_missing_comment(self, api, client):
        alice = api.user("alice")

        response = client.post("/api/forum/comments/999/downvote", headers=alice.headers)
        assert response.status_code == 404
