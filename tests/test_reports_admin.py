"""API tests for content reports and admin moderation."""

import pytest

pytestmark = [pytest.mark.api]


def _forum_post(client, user):
    response = client.post("/api/forum/posts", headers=user.headers, json={"title": "Buy now", "content": "Spam"})
    return response.json()


def _report(client, user, entity_type, entity_id, reason="SPAM"):
    return client.post("/api/report", headers=user.headers, json={
        "entity_type": entity_type, "entity_id": entity_id, "reason_type": reason,
    })


class TestReports:
    def test_create_report(self, api, client):
        spammer = api.user("spammer")
        alice = api.user("alice")
        post = _forum_post(client, spammer)

        response = _report(client, alice, "FORUM_POST", post["id"])
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "PENDING"
        assert body["entity_name"] == "Buy now"
        assert body["created_by_username"] == "alice"

    def test_missing_entity(self, api, client):
        alice = api.user("alice")

        response = _report(client, alice, "FORUM_POST", 999)
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_duplicate_report_rejected(self, api, client):
        spammer = api.user("spammer")
        alice = api.user("alice")
        post = _forum_post(client, spammer)
        _report(client, alice, "FORUM_POST", post["id"])

        assert _report(client, alice, "FORUM_POST", post["id"]).status_code == 400

    def test_report_workplace_shortcut(self, api, client):
        owner = api.employer("owner")
        workplace = api.workplace(owner)
        alice = api.user("alice")

        response = client.post(f"/api/workplace/{workplace['id']}/report", headers=alice.headers,
                               json={"reason_type": "FAKE", "description": "Not a real company"})
        assert response.status_code == 201
        assert response.json()["entity_type"] == "WORKPLACE"
        assert response.json()["entity_name"] == "Acme Ethics"


class TestAdminReports:
    def test_admin_routes_require_admin(self, api, client):
        alice = api.user("alice")

        response = client.get("/api/admin/report", headers=alice.headers)
        assert response.status_code == 403
        assert response.json()["code"] == "ACCESS_DENIED"

    def test_list_and_filter(self, api, client):
        admin = api.admin()
        spammer = api.user("spammer")
        alice = api.user("alice")
        post = _forum_post(client, spammer)
        _report(client, alice, "FORUM_POST", post["id"])
        _report(client, alice, "PROFILE", client.get(f"/api/profile/{spammer.id}").json()["id"])

        everything = client.get("/api/admin/report", headers=admin.headers).json()
        assert everything["total_elements"] == 2

        posts = client.get("/api/admin/report", headers=admin.headers, params={"entity_type": "FORUM_POST"}).json()
        assert [r["entity_type"] for r in posts["content"]] == ["FORUM_POST"]

    def test_resolve_deletes_content_and_bans_creator(self, api, client):
        admin = api.admin()
        spammer = api.user("spammer")
        alice = api.user("alice")
        post = _forum_post(client, spammer)
        report = _report(client, alice, "FORUM_POST", post["id"]).json()

        response = client.post(f"/api/admin/report/{report['id']}/resolve", headers=admin.headers, json={
            "status": "APPROVED", "admin_note": "Spam", "delete_content": True,
            "ban_user": True, "ban_reason": "Spamming",
        })
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "APPROVED"
        assert body["entity_name"] == "[deleted]"
        assert body["resolved_at"] is not None

        assert client.get(f"/api/forum/posts/{post['id']}").status_code == 404
        login = api.login("spammer")
        assert login.status_code == 403
        assert login.json()["code"] == "ACCOUNT_BANNED"
        assert client.get("/api/auth/me", headers=spammer.headers).json()["code"] == "USER_BANNED"

    def test_resolve_twice_rejected(self, api, client):
        admin = api.admin()
        spammer = api.user("spammer")
        alice = api.user("alice")
        report = _report(client, alice, "FORUM_POST", _forum_post(client, spammer)["id"]).json()
        client.post(f"/api/admin/report/{report['id']}/resolve", headers=admin.headers, json={"status": "REJECTED"})

        again = client.post(f"/api/admin/report/{report['id']}/resolve", headers=admin.headers,
                            json={"status": "APPROVED"})
        assert again.status_code == 400

    def test_pending_is_not_a_resolution(self, api, client):
        admin = api.admin()
        spammer = api.user("spammer")
        alice = api.user("alice")
        report = _report(client, alice, "FORUM_POST", _forum_post(client, spammer)["id"]).json()

        response = client.post(f"/api/admin/report/{report['id']}/resolve", headers=admin.headers,
                               json={"status": "PENDING"})
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_FAILED"

    def test_unknown_report(self, api, client):
        admin = api.admin()

        response = client.get("/api/admin/report/999", headers=admin.headers)
        assert response.status_code == 404
        assert response.json()["code"] == "REPORT_NOT_FOUND"


class TestUserModeration:
    def test_ban_removes_owned_content(self, api, client):
        admin = api.admin()
        owner = api.employer("owner")
        workplace = api.workplace(owner)

        response = client.post(f"/api/admin/users/{owner.id}/ban", headers=admin.headers, json={"reason": "Fraud"})
        assert response.status_code == 200
        assert response.json()["is_banned"] is True
        assert response.json()["ban_reason"] == "Fraud"

        assert client.get(f"/api/workplace/{workplace['id']}").status_code == 404
        assert client.get(f"/api/profile/{owner.id}").status_code == 404

        again = client.post(f"/api/admin/users/{owner.id}/ban", headers=admin.headers, json={"reason": "Again"})
        assert again.status_code == 400

    def test_unban(self, api, client):
        admin = api.admin()
        alice = api.user("alice")
        client.post(f"/api/admin/users/{alice.id}/ban", headers=admin.headers, json={"reason": "Oops"})

        response = client.post(f"/api/admin/users/{alice.id}/unban", headers=admin.headers)
        assert response.json()["is_banned"] is False
        assert api.login("alice").status_code == 200

    def test_mentor_ban(self, api, client):
        admin = api.admin()
        mentor = api.user("mentor")
        client.post("/api/mentorship/mentor", headers=mentor.headers, json={"expertise": ["CV"], "max_mentees": 1})

        response = client.post(f"/api/admin/users/{mentor.id}/mentor-ban", headers=admin.headers,
                               json={"reason": "Unprofessional"})
        assert response.json()["is_mentor_banned"] is True
        assert client.get(f"/api/mentorship/mentor/{mentor.id}").status_code == 404

        recreate = client.post("/api/mentorship/mentor", headers=mentor.headers,
                               json={"expertise": ["CV"], "max_mentees": 1})
        assert recreate.status_code == 403

        client.post(f"/api/admin/users/{mentor.id}/mentor-unban", headers=admin.headers)
        recreate = client.post("/api/mentorship/mentor", headers=mentor.headers,
                               json={"expertise": ["CV"], "max_mentees": 1})
        assert recreate.status_code == 201

    def test_list_users(self, api, client):
        admin = api.admin()
        api.user("alice")
        api.employer("acme")

        employers = client.get("/api/admin/users", headers=admin.headers, params={"role": "ROLE_EMPLOYER"}).json()
        assert [u["username"] for u in employers["content"]] == ["acme"]

    def test_delete_user(self, api, client):
        admin = api.admin()
        alice = api.user("alice")

        assert client.delete(f"/api/admin/users/{alice.id}", headers=admin.headers).status_code == 200
        assert api.login("alice").status_code == 401

    def test_admin_cannot_delete_self(self, api, client):
        admin = api.admin()

        response = client.delete(f"/api/admin/users/{admin.id}", headers=admin.headers)
        assert response.status_code == 400
