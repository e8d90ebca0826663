"""API tests for badges and notifications."""

from datetime import datetime, timedelta

import pytest

pytestmark = [pytest.mark.api]


def _badge_types(client, user):
    return [b["badge_type"] for b in client.get("/api/badges/my", headers=user.headers).json()]


class TestBadges:
    def test_first_forum_post_awards_first_voice(self, api, client):
        alice = api.user("alice")
        client.post("/api/forum/posts", headers=alice.headers, json={"title": "Hi", "content": "Hello"})

        assert _badge_types(client, alice) == ["FIRST_VOICE"]
        notifications = client.get("/api/notifications/me", headers=alice.headers).json()
        assert any(n["notification_type"] == "AWARDED_BADGE" for n in notifications)

    def test_badge_awarded_once(self, api, client):
        alice = api.user("alice")
        for title in ("One", "Two"):
            client.post("/api/forum/posts", headers=alice.headers, json={"title": title, "content": "x"})

        assert _badge_types(client, alice) == ["FIRST_VOICE"]

    def test_job_badges(self, api, client):
        employer = api.employer("acme")
        workplace = api.workplace(employer)
        job = api.job(employer, workplace["id"])
        seeker = api.user("alice")
        application = client.post("/api/applications", headers=seeker.headers,
                                  json={"job_post_id": job["id"]}).json()
        client.put(f"/api/applications/{application['id']}/approve", headers=employer.headers, json={})

        assert _badge_types(client, employer) == ["FIRST_LISTING"]
        assert set(_badge_types(client, seeker)) == {"FIRST_STEP", "HIRED"}

    def test_mentor_profile_awards_guide(self, api, client):
        mentor = api.user("mentor")
        client.post("/api/mentorship/mentor", headers=mentor.headers, json={
            "expertise": ["CV"], "max_mentees": 1,
        })

        badges = client.get(f"/api/badges/user/{mentor.id}").json()
        assert [b["name"] for b in badges] == ["Guide"]

    def test_unknown_user(self, client):
        response = client.get("/api/badges/user/999")

        assert response.status_code == 404
        assert response.json()["code"] == "USER_NOT_FOUND"

    def test_types_catalogue(self, client):
        types = {t["badge_type"]: t for t in client.get("/api/badges/types").json()}

        assert len(types) == 18
        assert types["HELPFUL"]["criteria"] == "COMMENT_UPVOTES"
        assert types["HELPFUL"]["threshold"] == 10


class TestNotifications:
    def test_mark_as_read(self, api, client):
        alice = api.user("alice")
        client.post("/api/forum/posts", headers=alice.headers, json={"title": "Hi", "content": "Hello"})
        notification = client.get("/api/notifications/me", headers=alice.headers).json()[0]

        response = client.post(f"/api/notifications/{notification['id']}/read", headers=alice.headers)
        assert response.status_code == 200
        assert response.json()["read"] is True

    def test_cannot_read_someone_elses(self, api, client):
        alice = api.user("alice")
        bob = api.user("bob")
        client.post("/api/forum/posts", headers=alice.headers, json={"title": "Hi", "content": "Hello"})
        notification = client.get("/api/notifications/me", headers=alice.headers).json()[0]

        response = client.post(f"/api/notifications/{notification['id']}/read", headers=bob.headers)
        assert response.status_code == 403

    def test_old_notifications_are_hidden(self, api, client, db_session):
        from app.models import Notification
        from app.models.enums import NotificationType

        alice = api.user("alice")
        db_session.add(Notification(
            user_id=alice.id,
            title="Ancient",
            notification_type=NotificationType.BROADCAST,
            message="Long ago",
            created_at=datetime.utcnow() - timedelta(days=30),
        ))
        db_session.commit()

        titles = [n["title"] for n in client.get("/api/notifications/me", headers=alice.headers).json()]
        assert "Ancient" not in titles

    def test_broadcast_is_admin_only(self, api, client):
        alice = api.user("alice")
        bob = api.user("bob")
        admin = api.admin()

        denied = client.post("/api/notifications/broadcast", headers=alice.headers,
                             json={"title": "Hello", "message": "Everyone"})
        assert denied.status_code == 403

        response = client.post("/api/notifications/broadcast", headers=admin.headers,
                               json={"title": "Maintenance", "message": "Tonight"})
        assert response.status_code == 200
        for user in (alice, bob):
            titles = [n["title"] for n in client.get("/api/notifications/me", headers=user.headers).json()]
            assert "Maintenance" in titles

    def test_notify_single_user(self, api, client):
        alice = api.user("alice")
        admin = api.admin()

        response = client.post("/api/notifications/user/alice", headers=admin.headers,
                               json={"title": "Hi", "message": "Just you"})
        assert response.status_code == 201
        assert response.json()["notification_type"] == "BROADCAST"

        missing = client.post("/api/notifications/user/ghost", headers=admin.headers,
                              json={"title": "Hi", "message": "Nobody"})
        assert missing.status_code == 404
