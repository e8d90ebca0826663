"""API tests for the public dashboard counters and health check."""

import pytest

pytestmark = [pytest.mark.api]


class TestDashboard:
    def test_empty_platform(self, client):
        response = client.get("/api/dashboard/stats")

        assert response.status_code == 200
        assert all(value == 0 for value in response.json().values())

    def test_counts_activity(self, api, client):
        employer = api.employer("acme")
        workplace = api.workplace(employer)
        api.job(employer, workplace["id"])
        api.job(employer, workplace["id"], title="Office Manager", remote=False, inclusive_opportunity=True)
        seeker = api.user("alice")
        job_id = client.get("/api/jobs").json()[0]["id"]
        client.post("/api/applications", headers=seeker.headers, json={"job_post_id": job_id})
        client.post("/api/forum/posts", headers=seeker.headers, json={"title": "Hi", "content": "Hello"})

        stats = client.get("/api/dashboard/stats").json()
        assert stats["total_users"] == 2
        assert stats["total_employers"] == 1
        assert stats["total_job_seekers"] == 1
        assert stats["total_job_posts"] == 2
        assert stats["remote_job_posts"] == 1
        assert stats["inclusive_job_posts"] == 1
        assert stats["new_job_posts_this_week"] == 2
        assert stats["pending_applications"] == 1
        assert stats["total_forum_posts"] == 1
        assert stats["new_forum_posts_this_week"] == 1


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
