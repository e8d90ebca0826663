"""API tests for job posts and job applications."""

import pytest

from tests.conftest import PDF_BYTES

pytestmark = [pytest.mark.api]


@pytest.fixture
def posted(api):
    """An employer with a workplace and one job post."""
    employer = api.employer("acme")
    workplace = api.workplace(employer)
    job = api.job(employer, workplace["id"])
    return employer, workplace, job


class TestJobPosts:
    def test_create_job(self, posted):
        employer, workplace, job = posted

        assert job["employer_id"] == employer.id
        assert job["company_name"] == "Acme Ethics"
        assert job["ethical_tags"] == ["fair pay"]

    def test_job_seeker_cannot_post(self, api, client, posted):
        _, workplace, _ = posted
        seeker = api.user("alice")

        response = client.post("/api/jobs", headers=seeker.headers, json={
            "workplace_id": workplace["id"], "title": "Sneaky", "description": "x",
        })
        assert response.status_code == 403

    def test_employer_must_belong_to_workplace(self, api, client, posted):
        _, workplace, _ = posted
        outsider = api.employer("other")

        response = client.post("/api/jobs", headers=outsider.headers, json={
            "workplace_id": workplace["id"], "title": "Sneaky", "description": "x",
        })
        assert response.status_code == 403
        assert response.json()["code"] == "WORKPLACE_UNAUTHORIZED"

    def test_salary_range_validated(self, api, client, posted):
        employer, workplace, _ = posted

        response = client.post("/api/jobs", headers=employer.headers, json={
            "workplace_id": workplace["id"], "title": "Upside down", "description": "x",
            "min_salary": 90000, "max_salary": 10000,
        })
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_FAILED"

    def test_filters(self, api, client, posted):
        employer, workplace, _ = posted
        api.job(employer, workplace["id"], title="Office Manager", remote=False,
                ethical_tags=["inclusive"], min_salary=30000, max_salary=40000)

        remote = client.get("/api/jobs", params={"is_remote": True}).json()
        assert [j["title"] for j in remote] == ["Backend Engineer"]

        by_tag = client.get("/api/jobs", params={"ethical_tags": ["INCLUSIVE"]}).json()
        assert [j["title"] for j in by_tag] == ["Office Manager"]

        by_salary = client.get("/api/jobs", params={"min_salary": 45000}).json()
        assert [j["title"] for j in by_salary] == ["Backend Engineer"]

        by_company = client.get("/api/jobs", params={"company_name": "acme"}).json()
        assert len(by_company) == 2

    def test_update_only_by_owner(self, api, client, posted):
        employer, _, job = posted
        other = api.employer("other")

        denied = client.put(f"/api/jobs/{job['id']}", headers=other.headers, json={"title": "Mine now"})
        assert denied.status_code == 403

        response = client.put(f"/api/jobs/{job['id']}", headers=employer.headers, json={"title": "Senior Engineer"})
        assert response.status_code == 200
        assert response.json()["title"] == "Senior Engineer"

    def test_update_rejects_null_required_field(self, client, posted):
        employer, _, job = posted

        response = client.put(f"/api/jobs/{job['id']}", headers=employer.headers, json={"title": None})
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert client.get(f"/api/jobs/{job['id']}").json()["title"] == job["title"]

        cleared = client.put(f"/api/jobs/{job['id']}", headers=employer.headers, json={"contact": None})
        assert cleared.status_code == 200

    def test_delete_job(self, client, posted):
        employer, _, job = posted

        assert client.delete(f"/api/jobs/{job['id']}", headers=employer.headers).status_code == 200
        response = client.get(f"/api/jobs/{job['id']}")
        assert response.status_code == 404
        assert response.json()["code"] == "JOB_POST_NOT_FOUND"

    def test_jobs_by_employer_and_workplace(self, client, posted):
        employer, workplace, job = posted

        assert [j["id"] for j in client.get(f"/api/jobs/employer/{employer.id}").json()] == [job["id"]]
        assert [j["id"] for j in client.get(f"/api/jobs/workplace/{workplace['id']}").json()] == [job["id"]]


class TestApplications:
    def _apply(self, client, seeker, job_id):
        return client.post("/api/applications", headers=seeker.headers, json={
            "job_post_id": job_id, "cover_letter": "Hire me",
        })

    def test_apply_notifies_employer(self, api, client, posted):
        employer, _, job = posted
        seeker = api.user("alice")

        response = self._apply(client, seeker, job["id"])
        assert response.status_code == 201
        assert response.json()["status"] == "PENDING"
        assert response.json()["applicant_name"] == "alice"

        notifications = client.get("/api/notifications/me", headers=employer.headers).json()
        assert any(n["notification_type"] == "JOB_APPLICATION_REQUEST" for n in notifications)

    def test_duplicate_application_conflicts(self, api, client, posted):
        _, _, job = posted
        seeker = api.user("alice")
        self._apply(client, seeker, job["id"])

        response = self._apply(client, seeker, job["id"])
        assert response.status_code == 409
        assert response.json()["code"] == "APPLICATION_ALREADY_EXISTS"

    def test_employer_cannot_apply(self, api, client, posted):
        _, _, job = posted
        other = api.employer("other")

        assert self._apply(client, other, job["id"]).status_code == 403

    def test_list_requires_filter(self, api, client):
        seeker = api.user("alice")

        response = client.get("/api/applications", headers=seeker.headers)
        assert response.status_code == 400
        assert response.json()["code"] == "MISSING_FILTER_PARAMETER"

    def test_approve_with_feedback(self, api, client, posted):
        employer, _, job = posted
        seeker = api.user("alice")
        application = self._apply(client, seeker, job["id"]).json()

        response = client.put(f"/api/applications/{application['id']}/approve",
                              headers=employer.headers, json={"feedback": "Welcome aboard"})
        assert response.status_code == 200
        assert response.json()["status"] == "APPROVED"
        assert response.json()["feedback"] == "Welcome aboard"

        notifications = client.get("/api/notifications/me", headers=seeker.headers).json()
        assert any(n["notification_type"] == "JOB_APPLICATION_APPROVED" for n in notifications)

    def test_reject_by_other_employer_denied(self, api, client, posted):
        _, _, job = posted
        seeker = api.user("alice")
        other = api.employer("other")
        application = self._apply(client, seeker, job["id"]).json()

        response = client.put(f"/api/applications/{application['id']}/reject", headers=other.headers, json={})
        assert response.status_code == 403

    def test_listings_are_scoped(self, api, client, posted):
        employer, workplace, job = posted
        alice = api.user("alice")
        bob = api.user("bob")
        self._apply(client, alice, job["id"])
        self._apply(client, bob, job["id"])

        mine = client.get(f"/api/applications/job-seeker/{alice.id}", headers=alice.headers).json()
        assert [a["applicant_name"] for a in mine] == ["alice"]
        assert client.get(f"/api/applications/job-seeker/{alice.id}", headers=bob.headers).status_code == 403

        for_job = client.get(f"/api/applications/job-post/{job['id']}", headers=employer.headers).json()
        assert len(for_job) == 2
        for_workplace = client.get(f"/api/applications/workplace/{workplace['id']}", headers=employer.headers).json()
        assert len(for_workplace) == 2

        filtered = client.get("/api/applications", headers=bob.headers, params={"job_post_id": job["id"]}).json()
        assert [a["applicant_name"] for a in filtered] == ["bob"]

    def test_withdraw(self, api, client, posted):
        _, _, job = posted
        seeker = api.user("alice")
        application = self._apply(client, seeker, job["id"]).json()

        assert client.delete(f"/api/applications/{application['id']}", headers=seeker.headers).status_code == 200
        assert client.get(f"/api/applications/{application['id']}", headers=seeker.headers).status_code == 404


class TestApplicationCv:
    def test_upload_get_delete_cv(self, api, client, posted):
        employer, _, job = posted
        seeker = api.user("alice")
        application = client.post("/api/applications", headers=seeker.headers,
                                   json={"job_post_id": job["id"]}).json()

        uploaded = client.post(f"/api/applications/{application['id']}/cv", headers=seeker.headers,
                               files={"file": ("cv.pdf", PDF_BYTES, "application/pdf")})
        assert uploaded.status_code == 200
        assert uploaded.json()["cv_url"].startswith("/uploads/cv/")

        seen = client.get(f"/api/applications/{application['id']}/cv", headers=employer.headers)
        assert seen.json()["cv_url"] == uploaded.json()["cv_url"]

        assert client.delete(f"/api/applications/{application['id']}/cv", headers=seeker.headers).status_code == 200
        missing = client.get(f"/api/applications/{application['id']}/cv", headers=seeker.headers)
        assert missing.status_code == 404
        assert missing.json()["code"] == "RESUME_FILE_NOT_FOUND"

    def test_cv_must_be_pdf(self, api, client, posted):
        _, _, job = posted
        seeker = api.user("alice")
        application = client.post("/api/applications", headers=seeker.headers,
                                   json={"job_post_id": job["id"]}).json()

        response = client.post(f"/api/applications/{application['id']}/cv", headers=seeker.headers,
                               files={"file": ("cv.docx", b"PK\x03\x04", "application/octet-stream")})
        assert response.status_code == 400
        assert response.json()["code"] == "RESUME_FILE_CONTENT_TYPE_INVALID"
