"""API tests for profiles and their child lists."""

import pytest

from tests.conftest import PNG_BYTES

pytestmark = [pytest.mark.api]


class TestProfile:
    def test_registration_creates_profile(self, api, client):
        user = api.user("alice")

        response = client.get("/api/profile", headers=user.headers)
        assert response.status_code == 200
        body = response.json()
        assert body["first_name"] == "Alice"
        assert body["username"] == "alice"

    def test_second_profile_conflicts(self, api, client):
        user = api.user("alice")

        response = client.post("/api/profile", headers=user.headers, json={
            "first_name": "A", "last_name": "B",
        })
        assert response.status_code == 409
        assert response.json()["code"] == "PROFILE_ALREADY_EXISTS"

    def test_update_requires_a_change(self, api, client):
        user = api.user("alice")

        response = client.put("/api/profile", headers=user.headers, json={})
        assert response.status_code == 400
        assert response.json()["message"] == "No changes provided"

    def test_update_bio(self, api, client):
        user = api.user("alice")

        response = client.put("/api/profile", headers=user.headers, json={"bio": "Hello"})
        assert response.status_code == 200
        assert response.json()["bio"] == "Hello"

    def test_public_profile(self, api, client):
        user = api.user("alice")

        response = client.get(f"/api/profile/{user.id}")
        assert response.status_code == 200
        assert response.json()["user_id"] == user.id

    def test_unknown_public_profile(self, client):
        response = client.get("/api/profile/999")

        assert response.status_code == 404
        assert response.json()["code"] == "PROFILE_NOT_FOUND"


class TestProfileChildren:
    def test_education_crud(self, api, client):
        user = api.user("alice")

        created = client.post("/api/profile/education", headers=user.headers, json={
            "school": "TU Berlin", "degree": "BSc", "field": "CS", "start_date": "2018-10-01",
        })
        assert created.status_code == 201
        education_id = created.json()["id"]

        updated = client.put(f"/api/profile/education/{education_id}", headers=user.headers,
                             json={"end_date": "2021-09-30"})
        assert updated.status_code == 200
        assert updated.json()["end_date"] == "2021-09-30"

        assert client.delete(f"/api/profile/education/{education_id}", headers=user.headers).status_code == 200
        profile = client.get("/api/profile", headers=user.headers).json()
        assert profile["educations"] == []

    def test_education_end_before_start_rejected(self, api, client):
        user = api.user("alice")
        created = client.post("/api/profile/education", headers=user.headers, json={
            "school": "TU Berlin", "degree": "BSc", "field": "CS", "start_date": "2018-10-01",
        }).json()

        response = client.put(f"/api/profile/education/{created['id']}", headers=user.headers,
                              json={"end_date": "2017-01-01"})
        assert response.status_code == 400

    def test_other_users_child_is_not_found(self, api, client):
        alice = api.user("alice")
        bob = api.user("bob")
        skill = client.post("/api/profile/skill", headers=alice.headers, json={"name": "Python"}).json()

        response = client.delete(f"/api/profile/skill/{skill['id']}", headers=bob.headers)
        assert response.status_code == 404
        assert response.json()["code"] == "SKILL_NOT_FOUND"

    def test_interest_and_experience(self, api, client):
        user = api.user("alice")
        client.post("/api/profile/interest", headers=user.headers, json={"name": "Climate"})
        client.post("/api/profile/experience", headers=user.headers, json={
            "company": "Acme", "position": "Dev", "start_date": "2020-01-01",
        })

        profile = client.get("/api/profile", headers=user.headers).json()
        assert [i["name"] for i in profile["interests"]] == ["Climate"]
        assert profile["experiences"][0]["company"] == "Acme"


class TestProfileImage:
    def test_upload_and_delete_image(self, api, client):
        user = api.user("alice")

        response = client.post("/api/profile/image", headers=user.headers,
                               files={"file": ("me.png", PNG_BYTES, "image/png")})
        assert response.status_code == 200
        url = response.json()["image_url"]
        assert url.startswith("/uploads/profiles/")
        assert client.get(url).status_code == 200

        assert client.delete("/api/profile/image", headers=user.headers).status_code == 200
        assert client.get("/api/profile", headers=user.headers).json()["image_url"] is None

    def test_rejects_non_image(self, api, client):
        user = api.user("alice")

        response = client.post("/api/profile/image", headers=user.headers,
                               files={"file": ("notes.txt", b"hello", "text/plain")})
        assert response.status_code == 400
        assert response.json()["code"] == "IMAGE_CONTENT_TYPE_INVALID"
