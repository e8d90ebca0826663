"""API tests for mentor profiles, mentorship requests, resume reviews and chat."""

import pytest

from tests.conftest import PDF_BYTES

pytestmark = [pytest.mark.api]


def _become_mentor(client, user, max_mentees=2):
    response = client.post("/api/mentorship/mentor", headers=user.headers, json={
        "expertise": ["CV review", "Interviews"], "max_mentees": max_mentees,
    })
    assert response.status_code == 201, response.text
    return response.json()


def _request(client, mentee, mentor_id):
    return client.post("/api/mentorship/requests", headers=mentee.headers, json={
        "mentor_id": mentor_id, "motivation": "Help me with my CV",
    })


@pytest.fixture
def accepted(api, client):
    """Mentor and mentee with an accepted mentorship."""
    mentor = api.user("mentor")
    mentee = api.user("mentee")
    _become_mentor(client, mentor)
    request = _request(client, mentee, mentor.id).json()
    answer = client.patch(f"/api/mentorship/requests/{request['id']}/respond", headers=mentor.headers,
                          json={"accept": True, "response_message": "Happy to help"})
    assert answer.status_code == 200, answer.text
    return mentor, mentee, answer.json()


class TestMentorProfiles:
    def test_create_and_list(self, api, client):
        mentor = api.user("mentor")
        profile = _become_mentor(client, mentor)

        assert profile["current_mentees"] == 0
        assert profile["average_rating"] == 0.0
        listed = client.get("/api/mentorship").json()
        assert [m["username"] for m in listed] == ["mentor"]

    def test_duplicate_profile_conflicts(self, api, client):
        mentor = api.user("mentor")
        _become_mentor(client, mentor)

        response = client.post("/api/mentorship/mentor", headers=mentor.headers, json={
            "expertise": ["x"], "max_mentees": 1,
        })
        assert response.status_code == 409
        assert response.json()["code"] == "MENTOR_PROFILE_ALREADY_EXISTS"

    def test_capacity_cannot_drop_below_current(self, accepted, client):
        mentor, _, _ = accepted

        response = client.put(f"/api/mentorship/mentor/{mentor.id}", headers=mentor.headers, json={
            "expertise": ["CV review"], "max_mentees": 0,
        })
        # max_mentees has a lower bound of 1 in the request body
        assert response.status_code == 400

        lowered = client.put(f"/api/mentorship/mentor/{mentor.id}", headers=mentor.headers, json={
            "expertise": ["CV review"], "max_mentees": 1,
        })
        assert lowered.status_code == 200

    def test_delete_blocked_by_active_mentorship(self, accepted, client):
        mentor, _, _ = accepted

        response = client.delete(f"/api/mentorship/mentor/{mentor.id}", headers=mentor.headers)
        assert response.status_code == 400
        assert response.json()["code"] == "ACTIVE_MENTORSHIP_EXIST"

    def test_only_self_can_update(self, api, client):
        mentor = api.user("mentor")
        other = api.user("other")
        _become_mentor(client, mentor)

        response = client.put(f"/api/mentorship/mentor/{mentor.id}", headers=other.headers, json={
            "expertise": ["x"], "max_mentees": 3,
        })
        assert response.status_code == 403


class TestMentorshipRequests:
    def test_request_notifies_mentor(self, api, client):
        mentor = api.user("mentor")
        mentee = api.user("mentee")
        _become_mentor(client, mentor)

        response = _request(client, mentee, mentor.id)
        assert response.status_code == 201
        assert response.json()["status"] == "PENDING"

        notifications = client.get("/api/notifications/me", headers=mentor.headers).json()
        assert any(n["notification_type"] == "MENTORSHIP_REQUEST" for n in notifications)

    def test_cannot_request_self(self, api, client):
        mentor = api.user("mentor")
        _become_mentor(client, mentor)

        assert _request(client, mentor, mentor.id).status_code == 400

    def test_duplicate_pending_request_rejected(self, api, client):
        mentor = api.user("mentor")
        mentee = api.user("mentee")
        _become_mentor(client, mentor)
        _request(client, mentee, mentor.id)

        assert _request(client, mentee, mentor.id).status_code == 400

    def test_full_mentor_is_unavailable(self, api, client):
        mentor = api.user("mentor")
        first = api.user("first")
        second = api.user("second")
        _become_mentor(client, mentor, max_mentees=1)
        request = _request(client, first, mentor.id).json()
        client.patch(f"/api/mentorship/requests/{request['id']}/respond", headers=mentor.headers,
                     json={"accept": True})

        response = _request(client, second, mentor.id)
        assert response.status_code == 400
        assert response.json()["code"] == "MENTOR_UNAVAILABLE"

    def test_accept_creates_review_and_conversation(self, accepted, client):
        mentor, _, answered = accepted

        assert answered["status"] == "ACCEPTED"
        assert answered["review_status"] == "ACTIVE"
        assert answered["conversation_id"] is not None
        profile = client.get(f"/api/mentorship/mentor/{mentor.id}").json()
        assert profile["current_mentees"] == 1

    def test_respond_twice_rejected(self, accepted, client):
        mentor, _, answered = accepted

        response = client.patch(f"/api/mentorship/requests/{answered['id']}/respond", headers=mentor.headers,
                                json={"accept": False})
        assert response.status_code == 400
        assert response.json()["code"] == "REQUEST_ALREADY_PROCESSED"

    def test_decline(self, api, client):
        mentor = api.user("mentor")
        mentee = api.user("mentee")
        _become_mentor(client, mentor)
        request = _request(client, mentee, mentor.id).json()

        response = client.patch(f"/api/mentorship/requests/{request['id']}/respond", headers=mentor.headers,
                                json={"accept": False, "response_message": "Too busy"})
        assert response.json()["status"] == "REJECTED"
        assert response.json()["resume_review_id"] is None

    def test_cancel_by_requester(self, api, client):
        mentor = api.user("mentor")
        mentee = api.user("mentee")
        _become_mentor(client, mentor)
        request = _request(client, mentee, mentor.id).json()

        assert client.patch(f"/api/mentorship/requests/{request['id']}/cancel",
                            headers=mentor.headers).status_code == 403
        response = client.patch(f"/api/mentorship/requests/{request['id']}/cancel", headers=mentee.headers)
        assert response.json()["status"] == "CANCELLED"

    def test_request_listings_are_private(self, accepted, api, client):
        mentor, mentee, _ = accepted
        other = api.user("other")

        assert len(client.get(f"/api/mentorship/mentor/{mentor.id}/requests", headers=mentor.headers).json()) == 1
        assert len(client.get(f"/api/mentorship/mentee/{mentee.id}/requests", headers=mentee.headers).json()) == 1
        assert client.get(f"/api/mentorship/mentee/{mentee.id}/requests", headers=other.headers).status_code == 403


class TestResumeReview:
    def test_upload_resume(self, accepted, api, client):
        mentor, mentee, answered = accepted
        review_id = answered["resume_review_id"]

        missing = client.get(f"/api/mentorship/{review_id}/file", headers=mentor.headers)
        assert missing.status_code == 404
        assert missing.json()["code"] == "RESUME_FILE_NOT_FOUND"

        uploaded = client.post(f"/api/mentorship/{review_id}/file", headers=mentee.headers,
                               files={"file": ("cv.pdf", PDF_BYTES, "application/pdf")})
        assert uploaded.status_code == 200
        assert uploaded.json()["resume_url"].startswith("/uploads/resumes/")

        seen = client.get(f"/api/mentorship/{review_id}/file", headers=mentor.headers)
        assert seen.json()["resume_url"] == uploaded.json()["resume_url"]

    def test_outsider_cannot_see_review(self, accepted, api, client):
        _, _, answered = accepted
        other = api.user("other")

        response = client.get(f"/api/mentorship/{answered['resume_review_id']}", headers=other.headers)
        assert response.status_code == 403
        assert response.json()["code"] == "UNAUTHORIZED_REVIEW_ACCESS"

    def test_complete_then_rate(self, accepted, client):
        mentor, mentee, answered = accepted
        review_id = answered["resume_review_id"]

        early = client.post("/api/mentorship/ratings", headers=mentee.headers,
                            json={"resume_review_id": review_id, "rating": 5})
        assert early.status_code == 400

        completed = client.patch(f"/api/mentorship/review/{review_id}/complete", headers=mentee.headers)
        assert completed.status_code == 200
        assert completed.json()["status"] == "COMPLETED"

        rated = client.post("/api/mentorship/ratings", headers=mentee.headers,
                            json={"resume_review_id": review_id, "rating": 4, "comment": "Great"})
        assert rated.status_code == 201
        assert rated.json()["average_rating"] == 4.0
        assert rated.json()["review_count"] == 1
        assert rated.json()["current_mentees"] == 0

        again = client.post("/api/mentorship/ratings", headers=mentee.headers,
                            json={"resume_review_id": review_id, "rating": 1})
        assert again.status_code == 409

    def test_mentor_cannot_rate_themselves(self, accepted, client):
        mentor, mentee, answered = accepted
        review_id = answered["resume_review_id"]
        client.patch(f"/api/mentorship/review/{review_id}/complete", headers=mentor.headers)

        response = client.post("/api/mentorship/ratings", headers=mentor.headers,
                               json={"resume_review_id": review_id, "rating": 5})
        assert response.status_code == 403

    def test_finish_twice_rejected(self, accepted, client):
        mentor, _, answered = accepted
        review_id = answered["resume_review_id"]
        client.patch(f"/api/mentorship/review/{review_id}/close", headers=mentor.headers)

        response = client.patch(f"/api/mentorship/review/{review_id}/complete", headers=mentor.headers)
        assert response.status_code == 400
        assert response.json()["code"] == "MENTORSHIP_NOT_ACTIVE"


class TestMentorCapacity:
    def _current_mentees(self, client, mentor):
        return client.get(f"/api/mentorship/mentor/{mentor.id}").json()["current_mentees"]

    def test_close_frees_slot(self, accepted, client):
        mentor, _, answered = accepted
        assert self._current_mentees(client, mentor) == 1

        closed = client.patch(f"/api/mentorship/review/{answered['resume_review_id']}/close", headers=mentor.headers)
        assert closed.json()["status"] == "CLOSED"
        assert self._current_mentees(client, mentor) == 0

    def test_count_never_drops_below_zero(self, accepted, client, db_session):
        from app.models import MentorProfile

        mentor, mentee, answered = accepted
        db_session.get(MentorProfile, mentor.id).current_mentees = 0
        db_session.commit()

        response = client.patch(f"/api/mentorship/review/{answered['resume_review_id']}/complete",
                                headers=mentee.headers)
        assert response.status_code == 200
        assert self._current_mentees(client, mentor) == 0

    def test_deleting_mentee_frees_slot(self, accepted, client):
        mentor, mentee, _ = accepted

        assert client.delete("/api/auth/me", headers=mentee.headers).status_code == 200
        assert self._current_mentees(client, mentor) == 0


class TestChat:
    def test_exchange_messages(self, accepted, client):
        mentor, mentee, answered = accepted
        conversation_id = answered["conversation_id"]

        sent = client.post(f"/api/chat/{conversation_id}/messages", headers=mentee.headers,
                           json={"content": "Hi, here is my CV"})
        assert sent.status_code == 201
        client.post(f"/api/chat/{conversation_id}/messages", headers=mentor.headers, json={"content": "Thanks!"})

        history = client.get(f"/api/chat/history/{conversation_id}", headers=mentor.headers).json()
        assert [(m["sender_username"], m["content"]) for m in history] == [
            ("mentee", "Hi, here is my CV"),
            ("mentor", "Thanks!"),
        ]
        notifications = client.get("/api/notifications/me", headers=mentor.headers).json()
        assert any(n["notification_type"] == "NEW_MESSAGE" for n in notifications)

    def test_outsider_is_denied(self, accepted, api, client):
        _, _, answered = accepted
        other = api.user("other")

        response = client.get(f"/api/chat/history/{answered['conversation_id']}", headers=other.headers)
        assert response.status_code == 403

    def test_closed_conversation_is_read_only(self, accepted, client):
        mentor, mentee, answered = accepted
        conversation_id = answered["conversation_id"]
        client.patch(f"/api/mentorship/review/{answered['resume_review_id']}/close", headers=mentor.headers)

        response = client.post(f"/api/chat/{conversation_id}/messages", headers=mentee.headers,
                               json={"content": "Still there?"})
        assert response.status_code == 400
        assert response.json()["code"] == "MENTORSHIP_NOT_ACTIVE"

        history = client.get(f"/api/chat/history/{conversation_id}", headers=mentee.headers).json()
        assert history[-1]["sender_username"] == "System"
        assert history[-1]["sender_id"] is None

    def test_unknown_conversation(self, api, client):
        user = api.user("alice")

        response = client.get("/api/chat/history/999", headers=user.headers)
        assert response.status_code == 404
        assert response.json()["code"] == "CONVERSATION_NOT_FOUND"
