"""API tests for registration, login, OTP and password flows."""

from unittest.mock import patch

import pytest

from tests.conftest import PASSWORD

pytestmark = [pytest.mark.api]


class TestRegistration:
    def test_register_creates_unverified_user(self, api):
        response = api.register("alice")

        assert response.status_code == 201
        body = response.json()
        assert body["username"] == "alice"
        assert body["role"] == "ROLE_JOBSEEKER"
        assert body["email_verified"] is False

    def test_register_sends_verification_email(self, api):
        with patch("app.services.mail_service.send_verification_email") as mock_send:
            api.register("alice")

        mock_send.assert_called_once()
        to, username, token = mock_send.call_args.args
        assert to == "alice@example.com"
        assert username == "alice"
        assert token

    def test_admin_role_cannot_self_register(self, api):
        response = api.register("mallory", role="ROLE_ADMIN")

        assert response.status_code == 400
        assert response.json()["code"] == "ROLE_INVALID"

    def test_duplicate_username_conflicts(self, api):
        api.register("alice")
        response = api.register("alice", email="other@example.com")

        assert response.status_code == 409
        assert response.json()["code"] == "USER_ALREADY_EXISTS"

    def test_validation_error_body(self, client):
        response = client.post("/api/auth/register", json={"username": "al"})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_FAILED"
        assert body["path"] == "/api/auth/register"
        assert any(v["field"] == "username" for v in body["violations"])

    def test_malformed_json(self, client):
        response = client.post(
            "/api/auth/login", content="{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "MALFORMED_JSON"


class TestLogin:
    def test_unverified_user_cannot_login(self, api):
        api.register("alice")
        response = api.login("alice")

        assert response.status_code == 403
        assert response.json()["code"] == "EMAIL_NOT_VERIFIED"

    def test_verified_user_gets_token(self, api, client):
        user = api.user("alice")

        me = client.get("/api/auth/me", headers=user.headers)
        assert me.status_code == 200
        assert me.json()["email_verified"] is True

    def test_wrong_password(self, api):
        api.user("alice")
        response = api.login("alice", "wrong-password")

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_CREDENTIALS"

    def test_verification_token_is_single_use(self, api, client):
        api.register("alice")
        token = api.verification_token("alice")
        client.post("/api/auth/verify-email", json={"token": token})

        response = client.post("/api/auth/verify-email", json={"token": token})
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_TOKEN"

    def test_missing_token_is_unauthorized(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json()["code"] == "USER_UNAUTHORIZED"

    def test_garbage_token_is_unauthorized(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401


class TestOtpLogin:
    def test_login_returns_challenge_then_token(self, api, client):
        from app.services import auth_service

        api.user("alice")
        with patch.object(auth_service.settings, "otp_enabled", True), \
                patch("app.services.mail_service.send_otp_email") as mock_send:
            challenge = api.login("alice")
            assert challenge.status_code == 200
            assert challenge.json()["otp_required"] is True
            code = mock_send.call_args.args[2]

            response = client.post("/api/auth/login/verify", json={
                "temp_token": challenge.json()["temp_token"], "code": code,
            })

        assert response.status_code == 200
        assert response.json()["access_token"]

    def test_wrong_code_rejected(self, api, client):
        from app.services import auth_service

        api.user("alice")
        with patch.object(auth_service.settings, "otp_enabled", True), \
                patch("app.services.mail_service.send_otp_email") as mock_send:
            challenge = api.login("alice").json()
            code = mock_send.call_args.args[2]
            wrong = "000000" if code != "000000" else "111111"
            response = client.post("/api/auth/login/verify", json={
                "temp_token": challenge["temp_token"], "code": wrong,
            })

        assert response.status_code == 401
        assert response.json()["code"] == "AUTHENTICATION_FAILED"

    def test_preauth_token_is_not_an_access_token(self, api, client):
        from app.services import auth_service

        api.user("alice")
        with patch.object(auth_service.settings, "otp_enabled", True), \
                patch("app.services.mail_service.send_otp_email"):
            temp_token = api.login("alice").json()["temp_token"]

        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {temp_token}"})
        assert response.status_code == 401


class TestPasswords:
    def test_reset_flow(self, api, client):
        api.user("alice")
        with patch("app.services.mail_service.send_password_reset_email") as mock_send:
            response = client.post("/api/auth/password-reset", json={"email": "alice@example.com"})
        assert response.status_code == 200
        token = mock_send.call_args.args[2]

        confirm = client.post("/api/auth/password-reset/confirm", json={
            "token": token, "new_password": "NewPassw0rd!",
        })
        assert confirm.status_code == 200
        assert api.login("alice", "NewPassw0rd!").status_code == 200
        assert api.login("alice").status_code == 401

    def test_reset_for_unknown_email_still_succeeds(self, client):
        with patch("app.services.mail_service.send_password_reset_email") as mock_send:
            response = client.post("/api/auth/password-reset", json={"email": "ghost@example.com"})

        assert response.status_code == 200
        mock_send.assert_not_called()

    def test_change_password_checks_current(self, api, client):
        user = api.user("alice")
        response = client.post("/api/auth/password-change", headers=user.headers, json={
            "current_password": "not-it-at-all", "new_password": "NewPassw0rd!",
        })

        assert response.status_code == 401
        assert response.json()["code"] == "CURRENT_PASSWORD_INVALID"

    def test_change_password_must_differ(self, api, client):
        user = api.user("alice")
        response = client.post("/api/auth/password-change", headers=user.headers, json={
            "current_password": PASSWORD, "new_password": PASSWORD,
        })

        assert response.status_code == 400
        assert response.json()["code"] == "PASSWORD_SAME_AS_OLD"


class TestAccountDeletion:
    def test_delete_me_removes_user(self, api, client):
        user = api.user("alice")

        response = client.delete("/api/auth/me", headers=user.headers)
        assert response.status_code == 200
        assert api.login("alice").status_code == 401
