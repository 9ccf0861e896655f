# tests/v1/test_auth.py
"""Tests for admin login, session and settings endpoints."""

from __future__ import annotations

from fastapi import status

from gatecha.services.credentials import CredentialManager
from gatecha.services.settings_store import SettingsStore
from gatecha.utils.pow_client import solve_to_payload
from tests.conftest import ADMIN_PASSWORD, ADMIN_USERNAME


def _login(client, **extra):
    body = {"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD, **extra}
    return client.post("/api/admin/login", json=body)


def _login_challenge_payload(client) -> str:
    config = client.get("/api/public/login-config").json()
    challenge = client.get(config["challenge_url"]).json()
    return solve_to_payload(challenge)


class TestLogin:
    def test_login_returns_usable_session(self, client, admin_user) -> None:
        response = _login(client)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["token"]
        assert data["expires_at"]

        me = client.get(
            "/api/admin/me", headers={"Authorization": f"Bearer {data['token']}"}
        )
        assert me.status_code == status.HTTP_200_OK
        assert me.json() == {"username": ADMIN_USERNAME}

    def test_wrong_password_is_rejected(self, client, admin_user) -> None:
        response = client.post(
            "/api/admin/login", json={"username": ADMIN_USERNAME, "password": "nope"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"error": "invalid credentials"}

    def test_unknown_user_is_rejected(self, client, admin_user) -> None:
        response = client.post(
            "/api/admin/login", json={"username": "mallory", "password": ADMIN_PASSWORD}
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestLoginChallenge:
    def test_login_requires_challenge_when_enabled(self, client, db_session, admin_user) -> None:
        SettingsStore(db_session).set_login_captcha_enabled(True)

        response = _login(client)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"error": "captcha required"}

    def test_bad_credentials_are_checked_before_challenge(
        self, client, db_session, admin_user
    ) -> None:
        SettingsStore(db_session).set_login_captcha_enabled(True)

        response = client.post(
            "/api/admin/login", json={"username": ADMIN_USERNAME, "password": "nope"}
        )

        assert response.json() == {"error": "invalid credentials"}

    def test_invalid_challenge_is_rejected(self, client, db_session, admin_user) -> None:
        SettingsStore(db_session).set_login_captcha_enabled(True)

        response = _login(client, captcha_payload="garbage")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"error": "invalid captcha"}

    def test_solved_challenge_is_single_use(self, client, db_session, admin_user) -> None:
        SettingsStore(db_session).set_login_captcha_enabled(True)
        payload = _login_challenge_payload(client)

        first = _login(client, captcha_payload=payload)
        second = _login(client, captcha_payload=payload)

        assert first.status_code == status.HTTP_200_OK
        assert second.status_code == status.HTTP_401_UNAUTHORIZED
        assert second.json() == {"error": "invalid captcha"}

    def test_camel_case_payload_field_is_accepted(self, client, db_session, admin_user) -> None:
        SettingsStore(db_session).set_login_captcha_enabled(True)
        payload = _login_challenge_payload(client)

        assert _login(client, captchaPayload=payload).status_code == status.HTTP_200_OK


class TestSessionEndpoints:
    def test_me_requires_session(self, client) -> None:
        response = client.get("/api/admin/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"error": "missing authorization"}

    def test_change_password(self, client, db_session, admin_headers) -> None:
        response = client.post(
            "/api/admin/change-password",
            json={"current_password": ADMIN_PASSWORD, "new_password": "new secret"},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": "password changed"}
        manager = CredentialManager(db_session)
        assert manager.validate(ADMIN_USERNAME, "new secret")
        assert not manager.validate(ADMIN_USERNAME, ADMIN_PASSWORD)

    def test_change_password_checks_current(self, client, admin_headers) -> None:
        response = client.post(
            "/api/admin/change-password",
            json={"current_password": "wrong", "new_password": "new secret"},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"error": "invalid current password"}

    def test_change_password_rejects_empty(self, client, admin_headers) -> None:
        response = client.post(
            "/api/admin/change-password",
            json={"current_password": ADMIN_PASSWORD, "new_password": ""},
            headers=admin_headers,
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestSettingsEndpoints:
    def test_settings_default_disabled(self, client, admin_headers) -> None:
        response = client.get("/api/admin/settings", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"login_captcha_enabled": False}

    def test_enabling_creates_login_key(self, client, db_session, admin_headers) -> None:
        response = client.put(
            "/api/admin/settings", json={"login_captcha_enabled": True}, headers=admin_headers
        )

        assert response.json() == {"login_captcha_enabled": True}
        keys = client.get("/api/admin/keys", headers=admin_headers).json()["keys"]
        assert [key["name"] for key in keys] == ["Login CAPTCHA"]

        disabled = client.put(
            "/api/admin/settings", json={"login_captcha_enabled": False}, headers=admin_headers
        )
        assert disabled.json() == {"login_captcha_enabled": False}

    def test_settings_require_session(self, client) -> None:
        response = client.put("/api/admin/settings", json={"login_captcha_enabled": True})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
