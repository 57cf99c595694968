"""Tests for admin authentication: credential check, tokens and the login route."""
from __future__ import annotations

import base64
import json
import time

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from core.auth import (
    check_admin_credentials,
    create_access_token,
    create_admin_token,
    decode_access_token,
)
from core.config import DEFAULT_JWT_SECRET

ADMIN_EMAIL = "admin@nuevatienda.com"
ADMIN_PASSWORD = "password"
LOGIN_URL = "/api/auth/admin-login"


def _claims(token: str) -> dict:
    payload = token.split(".")[1]
    payload += "=" * (-len(payload) % 4)
    return json.loads(base64.urlsafe_b64decode(payload))


# ---------------------------------------------------------------------------
# Unit Tests: Credentials
# ---------------------------------------------------------------------------

class TestAdminCredentials:
    def test_exact_match(self, settings):
        assert check_admin_credentials(settings, ADMIN_EMAIL, ADMIN_PASSWORD)

    def test_email_is_case_sensitive(self, settings):
        assert not check_admin_credentials(settings, ADMIN_EMAIL.upper(), ADMIN_PASSWORD)

    def test_password_is_case_sensitive(self, settings):
        assert not check_admin_credentials(settings, ADMIN_EMAIL, "Password")

    def test_configured_credentials_override_defaults(self, make_settings):
        settings = make_settings(ADMIN_EMAIL="dueña@salon.co", ADMIN_PASSWORD="otra-clave")
        assert check_admin_credentials(settings, "dueña@salon.co", "otra-clave")
        assert not check_admin_credentials(settings, ADMIN_EMAIL, ADMIN_PASSWORD)

    def test_lone_surrogate_is_a_mismatch(self, settings):
        assert not check_admin_credentials(settings, "\ud800", "x")
        assert not check_admin_credentials(settings, ADMIN_EMAIL, "pass\udfffword")


# ---------------------------------------------------------------------------
# Unit Tests: JWT Tokens
# ---------------------------------------------------------------------------

class TestTokens:
    def test_admin_token_claims(self, settings):
        token = create_admin_token(settings, ADMIN_EMAIL)
        payload = decode_access_token(settings, token)
        assert payload is not None
        assert payload["id"] == 1
        assert payload["email"] == ADMIN_EMAIL
        assert payload["rol"] == "admin"

    def test_expiry_is_24_hours_after_issuance(self, settings):
        before = int(time.time())
        payload = decode_access_token(settings, create_admin_token(settings, ADMIN_EMAIL))
        after = int(time.time())
        assert before <= payload["iat"] <= after
        assert payload["exp"] - payload["iat"] == 24 * 3600

    def test_header_is_hs256(self, settings):
        token = create_admin_token(settings, ADMIN_EMAIL)
        header = token.split(".")[0]
        header += "=" * (-len(header) % 4)
        assert json.loads(base64.urlsafe_b64decode(header)) == {"alg": "HS256", "typ": "JWT"}

    def test_expired_token_rejected(self, settings):
        token = create_access_token(settings, 1, ADMIN_EMAIL, "admin", now=int(time.time()) - 25 * 3600)
        assert decode_access_token(settings, token) is None

    def test_token_signed_with_other_secret_rejected(self, settings, make_settings):
        other = make_settings(JWT_SECRET="another-secret")
        token = create_admin_token(other, ADMIN_EMAIL)
        assert decode_access_token(settings, token) is None

    def test_tampered_payload_rejected(self, settings):
        token = create_admin_token(settings, ADMIN_EMAIL)
        header, _, signature = token.split(".")
        forged = base64.urlsafe_b64encode(
            json.dumps({"id": 2, "email": "x@y.z", "rol": "admin", "exp": time.time() + 60}).encode()
        ).rstrip(b"=").decode()
        assert decode_access_token(settings, f"{header}.{forged}.{signature}") is None

    @pytest.mark.parametrize("token", ["", "garbage", "garbage.token.here", "a.b"])
    def test_malformed_tokens_return_none(self, settings, token):
        assert decode_access_token(settings, token) is None

    def test_fallback_secret_when_unset(self, make_settings):
        settings = make_settings(JWT_SECRET=None)
        assert settings.is_default_jwt_secret()
        assert settings.get_jwt_secret() == DEFAULT_JWT_SECRET
        token = create_admin_token(settings, ADMIN_EMAIL)
        assert decode_access_token(settings, token)["rol"] == "admin"


# ---------------------------------------------------------------------------
# Integration Tests: /api/auth/admin-login
# ---------------------------------------------------------------------------

class TestAdminLogin:
    def test_login_success(self, client):
        resp = client.post(LOGIN_URL, json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["mensaje"] == "Login exitoso"
        assert isinstance(data["token"], str) and data["token"]
        assert data["usuario"] == {
            "id": 1,
            "email": ADMIN_EMAIL,
            "nombre": "Administrador",
            "rol": "admin",
        }

    def test_issued_token_claims(self, client):
        resp = client.post(LOGIN_URL, json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
        claims = _claims(resp.json()["token"])
        assert claims["id"] == 1
        assert claims["email"] == ADMIN_EMAIL
        assert claims["rol"] == "admin"
        assert claims["exp"] - claims["iat"] == 86400
        assert abs(claims["iat"] - time.time()) < 60

    def test_login_with_form_body(self, client):
        resp = client.post(LOGIN_URL, data={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
        assert resp.status_code == 200
        assert resp.json()["success"] is True

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"email": ADMIN_EMAIL},
            {"password": ADMIN_PASSWORD},
            {"email": "", "password": ADMIN_PASSWORD},
            {"email": ADMIN_EMAIL, "password": ""},
            {"email": ADMIN_EMAIL, "password": None},
        ],
    )
    def test_missing_fields(self, client, body):
        resp = client.post(LOGIN_URL, json=body)
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "mensaje": "Email y contraseña son requeridos"}

    def test_missing_body(self, client):
        resp = client.post(LOGIN_URL)
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_non_object_json_body(self, client):
        resp = client.post(LOGIN_URL, json=[ADMIN_EMAIL, ADMIN_PASSWORD])
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    @pytest.mark.parametrize(
        "email,password",
        [
            (ADMIN_EMAIL, "wrong"),
            ("otro@nuevatienda.com", ADMIN_PASSWORD),
            ("ADMIN@NUEVATIENDA.COM", ADMIN_PASSWORD),
            (ADMIN_EMAIL, "PASSWORD"),
        ],
    )
    def test_wrong_credentials(self, client, email, password):
        resp = client.post(LOGIN_URL, json={"email": email, "password": password})
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "mensaje": "Credenciales incorrectas"}

    def test_markup_in_password_is_not_stripped_before_comparison(self, client):
        resp = client.post(LOGIN_URL, json={"email": ADMIN_EMAIL, "password": "pass<word>"})
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "mensaje": "Credenciales incorrectas"}

    def test_padded_email_is_not_trimmed_before_comparison(self, client):
        resp = client.post(LOGIN_URL, json={"email": f" {ADMIN_EMAIL} ", "password": ADMIN_PASSWORD})
        assert resp.status_code == 401

    @pytest.mark.parametrize("password", ["s3<cr>et", "  espacios  ", "a>b<c"])
    def test_configured_password_with_markup_characters(self, make_settings, password):
        settings = make_settings(ADMIN_PASSWORD=password)
        with TestClient(create_app(settings)) as client:
            resp = client.post(LOGIN_URL, json={"email": ADMIN_EMAIL, "password": password})
            form = client.post(LOGIN_URL, data={"email": ADMIN_EMAIL, "password": password})
        assert resp.status_code == 200
        assert form.status_code == 200

    def test_lone_surrogate_credentials_are_rejected(self, client):
        resp = client.post(
            LOGIN_URL,
            content=b'{"email": "\\ud800", "password": "x"}',
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "mensaje": "Credenciales incorrectas"}

    def test_unexpected_error_is_not_leaked(self, client, monkeypatch):
        import api.routes.auth as auth_routes

        def broken_signer(*args, **kwargs):
            raise RuntimeError("signing key unavailable: /etc/secret")

        monkeypatch.setattr(auth_routes, "create_admin_token", broken_signer)
        resp = client.post(LOGIN_URL, json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "mensaje": "Error interno del servidor"}
        assert "/etc/secret" not in resp.text


class TestVerify:
    def test_verify_round_trip(self, client):
        login = client.post(LOGIN_URL, json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
        token = login.json()["token"]
        resp = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["usuario"] == {"id": 1, "email": ADMIN_EMAIL, "rol": "admin"}

    def test_verify_without_token(self, client):
        resp = client.get("/api/auth/verify")
        assert resp.status_code == 401
        assert resp.json()["success"] is False
        assert resp.headers["www-authenticate"] == "Bearer"

    def test_verify_invalid_token(self, client):
        resp = client.get("/api/auth/verify", headers={"Authorization": "Bearer invalid.jwt.token"})
        assert resp.status_code == 401
        assert resp.json()["success"] is False
