"""
Tests for access token validation.

These tests verify that:
1. Valid bearer tokens and session cookies resolve the caller
2. Missing, malformed, expired and forged tokens are rejected with 401
3. Error responses carry a trace_id (plus the reason in dev mode)
"""

import jwt
import pytest

from conftest import auth_headers, create_access_token, make_profile
from matchline.auth import deps as auth_deps
from matchline.auth import security
from matchline.config import JWT_SECRET


class TestAuthTokenValidation:
    """Protected endpoints accept valid tokens from either transport."""

    def test_bearer_token_resolves_profile(self, client, db):
        uid = make_profile(db, display_name="Bea")
        r = client.get("/profiles/me", headers=auth_headers(uid))
        assert r.status_code == 200
        assert r.json()["profile"]["id"] == uid

    def test_session_cookie_resolves_profile(self, client, db):
        uid = make_profile(db)
        client.cookies.set(auth_deps.SESSION_COOKIE_NAME, create_access_token(uid))
        try:
            r = client.get("/profiles/me")
        finally:
            client.cookies.clear()
        assert r.status_code == 200
        assert r.json()["profile"]["id"] == uid

    def test_cookie_takes_priority_over_bearer(self, client, db):
        cookie_user = make_profile(db)
        bearer_user = make_profile(db)
        client.cookies.set(auth_deps.SESSION_COOKIE_NAME, create_access_token(cookie_user))
        try:
            r = client.get("/profiles/me", headers=auth_headers(bearer_user))
        finally:
            client.cookies.clear()
        assert r.json()["profile"]["id"] == cookie_user


class TestAuthFailures:
    """Each failure mode returns 401 with a traceable detail."""

    def test_missing_token(self, client):
        r = client.get("/profiles/me")
        assert r.status_code == 401
        assert "trace_id" in r.json()["detail"]

    @pytest.mark.parametrize("header", ["Token abc", "Bearer", "abc.def.ghi"])
    def test_malformed_header(self, client, header):
        r = client.get("/profiles/me", headers={"Authorization": header})
        assert r.status_code == 401

    def test_expired_token(self, client, db):
        uid = make_profile(db)
        token = create_access_token(uid, ttl_minutes=-5)
        r = client.get("/profiles/me", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 401

    def test_token_signed_with_other_secret(self, client, db):
        uid = make_profile(db)
        token = jwt.encode({"sub": uid}, "not-the-secret", algorithm=security.ALGORITHM)
        r = client.get("/profiles/me", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 401

    def test_token_without_subject(self, client):
        token = jwt.encode({"sub": ""}, JWT_SECRET, algorithm=security.ALGORITHM)
        r = client.get("/profiles/me", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 401

    def test_dev_mode_exposes_reason(self, client, monkeypatch):
        monkeypatch.setattr(auth_deps, "DEV_MODE", True)
        r = client.get("/profiles/me", headers={"Authorization": "Token abc"})
        assert r.status_code == 401
        detail = r.json()["detail"]
        assert detail["reason"] == "malformed_token"
        assert detail["trace_id"]

    def test_expired_reason_in_dev_mode(self, client, monkeypatch):
        monkeypatch.setattr(auth_deps, "DEV_MODE", True)
        token = create_access_token("someone", ttl_minutes=-1)
        r = client.get("/profiles/me", headers={"Authorization": f"Bearer {token}"})
        assert r.json()["detail"]["reason"] == "token_expired"

    def test_missing_server_secret_is_not_reported_as_bad_token(self, client, db, monkeypatch):
        uid = make_profile(db)
        headers = auth_headers(uid)
        monkeypatch.setattr(security, "JWT_SECRET", "")
        r = client.get("/profiles/me", headers=headers)
        assert r.status_code == 500
        assert r.json()["detail"] == "JWT secret not configured"
