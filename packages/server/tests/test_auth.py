"""
Tests for admin API authentication and security middleware.

Covers:
- Bearer token parsing
- Constant-time admin key verification
- require_admin_api_key dependency (401 / 403 / pass)
- Security headers middleware
"""

from __future__ import annotations

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from app.core.auth import parse_bearer, require_admin_api_key, verify_admin_api_key
from app.core.config import Settings, get_settings
from app.core.middleware import SECURITY_HEADERS, SecurityHeadersMiddleware


# ---------------------------------------------------------------------------
# Unit Tests: header parsing and key comparison
# ---------------------------------------------------------------------------

class TestParseBearer:
    def test_valid(self):
        assert parse_bearer("Bearer abc123") == "abc123"

    def test_strips_whitespace(self):
        assert parse_bearer("Bearer   abc123  ") == "abc123"

    @pytest.mark.parametrize("value", [None, "", "abc123", "Basic abc123", "Bearer ", "bearer abc123"])
    def test_invalid(self, value):
        assert parse_bearer(value) is None


class TestVerifyAdminKey:
    def test_match(self):
        assert verify_admin_api_key("secret", "secret")

    def test_mismatch(self):
        assert not verify_admin_api_key("secret", "secret2")
        assert not verify_admin_api_key("", "secret")


# ---------------------------------------------------------------------------
# Dependency: require_admin_api_key
# ---------------------------------------------------------------------------

def _make_app(admin_api_key: str) -> FastAPI:
    app = FastAPI()
    app.dependency_overrides[get_settings] = lambda: Settings(admin_api_key=admin_api_key)

    @app.get("/admin", dependencies=[Depends(require_admin_api_key)])
    async def admin_endpoint():
        return {"ok": True}

    return app


class TestRequireAdminApiKey:
    def test_valid_key(self):
        client = TestClient(_make_app("k3y"))
        resp = client.get("/admin", headers={"Authorization": "Bearer k3y"})
        assert resp.status_code == 200
        assert resp.json() == {"ok": True}

    def test_missing_header(self):
        client = TestClient(_make_app("k3y"))
        resp = client.get("/admin")
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Authentication required"

    def test_non_bearer_header(self):
        client = TestClient(_make_app("k3y"))
        resp = client.get("/admin", headers={"Authorization": "k3y"})
        assert resp.status_code == 401

    def test_wrong_key(self):
        client = TestClient(_make_app("k3y"))
        resp = client.get("/admin", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid admin API key"

    def test_not_configured(self):
        """With no key configured the admin API is closed, even to empty tokens."""
        client = TestClient(_make_app(""))
        resp = client.get("/admin", headers={"Authorization": "Bearer anything"})
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Admin API is not configured"


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

class TestSecurityHeadersMiddleware:
    def test_headers_present(self):
        app = FastAPI()
        app.add_middleware(SecurityHeadersMiddleware)

        @app.get("/test")
        async def test_endpoint():
            return {"ok": True}

        client = TestClient(app)
        resp = client.get("/test")
        assert resp.status_code == 200
        for header, value in SECURITY_HEADERS.items():
            assert resp.headers.get(header) == value
