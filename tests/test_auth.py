"""Tests for web-mode authentication and PHI scrubbing of error reports."""

from unittest.mock import patch

import jwt
import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from api import auth
from main import _scrub_phi


def _app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(auth.AuthMiddleware)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/whoami")
    async def whoami(request: Request):
        return {"user_id": request.state.user_id}

    return app


@pytest.fixture
def client():
    return TestClient(_app())


class TestDesktopMode:
    def test_passes_through(self, client):
        with patch.object(auth, "REQUIRE_AUTH", False):
            assert client.get("/whoami").json() == {"user_id": None}


class TestWebMode:
    def test_missing_header(self, client):
        with patch.object(auth, "REQUIRE_AUTH", True):
            resp = client.get("/whoami")
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Missing authorization header"

    def test_public_path(self, client):
        with patch.object(auth, "REQUIRE_AUTH", True):
            assert client.get("/health").status_code == 200

    def test_valid_token(self, client):
        with patch.object(auth, "REQUIRE_AUTH", True), \
                patch.object(auth, "_decode_token", return_value={"sub": "user-1"}):
            resp = client.get("/whoami", headers={"Authorization": "Bearer abc"})
        assert resp.json() == {"user_id": "user-1"}

    def test_expired_token(self, client):
        with patch.object(auth, "REQUIRE_AUTH", True), \
                patch.object(auth, "_decode_token", side_effect=jwt.ExpiredSignatureError()):
            resp = client.get("/whoami", headers={"Authorization": "Bearer abc"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Token expired"

    def test_invalid_token(self, client):
        with patch.object(auth, "REQUIRE_AUTH", True), \
                patch.object(auth, "_decode_token", side_effect=jwt.InvalidTokenError()):
            resp = client.get("/whoami", headers={"Authorization": "Bearer abc"})
        assert resp.json()["detail"] == "Invalid token"

    def test_missing_sub(self, client):
        with patch.object(auth, "REQUIRE_AUTH", True), \
                patch.object(auth, "_decode_token", return_value={}):
            resp = client.get("/whoami", headers={"Authorization": "Bearer abc"})
        assert resp.json()["detail"] == "Invalid token: missing sub"


class TestScrubPhi:
    def test_identifiers_redacted(self):
        text = "Claimant: Jane Doe, DOB 1990-01-15, SSN 123-45-6789, jane@example.com"
        scrubbed = _scrub_phi(text)
        assert "Jane Doe" not in scrubbed
        assert "1990-01-15" not in scrubbed
        assert "123-45-6789" not in scrubbed
        assert "jane@example.com" not in scrubbed

    def test_report_filename_redacted(self):
        assert _scrub_phi("wrote FCE_Report_Doe__Jane_2026") == "wrote [REDACTED]"

    def test_plain_text_untouched(self):
        assert _scrub_phi("Template not found") == "Template not found"
