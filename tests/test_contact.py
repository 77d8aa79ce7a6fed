"""Tests for the contact form endpoint."""

import os
import tempfile
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from slowapi.errors import RateLimitExceeded

from api import contact
from api.rate_limit import limiter, rate_limit_exceeded_handler
from main import create_app
from storage import database
from storage.database import Database


@pytest.fixture
def mock_db():
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    try:
        yield Database(db_path=path)
    finally:
        os.unlink(path)


@pytest.fixture
def client(mock_db):
    with patch.object(database, "_db_instance", mock_db):
        yield TestClient(create_app())


class TestEvaluationTypeLabels:
    def test_known_and_unknown(self):
        labels = contact.evaluation_type_labels(["rehab", "custom"])
        assert labels == ["Rehab Baseline and Progress Evaluations", "custom"]


class TestSubmitContact:
    def test_missing_fields(self, client):
        resp = client.post("/contact", json={"name": "Pat", "email": "pat@example.com"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Missing required fields"

    def test_empty_strings_count_as_missing(self, client):
        resp = client.post("/contact", json={"name": "", "clinicName": "Rehab", "email": "a@b.co"})
        assert resp.status_code == 400

    def test_stored(self, client, mock_db):
        resp = client.post("/contact", json={
            "name": "Pat",
            "clinicName": "Rehab Works",
            "email": "pat@example.com",
            "evaluationTypes": ["functional"],
            "comments": "Please call",
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "Contact request received"

        items, total = mock_db.list_contact_requests()
        assert total == 1
        assert items[0]["id"] == body["id"]
        assert items[0]["message"] == "Please call"
        assert items[0]["evaluation_types"] == [contact.EVALUATION_TYPE_LABELS["functional"]]

    def test_storage_failure(self, client, mock_db):
        with patch.object(mock_db, "save_contact_request", side_effect=RuntimeError("disk")):
            resp = client.post("/contact", json={"name": "Pat", "clinicName": "R", "email": "p@x.co"})
        assert resp.status_code == 500
        assert resp.json()["detail"] == "Failed to save contact request. Please try again later."


@pytest.fixture
def limited_client():
    """Contact router with the web-mode limiter switched on."""
    app = FastAPI()
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.include_router(contact.router)
    with patch.object(limiter, "enabled", True):
        limiter.reset()
        yield TestClient(app)
        limiter.reset()


class TestContactRateLimit:
    def test_throttled_after_five(self, limited_client):
        incomplete = {"name": "Pat", "email": "pat@example.com"}
        for _ in range(5):
            assert limited_client.post("/contact", json=incomplete).status_code == 400
        resp = limited_client.post("/contact", json=incomplete)
        assert resp.status_code == 429
        assert resp.json()["detail"] == "Rate limit exceeded. Please wait before making more requests."

    def test_desktop_mode_unthrottled(self, client):
        incomplete = {"name": "Pat", "email": "pat@example.com"}
        for _ in range(7):
            assert client.post("/contact", json=incomplete).status_code == 400
