"""Tests for the evaluation, catalog and calculation endpoints."""

import os
import tempfile
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from storage import database
from storage.database import Database
from main import create_app

CLAIMANT = {"claimantId": "C-100", "firstName": "Jane", "lastName": "Doe", "gender": "Female"}


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


@pytest.fixture
def evaluation(client):
    resp = client.post("/evaluations", json=CLAIMANT)
    assert resp.status_code == 201
    return resp.json()


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_responses_not_cached(self, client):
        assert client.get("/health").headers["cache-control"].startswith("no-store")


class TestEvaluations:
    def test_create(self, evaluation):
        assert evaluation["claimant_id"] == "C-100"
        assert evaluation["completed_steps"] == [1]
        assert evaluation["data"]["claimant"]["gender"] == "Female"

    def test_create_requires_names(self, client):
        resp = client.post("/evaluations", json={"claimantId": "C-1"})
        assert resp.status_code == 422

    def test_create_logs_phi_access(self, client, mock_db, evaluation):
        entries = mock_db.list_phi_access()
        assert entries[0]["action"] == "create_evaluation"
        assert entries[0]["resource_id"] == evaluation["id"]
        assert entries[0]["user_id"] is None

    def test_list_and_search(self, client, evaluation):
        client.post("/evaluations", json={"claimantId": "C-200", "firstName": "John", "lastName": "Roe"})
        resp = client.get("/evaluations")
        assert resp.json()["total"] == 2
        resp = client.get("/evaluations", params={"search": "Doe"})
        items = resp.json()["items"]
        assert [item["id"] for item in items] == [evaluation["id"]]
        assert "data" not in items[0]

    def test_list_limit_validated(self, client):
        assert client.get("/evaluations", params={"limit": 0}).status_code == 422

    def test_get(self, client, evaluation):
        resp = client.get(f"/evaluations/{evaluation['id']}")
        assert resp.status_code == 200
        assert resp.json()["first_name"] == "Jane"

    def test_get_missing(self, client):
        resp = client.get("/evaluations/nope")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Evaluation not found."

    def test_delete(self, client, evaluation):
        resp = client.delete(f"/evaluations/{evaluation['id']}")
        assert resp.json() == {"deleted": True, "id": evaluation["id"]}
        assert client.get(f"/evaluations/{evaluation['id']}").status_code == 404
        assert client.delete(f"/evaluations/{evaluation['id']}").status_code == 404

    def test_database_error_is_500(self, client, mock_db):
        with patch.object(mock_db, "get_evaluation", side_effect=RuntimeError("boom")):
            resp = client.get("/evaluations/abc")
        assert resp.status_code == 500
        assert resp.json()["detail"] == "A database error occurred. Please try again."


class TestSections:
    def test_update_section(self, client, evaluation):
        payload = {"activities": [{"name": "Sitting", "rating": 3}]}
        resp = client.put(
            f"/evaluations/{evaluation['id']}/sections/activityRating", json={"data": payload},
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["activityRating"] == payload
        assert resp.json()["data"]["claimant"]["claimantId"] == "C-100"

    def test_unknown_section(self, client, evaluation):
        resp = client.put(f"/evaluations/{evaluation['id']}/sections/billing", json={"data": {}})
        assert resp.status_code == 400

    def test_missing_evaluation(self, client):
        resp = client.put("/evaluations/nope/sections/testData", json={"data": {"tests": []}})
        assert resp.status_code == 404

    def test_claimant_section_validated(self, client, evaluation):
        resp = client.put(
            f"/evaluations/{evaluation['id']}/sections/claimant", json={"data": {"firstName": "X"}},
        )
        assert resp.status_code == 400

    def test_claimant_update_renames(self, client, evaluation):
        renamed = {**CLAIMANT, "lastName": "Smith"}
        resp = client.put(f"/evaluations/{evaluation['id']}/claimant", json=renamed)
        assert resp.json()["last_name"] == "Smith"

    def test_referral_questions_migrated(self, client, evaluation):
        old = {"questions": [{"id": "default-4", "question": "What is your relationship with the referrer?", "answer": ""}]}
        resp = client.put(f"/evaluations/{evaluation['id']}/sections/referral", json={"data": old})
        question = resp.json()["data"]["referral"]["questions"][0]["question"]
        assert question != "What is your relationship with the referrer?"

    def test_referral_non_dict_questions_skipped(self, client, evaluation):
        data = {"questions": ["oops", {"id": "default-1", "question": "Reason for referral?", "answer": "Back pain"}]}
        resp = client.put(f"/evaluations/{evaluation['id']}/sections/referral", json={"data": data})
        assert resp.status_code == 200
        questions = resp.json()["data"]["referral"]["questions"]
        assert [q["answer"] for q in questions] == ["Back pain"]

    def test_protocol_cleaned(self, client, evaluation):
        resp = client.put(
            f"/evaluations/{evaluation['id']}/protocol",
            json={"selectedTests": ["fingering", "mcafi-step", "fingering", "unknown-test"]},
        )
        assert resp.json()["data"]["protocol"] == {"selectedTests": ["fingering"]}


class TestWizardSteps:
    def test_progress(self, client, evaluation):
        resp = client.get(f"/evaluations/{evaluation['id']}/progress")
        body = resp.json()
        assert body["completedSteps"] == [1]
        assert body["nextStep"] == 2
        assert len(body["steps"]) == 9

    def test_complete_next_step(self, client, evaluation):
        resp = client.post(f"/evaluations/{evaluation['id']}/steps/2/complete")
        assert resp.status_code == 200
        assert resp.json()["completedSteps"] == [1, 2]
        stored = client.get(f"/evaluations/{evaluation['id']}").json()
        assert stored["completed_steps"] == [1, 2]

    def test_skipping_a_step_conflicts(self, client, evaluation):
        resp = client.post(f"/evaluations/{evaluation['id']}/steps/4/complete")
        assert resp.status_code == 409

    def test_missing_evaluation(self, client):
        assert client.post("/evaluations/nope/steps/2/complete").status_code == 404


class TestCatalog:
    def test_categories(self, client):
        ids = [c["test_type_id"] for c in client.get("/protocol/categories").json()]
        assert ids[0] == "strength"
        assert len(ids) == 5

    def test_tests_by_category(self, client):
        tests = client.get("/protocol/tests", params={"category": "occupational"}).json()
        assert tests[0]["id"] == "fingering"
        assert all(t["category"] == "Occupational Tasks" for t in tests)

    def test_unknown_category(self, client):
        assert client.get("/protocol/tests", params={"category": "zzzz"}).status_code == 404

    def test_test_detail(self, client):
        detail = client.get("/protocol/tests/fingering").json()
        assert detail["mtmConfig"]["number_of_reps"] == 10
        assert detail["illustrations"] == [
            {"src": "/sample_illustration/MTM_Test_Battery_Fingering.jpg", "label": "Fingering"},
        ]
        assert client.get("/protocol/tests/nope").status_code == 404


class TestReferralDefaults:
    def test_defaults(self, client):
        body = client.get("/referral/defaults").json()
        assert len(body["questions"]) == 10
        assert body["pdcLevels"][0]["name"] == "Sedentary"
        assert body["rpdrBehaviors"]
        assert body["ctpBehaviors"]


class TestCalculations:
    def test_test_summary(self, client):
        test = {
            "testId": "grip-position-2",
            "testName": "Grip Position 2",
            "leftMeasurements": {"trial1": 100, "trial2": 100, "trial3": 100},
            "rightMeasurements": {"trial1": 100, "trial2": 100, "trial3": 100},
        }
        body = client.post("/calculations/test-summary", json=test).json()
        assert body["left_average"] == 100
        assert body["bilateral_deficiency"] == 0
        assert body["category"] == "Strength"
        assert body["unit"] == "lb"

    def test_test_summary_list_measurements(self, client):
        test = {"testName": "Grip Position 2", "leftMeasurements": [10, 20]}
        resp = client.post("/calculations/test-summary", json=test)
        assert resp.status_code == 200
        assert resp.json()["left_average"] == 15.0

    def test_cardio(self, client):
        body = client.post("/calculations/cardio", json={
            "test": {"testId": "bruce-treadmill", "totalTime": 10, "age": 35},
            "claimant": {"gender": "Female"},
        }).json()
        assert body["kind"] == "bruce"
        assert body["classification"] == "Above Average"

    def test_cardio_requires_test(self, client):
        assert client.post("/calculations/cardio", json={}).status_code == 400

    def test_crosschecks(self, client):
        checks = client.post("/calculations/crosschecks", json={"tests": []}).json()
        assert len(checks) == 8
        assert checks[0]["pass"] is None

    def test_crosschecks_requires_list(self, client):
        assert client.post("/calculations/crosschecks", json={"tests": "x"}).status_code == 400


class TestProfile:
    def test_round_trip(self, client):
        assert client.get("/profile").json()["name"] is None
        resp = client.patch("/profile", json={"name": "Dr. Smith", "clinic_name": "Rehab Works"})
        assert resp.json()["clinic_name"] == "Rehab Works"
        assert client.get("/profile").json()["name"] == "Dr. Smith"
