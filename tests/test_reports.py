"""Tests for report rendering and the report endpoints."""

import io
import os
import tempfile
from datetime import date
from unittest.mock import patch

import docx
import pytest
from fastapi.testclient import TestClient

from api.reports import build_report_body
from main import create_app
from report_gen import (
    render_claimant_report,
    render_executive_summary,
    render_executive_summary_pdf,
    report_filename,
)
from report_gen import body as rb
from report_gen.docx_common import clean_text
from storage import database
from storage.database import Database

TODAY = date(2026, 3, 2)

BODY = {
    "claimantData": {
        "claimantId": "C-100",
        "firstName": "Jane",
        "lastName": "Doe",
        "gender": "Female",
        "dateOfBirth": "1990-01-15",
        "weight": "150",
        "weightUnit": "lbs",
    },
    "evaluatorData": {"name": "Dr. Smith", "clinicName": "Rehab Works", "clinicPhone": "555-0100"},
    "referralQuestionsData": {
        "questions": [
            {"question": "What is the present strength?", "answer": "Good"},
            {"question": "Physical Demand Classification (PDC)?", "answer": "PDC:Light|Lifts 20 lbs"},
        ],
        "conclusionData": {
            "returnToWorkStatus": {"status": "Return to Regular Duties", "comments": "Cleared"},
            "rpdrBehaviors": {"Guarding": True},
        },
    },
    "testData": {"tests": [
        {
            "testId": "grip-position-2",
            "testName": "Grip Position 2",
            "leftMeasurements": {"trial1": 60, "trial2": 62, "trial3": 61},
            "rightMeasurements": {"trial1": 70, "trial2": 71, "trial3": 72},
        },
        {
            "testId": "lumbar-spine-flexion-extension",
            "testName": "Lumbar Flexion/Extension",
            "leftMeasurements": {"trial1": 50, "trial2": 52, "trial3": 51},
            "rightMeasurements": {"trial1": 20, "trial2": 21, "trial3": 22},
        },
    ]},
    "mtmTestData": {
        "fingering": {
            "testName": "Fingering",
            "trials": [
                {"trial": 1, "reps": 10, "testTime": 12.5, "percentIS": 95},
                {"trial": 2, "reps": 10, "testTime": 12.1, "percentIS": 98},
            ],
            "heartRate": {"pre": 72, "post": 90},
        },
    },
    "cardioTestData": {
        "bruce-treadmill-test": {"testId": "bruce-treadmill-test", "testName": "Bruce Treadmill Test",
                                 "totalTime": 10, "age": 35},
    },
    "activityRatingData": {"activities": [{"name": "Sitting", "rating": 3}]},
}


class TestBodyAccessors:
    def test_claimant_name(self):
        assert rb.claimant_name(BODY) == "Doe, Jane"
        assert rb.claimant_name({"claimantName": "Override"}) == "Override"
        assert rb.claimant_name({}) == "Unknown"
        assert rb.claimant_name({"claimantData": {"firstName": "", "lastName": ""}}) == "Unknown"

    def test_report_filename(self):
        assert report_filename(BODY, "docx", TODAY) == "FCE_Report_Doe__Jane_2026-03-02.docx"
        assert report_filename({}, "pdf", TODAY) == "FCE_Report_Unknown_2026-03-02.pdf"

    def test_clinic_defaults(self):
        clinic = rb.clinic_details({})
        assert clinic["name"] == rb.DEFAULT_CLINIC_NAME
        assert clinic["phone_fax"] == ""
        assert rb.clinic_details(BODY)["phone_fax"] == "Phone: 555-0100"

    def test_evaluation_date(self):
        assert rb.evaluation_date({}, TODAY) == "2026-03-02"
        assert rb.evaluation_date({"evaluationDate": "2026-01-01"}, TODAY) == "2026-01-01"

    def test_return_to_work_prefers_conclusion(self):
        body = {"referralQuestionsData": {
            "returnToWorkStatus": {"status": "Other"},
            "conclusionData": {"returnToWorkStatus": {"status": "Return to Regular Duties"}},
        }}
        assert rb.return_to_work_status(body)["status"] == "Return to Regular Duties"
        assert rb.return_to_work_status({}) == {}

    def test_mtm_entries_accepts_list(self):
        body = {"mtmData": [{"testId": "walk"}, "junk"]}
        assert rb.mtm_entries(body) == [("walk", {"testId": "walk"})]

    def test_pain_images_falls_back_to_saved(self):
        body = {"painIllustrationData": {"savedImageData": ["a", "b", "c", "d"]}}
        assert rb.pain_images(body) == ["a", "b", "c"]


class TestRenderers:
    def test_executive_summary_docx(self):
        content = render_executive_summary(BODY, TODAY)
        assert content[:2] == b"PK"
        doc = docx.Document(io.BytesIO(content))
        text = "\n".join(p.text for p in doc.paragraphs)
        assert "Return to Regular Duties" in text or any(
            "Return to Regular Duties" in cell.text
            for table in doc.tables for row in table.rows for cell in row.cells
        )

    def test_empty_body_renders(self):
        assert render_executive_summary({}, TODAY)[:2] == b"PK"
        assert render_claimant_report({}, TODAY)[:2] == b"PK"
        assert render_executive_summary_pdf({}, TODAY)[:4] == b"%PDF"

    def test_claimant_report_docx(self):
        content = render_claimant_report(BODY, TODAY)
        doc = docx.Document(io.BytesIO(content))
        assert len(doc.tables) > 3

    def test_pdf(self):
        assert render_executive_summary_pdf(BODY, TODAY)[:4] == b"%PDF"

    def test_control_characters_stripped(self):
        body = {
            **BODY,
            "history": "Pasted\x0bfrom Word",
            "referralQuestionsData": {"questions": [{"question": "Strength?", "answer": "Good\x0c\x01"}]},
        }
        doc = docx.Document(io.BytesIO(render_executive_summary(body, TODAY)))
        text = "\n".join(p.text for p in doc.paragraphs)
        assert "Pastedfrom Word" in text
        assert render_executive_summary_pdf(body, TODAY)[:4] == b"%PDF"

    def test_clean_text(self):
        assert clean_text("a\x00b\x0bc\x1fd") == "abcd"
        assert clean_text("tab\tnew\nline\r") == "tab\tnew\nline\r"
        assert clean_text(None) == ""
        assert clean_text(12) == "12"


class TestBuildReportBody:
    def test_sections_mapped(self):
        record = {"data": {
            "claimant": {"claimantId": "C-1"},
            "testData": {"tests": []},
            "referral": {"questions": [{"question": "Q", "answer": "A"}]},
            "conclusion": {"returnToWorkStatus": {"status": "Other"}, "signatureImage": "data:x"},
            "protocol": {"selectedTests": ["walk"]},
        }}
        body = build_report_body(record, {"name": "Dr. Smith"})
        assert body["claimantData"] == {"claimantId": "C-1"}
        assert body["referralQuestionsData"]["questions"][0]["answer"] == "A"
        assert body["referralQuestionsData"]["conclusionData"]["returnToWorkStatus"]["status"] == "Other"
        assert body["signatureImage"] == "data:x"
        assert body["evaluatorData"] == {"name": "Dr. Smith"}
        assert "protocol" not in body

    def test_original_record_untouched(self):
        referral = {"questions": []}
        record = {"data": {"referral": referral, "conclusion": {}}}
        build_report_body(record, {})
        assert "conclusionData" not in referral


@pytest.fixture
def client():
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    try:
        with patch.object(database, "_db_instance", Database(db_path=path)):
            yield TestClient(create_app())
    finally:
        os.unlink(path)


class TestReportEndpoints:
    def test_dry_run_echoes_body(self, client):
        resp = client.post("/reports/executive-summary?dryRun=1", json={"claimantData": {"claimantId": "C-1"}})
        assert resp.json() == {"ok": True, "body": {"claimantData": {"claimantId": "C-1"}}}

    def test_executive_summary_download(self, client):
        resp = client.post("/reports/executive-summary", json=BODY)
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/vnd.openxmlformats")
        assert 'filename="FCE_Report_Doe__Jane_' in resp.headers["content-disposition"]
        assert resp.headers["cache-control"] == "no-store, no-transform"
        assert resp.content[:2] == b"PK"

    def test_pasted_control_characters(self, client):
        resp = client.post("/reports/executive-summary", json={**BODY, "history": "Pasted\x0bfrom Word"})
        assert resp.status_code == 200
        assert resp.content[:2] == b"PK"

    def test_pdf_download(self, client):
        resp = client.post("/reports/executive-summary/pdf", json=BODY)
        assert resp.headers["content-type"] == "application/pdf"
        assert resp.content[:4] == b"%PDF"

    def test_render_failure(self, client):
        with patch("api.reports.render_claimant_report", side_effect=RuntimeError("bad image")):
            resp = client.post("/reports/claimant", json=BODY)
        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal Server Error generating DOCX", "details": "bad image"}

    def test_export_logged(self, client):
        client.post("/reports/claimant", json=BODY)
        entry = database.get_db().list_phi_access()[0]
        assert entry["action"] == "export_report"
        assert entry["resource_id"] == "C-100"

    def test_stored_evaluation_report(self, client):
        created = client.post("/evaluations", json=BODY["claimantData"]).json()
        resp = client.get(f"/evaluations/{created['id']}/report/pdf")
        assert resp.status_code == 200
        assert resp.content[:4] == b"%PDF"

    def test_unknown_kind(self, client):
        assert client.get("/evaluations/x/report/xlsx").status_code == 404
        assert client.get("/evaluations/x/report/docx").status_code == 404
