"""Tests for the SQLite Database class."""

import tempfile
import os

import pytest

from storage.database import SECTIONS, Database


@pytest.fixture
def db():
    """Create an isolated Database using a temp file."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    try:
        yield Database(db_path=path)
    finally:
        os.unlink(path)


def _claimant(**overrides) -> dict:
    claimant = {"claimantId": "C-100", "firstName": "Jane", "lastName": "Doe"}
    claimant.update(overrides)
    return claimant


# --- Schema ---

class TestSchema:
    def _columns(self, db: Database, table: str) -> set[str]:
        conn = db._get_conn()
        try:
            return {row["name"] for row in conn.execute(f"PRAGMA table_info({table})")}
        finally:
            conn.close()

    def test_tables_created_with_all_columns(self, db: Database):
        assert "updated_at" in self._columns(db, "settings")
        assert "message" in self._columns(db, "contact_requests")

    def test_indexes_created(self, db: Database):
        conn = db._get_conn()
        try:
            names = {row["name"] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'index'")}
        finally:
            conn.close()
        assert {"idx_evaluations_created", "idx_phi_access_user"} <= names

    def test_reopen_existing_file(self, db: Database):
        db.set_setting("theme", "dark")
        again = Database(db_path=db._db_path)
        assert again.get_setting("theme") == "dark"


# --- Settings ---

class TestSettings:
    def test_get_missing_returns_none(self, db: Database):
        assert db.get_setting("nonexistent") is None

    def test_set_and_get(self, db: Database):
        db.set_setting("profile.name", "Dr. Smith")
        assert db.get_setting("profile.name") == "Dr. Smith"

    def test_overwrite(self, db: Database):
        db.set_setting("key", "a")
        db.set_setting("key", "b")
        assert db.get_setting("key") == "b"

    def test_get_all_settings(self, db: Database):
        db.set_setting("a", "1")
        db.set_setting("b", "2")
        assert db.get_all_settings() == {"a": "1", "b": "2"}

    def test_delete_setting(self, db: Database):
        db.set_setting("key", "val")
        db.delete_setting("key")
        assert db.get_setting("key") is None


# --- Evaluations ---

class TestEvaluations:
    def test_create_marks_first_step_complete(self, db: Database):
        record = db.create_evaluation(_claimant())
        assert record["claimant_id"] == "C-100"
        assert record["first_name"] == "Jane"
        assert record["last_name"] == "Doe"
        assert record["completed_steps"] == [1]
        assert record["data"] == {"claimant": _claimant()}

    def test_get_roundtrip(self, db: Database):
        created = db.create_evaluation(_claimant())
        fetched = db.get_evaluation(created["id"])
        assert fetched is not None
        assert fetched["id"] == created["id"]
        assert fetched["data"]["claimant"]["firstName"] == "Jane"

    def test_get_nonexistent(self, db: Database):
        assert db.get_evaluation("missing") is None

    def test_list_newest_first(self, db: Database):
        first = db.create_evaluation(_claimant(claimantId="A"))
        second = db.create_evaluation(_claimant(claimantId="B"))
        items, total = db.list_evaluations()
        assert total == 2
        assert [i["id"] for i in items] == [second["id"], first["id"]]
        assert "data" not in items[0]

    def test_list_pagination(self, db: Database):
        for i in range(5):
            db.create_evaluation(_claimant(claimantId=f"C-{i}"))
        items, total = db.list_evaluations(offset=2, limit=2)
        assert total == 5
        assert len(items) == 2

    def test_list_search_matches_name_and_id(self, db: Database):
        db.create_evaluation(_claimant(claimantId="X-1", firstName="Alice", lastName="Walker"))
        db.create_evaluation(_claimant(claimantId="Y-2", firstName="Bob", lastName="Stone"))
        items, total = db.list_evaluations(search="walk")
        assert total == 1
        assert items[0]["first_name"] == "Alice"
        items, total = db.list_evaluations(search="Y-2")
        assert total == 1
        assert items[0]["first_name"] == "Bob"

    def test_update_section(self, db: Database):
        record = db.create_evaluation(_claimant())
        updated = db.update_evaluation_section(record["id"], "testData", {"tests": []})
        assert updated is not None
        assert updated["data"]["testData"] == {"tests": []}
        assert updated["data"]["claimant"]["claimantId"] == "C-100"

    def test_update_claimant_refreshes_columns(self, db: Database):
        record = db.create_evaluation(_claimant())
        updated = db.update_evaluation_section(
            record["id"], "claimant", _claimant(claimantId="C-200", lastName="Roe"),
        )
        assert updated["claimant_id"] == "C-200"
        assert updated["last_name"] == "Roe"

    def test_update_unknown_section_raises(self, db: Database):
        record = db.create_evaluation(_claimant())
        with pytest.raises(ValueError):
            db.update_evaluation_section(record["id"], "billing", {})

    def test_update_missing_evaluation(self, db: Database):
        assert db.update_evaluation_section("missing", SECTIONS[0], {}) is None

    def test_set_completed_steps_sorts_and_dedupes(self, db: Database):
        record = db.create_evaluation(_claimant())
        assert db.set_completed_steps(record["id"], [3, 1, 2, 1]) is True
        assert db.get_evaluation(record["id"])["completed_steps"] == [1, 2, 3]

    def test_set_completed_steps_missing(self, db: Database):
        assert db.set_completed_steps("missing", [1]) is False

    def test_delete(self, db: Database):
        record = db.create_evaluation(_claimant())
        assert db.delete_evaluation(record["id"]) is True
        assert db.get_evaluation(record["id"]) is None

    def test_delete_nonexistent(self, db: Database):
        assert db.delete_evaluation("missing") is False


# --- Audit ---

class TestPhiAccessLog:
    def test_log_and_list(self, db: Database):
        db.log_phi_access(None, "view_evaluation", "evaluation", "abc", "127.0.0.1", "pytest")
        db.log_phi_access("user-1", "export_report", "report")
        entries = db.list_phi_access()
        assert len(entries) == 2
        assert entries[0]["action"] == "export_report"
        assert entries[0]["user_id"] == "user-1"
        assert entries[1]["resource_id"] == "abc"
        assert entries[1]["user_id"] is None


# --- Contact requests ---

class TestContactRequests:
    def test_save_returns_row(self, db: Database):
        saved = db.save_contact_request(
            "Ann", "Rehab Co", "ann@example.com", None, ["Comprehensive FCE"], "Call me",
        )
        assert saved["id"] == 1
        assert saved["evaluation_types"] == ["Comprehensive FCE"]
        assert saved["message"] == "Call me"

    def test_list_newest_first(self, db: Database):
        db.save_contact_request("A", "Clinic A", "a@example.com")
        db.save_contact_request("B", "Clinic B", "b@example.com")
        items, total = db.list_contact_requests()
        assert total == 2
        assert items[0]["name"] == "B"
        assert items[1]["evaluation_types"] == []
