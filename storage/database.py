"""SQLite database for settings, evaluations and audit records."""

from __future__ import annotations

import json
import os
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Any

import platformdirs


def _now() -> str:
    """Return current UTC time as ISO 8601 string."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


# Evaluation data is stored as one JSON document keyed by wizard section
SECTIONS = (
    "claimant",
    "painIllustration",
    "activityRating",
    "referral",
    "protocol",
    "testData",
    "mtmTestData",
    "cardioTestData",
    "digitalLibrary",
    "conclusion",
)


_SCHEMA = """
CREATE TABLE IF NOT EXISTS settings (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS evaluations (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    claimant_id TEXT NOT NULL DEFAULT '',
    first_name TEXT NOT NULL DEFAULT '',
    last_name TEXT NOT NULL DEFAULT '',
    data TEXT NOT NULL DEFAULT '{}',
    completed_steps TEXT NOT NULL DEFAULT '[]'
);

CREATE TABLE IF NOT EXISTS phi_access_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
    user_id TEXT,
    action TEXT NOT NULL,
    resource_type TEXT NOT NULL,
    resource_id TEXT,
    ip_address TEXT,
    user_agent TEXT
);

CREATE TABLE IF NOT EXISTS contact_requests (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
    name TEXT NOT NULL,
    clinic_name TEXT NOT NULL,
    email TEXT NOT NULL,
    phone TEXT,
    evaluation_types TEXT NOT NULL DEFAULT '[]',
    message TEXT
);

CREATE INDEX IF NOT EXISTS idx_evaluations_created ON evaluations(created_at);
CREATE INDEX IF NOT EXISTS idx_phi_access_user ON phi_access_log(user_id);
"""


def _get_db_path() -> str:
    """Return OS-appropriate path for fce.db, or FCE_DB_PATH when set."""
    override = os.getenv("FCE_DB_PATH")
    if override:
        return override
    data_dir = platformdirs.user_data_dir("FCE Evaluator")
    os.makedirs(data_dir, exist_ok=True)
    return os.path.join(data_dir, "fce.db")


def _evaluation_row(row: sqlite3.Row) -> dict[str, Any]:
    result = dict(row)
    result["data"] = json.loads(result["data"])
    result["completed_steps"] = json.loads(result["completed_steps"])
    return result


def _claimant_columns(claimant: dict[str, Any] | None) -> tuple[str, str, str]:
    claimant = claimant or {}
    return (
        str(claimant.get("claimantId") or ""),
        str(claimant.get("firstName") or ""),
        str(claimant.get("lastName") or ""),
    )


class Database:
    """SQLite-backed storage for settings and evaluations."""

    def __init__(self, db_path: str | None = None) -> None:
        self._db_path = db_path or _get_db_path()
        self._init_db()

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_db(self) -> None:
        conn = self._get_conn()
        try:
            conn.executescript(_SCHEMA)
            conn.commit()
        finally:
            conn.close()

    # --- Settings ---

    def get_setting(self, key: str) -> str | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT value FROM settings WHERE key = ?", (key,)
            ).fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def set_setting(self, key: str, value: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT OR REPLACE INTO settings (key, value, updated_at) VALUES (?, ?, ?)",
                (key, value, _now()),
            )
            conn.commit()
        finally:
            conn.close()

    def get_all_settings(self) -> dict[str, str]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT key, value FROM settings").fetchall()
            return {row["key"]: row["value"] for row in rows}
        finally:
            conn.close()

    def delete_setting(self, key: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM settings WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()

    # --- Evaluations ---

    def create_evaluation(self, claimant: dict[str, Any]) -> dict[str, Any]:
        """Start an evaluation from claimant info; step 1 is marked complete."""
        conn = self._get_conn()
        try:
            eval_id = str(uuid.uuid4())
            now = _now()
            claimant_id, first_name, last_name = _claimant_columns(claimant)
            conn.execute(
                """INSERT INTO evaluations (id, created_at, updated_at, claimant_id, first_name, last_name, data, completed_steps)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    eval_id,
                    now,
                    now,
                    claimant_id,
                    first_name,
                    last_name,
                    json.dumps({"claimant": claimant}),
                    json.dumps([1]),
                ),
            )
            conn.commit()
            row = conn.execute(
                "SELECT * FROM evaluations WHERE id = ?", (eval_id,)
            ).fetchone()
            return _evaluation_row(row)
        finally:
            conn.close()

    def get_evaluation(self, evaluation_id: str) -> dict[str, Any] | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM evaluations WHERE id = ?", (evaluation_id,)
            ).fetchone()
            return _evaluation_row(row) if row else None
        finally:
            conn.close()

    def list_evaluations(
        self,
        offset: int = 0,
        limit: int = 20,
        search: str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        conn = self._get_conn()
        try:
            conditions: list[str] = []
            params: list[Any] = []

            if search:
                like = f"%{search}%"
                conditions.append(
                    "(first_name LIKE ? OR last_name LIKE ? OR claimant_id LIKE ?)"
                )
                params.extend([like, like, like])

            where_clause = (" WHERE " + " AND ".join(conditions)) if conditions else ""

            count_row = conn.execute(
                f"SELECT COUNT(*) as cnt FROM evaluations{where_clause}",
                params,
            ).fetchone()
            total = count_row["cnt"]

            rows = conn.execute(
                f"""SELECT id, created_at, updated_at, claimant_id, first_name, last_name, completed_steps
                    FROM evaluations{where_clause}
                    ORDER BY created_at DESC
                    LIMIT ? OFFSET ?""",
                params + [limit, offset],
            ).fetchall()

            items = []
            for row in rows:
                item = dict(row)
                item["completed_steps"] = json.loads(item["completed_steps"])
                items.append(item)
            return items, total
        finally:
            conn.close()

    def update_evaluation_section(
        self, evaluation_id: str, section: str, payload: Any,
    ) -> dict[str, Any] | None:
        """Replace one section of an evaluation's data.

        Raises ValueError for an unknown section. Returns None if the
        evaluation does not exist.
        """
        if section not in SECTIONS:
            raise ValueError(f"Unknown evaluation section: {section}")
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT data FROM evaluations WHERE id = ?", (evaluation_id,)
            ).fetchone()
            if not row:
                return None
            data = json.loads(row["data"])
            data[section] = payload

            if section == "claimant":
                claimant_id, first_name, last_name = _claimant_columns(payload)
                conn.execute(
                    """UPDATE evaluations SET data = ?, claimant_id = ?, first_name = ?, last_name = ?, updated_at = ?
                       WHERE id = ?""",
                    (json.dumps(data), claimant_id, first_name, last_name, _now(), evaluation_id),
                )
            else:
                conn.execute(
                    "UPDATE evaluations SET data = ?, updated_at = ? WHERE id = ?",
                    (json.dumps(data), _now(), evaluation_id),
                )
            conn.commit()
            row = conn.execute(
                "SELECT * FROM evaluations WHERE id = ?", (evaluation_id,)
            ).fetchone()
            return _evaluation_row(row)
        finally:
            conn.close()

    def set_completed_steps(self, evaluation_id: str, steps: list[int]) -> bool:
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                "UPDATE evaluations SET completed_steps = ?, updated_at = ? WHERE id = ?",
                (json.dumps(sorted(set(steps))), _now(), evaluation_id),
            )
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    def delete_evaluation(self, evaluation_id: str) -> bool:
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                "DELETE FROM evaluations WHERE id = ?", (evaluation_id,)
            )
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    # --- Audit ---

    def log_phi_access(
        self,
        user_id: str | None,
        action: str,
        resource_type: str,
        resource_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """INSERT INTO phi_access_log (user_id, action, resource_type, resource_id, ip_address, user_agent)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (user_id, action, resource_type, resource_id, ip_address, user_agent),
            )
            conn.commit()
        finally:
            conn.close()

    def list_phi_access(self, limit: int = 100) -> list[dict[str, Any]]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM phi_access_log ORDER BY id DESC LIMIT ?", (limit,)
            ).fetchall()
            return [dict(row) for row in rows]
        finally:
            conn.close()

    # --- Contact requests ---

    def save_contact_request(
        self,
        name: str,
        clinic_name: str,
        email: str,
        phone: str | None = None,
        evaluation_types: list[str] | None = None,
        message: str | None = None,
    ) -> dict[str, Any]:
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                """INSERT INTO contact_requests (name, clinic_name, email, phone, evaluation_types, message)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (name, clinic_name, email, phone, json.dumps(evaluation_types or []), message),
            )
            conn.commit()
            row = conn.execute(
                "SELECT * FROM contact_requests WHERE id = ?", (cursor.lastrowid,)
            ).fetchone()
            result = dict(row)
            result["evaluation_types"] = json.loads(result["evaluation_types"])
            return result
        finally:
            conn.close()

    def list_contact_requests(
        self, offset: int = 0, limit: int = 20,
    ) -> tuple[list[dict[str, Any]], int]:
        conn = self._get_conn()
        try:
            total = conn.execute(
                "SELECT COUNT(*) as cnt FROM contact_requests"
            ).fetchone()["cnt"]
            rows = conn.execute(
                """SELECT * FROM contact_requests
                   ORDER BY id DESC
                   LIMIT ? OFFSET ?""",
                (limit, offset),
            ).fetchall()
            items = []
            for row in rows:
                item = dict(row)
                item["evaluation_types"] = json.loads(item["evaluation_types"])
                items.append(item)
            return items, total
        finally:
            conn.close()


_db_instance: Database | None = None


def get_db() -> Database:
    """Return the module-level Database singleton."""
    global _db_instance
    if _db_instance is None:
        _db_instance = Database()
    return _db_instance
