"""Persistent storage: SQLite database for settings, evaluations and audit logs."""

from storage.database import SECTIONS, Database, get_db

__all__ = [
    "Database",
    "SECTIONS",
    "get_db",
]
