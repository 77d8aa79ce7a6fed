from __future__ import annotations

import logging
from typing import Iterable, Optional

from .base import BaseTestType, ProtocolTest

logger = logging.getLogger(__name__)

# Ids saved by older clients that no longer exist in the catalog
_LEGACY_ID_MARKERS = ("mcafi",)
_LEGACY_IDS = {"cervical-anterior-obliques", "dynamic-lift-frequent"}


class TestTypeRegistry:
    """Registry for protocol test category handlers."""

    def __init__(self):
        self._handlers: dict[str, BaseTestType] = {}

    def register(self, handler: BaseTestType) -> None:
        type_id = handler.test_type_id
        if type_id in self._handlers:
            logger.warning(f"Overwriting existing handler for '{type_id}'")
        self._handlers[type_id] = handler
        logger.info(f"Registered test type handler: {type_id}")

    def get(self, type_id: str) -> Optional[BaseTestType]:
        return self._handlers.get(type_id)

    def resolve(self, type_id_or_name: str) -> tuple[Optional[str], Optional[BaseTestType]]:
        """Resolve a category ID or free-text name to a handler.

        1. Exact ID match
        2. Keyword match against registered handlers
        Returns (resolved_id, handler) or (None, None).
        """
        handler = self._handlers.get(type_id_or_name)
        if handler is not None:
            return (type_id_or_name, handler)

        query = type_id_or_name.lower()
        best_handler = None
        best_id: Optional[str] = None
        best_score = 0
        for tid, h in self._handlers.items():
            for kw in h.keywords:
                if kw.lower() in query or query in kw.lower():
                    score = len(kw)  # longer keyword match = more specific
                    if score > best_score:
                        best_score = score
                        best_handler = h
                        best_id = tid

        return (best_id, best_handler) if best_handler else (None, None)

    def list_types(self) -> list[dict]:
        return [handler.get_metadata() for handler in self._handlers.values()]

    def all_tests(self) -> list[ProtocolTest]:
        return [test for handler in self._handlers.values() for test in handler.tests()]

    def find_test(self, test_id: str) -> tuple[Optional[ProtocolTest], Optional[BaseTestType]]:
        """Look up a catalog test by id. Returns (test, handler) or (None, None)."""
        for handler in self._handlers.values():
            test = handler.get_test(test_id)
            if test is not None:
                return (test, handler)
        return (None, None)

    def clean_protocol_selection(self, test_ids: Iterable[str] | None) -> list[str]:
        """Drop legacy, unknown and duplicate ids, keeping selection order."""
        known = {test.id for test in self.all_tests()}
        cleaned: list[str] = []
        for test_id in test_ids or []:
            if not isinstance(test_id, str):
                continue
            if test_id in _LEGACY_IDS or any(m in test_id for m in _LEGACY_ID_MARKERS):
                logger.info("Dropping legacy protocol test id %s", test_id)
                continue
            if test_id not in known:
                logger.warning("Dropping unknown protocol test id %s", test_id)
                continue
            if test_id not in cleaned:
                cleaned.append(test_id)
        return cleaned
