from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from fce.illustrations import sample_illustrations


@dataclass(frozen=True)
class ProtocolTest:
    """A selectable test in the evaluation protocol."""

    id: str
    name: str
    group_id: str = ""
    group_name: str = ""
    side: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "groupId": self.group_id,
            "groupName": self.group_name,
            "side": self.side,
        }


@dataclass(frozen=True)
class TestGroup:
    id: str
    name: str
    tests: tuple[ProtocolTest, ...] = field(default_factory=tuple)


def make_group(group_id: str, name: str, tests: list[tuple[str, str]], side: str | None = None) -> TestGroup:
    """Build a group from ``(test_id, test_name)`` pairs."""
    return TestGroup(
        group_id,
        name,
        tuple(ProtocolTest(tid, tname, group_id, name, side) for tid, tname in tests),
    )


def side_groups(group_id: str, label: str, tests: list[tuple[str, str]]) -> list[TestGroup]:
    """Left and right copies of a per-side ROM group.

    Test ids get a ``-left``/``-right`` suffix; names stay the same.
    """
    groups = []
    for side in ("left", "right"):
        title = side.capitalize()
        groups.append(make_group(
            f"{group_id}-{side}",
            f"{title} Side - {label}",
            [(f"{tid}-{side}", tname) for tid, tname in tests],
            side=side,
        ))
    return groups


class BaseTestType(ABC):
    """Abstract base class for a protocol test category."""

    @property
    @abstractmethod
    def test_type_id(self) -> str:
        """Unique identifier, e.g., 'strength'."""
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable name, e.g., 'Strength'."""
        ...

    @property
    @abstractmethod
    def keywords(self) -> list[str]:
        """Keywords used to resolve free-text category names."""
        ...

    @abstractmethod
    def groups(self) -> list[TestGroup]:
        """Test groups in display order."""
        ...

    @property
    def category(self) -> str:
        """Report section for tests of this type."""
        return "Strength"

    def tests(self) -> list[ProtocolTest]:
        return [test for group in self.groups() for test in group.tests]

    def get_test(self, test_id: str) -> Optional[ProtocolTest]:
        for test in self.tests():
            if test.id == test_id:
                return test
        return None

    def describe_test(self, test_id: str) -> dict:
        """Extra catalog detail for one test; override in subclass."""
        return {}

    def describe(self, test_id: str) -> dict:
        """Sample illustrations plus the type-specific detail for one test."""
        return {
            "illustrations": [ill.to_dict() for ill in sample_illustrations(test_id)],
            **self.describe_test(test_id),
        }

    def get_metadata(self) -> dict:
        """Return metadata for listing in registry."""
        return {
            "test_type_id": self.test_type_id,
            "display_name": self.display_name,
            "keywords": self.keywords,
            "category": self.category,
            "test_count": len(self.tests()),
        }
