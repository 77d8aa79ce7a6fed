"""
Occupational (MTM) tasks.

Each task carries its Methods-Time Measurement trial configuration: how many
timed trials, repetitions per trial, and the posture, plane, load and
distance the task is performed at.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Optional

from fce import categorization
from test_types.base import BaseTestType, TestGroup, make_group


@dataclass(frozen=True)
class MTMTestConfig:
    number_of_trials: int
    number_of_reps: int
    position: str = "Standing"
    body_side: Optional[str] = None
    plane: Optional[str] = None
    direction: Optional[str] = None
    weight: Optional[float] = None
    distance: Optional[float] = None
    weight_options: tuple[float, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["weight_options"] = list(self.weight_options)
        return {k: v for k, v in data.items() if v is not None}


def _upper(reps: int, plane: str) -> MTMTestConfig:
    return MTMTestConfig(3, reps, body_side="Both", plane=plane)


MTM_TESTS: list[tuple[str, str, MTMTestConfig]] = [
    ("fingering", "Fingering", _upper(10, "Immediate")),
    ("bi-manual-fingering", "Bi-manual Fingering", _upper(10, "Immediate")),
    ("handling", "Handling", _upper(10, "Immediate")),
    ("bi-manual-handling", "Bi-manual Handling", _upper(10, "Immediate")),
    ("reach-immediate", "Reach Immediate", _upper(6, "Front")),
    ("reach-overhead", "Reach Overhead", _upper(6, "Overhead")),
    ("reach-with-weight", "Reach With Weight", _upper(6, "Front")),
    ("stoop", "Stoop", MTMTestConfig(3, 6, body_side="Both", weight=0, distance=0)),
    ("walk", "Walk", MTMTestConfig(3, 1, direction="Both", distance=50)),
    ("push-pull-cart", "Push/Pull Cart", MTMTestConfig(
        3, 1, direction="Both", weight=40, distance=8, weight_options=(40, 50, 60),
    )),
    ("crouch", "Crouch", MTMTestConfig(3, 6, "Crouching", body_side="Both", weight=0, distance=0)),
    ("carry", "Carry", MTMTestConfig(
        3, 1, body_side="Both", weight=10, distance=12, weight_options=(10, 20, 50),
    )),
    ("crawl", "Crawl", MTMTestConfig(3, 1, "Crawling", body_side="Both", weight=0, distance=10)),
    ("climb-stairs", "Climb Stairs", MTMTestConfig(3, 1, direction="Both", weight=0, distance=4)),
    ("balance", "Balance", MTMTestConfig(3, 1, direction="Both", weight=0, distance=10)),
    ("kneel", "Kneel", MTMTestConfig(3, 6, "Kneeling", body_side="Both", weight=0, distance=0)),
    ("climb-ladder", "Climb Ladder", MTMTestConfig(1, 3, direction="Both", weight=0, distance=8)),
]

MTM_CONFIGS: dict[str, MTMTestConfig] = {tid: config for tid, _, config in MTM_TESTS}


class OccupationalHandler(BaseTestType):

    @property
    def test_type_id(self) -> str:
        return "occupational"

    @property
    def display_name(self) -> str:
        return "Occupational Tasks"

    @property
    def keywords(self) -> list[str]:
        return ["occupational", "mtm", "methods-time measurement", "task", "work simulation"]

    @property
    def category(self) -> str:
        return categorization.OCCUPATIONAL

    def groups(self) -> list[TestGroup]:
        return [make_group("mtm-test-battery", "MTM Test Battery", [(tid, name) for tid, name, _ in MTM_TESTS])]

    def mtm_config(self, test_id: str) -> Optional[MTMTestConfig]:
        return MTM_CONFIGS.get(test_id)

    def describe_test(self, test_id: str) -> dict:
        config = self.mtm_config(test_id)
        return {"mtmConfig": config.to_dict()} if config else {}
