"""
Normative values for FCE test results.

ROM norms follow AMA Guides joint tables (degrees). Grip and pinch norms are
population averages in pounds. Cardio tests have no side norms; they are
scored by heart rate and VO2 tables in ``fce.cardio`` instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class NormInfo:
    unit: str
    left: Optional[float]
    right: Optional[float]
    kind: str


_ROM_WORDS = (
    "range", "motion", "flexion", "extension", "abduction", "adduction",
    "rotation", "dorsi", "palmar", "radial", "ulnar", "deviation",
)
_CARDIO_WORDS = ("step", "cardio", "treadmill", "mcaft", "kasch")


def is_grip(name: str) -> bool:
    return "grip" in name.lower()


def is_pinch(name: str) -> bool:
    return "pinch" in name.lower()


def is_rom(name: str) -> bool:
    n = name.lower()
    return any(w in n for w in _ROM_WORDS)


def is_cardio(name: str) -> bool:
    n = name.lower()
    return any(w in n for w in _CARDIO_WORDS)


def rom_norm(name: str) -> Optional[float]:
    """Return the expected ROM in degrees for a test name, or None."""
    n = name.lower()

    if "cervical" in n:
        if "flexion" in n:
            return 60
        if "extension" in n:
            return 75
        if "lateral" in n:
            return 45
        if "rotation" in n:
            return 80

    if "lumbar" in n or "thoraco" in n:
        if "flexion" in n:
            return 48
        if "extension" in n:
            return 25
        if "lateral" in n:
            return 25
        if "rotation" in n:
            return 30

    if "shoulder" in n:
        if "flexion" in n:
            return 180
        if "hyperextension" in n:
            return 50
        if "abduction" in n:
            return 180
        if "adduction" in n:
            return 50
        if "rotation" in n and ("internal" in n or "external" in n):
            return 90

    if "elbow" in n:
        if "flexion" in n:
            return 140
        if "extension" in n:
            return 0

    if "forearm" in n:
        if "pronation" in n or "supination" in n:
            return 80

    if "wrist" in n:
        if "flexion" in n and "extension" not in n:
            return 60
        if "extension" in n and "flexion" not in n:
            return 60
        if "dorsiflexion" in n or "palmar" in n:
            return 60
        if "radial" in n or "ulnar" in n:
            return 20

    if "hip" in n:
        if "flexion" in n:
            return 100
        if "extension" in n:
            return 30
        if "abduction" in n:
            return 40
        if "adduction" in n:
            return 20
        if "internal" in n and "rotation" in n:
            return 40
        if "external" in n and "rotation" in n:
            return 50

    if "knee" in n:
        if "flexion" in n:
            return 150
        if "extension" in n:
            return 0

    if "ankle" in n:
        if "plantarflexion" in n:
            return 40
        if "dorsiflexion" in n:
            return 30

    return None


def infer_norms(test_name: str) -> NormInfo:
    """Infer unit and left/right norms from a test id and/or name."""
    if not test_name:
        return NormInfo(unit="", left=None, right=None, kind="other")

    name = test_name.lower()
    if is_cardio(name):
        return NormInfo(unit="bpm", left=None, right=None, kind="cardio")
    # Grip/pinch before ROM so "Pinch Strength Palmar" is not read as ROM
    if is_grip(name):
        return NormInfo(unit="lb", left=110.5, right=120.8, kind="strength")
    if is_pinch(name):
        return NormInfo(unit="lb", left=85.0, right=90.0, kind="strength")
    if is_rom(name):
        value = rom_norm(name)
        return NormInfo(unit="deg", left=value, right=value, kind="rom")
    return NormInfo(unit="lb", left=None, right=None, kind="strength")
