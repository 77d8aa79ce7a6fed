"""
Report categories for FCE tests.

Every test lands in exactly one of five sections. ``categorize_test`` is the
id-driven rule set used for data entry and test-data pages;
``fad_category`` is the looser name-driven rule set used by the job-match
table, where tests may come from older clients without catalog ids.
"""

from __future__ import annotations

import re

STRENGTH = "Strength"
ROM_SPINE_EXTREMITY = "ROM Total Spine/Extremity"
ROM_HAND_FOOT = "ROM Hand/Foot"
OCCUPATIONAL = "Occupational Tasks"
CARDIO = "Cardio"

_CATEGORIES = (STRENGTH, ROM_SPINE_EXTREMITY, ROM_HAND_FOOT, OCCUPATIONAL, CARDIO)

_CARDIO_RE = re.compile(
    r"\b(bruce|treadmill|cardio|mcaft|kasch|step-test|aerobic|heart|pulse|ymca|vo2|cardiovascular)\b"
)
# "carry" is matched whole so the plain "carry" catalog id is occupational
_OCCUPATIONAL_ID_RE = re.compile(
    r"\b(fingering|handling|reach-|balance|stoop|walk|crouch|crawl|climb|kneel|ladder|push-pull|cart|carry|occupational|mtm)\b"
)
_HAND_FOOT_PART_RE = re.compile(r"\b(hand|foot|finger|thumb|wrist|ankle|digit|toe|dip|pip|mp)\b")
_HAND_FOOT_MOTION_RE = re.compile(
    r"\b(flexion|extension|abduction|adduction|rotation|range|rom|deviation|dorsi|plantar|eversion|inversion)\b"
)
_SPINE_ID_RE = re.compile(
    r"\b(cervical-spine|lumbar-spine|thoracic-spine|spine.*flexion|spine.*extension|spine.*lateral|spine.*rotation)\b"
)
_EXTREMITY_ID_RE = re.compile(
    r"\b(shoulder-rom|hip-rom|knee-rom|elbow-rom|wrist-rom|ankle-rom|extremity-)\b"
)
_GENERAL_ROM_ID_RE = re.compile(r"\b(rom|goniometer|goniometric)\b")
_STRENGTH_ID_RE = re.compile(
    r"\b(hand-strength|pinch-strength|grip|pinch|lift|strength|force|mvic|mve|static|dynamic)\b"
)
_CERVICAL_MUSCLE_RE = re.compile(r"\b(flexion|extension|lateral|rotation)\b")
_MUSCLE_ID_RE = re.compile(r"\b(hip-muscle|shoulder-muscle|wrist-muscle|elbow-muscle|knee-muscle|ankle-muscle)\b")
_STRENGTH_NAME_RE = re.compile(r"\b(grip|pinch|lift|strength|force|hand strength|pinch strength)\b")


def categories_in_order() -> list[str]:
    return list(_CATEGORIES)


def categorize_test(test: dict | None) -> str:
    """Place a test in its report section by category, id, then name."""
    if not test:
        return STRENGTH

    name = str(test.get("testName") or "").lower()
    test_id = str(test.get("testId") or "").lower()
    raw_category = test.get("category")
    category = str(raw_category or test.get("testType") or "").lower()

    if raw_category in _CATEGORIES:
        return raw_category

    if _CARDIO_RE.search(f"{name} {test_id} {category}"):
        return CARDIO

    if _OCCUPATIONAL_ID_RE.search(test_id):
        return OCCUPATIONAL

    # Muscle tests of the wrist/ankle are strength, not hand/foot ROM
    if (
        "muscle-" not in test_id
        and _HAND_FOOT_PART_RE.search(name)
        and _HAND_FOOT_MOTION_RE.search(name)
    ):
        return ROM_HAND_FOOT

    if _SPINE_ID_RE.search(test_id) or _EXTREMITY_ID_RE.search(test_id):
        return ROM_SPINE_EXTREMITY
    if _GENERAL_ROM_ID_RE.search(test_id):
        return ROM_SPINE_EXTREMITY

    if "muscle-" in test_id or _STRENGTH_ID_RE.search(test_id):
        return STRENGTH
    # Cervical ids without "-spine-" are the cervical muscle tests
    if (
        test_id.startswith("cervical-")
        and "-spine-" not in test_id
        and _CERVICAL_MUSCLE_RE.search(test_id)
    ):
        return STRENGTH
    if _MUSCLE_ID_RE.search(test_id):
        return STRENGTH
    if _STRENGTH_NAME_RE.search(name):
        return STRENGTH

    return STRENGTH


def group_tests_by_category(tests: list[dict] | None) -> dict[str, list[dict]]:
    grouped: dict[str, list[dict]] = {c: [] for c in _CATEGORIES}
    if not isinstance(tests, list):
        return grouped
    for test in tests:
        grouped[categorize_test(test)].append(test)
    return grouped


_FAD_CARDIO_NAMES = (
    "step", "treadmill", "mcaft", "kasch", "bruce", "ymca", "cardio",
    "cardiovascular", "aerobic", "vo2", "heart rate",
)
_FAD_HAND_FOOT_PARTS = ("hand", "foot", "finger", "wrist", "ankle", "thumb")
_FAD_HAND_FOOT_MOTIONS = ("flexion", "extension", "abduction", "adduction")
_FAD_ROM_NAMES = ("flexion", "extension", "spine", "cervical", "back", "shoulder")
_FAD_OCCUPATIONAL_NAMES = (
    "fingering", "handling", "reach", "climb", "crawl", "stoop", "walk",
    "push", "pull", "crouch", "carry", "kneel", "ladder", "balance",
)


def fad_category(test: dict) -> str:
    """Section used in the functional abilities (job match) table."""
    raw_category = test.get("category")
    if raw_category in (ROM_HAND_FOOT, ROM_SPINE_EXTREMITY, CARDIO, OCCUPATIONAL):
        return raw_category

    name = str(test.get("testName") or "").lower()
    category = str(raw_category or test.get("testType") or "").lower().strip()

    if any(w in category for w in ("cardio", "heart", "aerobic")) or any(
        w in name for w in _FAD_CARDIO_NAMES
    ):
        return CARDIO

    if ("rom" in category and ("hand" in category or "foot" in category)) or (
        any(p in name for p in _FAD_HAND_FOOT_PARTS)
        and any(m in name for m in _FAD_HAND_FOOT_MOTIONS)
    ):
        return ROM_HAND_FOOT

    if any(w in category for w in ("rom", "range", "motion")) or any(
        w in name for w in _FAD_ROM_NAMES
    ):
        return ROM_SPINE_EXTREMITY

    if any(w in category for w in ("occupational", "task")) or any(
        w in name for w in _FAD_OCCUPATIONAL_NAMES
    ):
        return OCCUPATIONAL

    return STRENGTH
