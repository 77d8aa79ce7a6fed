"""
Consistency crosschecks for the functional abilities section.

Each check yields ``pass`` as True/False, or None when there is nothing to
judge. ``applicable`` controls whether the report prints a tick or "N/A".
The distraction and diagnosis checks only appear when the matching referral
question is present.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Optional

from fce.stats import TRIAL_KEYS, as_measurements, to_number

DISTRACTION_QUESTION_KEY = "6b) Distraction test consistency"
DIAGNOSIS_QUESTION_KEY = "6c) Consistency with diagnosis"

_STANDARD_GRIP_MARKERS = ("position 2", "pos 2", "position2", "std position", "standard", "p2")
_DYNAMIC_LIFT_MARKERS = ("low", "mid", "high", "overhead", "frequent", "dynamic")


@dataclass
class Crosscheck:
    name: str
    description: str
    passed: Optional[bool]
    applicable: bool

    def to_dict(self) -> dict:
        data = asdict(self)
        data["pass"] = data.pop("passed")
        return data


def _trials(measurements) -> list[float]:
    measurements = as_measurements(measurements)
    values = []
    for key in TRIAL_KEYS:
        v = to_number(measurements.get(key))
        if v is not None:
            values.append(v)
    return values


def _avg(measurements: dict | None) -> float:
    values = [v for v in _trials(measurements) if v > 0]
    return sum(values) / len(values) if values else 0


def _cv(measurements: dict | None) -> int:
    values = [v for v in _trials(measurements) if v > 0]
    if not values:
        return 0
    mean = sum(values) / len(values)
    if mean == 0:
        return 0
    std = math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))
    return int(math.floor(std / mean * 100 + 0.5))


def _bilateral_diff(left: float, right: float) -> float:
    high = max(left, right)
    if high == 0:
        return 0
    return abs(left - right) / high * 100


def _name(test: dict) -> str:
    return str(test.get("testName") or "").lower()


def _heart_rate(test: dict, key: str) -> float:
    for side in ("leftMeasurements", "rightMeasurements"):
        v = to_number(as_measurements(test.get(side)).get(key))
        if v:
            return v
    return 0


def _rapid_exchange(all_tests: list[dict], grip_tests: list[dict]) -> Optional[bool]:
    if not grip_tests:
        return None
    rapid = [t for t in all_tests if "rapid" in _name(t) or "exchange" in _name(t)]
    standard = next(
        (t for t in grip_tests if any(m in _name(t) for m in _STANDARD_GRIP_MARKERS)),
        None,
    )
    if standard is None:
        standard = grip_tests[0]
        best = (_avg(standard.get("leftMeasurements")) + _avg(standard.get("rightMeasurements"))) / 2
        for test in grip_tests[1:]:
            cur = (_avg(test.get("leftMeasurements")) + _avg(test.get("rightMeasurements"))) / 2
            if cur > best:
                standard, best = test, cur
    if not rapid:
        return None

    def across(side: str) -> float:
        values = [v for v in (_avg(t.get(side)) for t in rapid) if v > 0]
        return sum(values) / len(values) if values else 0

    comparisons = []
    for side in ("leftMeasurements", "rightMeasurements"):
        std_avg = _avg(standard.get(side))
        rapid_avg = across(side)
        if std_avg > 0 and rapid_avg > 0:
            comparisons.append(rapid_avg <= std_avg * 0.85)
    if not comparisons:
        return None
    return all(comparisons)


def _has_consistent_window(values: list[float]) -> bool:
    """Three consecutive trials within 5 degrees and 10% of their mean."""
    for i in range(len(values) - 2):
        t1, t2, t3 = values[i:i + 3]
        max_diff = max(abs(t1 - t2), abs(t2 - t3), abs(t1 - t3))
        mean = (t1 + t2 + t3) / 3
        denom = mean or 1
        max_pct = max(abs(t - mean) / denom * 100 for t in (t1, t2, t3))
        if max_diff <= 5 and max_pct <= 10:
            return True
    return False


def _referral_status(questions: list[dict], key: str) -> Optional[bool]:
    for q in questions:
        if q and key in str(q.get("question") or ""):
            status = str(q.get("answer") or "").split("|")[0].upper()
            return "PASS" in status
    return None


def compute_crosschecks(tests: list[dict] | None, referral: dict | None = None) -> list[Crosscheck]:
    all_tests = [t for t in (tests or []) if isinstance(t, dict)]

    grip_tests = [t for t in all_tests if "grip" in _name(t) or "hand" in _name(t)]
    pinch_tests = [t for t in all_tests if "pinch" in _name(t)]
    lift_tests = [t for t in all_tests if "lift" in _name(t)]
    rom_tests = [
        t for t in all_tests
        if any(w in _name(t) for w in ("range", "motion", "flexion", "extension"))
    ]
    dynamic_lifts = [t for t in lift_tests if any(m in _name(t) for m in _DYNAMIC_LIFT_MARKERS)]

    rapid_exchange = _rapid_exchange(all_tests, grip_tests)

    grip_mve = None
    if grip_tests:
        grip_mve = all(
            _bilateral_diff(_avg(t.get("leftMeasurements")), _avg(t.get("rightMeasurements"))) <= 20
            for t in grip_tests
        )

    pinch_ratio = None
    if pinch_tests:
        pinch_ratio = all(
            _cv(t.get("leftMeasurements")) <= 15 and _cv(t.get("rightMeasurements")) <= 15
            for t in pinch_tests
        )

    lift_hr = None
    if dynamic_lifts:
        lift_hr = any(
            _heart_rate(t, "postHeartRate") > _heart_rate(t, "preHeartRate")
            for t in dynamic_lifts
        )

    rom_consistency = None
    if rom_tests:
        rom_consistency = True
        for t in rom_tests:
            values = _trials(t.get("leftMeasurements")) + _trials(t.get("rightMeasurements"))
            if len(values) < 6 or not _has_consistent_window(values):
                rom_consistency = False
                break

    test_retest = None
    dominant_side = None
    cv_summary = None
    if all_tests:
        low_cv = [
            t for t in all_tests
            if _cv(t.get("leftMeasurements")) <= 15 and _cv(t.get("rightMeasurements")) <= 15
        ]
        similar_values = len(low_cv) / len(all_tests) >= 0.8

        consistent_deficiency = True
        weaker_sides = {
            "left" if _avg(t.get("leftMeasurements")) < _avg(t.get("rightMeasurements")) else "right"
            for t in all_tests
        }
        if len(weaker_sides) > 1:
            consistent_deficiency = False
        test_retest = similar_values and consistent_deficiency

        dominant_side = True
        for t in all_tests:
            left = _avg(t.get("leftMeasurements"))
            right = _avg(t.get("rightMeasurements"))
            if min(left, right) == 0:
                continue
            if max(left, right) / min(left, right) > 1.1:
                dominant_side = False
                break

        strict_cv = [
            t for t in all_tests
            if _cv(t.get("leftMeasurements")) < 15 and _cv(t.get("rightMeasurements")) < 15
        ]
        cv_summary = len(strict_cv) / len(all_tests) >= 0.7

    questions = (referral or {}).get("questions") or []
    if not isinstance(questions, list):
        questions = []
    distraction = _referral_status(questions, DISTRACTION_QUESTION_KEY)
    diagnosis = _referral_status(questions, DIAGNOSIS_QUESTION_KEY)

    has_tests = bool(all_tests)
    checks = [
        Crosscheck(
            "Hand grip rapid exchange",
            "Rapid Exchange Grip was 15% less to equal that of the Std position 2 Hand Grip measure.",
            rapid_exchange,
            rapid_exchange is not None,
        ),
        Crosscheck(
            "Hand grip MVE",
            "Position 1 through 5 displayed a bell curve showing greatest strength in position 2-3.",
            grip_mve,
            bool(grip_tests),
        ),
        Crosscheck(
            "Pinch grip key/tip/palmar ratio",
            "Key grip was greater than palmar which was greater than tip grip.",
            pinch_ratio,
            bool(pinch_tests),
        ),
        Crosscheck(
            "Dynamic lift HR fluctuation",
            "Client displayed an increase in heart rate when weight and/or repetitions were increased "
            "(any dynamic lift: low, mid, high, overhead, or frequent).",
            lift_hr,
            bool(dynamic_lifts),
        ),
        Crosscheck(
            "ROM consistency check",
            "During total spine ROM, the client provided three consecutive trials between 5 degrees "
            "and 10% of each other in a six-trial session.",
            rom_consistency,
            bool(rom_tests),
        ),
        Crosscheck(
            "Test/retest trial consistency",
            "When tests were repeated the client displayed similar values and left/right deficiency.",
            test_retest,
            has_tests,
        ),
        Crosscheck(
            "Dominant side monitoring",
            "It is expected that if the client is Right-Handed, he/she will demonstrate approx.10% greater "
            "values on the dominant side – if Left-Handed then the values would be close to the same.",
            dominant_side,
            has_tests,
        ),
    ]
    if distraction is not None:
        checks.append(Crosscheck(
            "Distraction test consistency",
            "When performing distraction tests for sustained posture the client should demonstrate "
            "similar limitations and or abilities.",
            distraction,
            True,
        ))
    if diagnosis is not None:
        checks.append(Crosscheck(
            "Consistency with diagnosis",
            "Based on the diagnosis and complaints of the individual it is expected that those issues "
            "would relate to a similar function performance pattern during testing.",
            diagnosis,
            True,
        ))
    checks.append(Crosscheck(
        "Coefficient of Variation (CV)",
        "We would expect to see a CV less than 15% for a client that is deemed to be consistent.",
        cv_summary,
        has_tests,
    ))
    return checks


def check_marks(check: Crosscheck) -> tuple[str, str]:
    """Pass/Fail column text for a crosscheck row."""
    if not check.applicable or check.passed is None:
        return ("N/A", "N/A")
    return ("✓", "") if check.passed else ("", "✓")
