"""Trial arithmetic shared by data entry, crosschecks and reports.

Measurements arrive as dicts keyed ``trial1``..``trial6`` (data entry) or,
from older clients, ``t1``/``"1"`` style keys and plain lists. Helpers here
never raise on malformed values; anything non-numeric is treated as missing.
"""

from __future__ import annotations

import math
import re
from typing import Any, Optional

from fce.norms import infer_norms

_NON_NUMERIC_RE = re.compile(r"[^\d.-]")

TRIAL_KEYS = tuple(f"trial{i}" for i in range(1, 7))


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a calculator (0.5 always rounds away from zero)."""
    factor = 10 ** digits
    scaled = abs(value) * factor
    rounded = math.floor(scaled + 0.5) / factor
    return rounded if value >= 0 else -rounded


def to_number(value: Any) -> Optional[float]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        cleaned = _NON_NUMERIC_RE.sub("", value)
        try:
            n = float(cleaned)
        except ValueError:
            return None
        return n if math.isfinite(n) else None
    return None


def read_trials(src: Any) -> list[Optional[float]]:
    """Read up to 30 trial values from a list or a trial-keyed dict."""
    if not src:
        return []
    if isinstance(src, (list, tuple)):
        return [to_number(v) for v in src]
    if isinstance(src, dict):
        out: list[Optional[float]] = []
        for i in range(1, 31):
            for key in (f"trial{i}", f"t{i}", str(i)):
                if src.get(key) is not None:
                    out.append(to_number(src[key]))
                    break
        return out
    return []


def as_measurements(src: Any) -> dict:
    """Trial-keyed dict for *src*; a plain list becomes trial1, trial2, ..."""
    if isinstance(src, dict):
        return src
    if isinstance(src, (list, tuple)):
        return {f"trial{i}": v for i, v in enumerate(src, start=1)}
    return {}


def trial_values(measurements: Any) -> list[float]:
    """Positive values among trial1..trial6; blank or zero trials are not recorded."""
    measurements = as_measurements(measurements)
    values = []
    for key in TRIAL_KEYS:
        v = to_number(measurements.get(key))
        if v is not None and v > 0:
            values.append(v)
    return values


def _mean(values: list[float]) -> float:
    return sum(values) / len(values)


def _population_std(values: list[float]) -> float:
    mean = _mean(values)
    return math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))


def average(measurements: dict | None) -> float:
    values = trial_values(measurements)
    if not values:
        return 0
    return round_half_up(_mean(values), 2)


def coefficient_of_variation(measurements: dict | None) -> float:
    values = trial_values(measurements)
    if not values:
        return 0
    mean = _mean(values)
    if mean == 0:
        return 0
    return round_half_up(_population_std(values) / mean * 100, 2)


def report_cv(measurements: dict | None) -> int:
    """CV as printed in reports: whole percent, needs at least two trials."""
    values = trial_values(measurements)
    if len(values) < 2:
        return 0
    mean = _mean(values)
    if mean == 0:
        return 0
    return int(round_half_up(_population_std(values) / mean * 100))


def bilateral_deficiency(from_side: dict | None, to_side: dict | None) -> float:
    """Percent by which *from_side* falls short of *to_side* (never negative)."""
    from_avg = average(from_side)
    to_avg = average(to_side)
    if to_avg == 0:
        return 0
    deficiency = (to_avg - from_avg) / to_avg * 100
    return max(0, round_half_up(deficiency, 2))


def report_bilateral_deficiency(left_avg: float | None, right_avg: float | None) -> int:
    """Symmetric deficiency between the two side averages, whole percent."""
    if not left_avg or not right_avg:
        return 0
    high = max(left_avg, right_avg)
    low = min(left_avg, right_avg)
    return int(round_half_up((high - low) / high * 100))


def percent_of_norm(value: float | None, norm: float | None) -> float:
    if not norm or norm <= 0 or value is None:
        return 0
    return round_half_up(value / norm * 100, 2)


def norm_for_side(test: dict, side: str) -> float:
    """Standardised norm for a side, falling back to the evaluator's target value."""
    info = infer_norms(f"{test.get('testId') or ''} {test.get('testName') or ''}")
    v = info.left if side == "left" else info.right
    if isinstance(v, (int, float)) and v > 0:
        return float(v)
    base = test.get("valueToBeTestedNumber") or ""
    if side == "left":
        raw = test.get("valueToBeTestedNumberLeft") or base
    else:
        raw = test.get("valueToBeTestedNumberRight") or base
    n = to_number(raw)
    return n if n is not None else 0


def summarize_test(test: dict) -> dict[str, Any]:
    """Per-side averages, variation and norm comparison for one test."""
    left = as_measurements(test.get("leftMeasurements"))
    right = as_measurements(test.get("rightMeasurements"))
    left_avg = average(left)
    right_avg = average(right)
    left_norm = norm_for_side(test, "left")
    right_norm = norm_for_side(test, "right")
    info = infer_norms(f"{test.get('testId') or ''} {test.get('testName') or ''}")
    return {
        "left_average": left_avg,
        "right_average": right_avg,
        "left_cv": coefficient_of_variation(left),
        "right_cv": coefficient_of_variation(right),
        "left_report_cv": report_cv(left),
        "right_report_cv": report_cv(right),
        "left_deficiency": bilateral_deficiency(left, right),
        "right_deficiency": bilateral_deficiency(right, left),
        "bilateral_deficiency": report_bilateral_deficiency(left_avg, right_avg),
        "unit": info.unit,
        "left_norm": left_norm,
        "right_norm": right_norm,
        "left_percent_of_norm": percent_of_norm(left_avg, left_norm),
        "right_percent_of_norm": percent_of_norm(right_avg, right_norm),
    }
