"""
Range-of-motion pairing and label inference.

Extremity ROM tests are recorded once per side (``...-left`` / ``...-right``
ids), each holding two motions: the "left" measurements column carries the
first motion (e.g. flexion) and the "right" column the second (extension).
The helpers here turn those ids and names into report row labels.
"""

from __future__ import annotations

import re
from typing import Optional

from fce.stats import as_measurements, average, report_cv, round_half_up

_PAIRED_RE = re.compile(r"\b(rom|range)\b")
_SIDE_SUFFIX_RE = re.compile(r"-(left|right)$", re.IGNORECASE)
_SIDE_PREFIX_RE = re.compile(r"^(Left|Right)\s+Side\s*-\s*", re.IGNORECASE)
_SIDE_PREFIX_SPLIT_RE = re.compile(r"^(Left|Right)\s+Side\s*-\s*(.+)$", re.IGNORECASE)
_SPINE_PART_RE = re.compile(r"\b(cervical|lumbar|thoracic)\b")
_SPINE_MOTION_RE = re.compile(r"\b(spine|range|motion|flexion|extension)\b")

_MOTION_WORDS = (
    "Internal|External|Flexion|Extension|Rotation|Abduction|Adduction|Supination|"
    "Pronation|Dorsi|Plantar|Inversion|Eversion|Radial|Ulnar|Deviation|Raise"
)
_STRIP_MOTION_RE = re.compile(
    rf"\s+[A-Za-z/]*(?:{_MOTION_WORDS})[A-Za-z/\s]*.*$", re.IGNORECASE
)
_BODY_BEFORE_MOTION_RE = re.compile(rf"^(.+?)\s+[A-Za-z/]*(?:{_MOTION_WORDS})", re.IGNORECASE)
_BODY_DASHED_RE = re.compile(
    rf"^([A-Z][a-zA-Z\s]+?)\s*(?:-|:)\s*[A-Za-z/]*(?:{_MOTION_WORDS})", re.IGNORECASE
)

KNOWN_MOVEMENTS = (
    "flexion", "extension", "abduction", "adduction", "rotation", "internal",
    "external", "supination", "pronation", "radial", "ulnar", "deviation",
    "dorsi", "plantar", "inversion", "eversion",
)

# (substrings, full labels, abbreviated labels); first match wins
_MOTION_PAIRS: list[tuple[tuple[str, ...], tuple[str, str], tuple[str, str]]] = [
    (("flexion-extension", "flexion/extension"), ("Flexion", "Extension"), ("F", "E")),
    (("dorsi-plantar", "dorsi/plantar", "dorsiplantar"), ("Dorsi Flexion", "Plantar Flexion"), ("DF", "PF")),
    (("inversion-eversion", "inversion/eversion"), ("Inversion", "Eversion"), ("I", "E")),
    (("supination-pronation", "supination/pronation"), ("Supination", "Pronation"), ("S", "P")),
    (
        (
            "internal-external-rotation", "internal/external rotation",
            "internal/external-rotation", "internal external rotation",
        ),
        ("Internal Rotation", "External Rotation"),
        ("I", "E"),
    ),
    (("abduction-adduction", "abduction/adduction"), ("Abduction", "Adduction"), ("ABD", "ADD")),
    (("radial-ulnar", "radial/ulnar", "radial ulnar"), ("Radial Deviation", "Ulnar Deviation"), ("R", "U")),
    (("straight-leg-raise", "straight leg raise"), ("Left", "Right"), ("L", "R")),
    (("thumb-abduction", "thumb abduction"), ("Palmar", "Radial"), ("P", "R")),
]


def is_paired_rom_test(test_id: str | None) -> bool:
    if not test_id:
        return False
    tid = test_id.lower()
    return bool(_PAIRED_RE.search(tid)) and tid.endswith(("left", "right"))


def is_spine_rom_test(test_id: str | None, test_name: str | None = None) -> bool:
    """Cervical/lumbar/thoracic ROM, judged by three-consecutive-trial validity."""
    if not test_id and not test_name:
        return False
    combined = f"{test_id or ''} {test_name or ''}".lower()
    return bool(_SPINE_PART_RE.search(combined)) and bool(_SPINE_MOTION_RE.search(combined))


def base_rom_test_id(test_id: str | None) -> str:
    if not test_id:
        return ""
    return _SIDE_SUFFIX_RE.sub("", test_id)


def side_from_test_id(test_id: str | None) -> Optional[str]:
    if not test_id:
        return None
    m = _SIDE_SUFFIX_RE.search(test_id)
    return m.group(1).lower() if m else None


def movements_from_rom_test(test_id: str | None) -> list[str]:
    if not test_id:
        return []
    tid = test_id.lower()
    return [m for m in KNOWN_MOVEMENTS if m in tid]


def _side_title(side: str) -> str:
    return side[:1].upper() + side[1:].lower()


def format_rom_test_with_side(base_name: str, side: str) -> str:
    """"Shoulder Flexion/Extension", "left" -> "Left Side - Shoulder Flexion/Extension"."""
    clean = _SIDE_PREFIX_RE.sub("", base_name)
    return f"{_side_title(side)} Side - {clean}"


def rom_side_display_data(test_name: str, side: str, value: float, norm: float | None = None) -> dict:
    side_name = _side_title(side)
    clean = _SIDE_PREFIX_RE.sub("", test_name)
    return {"side": side_name, "label": f"{side_name} Side - {clean}", "value": value, "norm": norm}


def should_display_separate_side_rows(test_id: str | None) -> bool:
    return is_paired_rom_test(test_id)


def _match_pair(test_id: str | None, test_name: str | None, index: int) -> Optional[tuple[str, str]]:
    combined = f"{test_id or ''} {test_name or ''}".lower()
    for needles, full, abbreviated in _MOTION_PAIRS:
        if any(n in combined for n in needles):
            return full if index == 1 else abbreviated
    return None


def full_motion_labels(test_id: str | None, test_name: str | None = None) -> Optional[tuple[str, str]]:
    return _match_pair(test_id, test_name, 1)


def paired_motion_labels(test_id: str | None, test_name: str | None = None) -> Optional[tuple[str, str]]:
    return _match_pair(test_id, test_name, 2)


def motion_labels(test_id: str | None, test_name: str | None = None) -> Optional[dict[str, tuple[str, str]]]:
    full = full_motion_labels(test_id, test_name)
    if full is None:
        return None
    return {"full": full, "abbreviated": paired_motion_labels(test_id, test_name)}


def extract_side_prefix(test_name: str | None, test_id: str | None = None) -> Optional[str]:
    """Return "Left Side - <body part>" when the test belongs to one side."""
    if not test_name:
        return None
    name = test_name.strip()
    m = _SIDE_SUFFIX_RE.search((test_id or "").lower())
    if m:
        side = "Left" if m.group(1).lower() == "left" else "Right"
        clean = _SIDE_PREFIX_RE.sub("", name)
        return f"{side} Side - {_STRIP_MOTION_RE.sub('', clean)}"

    m = _SIDE_PREFIX_SPLIT_RE.match(name)
    if m:
        return f"{m.group(1)} Side - {_STRIP_MOTION_RE.sub('', m.group(2))}"
    return None


def extract_body_part(test_name: str | None) -> Optional[str]:
    """"Lumbar - Flexion/Extension" -> "Lumbar"."""
    if not test_name:
        return None
    name = test_name.strip()

    m = _SIDE_PREFIX_SPLIT_RE.match(name)
    if m:
        rest = m.group(2)
        body = _BODY_BEFORE_MOTION_RE.match(rest)
        return body.group(1).strip() if body else rest

    m = _BODY_DASHED_RE.match(name)
    if m:
        return m.group(1).strip()

    m = _BODY_BEFORE_MOTION_RE.match(name)
    if m:
        return m.group(1).strip()
    return None


def _labels_from_body(test_name: str, test_id: str | None, motions: tuple[str, str]) -> Optional[tuple[str, str]]:
    prefix = extract_side_prefix(test_name, test_id)
    if prefix:
        m = re.match(r"^(?:Left|Right)\s+Side\s*-\s*(.+)$", prefix)
        body = m.group(1) if m else prefix
        return (f"{body} {motions[0]}", f"{body} {motions[1]}")

    body = extract_body_part(test_name)
    if not body:
        return None
    return (f"{body} - {motions[0]}", f"{body} - {motions[1]}")


def area_evaluated_labels(test_name: str | None, test_id: str | None = None) -> Optional[tuple[str, str]]:
    """Row labels for the two measurement columns, abbreviated motions."""
    if not test_name:
        return None
    tid = (test_id or "").lower()
    combined = f"{tid} {test_name.lower()}"

    if "straight-leg-raise" in combined or "straight leg raise" in combined:
        return (test_name, test_name)
    if "cervical-spine-rotation" in tid and "-left" not in tid and "-right" not in tid:
        return ("Left Side Cervical Rotation", "Right Side Cervical Rotation")
    if "thumb-abduction" in combined or "thumb abduction" in combined:
        full = full_motion_labels(test_id, test_name)
        if full:
            return (f"{full[0]} Thumb Abduction", f"{full[1]} Thumb Abduction")

    motions = paired_motion_labels(test_id, test_name)
    if not motions:
        return None
    return _labels_from_body(test_name, test_id, motions)


def full_area_evaluated_labels(test_name: str | None, test_id: str | None = None) -> Optional[tuple[str, str]]:
    """Row labels with full motion names, used on test data pages."""
    if not test_name:
        return None
    tid = (test_id or "").lower()
    combined = f"{tid} {test_name.lower()}"
    unsided = "-left" not in tid and "-right" not in tid

    if "straight-leg-raise" in combined or "straight leg raise" in combined:
        return (test_name, test_name)
    if "thumb-ip-flexion" in tid and "extension" not in tid and unsided:
        return ("Left Side Thumb IP Flexion", "Right Side Thumb IP Flexion")
    if "cervical-spine-rotation" in tid and unsided:
        return ("Left Side Cervical Rotation", "Right Side Cervical Rotation")
    if "great-toe-ip-flexion" in tid and "mp" not in tid and unsided:
        return ("Left Side Toe IP Flexion", "Right Side Toe IP Flexion")
    if "thumb-abduction" in combined or "thumb abduction" in combined:
        full = full_motion_labels(test_id, test_name)
        if full:
            return (f"{full[0]} Thumb Abduction", f"{full[1]} Thumb Abduction")

    motions = full_motion_labels(test_id, test_name)
    if not motions:
        return None
    return _labels_from_body(test_name, test_id, motions)


# Lumbar ROM summary rows: (label, test selector, measurement side, norm)
_LUMBAR_ROWS = (
    ("Lumbar Flexion", "flexion-extension", "leftMeasurements", 60),
    ("Lumbar Extension", "flexion-extension", "rightMeasurements", 25),
    ("Lateral Flexion - Left", "lateral-flexion", "leftMeasurements", 25),
    ("Lateral Flexion - Right", "lateral-flexion", "rightMeasurements", 25),
)


def _find_lumbar_test(tests: list[dict], kind: str) -> Optional[dict]:
    for test in tests:
        tid = str(test.get("testId") or "").lower()
        name = str(test.get("testName") or "").lower()
        if "lumbar" not in f"{tid} {name}":
            continue
        if kind == "lateral-flexion" and "lateral" in f"{tid} {name}":
            return test
        if kind == "flexion-extension" and "lateral" not in f"{tid} {name}" and (
            "flexion" in f"{tid} {name}" or "extension" in f"{tid} {name}"
        ):
            return test
    return None


def lumbar_motion_rows(tests: list[dict] | None) -> list[dict]:
    """Lumbar range of motion summary from recorded lumbar tests.

    Each row is ``{"area", "data", "valid", "norm", "percent"}`` formatted
    for display. A side whose trials vary by 15% or more is marked ``Fail``.
    """
    tests = tests or []
    rows = []
    for label, kind, side_key, norm in _LUMBAR_ROWS:
        test = _find_lumbar_test(tests, kind)
        measurements = as_measurements((test or {}).get(side_key))
        value = average(measurements)
        if not test or value <= 0:
            rows.append({"area": label, "data": "N/A", "valid": "N/A", "norm": f"{norm}°", "percent": "N/A"})
            continue
        cv = report_cv(measurements)
        rows.append({
            "area": label,
            "data": f"{int(round_half_up(value))}°",
            "valid": "Pass" if cv < 15 else "Fail",
            "norm": f"{norm}°",
            "percent": f"{int(round_half_up(value / norm * 100))}%",
        })
    return rows
