"""
Functional Abilities Determination: job requirements and job match.

Builds the table model behind the "Functional Abilities Determination and
Job Match Results" report section: one row per test grouped by section,
sit/stand time totals, effort counts and the consistency crosschecks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from fce import categorization
from fce.crosschecks import Crosscheck, compute_crosschecks
from fce.stats import as_measurements, average, to_number

BASE_SIT_MINUTES = 45
BASE_STAND_MINUTES = 5
MINUTES_PER_TEST = 5
KG_TO_LB = 2.20462

LEGEND = "L=Left, R=Right, F=Flexion, E=Extension, %IS=% Industrial Standard, HR=Heart Rate"

STATIC_ROWS = (
    ("Client Interview Test", "45 min", "", "N/A",
     "Initial assessment and history gathering", "Basic interview requirements", "Yes"),
    ("Activity Overview", "", "5 min", "//",
     "General activity overview and preparation", "Basic standing and mobility", "Yes"),
)

_STANDING_WORDS = (
    "lumbar", "cervical", "thoracic", "shoulder", "elbow", "wrist", "reach",
    "crouch", "stoop", "bend", "balance", "climb", "walk", "push", "pull",
    "carry", "lift", "overhead",
)


@dataclass
class JobRequirement:
    requirement: str
    kind: str
    unit: str = ""
    light_work: Optional[float] = None
    medium_work: Optional[float] = None
    norm: Optional[float] = None
    functional_min: Optional[float] = None


def _weight(text: str, light: float, medium: float) -> JobRequirement:
    return JobRequirement(text, "weight", "kg", light_work=light, medium_work=medium)


def _degrees(text: str, norm: float, functional_min: float) -> JobRequirement:
    return JobRequirement(text, "degrees", "degrees", norm=norm, functional_min=functional_min)


def job_requirements(test_name: str | None) -> JobRequirement:
    """Industry job-demand standard for a test, looked up by name."""
    n = (test_name or "").lower()

    if "grip" in n:
        return _weight("Grip strength ≥20 kg (Light work) / ≥30 kg (Medium work)", 20, 30)
    if "pinch" in n:
        if "key" in n:
            return _weight("Key pinch ≥4.3 kg (Light) / ≥7.0 kg (Medium work)", 4.3, 7.0)
        if "tip" in n:
            return _weight("Tip pinch ≥1.8 kg (Light) / ≥3.7 kg (Medium work)", 1.8, 3.7)
        if "palmar" in n:
            return _weight("Palmar pinch ≥2.1 kg (Light) / ≥4.3 kg (Medium work)", 2.1, 4.3)

    if "cervical" in n:
        if "flexion" in n:
            return _degrees("Cervical flexion ≥45°", 45, 45)
        if "extension" in n:
            return _degrees("Cervical extension ≥45°", 45, 45)
        if "lateral" in n:
            return _degrees("Cervical lateral flexion ≥35°", 35, 35)
    if "lumbar" in n:
        if "flexion" in n:
            return _degrees("Lumbar flexion ≥80°", 80, 60)
        if "extension" in n:
            return _degrees("Lumbar extension ≥20°", 20, 15)
    if "shoulder" in n:
        if "flexion" in n:
            return _degrees("Shoulder flexion ≥150°", 150, 120)
        if "abduction" in n:
            return _degrees("Shoulder abduction ≥150°", 150, 120)
        if "extension" in n:
            return _degrees("Shoulder extension ≥45°", 45, 30)
    if "hip" in n:
        if "flexion" in n:
            return _degrees("Hip flexion ≥90°", 90, 80)
        if "extension" in n:
            return _degrees("Hip extension ≥20°", 20, 15)
        if "abduction" in n:
            return _degrees("Hip abduction ≥35°", 35, 25)

    if "lift" in n:
        return _weight("Lifting capacity ≥10 kg (Light) / ≥25 kg (Medium work)", 10, 25)
    if "step" in n or "cardio" in n or "treadmill" in n:
        return JobRequirement("Cardiovascular endurance within normal limits for work demands", "cardio", "bpm")
    return JobRequirement("Functional capacity within normal work demands", "general")


def _fmt(value: float) -> str:
    return f"{value:g}"


def evaluate_job_match(test: dict) -> bool:
    """Whether the demonstrated result meets the job demand.

    An explicit evaluator decision wins, then the norm-level override, then
    a comparison of the best side against the evaluator target or the
    industry standard, then whether the task was demonstrated at all.
    """
    if test.get("jobMatch") == "matched":
        return True
    if test.get("jobMatch") == "not_matched":
        return False
    if test.get("normLevel") == "yes":
        return True
    if test.get("normLevel") == "no":
        return False

    req = job_requirements(test.get("testName"))
    left_avg = average(test.get("leftMeasurements"))
    right_avg = average(test.get("rightMeasurements"))
    target = to_number(test.get("valueToBeTestedNumber")) if test.get("valueToBeTestedNumber") else None

    if req.kind == "weight":
        best = max(left_avg, right_avg)
        if target is not None:
            return best >= target
        if req.light_work:
            return best >= req.light_work

    if req.kind == "degrees":
        name = str(test.get("testName") or "").lower()
        # Paired flexion/extension tests record flexion in the left column
        if "flexion" in name and "extension" in name:
            result = left_avg
        else:
            result = max(left_avg, right_avg)
        if target is not None:
            return result >= target
        if req.functional_min:
            return result >= req.functional_min
        if req.norm:
            return result >= req.norm

    return test.get("demonstrated") is True


def requirements_text(test: dict) -> str:
    req = job_requirements(test.get("testName"))
    target = test.get("valueToBeTestedNumber")
    if target and req.kind == "weight":
        return f"Target: {target} {test.get('valueToBeTestedUnit') or req.unit}"
    if test.get("normLevel") == "yes":
        return "Within Normal Limits"
    if test.get("normLevel") == "no":
        return "Below Normal Limits"
    if req.kind == "weight" and req.light_work and req.medium_work:
        return f"≥{_fmt(req.light_work)} {req.unit} (Light) / ≥{_fmt(req.medium_work)} {req.unit} (Medium)"
    if req.kind == "degrees" and req.functional_min and req.norm:
        return f"≥{_fmt(req.functional_min)}° (Min) / ≥{_fmt(req.norm)}° (Normal)"
    return "Functional Assessment"


def results_text(test: dict, category: str) -> str:
    result = test.get("result")
    if result and isinstance(result, str):
        return result

    left = as_measurements(test.get("leftMeasurements"))
    right = as_measurements(test.get("rightMeasurements"))
    left_avg = average(left)
    right_avg = average(right)

    if category == categorization.CARDIO:
        pre = max(to_number(left.get("preHeartRate")) or 0, to_number(right.get("preHeartRate")) or 0)
        post = max(to_number(left.get("postHeartRate")) or 0, to_number(right.get("postHeartRate")) or 0)
        if pre > 0 or post > 0:
            return f"{_fmt(pre)}//{_fmt(post)}"
        return "Norm"
    if category == categorization.OCCUPATIONAL:
        return f"%IS={(left_avg + right_avg) / 2:.1f}"
    if category in (categorization.ROM_HAND_FOOT, categorization.ROM_SPINE_EXTREMITY):
        name = str(test.get("testName") or "").lower()
        if "lateral" in name and not ("flexion" in name and "extension" in name):
            return f"L={left_avg:.2f} R={right_avg:.2f}"
        return f"F={left_avg:.2f} E={right_avg:.2f}"

    if "lift" in str(test.get("testName") or "").lower():
        unit = str(
            test.get("unitMeasure") or test.get("valueToBeTestedUnit") or job_requirements(test.get("testName")).unit
        ).lower()
        base = left_avg if left_avg > 0 else right_avg
        if base > 0:
            pounds = base * KG_TO_LB if unit == "kg" else base
            return f"{pounds:.1f} lbs"
    return f"L={left_avg:.1f} R={right_avg:.1f}"


def is_standing_test(test: dict) -> bool:
    name = str(test.get("testName") or "").lower()
    return any(w in name for w in _STANDING_WORDS)


def _dict_or_empty(*candidates: Any) -> dict:
    for c in candidates:
        if isinstance(c, dict) and c:
            return c
    return {}


def unify_tests(body: dict) -> list[dict]:
    """Tests for the job-match table, from ``testData.tests`` or MTM data."""
    test_data = body.get("testData") or {}
    tests = test_data.get("tests") if isinstance(test_data, dict) else None
    unified: list[dict] = []

    if isinstance(tests, list) and tests:
        for test in tests:
            if not isinstance(test, dict):
                continue
            unified.append({
                "testId": test.get("testId") or "",
                "testName": test.get("testName") or "",
                "category": test.get("category") or test.get("testType") or "",
                "leftMeasurements": as_measurements(test.get("leftMeasurements")),
                "rightMeasurements": as_measurements(test.get("rightMeasurements")),
                "valueToBeTestedNumber": test.get("valueToBeTestedNumber") or test.get("target"),
                "valueToBeTestedUnit": test.get("valueToBeTestedUnit") or "",
                "result": test.get("result") or "",
                "comments": test.get("comments") or test.get("description") or "",
                "normLevel": test.get("normLevel"),
                "demonstrated": test.get("demonstrated"),
                "jobRequirements": test.get("jobRequirements") or "",
                "jobMatch": test.get("jobMatch"),
                "effort": test.get("effort") or "",
                "unitMeasure": test.get("unitMeasure") or "",
            })
        return unified

    mtm = body.get("mtmTestData") or {}
    items = mtm if isinstance(mtm, list) else list(mtm.values()) if isinstance(mtm, dict) else []
    for item in items:
        if not isinstance(item, dict):
            continue
        measurements = item.get("measurements") if isinstance(item.get("measurements"), dict) else {}
        unified.append({
            "testId": item.get("testId") or item.get("id") or "",
            "testName": item.get("testName") or item.get("name") or item.get("id") or "Test",
            "category": item.get("mtmCategory") or item.get("category") or item.get("testType") or "",
            "leftMeasurements": _dict_or_empty(
                item.get("leftMeasurements"), item.get("measurementsLeft"), measurements.get("left"), item.get("left"),
            ),
            "rightMeasurements": _dict_or_empty(
                item.get("rightMeasurements"), item.get("measurementsRight"), measurements.get("right"), item.get("right"),
            ),
            "valueToBeTestedNumber": item.get("valueToBeTestedNumber") or item.get("target"),
            "valueToBeTestedUnit": item.get("valueToBeTestedUnit") or "",
            "result": item.get("result") or "",
            "comments": item.get("comments") or item.get("description") or "",
            "normLevel": item.get("normLevel"),
            "demonstrated": item.get("demonstrated"),
            "jobRequirements": item.get("jobRequirements") or "",
            "jobMatch": item.get("jobMatch"),
            "effort": item.get("effort") or "",
            "unitMeasure": item.get("unitMeasure") or "",
        })
    return unified


def effort_counts(tests: list[dict]) -> dict[str, int]:
    counts = {"poor": 0, "fair": 0, "good": 0}
    for test in tests:
        effort = str(test.get("effort") or "").lower()
        if effort == "poor":
            counts["poor"] += 1
        elif effort == "good":
            counts["good"] += 1
        else:
            # fair, average, "fair to average" and unrecorded effort
            counts["fair"] += 1
    return counts


@dataclass
class FadRow:
    activity: str
    sit_time: str
    stand_time: str
    results: str
    job_description: str
    job_requirements: str
    job_match: str

    def cells(self) -> list[str]:
        return [
            self.activity, self.sit_time, self.stand_time, self.results,
            self.job_description, self.job_requirements, self.job_match,
        ]


@dataclass
class FadTable:
    sections: dict[str, list[FadRow]] = field(default_factory=dict)
    total_sit_minutes: int = BASE_SIT_MINUTES
    total_stand_minutes: int = BASE_STAND_MINUTES
    efforts: dict[str, int] = field(default_factory=dict)
    total_tests: int = 0
    crosschecks: list[Crosscheck] = field(default_factory=list)

    @property
    def static_rows(self) -> list[FadRow]:
        return [FadRow(*row) for row in STATIC_ROWS]

    def effort_rows(self) -> list[tuple[str, str]]:
        return [
            ("Poor effort", f"{self.efforts.get('poor', 0)} out of {self.total_tests} Tests"),
            ("Fair to Average effort", f"{self.efforts.get('fair', 0)} out of {self.total_tests} Tests"),
            ("Good effort", f"{self.efforts.get('good', 0)} out of {self.total_tests} Tests"),
        ]


def build_fad_table(body: dict) -> FadTable:
    tests = unify_tests(body)
    table = FadTable(total_tests=len(tests))

    grouped: dict[str, list[dict]] = {c: [] for c in categorization.categories_in_order()}
    for test in tests:
        grouped[categorization.fad_category(test)].append(test)

    for category, members in grouped.items():
        if not members:
            continue
        rows = []
        for test in members:
            standing = is_standing_test(test)
            rows.append(FadRow(
                activity=test.get("testName") or "",
                sit_time="" if standing else f"{MINUTES_PER_TEST} min",
                stand_time=f"{MINUTES_PER_TEST} min" if standing else "",
                results=results_text(test, category),
                job_description=test.get("jobRequirements") or "Functional capacity assessment",
                job_requirements=requirements_text(test),
                job_match="Yes" if evaluate_job_match(test) else "No",
            ))
            if standing:
                table.total_stand_minutes += MINUTES_PER_TEST
            else:
                table.total_sit_minutes += MINUTES_PER_TEST
        table.sections[category] = rows

    table.efforts = effort_counts(tests)
    table.crosschecks = compute_crosschecks(tests, body.get("referralQuestionsData"))
    return table
