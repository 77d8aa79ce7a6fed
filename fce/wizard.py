"""Evaluation wizard steps and their completion rules.

Steps unlock in order: a step is available once the step before it is
complete. Progress is reported as a percentage of completed steps.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional


class StepUnavailableError(ValueError):
    """Raised when completing a step whose predecessor is not complete."""


@dataclass(frozen=True)
class WizardStep:
    id: int
    key: str
    title: str
    description: str
    section: Optional[str] = None


STEPS = (
    WizardStep(1, "claimant", "ENTER CLAIMANT INFO",
               "Input basic claimant information and case details", "claimant"),
    WizardStep(2, "pain-illustration", "ENTER IN CLAIMANT PAIN ILLUSTRATION",
               "Document pain locations and severity levels", "painIllustration"),
    WizardStep(3, "activity-rating", "COMPLETE PERCEIVED ABILITY CHART",
               "Assess claimant's perceived functional abilities", "activityRating"),
    WizardStep(4, "referral", "ENTER IN REFERRAL QUESTIONS",
               "Complete referral-specific questions and requirements", "referral"),
    WizardStep(5, "protocol", "SELECT PROTOCOL OR TESTS",
               "Choose appropriate evaluation protocols and tests", "protocol"),
    WizardStep(6, "test-data", "ENTER IN TEST DATA",
               "Input all test results and measurements", "testData"),
    WizardStep(7, "digital-library", "UPLOAD DIGITAL LIBRARY",
               "Upload documents, images, and files to your digital library", "digitalLibrary"),
    WizardStep(8, "review", "REVIEW REPORT",
               "Review all collected data before generating final report"),
    WizardStep(9, "download", "DOWNLOAD REPORT",
               "Generate and download final evaluation report"),
)

STEP_IDS = tuple(step.id for step in STEPS)


def get_step(step_id: int) -> Optional[WizardStep]:
    for step in STEPS:
        if step.id == step_id:
            return step
    return None


def normalize_completed(completed: Iterable[int] | None) -> list[int]:
    """Known step ids from *completed*, deduplicated and sorted."""
    return sorted({int(s) for s in completed or [] if int(s) in STEP_IDS})


def is_step_available(step_id: int, completed: Iterable[int]) -> bool:
    if step_id not in STEP_IDS:
        return False
    if step_id == STEP_IDS[0]:
        return True
    return (step_id - 1) in set(completed)


def next_available_step(completed: Iterable[int]) -> Optional[int]:
    done = set(completed)
    for step_id in STEP_IDS:
        if step_id in done:
            continue
        if is_step_available(step_id, done):
            return step_id
    return None


def progress_percent(completed: Iterable[int]) -> int:
    done = normalize_completed(completed)
    if STEP_IDS[-1] in done:
        return 100
    return round(len(done) / len(STEPS) * 100)


def step_status(step_id: int, completed: Iterable[int]) -> str:
    done = set(completed)
    if step_id in done:
        return "completed"
    if step_id == next_available_step(done):
        return "in_progress"
    return "pending"


def complete_step(step_id: int, completed: Iterable[int]) -> list[int]:
    """Return the completed list with *step_id* added.

    Raises StepUnavailableError when the step does not exist or its
    predecessor has not been completed.
    """
    done = normalize_completed(completed)
    if get_step(step_id) is None:
        raise StepUnavailableError(f"Unknown step {step_id}")
    if not is_step_available(step_id, done):
        raise StepUnavailableError(f"Step {step_id} is not available until step {step_id - 1} is complete")
    if step_id not in done:
        done.append(step_id)
    return sorted(done)


def progress(completed: Iterable[int] | None) -> dict:
    done = normalize_completed(completed)
    return {
        "completedSteps": done,
        "nextStep": next_available_step(done),
        "percent": progress_percent(done),
        "steps": [
            {
                "id": step.id,
                "key": step.key,
                "title": step.title,
                "description": step.description,
                "available": is_step_available(step.id, done),
                "status": step_status(step.id, done),
            }
            for step in STEPS
        ],
    }
