"""
Accessors for the report request body.

A report body is the wizard state as the client posts it: ``claimantData``,
``evaluatorData``, ``referralQuestionsData``, ``testData``, ``mtmTestData``,
``cardioTestData``, ``activityRatingData``, ``painIllustrationData`` and
``digitalLibraryData``. Every section is optional, so all accessors fall back
to empty values instead of raising.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Optional

from fce.cardio import age_from_dob

DEFAULT_CLINIC_NAME = "MedSource"
DEFAULT_CLINIC_ADDRESS = "1490-5A Quarterpath Road #242, Williamsburg, VA 23185"

_FILENAME_UNSAFE_RE = re.compile(r"[^a-zA-Z0-9]")


def section(body: dict, key: str) -> dict:
    value = (body or {}).get(key)
    return value if isinstance(value, dict) else {}


def claimant_name(body: dict) -> str:
    """``claimantName`` if given, else "Last, First", else "Unknown"."""
    if body.get("claimantName"):
        return str(body["claimantName"])
    cd = section(body, "claimantData")
    name = f"{cd.get('lastName') or ''}, {cd.get('firstName') or ''}".strip()
    # "," alone means both parts were empty
    return name if name.strip(", ") else "Unknown"


def report_filename(body: dict, extension: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    safe = _FILENAME_UNSAFE_RE.sub("_", claimant_name(body))
    return f"FCE_Report_{safe}_{today.isoformat()}.{extension}"


def clinic_details(body: dict) -> dict[str, str]:
    ev = section(body, "evaluatorData")
    phone = ev.get("clinicPhone") or body.get("clinicPhone") or ""
    fax = ev.get("clinicFax") or body.get("clinicFax") or ""
    parts = []
    if phone:
        parts.append(f"Phone: {phone}")
    if fax:
        parts.append(f"Fax: {fax}")
    return {
        "name": ev.get("clinicName") or body.get("clinicName") or DEFAULT_CLINIC_NAME,
        "address": ev.get("clinicAddress") or body.get("clinicAddress") or DEFAULT_CLINIC_ADDRESS,
        "phone_fax": "    ".join(parts),
    }


def logo_source(body: dict) -> Any:
    ev = section(body, "evaluatorData")
    for candidate in (body.get("logoPath"), ev.get("clinicLogo"), body.get("logoUrl"), body.get("logo")):
        if candidate:
            return candidate
    return None


def evaluation_date(body: dict, today: Optional[date] = None) -> str:
    cd = section(body, "claimantData")
    value = body.get("evaluationDate") or cd.get("evaluationDate")
    return str(value) if value else (today or date.today()).isoformat()


def claim_number(body: dict) -> str:
    cd = section(body, "claimantData")
    return str(body.get("claimNumber") or cd.get("claimNumber") or "N/A")


def _with_unit(value: Any, unit: Any) -> str:
    return f"{value or ''} {unit or ''}".strip()


def client_info_rows(body: dict, today: Optional[date] = None) -> list[tuple[str, str, str, str]]:
    """Two-column demographics table rows: (label, value, label, value)."""
    cd = section(body, "claimantData")
    ev = section(body, "evaluatorData")
    full_name = f"{cd.get('firstName') or ''} {cd.get('lastName') or ''}".strip()
    dob = cd.get("dateOfBirth") or ""
    age = age_from_dob(dob, today)
    dob_display = f"{dob or 'N/A'}{f' ({age})' if age is not None else ''}"
    referred_by = cd.get("referredBy") or cd.get("physician") or ""
    return [
        ("Name:", full_name or "N/A", "ID:", cd.get("claimantId") or body.get("claimNumber") or "N/A"),
        ("Address:", cd.get("address") or "N/A", "DOB (Age):", dob_display),
        ("Gender:", cd.get("gender") or "N/A", "Height:", _with_unit(cd.get("height"), cd.get("heightUnit")) or "N/A"),
        ("Home Phone:", cd.get("phone") or "N/A", "Weight:", _with_unit(cd.get("weight"), cd.get("weightUnit")) or "N/A"),
        ("Work Phone:", cd.get("workPhone") or "n/a", "Dominant Hand:", cd.get("dominantHand") or "N/A"),
        ("Occupation:", cd.get("currentOccupation") or cd.get("occupation") or "N/A",
         "Referred By:", referred_by or "N/A"),
        ("Employer(SIC):", cd.get("employer") or "N/A", "Resting Pulse:", cd.get("restingPulse") or ""),
        ("Insurance:", cd.get("insurance") or "N/A", "BP Sitting:", cd.get("bpSitting") or ""),
        ("Physician:", referred_by or "N/A", "Tested By:", ev.get("name") or ""),
    ]


def referral_questions(body: dict) -> list[dict]:
    questions = section(body, "referralQuestionsData").get("questions") or body.get("referralQuestions") or []
    return [q for q in questions if isinstance(q, dict)]


def conclusion_data(body: dict) -> dict:
    data = section(body, "referralQuestionsData").get("conclusionData")
    return data if isinstance(data, dict) else {}


def return_to_work_status(body: dict) -> dict:
    """Selected status and comments; the conclusion's copy wins when both exist."""
    for candidate in (
        conclusion_data(body).get("returnToWorkStatus"),
        section(body, "referralQuestionsData").get("returnToWorkStatus"),
    ):
        if isinstance(candidate, dict) and candidate.get("status"):
            return candidate
    return {}


def main_tests(body: dict) -> list[dict]:
    tests = section(body, "testData").get("tests") or []
    return [t for t in tests if isinstance(t, dict)]


def mtm_entries(body: dict) -> list[tuple[str, dict]]:
    """(test type, data) pairs from ``mtmTestData`` (or the older ``mtmData``)."""
    data = body.get("mtmTestData") or body.get("mtmData") or {}
    if isinstance(data, list):
        return [
            (str(item.get("testId") or item.get("id") or i), item)
            for i, item in enumerate(data) if isinstance(item, dict)
        ]
    if isinstance(data, dict):
        return [(key, value) for key, value in data.items() if isinstance(value, dict)]
    return []


def activity_ratings(body: dict) -> list[tuple[str, Any]]:
    activities = section(body, "activityRatingData").get("activities") or []
    return [
        (str(a.get("name") or ""), a.get("rating"))
        for a in activities if isinstance(a, dict)
    ]


def pain_images(body: dict) -> list[Any]:
    pain = section(body, "painIllustrationData")
    views = pain.get("compositedViews")
    if isinstance(views, dict):
        views = list(views.values())
    if isinstance(views, list) and views:
        return views
    saved = pain.get("savedImageData")
    return list(saved[:3]) if isinstance(saved, list) else []


def library_files(body: dict) -> list[Any]:
    files = section(body, "digitalLibraryData").get("savedFileData") or []
    return list(files) if isinstance(files, list) else []
