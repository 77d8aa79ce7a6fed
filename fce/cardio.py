"""
Cardio test scoring.

Sources:
- Bruce RA et al., Am Heart J 1973 (treadmill protocol and VO2max estimates)
- CSEP mCAFT worksheet (stage cadence, O2 cost and start stage)
- YMCA Fitness Testing and Assessment Manual (3-minute step test ratings)
- Kasch Pulse Recovery Test ratings
- Ebbeling et al. 1991 (single-stage submaximal treadmill regression)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from fce.stats import round_half_up, to_number

logger = logging.getLogger(__name__)

RATINGS = ("Excellent", "Good", "Above Average", "Average", "Below Average", "Poor", "Very Poor")


@dataclass(frozen=True)
class BruceStage:
    stage: int
    speed_mph: float
    incline_pct: int


BRUCE_STAGES = (
    BruceStage(1, 1.7, 10),
    BruceStage(2, 2.5, 12),
    BruceStage(3, 3.4, 14),
    BruceStage(4, 4.2, 16),
    BruceStage(5, 5.0, 18),
    BruceStage(6, 5.5, 20),
    BruceStage(7, 6.0, 22),
)

# VO2max norms in ml/kg/min, Excellent .. Very Poor lower bounds are read
# from the printed ranges by vo2_rating
VO2_NORMS = {
    "male": [
        ("20-29", [">56", "50-56", "46-49", "42-45", "37-41", "31-36", "<31"]),
        ("30-39", [">54", "48-54", "44-47", "40-43", "35-39", "29-34", "<29"]),
        ("40-49", [">52", "46-52", "42-45", "38-41", "33-37", "27-32", "<27"]),
        ("50-59", [">50", "44-50", "40-43", "36-39", "31-35", "25-30", "<25"]),
        ("60+", [">48", "42-48", "38-41", "34-37", "29-33", "23-28", "<23"]),
    ],
    "female": [
        ("20-29", [">49", "43-49", "39-42", "35-38", "31-34", "25-30", "<25"]),
        ("30-39", [">47", "41-47", "37-40", "33-36", "29-32", "23-28", "<23"]),
        ("40-49", [">45", "39-45", "35-38", "31-34", "27-30", "21-26", "<21"]),
        ("50-59", [">43", "37-43", "33-36", "29-32", "25-28", "19-24", "<19"]),
        ("60+", [">41", "35-41", "31-34", "27-30", "23-26", "17-22", "<17"]),
    ],
}

# Stage -> (cadence steps/min, O2 cost female, O2 cost male)
MCAFT_STAGES = {
    1: (24, 15.3, 15.9),
    2: (27, 18.0, 18.6),
    3: (30, 20.7, 21.3),
    4: (33, 23.4, 24.0),
    5: (36, 26.1, 26.7),
}

# Age band -> (male start stage, female start stage)
MCAFT_START_STAGES = [
    ("15-19", 4, 3),
    ("20-29", 4, 3),
    ("30-39", 3, 2),
    ("40-49", 3, 2),
    ("50-59", 2, 2),
    ("60-69", 2, 1),
]

STEP_AGE_BANDS = ("18-25", "26-35", "36-45", "46-55", "56-65", "65+")

# One-minute recovery heart rate ranges per age band
KASCH_RATINGS = {
    "female": [
        ("Excellent", ["52-81", "58-80", "63-91", "60-92", "70-92", "73-86"]),
        ("Good", ["85-93", "85-92", "89-96", "95-101", "97-103", "96-101"]),
        ("Above Average", ["96-102", "96-101", "100-104", "106-111", "104-111", "103-115"]),
        ("Average", ["104-110", "104-110", "107-112", "113-118", "113-118", "116-121"]),
        ("Below Average", ["113-120", "113-119", "115-120", "120-124", "119-127", "123-126"]),
        ("Poor", ["122-131", "122-129", "124-132", "126-132", "129-135", "128-133"]),
        ("Very Poor", ["135+", "132+", "137+", "137+", "141+", "139+"]),
    ],
    "male": [
        ("Excellent", ["50-76", "51-76", "49-76", "56-82", "60-77", "59-81"]),
        ("Good", ["79-89", "79-85", "80-88", "87-94", "86-94", "87-92"]),
        ("Above Average", ["88-93", "88-94", "92-96", "97-100", "97-100", "94-102"]),
        ("Average", ["95-100", "96-102", "98-105", "103-111", "103-109", "104-113"]),
        ("Below Average", ["102-107", "104-110", "108-113", "113-119", "111-119", "116-124"]),
        ("Poor", ["111-119", "114-121", "116-124", "121-126", "122-128", "126-132"]),
        ("Very Poor", ["124+", "126+", "128+", "131+", "131+", "137+"]),
    ],
}

YMCA_STEP_RATINGS = {
    "male": [
        ("Excellent", ["50-76", "51-76", "49-76", "56-82", "60-77", "59-81"]),
        ("Good", ["79-84", "79-85", "80-88", "87-93", "86-94", "87-92"]),
        ("Above Average", ["88-93", "88-94", "92-98", "95-101", "97-100", "94-102"]),
        ("Average", ["95-100", "96-102", "100-105", "103-111", "103-109", "104-110"]),
        ("Below Average", ["102-107", "104-110", "108-113", "113-119", "111-117", "114-118"]),
        ("Poor", ["111-119", "114-121", "116-124", "121-126", "119-128", "121-126"]),
        ("Very Poor", ["124-157", "126-161", "130-163", "131-159", "131-154", "130-151"]),
    ],
    "female": [
        ("Excellent", ["52-81", "58-80", "51-84", "63-91", "60-92", "70-92"]),
        ("Good", ["85-93", "85-92", "89-96", "95-101", "97-103", "96-101"]),
        ("Above Average", ["96-102", "95-101", "100-104", "104-110", "106-111", "104-111"]),
        ("Average", ["104-110", "104-110", "107-112", "113-118", "113-118", "116-121"]),
        ("Below Average", ["113-120", "113-119", "115-120", "120-124", "119-127", "123-126"]),
        ("Poor", ["122-131", "122-129", "124-132", "126-132", "129-135", "128-133"]),
        ("Very Poor", ["135-169", "134-171", "137-169", "137-171", "141-174", "135-155"]),
    ],
}


def normalize_sex(value: Any) -> Optional[str]:
    text = str(value or "").strip().lower()
    if text in ("m", "male", "man"):
        return "male"
    if text in ("f", "female", "woman"):
        return "female"
    return None


def age_from_dob(dob: Any, today: Optional[date] = None) -> Optional[int]:
    """Whole years since an ISO date of birth, or None if unparseable."""
    if not dob:
        return None
    try:
        born = datetime.fromisoformat(str(dob)[:10]).date()
    except ValueError:
        return None
    today = today or date.today()
    years = today.year - born.year - ((today.month, today.day) < (born.month, born.day))
    return max(0, years)


def _band_index(bands: list[str] | tuple[str, ...], age: float) -> int:
    for i, band in enumerate(bands):
        if band.endswith("+"):
            if age >= float(band[:-1]):
                return i
            continue
        low, high = (float(x) for x in band.split("-"))
        if age < low and i == 0:
            return 0
        if low <= age <= high:
            return i
    return len(bands) - 1


def _upper_bound(text: str) -> float:
    if text.endswith("+"):
        return math.inf
    return float(text.split("-")[-1])


def _lower_bound(text: str) -> float:
    if text.startswith(">"):
        return float(text[1:]) + 1
    if text.startswith("<"):
        return -math.inf
    return float(text.split("-")[0])


# Bruce

def bruce_vo2max(minutes: float, sex: str | None) -> Optional[float]:
    """Estimated VO2max from total treadmill time in decimal minutes."""
    if minutes is None or minutes <= 0:
        return None
    t = minutes
    if sex == "female":
        vo2 = 4.38 * t - 3.9
    elif sex == "male":
        vo2 = 14.8 - 1.379 * t + 0.451 * t ** 2 - 0.012 * t ** 3
    else:
        return None
    return round_half_up(vo2, 1)


def bruce_stage_for_time(minutes: float) -> Optional[BruceStage]:
    """Stage reached after *minutes* on the treadmill (three minutes per stage)."""
    if minutes is None or minutes <= 0:
        return None
    index = min(int(minutes // 3), len(BRUCE_STAGES) - 1)
    return BRUCE_STAGES[index]


def vo2_rating(vo2: float | None, age: float | None, sex: str | None) -> Optional[str]:
    if vo2 is None or age is None or sex not in VO2_NORMS:
        return None
    table = VO2_NORMS[sex]
    _, ranges = table[_band_index([band for band, _ in table], age)]
    for rating, text in zip(RATINGS, ranges):
        if vo2 >= _lower_bound(text):
            return rating
    return RATINGS[-1]


# mCAFT

def mcaft_start_stage(age: float | None, sex: str | None) -> Optional[int]:
    if age is None or sex is None:
        return None
    bands = [band for band, _, _ in MCAFT_START_STAGES]
    _, male, female = MCAFT_START_STAGES[_band_index(bands, age)]
    return male if sex == "male" else female


def mcaft_o2_cost(stage: int, sex: str | None) -> Optional[float]:
    row = MCAFT_STAGES.get(stage)
    if row is None or sex is None:
        return None
    return row[2] if sex == "male" else row[1]


def mcaft_vo2max(o2_cost: float, mass_kg: float, age: float) -> float:
    return round_half_up(17.2 + 1.29 * o2_cost - 0.09 * mass_kg - 0.18 * age, 1)


# YMCA submaximal treadmill

def ymca_treadmill_vo2max(speed_mph: float, heart_rate: float, age: float, sex: str | None) -> float:
    male = 1 if sex == "male" else 0
    vo2 = (
        15.1
        + 21.8 * speed_mph
        - 0.327 * heart_rate
        - 0.263 * speed_mph * age
        + 0.00504 * heart_rate * age
        + 5.98 * male
    )
    return round_half_up(vo2, 1)


# Step tests

def recovery_rating(table: dict, heart_rate: float | None, age: float | None, sex: str | None) -> Optional[str]:
    """First rating whose upper heart-rate bound covers *heart_rate*."""
    if heart_rate is None or age is None or sex not in table:
        return None
    column = _band_index(STEP_AGE_BANDS, age)
    rows = table[sex]
    for rating, ranges in rows:
        if heart_rate <= _upper_bound(ranges[column]):
            return rating
    return rows[-1][0]


def kasch_rating(heart_rate, age, sex) -> Optional[str]:
    return recovery_rating(KASCH_RATINGS, heart_rate, age, sex)


def ymca_step_rating(heart_rate, age, sex) -> Optional[str]:
    return recovery_rating(YMCA_STEP_RATINGS, heart_rate, age, sex)


def cardio_kind(test: dict) -> Optional[str]:
    """Which cardio protocol a test is, by id then name."""
    test_id = str(test.get("testId") or "").lower()
    name = str(test.get("testName") or "").lower()
    for text in (test_id, name):
        if "ymca" in text and "step" in text:
            return "ymca-step"
        if "ymca" in text and "treadmill" in text:
            return "ymca-treadmill"
        if "mcaft" in text:
            return "mcaft"
        if "kasch" in text:
            return "kasch"
        if "bruce" in text:
            return "bruce"
    if "treadmill" in name:
        return "bruce"
    return None


def _minutes(test: dict) -> Optional[float]:
    total = to_number(test.get("totalTime"))
    if total is not None:
        return total
    mins = to_number(test.get("minutes"))
    secs = to_number(test.get("seconds"))
    if mins is None and secs is None:
        return None
    return (mins or 0) + (secs or 0) / 60


def _weight_kg(claimant: dict) -> Optional[float]:
    weight = to_number(claimant.get("weight"))
    if weight is None:
        return None
    if str(claimant.get("weightUnit") or "").lower() in ("lb", "lbs", "pounds"):
        return weight / 2.20462
    return weight


def _recovery_hr(test: dict) -> Optional[float]:
    for key in ("recoveryHeartRate", "heartRate", "postHeartRate", "hrPost"):
        v = to_number(test.get(key))
        if v:
            return v
    return None


def score_cardio_test(test: dict, claimant: dict | None = None) -> dict[str, Any]:
    """Score a cardio test from its inputs and the claimant's demographics.

    Returns the protocol kind plus whichever of vo2Max, classification,
    stage, o2Cost, startStage and heartRate apply. Fields that cannot be
    derived from the inputs are None rather than raising.
    """
    claimant = claimant or {}
    sex = normalize_sex(test.get("gender") or claimant.get("gender") or claimant.get("sex"))
    age = to_number(test.get("age"))
    if age is None:
        age = age_from_dob(claimant.get("dateOfBirth"))

    kind = cardio_kind(test)
    result: dict[str, Any] = {"kind": kind, "sex": sex, "age": age, "vo2Max": None, "classification": None}

    if kind == "bruce":
        minutes = _minutes(test)
        vo2 = bruce_vo2max(minutes, sex) if minutes is not None else None
        stage = bruce_stage_for_time(minutes) if minutes is not None else None
        result.update(
            minutes=minutes,
            stage=stage.stage if stage else None,
            vo2Max=vo2,
            classification=vo2_rating(vo2, age, sex),
        )
    elif kind == "mcaft":
        stage = to_number(test.get("lastCompletedStage") or test.get("stage"))
        o2_cost = mcaft_o2_cost(int(stage), sex) if stage is not None else None
        mass = _weight_kg(claimant)
        vo2 = None
        if o2_cost is not None and mass is not None and age is not None:
            vo2 = mcaft_vo2max(o2_cost, mass, age)
        result.update(
            startStage=mcaft_start_stage(age, sex),
            stage=int(stage) if stage is not None else None,
            o2Cost=o2_cost,
            vo2Max=vo2,
            classification=vo2_rating(vo2, age, sex),
        )
    elif kind == "ymca-treadmill":
        speed = to_number(test.get("speed"))
        hr = to_number(test.get("heartRate"))
        vo2 = None
        if speed is not None and hr is not None and age is not None:
            vo2 = ymca_treadmill_vo2max(speed, hr, age, sex)
        result.update(heartRate=hr, vo2Max=vo2, classification=vo2_rating(vo2, age, sex))
    elif kind in ("kasch", "ymca-step"):
        hr = _recovery_hr(test)
        rate = kasch_rating if kind == "kasch" else ymca_step_rating
        result.update(heartRate=hr, classification=rate(hr, age, sex))
    else:
        logger.info("No cardio scoring for test %r", test.get("testId") or test.get("testName"))
    return result
