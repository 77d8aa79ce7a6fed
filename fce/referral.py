"""Referral questions, physical demand classification and conclusion vocabulary."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

PDC_PREFIX = "PDC:"
DEFAULT_PDC_ANSWER = "PDC:Sedentary|"

DEFAULT_QUESTIONS = (
    "What is the present lumbar range of motion noted for the client?",
    "What is the present range of motion noted for the client for the affected area of injury?",
    "What is the present strength noted for the client for the affected area of injury?",
    "What are the present limitations to returning to full duties in their previous position?",
    "What accommodations could be made to the workplace to provide increased abilities/comfort to the "
    "client based on the present condition?",
    "6a) Was the client consistent and reliable in their efforts?",
    "6b) Distraction test consistency - When performing distraction tests for sustained posture the client "
    "should demonstrate similar limitations and or abilities. Pass/Fail determination:",
    "6c) Consistency with diagnosis - Based on the diagnosis and complaints of the individual it is expected "
    "that those issues would relate to a similar function performance pattern during testing. "
    "Pass/Fail determination:",
    "What would be the Physical Demand Classification (PDC) for this client?",
    "Conclusions?",
)

RETURN_TO_WORK_OPTIONS = {
    "Return to Regular Duties": (
        "Client demonstrated the ability to Return to Work at prior level of function. The capabilities "
        "displayed meet or exceed the demands of the pre-injury job, a full return to work without "
        "restrictions is recommended."
    ),
    "Return with Restrictions/Modified Duties": (
        "The demonstrated abilities tested are lower than the job demands as per the restrictions noted. "
        "At the employer's discretion they may desire to modify the job or reassign the client to a "
        "different role that fits within these new capabilities."
    ),
    "Need for Further Rehabilitation": (
        "Significant deficits were identified and based on the FCE results; it is recommended that the "
        "client undergoes additional physical / occupational therapy and retest in 4-6 weeks."
    ),
    "Need for Work Conditioning": (
        "Based on the FCE results, it is recommended that the client undergoes 3 to 6 weeks of work "
        "conditioning to build up their strength and endurance gradually before attempting to return to work."
    ),
    "Vocational Retraining": (
        "Based on the results of the FCE and the essential and critical demands of the job, the client has "
        "demonstrated that their previous occupation is not physically feasible long-term and their may be "
        "a need for vocational retraining for a different career."
    ),
}

# Reported pain and disability related behaviours
RPDR_BEHAVIORS = (
    "Grimacing",
    "Stretching",
    "Rubbing area",
    "Unloading extremity(s)",
    "Shaking the involved area",
    "Guarding",
    "Decreased speed of movement/mobility",
    "Alternating positions/postures",
    "Sitting for unoffered breaks",
    "Taking short breaks",
    "Terminating tasks due to pain and apprehension",
    "Demonstrated need to lay down",
    "Open/Close hand(s) repeatedly",
)

# Competitive test performance behaviours
CTP_BEHAVIORS = (
    "Wiping hands",
    "Repositioning body closer to a task",
    "Starting a task early, ending a task late",
    "Asking for more weight",
    "Extra muscular recruitment",
    "Asking to repeat a task",
    "Asking if met norms/comparing scores on tasks",
    "Verbal expressions of frustration",
)


@dataclass(frozen=True)
class PdcLevel:
    name: str
    title: str
    description: str
    occasional: str
    frequent: str
    constant: str
    energy: str


PDC_LEVELS = (
    PdcLevel(
        "Sedentary",
        "(S) Sedentary Work",
        "Exerting up to 10 lbs of force occasionally and/or a negligible amount of force frequently to lift, "
        "carry, push, pull, or otherwise move objects, including the human body. Sedentary work involves "
        "sitting most of the time but may involve walking or standing for brief periods of time. Jobs are "
        "sedentary if walking and standing are required occasionally and all other sedentary criteria are "
        "met. Strength is considered sedentary when none of the light strength requirements are met and "
        "standing is required less than or equal to 1/3 of the work schedule or workday. For civilian "
        "workers, 30.6 percent of workers were required to work at a sedentary strength level. Occupations "
        "with critical tasks where workers typically spend the day sitting and occasionally lift items of "
        "little weight, like a pen or a few pieces of paper, require sedentary strength.",
        "Up to 10 lbs of force", "Negligible weight", "Negligible weight", "< 1.7 Kcal/min",
    ),
    PdcLevel(
        "Light",
        "(L) Light Work",
        "Exerting 11 to 25 lb of force occasionally, and/or up to 10 lb of force frequently, and/or a "
        "negligible amount of force constantly to move objects. Physical demand requirements are in excess "
        "of those for sedentary work. Even though the weight lifted may be only negligible, a job should be "
        "rated Light Work: (1) when it requires walking or standing to a significant degree; or (2) when it "
        "requires sitting most of the time but entails pushing and/or pulling of arm or leg controls; and/or "
        "(3) when the job requires working at a production rate pace entailing the constant pushing and/or "
        "pulling of materials even though the weight of those materials is negligible. The constant stress "
        "and strain of maintaining a production rate pace, especially in an industrial setting, can be and "
        "is physically exhausting. If the work level of an occupation does not meet the conditions for the "
        "other strength levels, including sedentary, a light strength level is required. For civilian "
        "workers, 33.3 percent of workers were required to work at a light strength level.",
        "11–25 lbs of force", "Up to 10 lbs of force", "Negligible weight", "1.7 to 3.2 Kcal/min",
    ),
    PdcLevel(
        "Medium",
        "(M) Medium Work",
        "Exerting 26 to 50 lbs of force occasionally, and/or 11 to 25 lbs of force frequently, and/or "
        "greater than negligible up to 10 lbs of force constantly to move objects. Physical demand "
        "requirements are in excess of those for light work. For civilian workers, 29.0 percent of workers "
        "were required to work at a medium strength level.",
        "26–50 lbs of force", "10–25 lbs of force", "Up to 10 lbs of force", "3.3 to 5.7 Kcal/min",
    ),
    PdcLevel(
        "Heavy",
        "(H) Heavy Work",
        "Exerting 51 to 100 lbs of force occasionally, and/or 26 to 50 lbs of force frequently, and/or 11 "
        "to 25 lbs of force constantly to move objects. Physical demand requirements are in excess of those "
        "for medium work. For civilian workers, 6.4 percent of workers were required to work at a heavy "
        "strength level.",
        "51–100 lbs of force", "26–50 lbs of force", "11–25 lbs of force", "5.8 to 8.2 Kcal/min",
    ),
    PdcLevel(
        "Very Heavy",
        "(VH) Very Heavy Work",
        "Exerting over 100 lbs of force occasionally, and over 50 lbs of force frequently, and over 25 lbs "
        "of force constantly to move objects. For civilian workers, 0.7 percent required a very heavy "
        "strength level, which indicates requirements beyond the conditions set for heavy work. Examples of "
        "occupational groups with heavy strength level requirements include: Laborers in construction and "
        "extraction occupations may lift items that weigh 50 pounds or more, like bags of cement or sheets "
        "of plywood, for more than 1/3 of the workday.",
        "Over 100 lbs of force", "Over 50 lbs of force", "Over 25 lbs of force", "8.3 or more Kcal/min",
    ),
)

PDC_BY_NAME = {level.name: level for level in PDC_LEVELS}

_NUMBERING_RE = re.compile(r"^\d+[a-zA-Z]?\)?\s*")


def default_questions() -> list[dict]:
    return [
        {
            "id": f"default-{i}",
            "question": q,
            "answer": DEFAULT_PDC_ANSWER if "Physical Demand Classification" in q else "",
            "savedImageData": [],
        }
        for i, q in enumerate(DEFAULT_QUESTIONS, start=1)
    ]


def default_conclusion() -> dict:
    return {
        "returnToWorkStatus": {"status": "", "comments": ""},
        "rpdrBehaviors": {b: False for b in RPDR_BEHAVIORS},
        "ctpBehaviors": {b: False for b in CTP_BEHAVIORS},
    }


def clean_question(question: str | None) -> str:
    """Strip leading numbering such as ``6a)`` from a question."""
    return _NUMBERING_RE.sub("", question or "").strip()


def is_pdc_question(question: str | None) -> bool:
    return "physical demand classification" in (question or "").lower()


def is_conclusion_question(question: str | None) -> bool:
    return "conclusion" in (question or "").lower()


def parse_pdc_answer(answer: str | None) -> Optional[tuple[str, str]]:
    """Split a ``PDC:<level>|<comments>`` answer into (level, comments)."""
    if not answer or not str(answer).startswith(PDC_PREFIX):
        return None
    head, _, comments = str(answer).partition("|")
    return head[len(PDC_PREFIX):].strip(), comments.split("|")[0]


def parse_pass_fail(answer: str | None) -> Optional[bool]:
    """PASS/FAIL status before the first ``|`` of a determination answer."""
    status = str(answer or "").split("|")[0].strip().upper()
    if "PASS" in status:
        return True
    if "FAIL" in status:
        return False
    return None


def migrate_questions(questions: list[dict] | None) -> list[dict]:
    """Bring question lists saved by older clients up to the current wording."""
    migrated = []
    if not isinstance(questions, list):
        return migrated
    for q in questions:
        if not isinstance(q, dict):
            continue
        q = dict(q)
        text = q.get("question") or ""
        if q.get("id") == "default-4" and "What is your relationship with the referrer?" in text:
            q["question"] = DEFAULT_QUESTIONS[3]
        elif "Physical Demand Classification for this client?" in text and "(PDC)" not in text:
            q["question"] = DEFAULT_QUESTIONS[8]
        elif is_pdc_question(text) and not str(q.get("answer") or "").startswith(PDC_PREFIX):
            q["answer"] = DEFAULT_PDC_ANSWER
        migrated.append(q)
    return migrated


def find_answer(referral: dict | None, needle: str) -> Optional[str]:
    for q in (referral or {}).get("questions") or []:
        if isinstance(q, dict) and needle.lower() in str(q.get("question") or "").lower():
            return q.get("answer")
    return None


def checked_behaviors(flags: dict | None, vocabulary: tuple[str, ...]) -> list[str]:
    """Behaviours ticked in *flags*, in vocabulary order."""
    flags = flags or {}
    return [b for b in vocabulary if flags.get(b)]
