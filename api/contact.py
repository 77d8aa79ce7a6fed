"""Contact form endpoint.

Submissions are stored in SQLite and logged; delivering them by mail is left
to whatever relays the contact_requests table.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, HTTPException, Request

from api.contact_models import ContactRequest, ContactResponse
from api.rate_limit import CONTACT_RATE_LIMIT, limiter
from storage.database import get_db

_logger = logging.getLogger(__name__)

router = APIRouter()

EVALUATION_TYPE_LABELS = {
    "functional": "Functional Abilities and Capacity Evaluation / Fit for Duties / Return to Work",
    "job-demands": "Job / Physical Demands Analysis (JDA / PDA)",
    "pre-employment": "Post Offer Pre-Employment Screening",
    "rehab": "Rehab Baseline and Progress Evaluations",
}


def evaluation_type_labels(types: list[str]) -> list[str]:
    """Map form values to their display labels; unknown values pass through."""
    return [EVALUATION_TYPE_LABELS.get(t, t) for t in types]


@router.post("/contact", response_model=ContactResponse)
@limiter.limit(CONTACT_RATE_LIMIT)
async def submit_contact(request: Request, body: ContactRequest = Body(...)):
    """Store a contact form submission."""
    if not body.name or not body.clinicName or not body.email:
        raise HTTPException(status_code=400, detail="Missing required fields")

    labels = evaluation_type_labels(body.evaluationTypes)
    try:
        record = get_db().save_contact_request(
            name=body.name,
            clinic_name=body.clinicName,
            email=body.email,
            phone=body.phone,
            evaluation_types=labels,
            message=body.comments,
        )
    except Exception as exc:
        _logger.exception("Failed to store contact request: %s", exc)
        raise HTTPException(
            status_code=500,
            detail="Failed to save contact request. Please try again later.",
        )

    _logger.info(
        "Contact request %s stored (%d evaluation types)",
        record["id"], len(labels),
    )
    return ContactResponse(
        success=True,
        message="Contact request received",
        id=record["id"],
    )
