"""Report download endpoints: executive summary, full claimant report and PDF."""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Callable, Optional

from fastapi import APIRouter, Body, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response

from api import settings_store
from api.phi_audit import log_phi_access
from api.rate_limit import REPORT_RATE_LIMIT, limiter
from api.routes import _db_guard, _require_evaluation
from report_gen import (
    render_claimant_report,
    render_executive_summary,
    render_executive_summary_pdf,
    report_filename,
)

_logger = logging.getLogger(__name__)

router = APIRouter()

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PDF_MEDIA_TYPE = "application/pdf"

# Stored wizard section -> report body key
_SECTION_KEYS = {
    "claimant": "claimantData",
    "painIllustration": "painIllustrationData",
    "activityRating": "activityRatingData",
    "referral": "referralQuestionsData",
    "testData": "testData",
    "mtmTestData": "mtmTestData",
    "cardioTestData": "cardioTestData",
    "digitalLibrary": "digitalLibraryData",
}

# kind -> (renderer, extension, label)
_REPORT_KINDS: dict[str, tuple[Callable[..., bytes], str, str]] = {
    "docx": (render_executive_summary, "docx", "DOCX"),
    "full": (render_claimant_report, "docx", "DOCX"),
    "pdf": (render_executive_summary_pdf, "pdf", "PDF"),
}


def build_report_body(record: dict, evaluator: dict) -> dict:
    """Assemble a report body from a stored evaluation and the evaluator profile.

    The conclusion section is folded into ``referralQuestionsData.conclusionData``,
    which is where a posted body carries it.
    """
    data = record.get("data") or {}
    body = {key: data[name] for name, key in _SECTION_KEYS.items() if data.get(name) is not None}
    conclusion = data.get("conclusion")
    if isinstance(conclusion, dict):
        referral = dict(body.get("referralQuestionsData") or {})
        referral["conclusionData"] = conclusion
        body["referralQuestionsData"] = referral
        if conclusion.get("signatureImage"):
            body["signatureImage"] = conclusion["signatureImage"]
    body["evaluatorData"] = evaluator
    return body


def _claimant_id(body: dict) -> Optional[str]:
    claimant = body.get("claimantData")
    if isinstance(claimant, dict) and claimant.get("claimantId"):
        return str(claimant["claimantId"])
    return None


async def _render(renderer: Callable[..., bytes], body: dict, extension: str, label: str) -> Response:
    today = date.today()
    try:
        content = await asyncio.get_event_loop().run_in_executor(None, renderer, body, today)
    except Exception as exc:
        _logger.exception("%s generation failed for claimant %s", label, _claimant_id(body) or "-")
        return JSONResponse(
            status_code=500,
            content={"error": f"Internal Server Error generating {label}", "details": str(exc)},
        )
    filename = report_filename(body, extension, today)
    return Response(
        content=content,
        media_type=PDF_MEDIA_TYPE if extension == "pdf" else DOCX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-store, no-transform",
        },
    )


@router.post("/reports/executive-summary")
@limiter.limit(REPORT_RATE_LIMIT)
async def executive_summary_docx(
    request: Request,
    body: dict = Body(...),
    dryRun: Optional[str] = Query(None),
):
    """Executive summary DOCX. ``?dryRun=1`` echoes the body without rendering."""
    if dryRun == "1":
        return {"ok": True, "body": body}
    await log_phi_access(request, "export_report", "report", _claimant_id(body))
    return await _render(render_executive_summary, body, "docx", "DOCX")


@router.post("/reports/claimant")
@limiter.limit(REPORT_RATE_LIMIT)
async def claimant_report_docx(request: Request, body: dict = Body(...)):
    await log_phi_access(request, "export_report", "report", _claimant_id(body))
    return await _render(render_claimant_report, body, "docx", "DOCX")


@router.post("/reports/executive-summary/pdf")
@limiter.limit(REPORT_RATE_LIMIT)
async def executive_summary_pdf(request: Request, body: dict = Body(...)):
    await log_phi_access(request, "export_report", "report", _claimant_id(body))
    return await _render(render_executive_summary_pdf, body, "pdf", "PDF")


@router.get("/evaluations/{evaluation_id}/report/{kind}")
@limiter.limit(REPORT_RATE_LIMIT)
async def evaluation_report(request: Request, evaluation_id: str, kind: str):
    """Render a report for a stored evaluation (kind: docx, full or pdf)."""
    if kind not in _REPORT_KINDS:
        raise HTTPException(status_code=404, detail="Report kind not found.")
    record = _require_evaluation(evaluation_id)
    profile = _db_guard(settings_store.get_profile)
    body = build_report_body(record, settings_store.evaluator_data(profile))
    await log_phi_access(request, "export_report", "evaluation", evaluation_id)
    renderer, extension, label = _REPORT_KINDS[kind]
    return await _render(renderer, body, extension, label)
