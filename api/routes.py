import logging
from dataclasses import asdict

from fastapi import APIRouter, Body, HTTPException, Query, Request

from api import settings_store
from api.evaluation_models import (
    ClaimantModel,
    EvaluationDeleteResponse,
    EvaluationListItem,
    EvaluationListResponse,
    EvaluationResponse,
    ProgressResponse,
    ProtocolUpdateRequest,
    SectionUpdateRequest,
)
from api.phi_audit import log_phi_access
from api.profile_models import EvaluatorProfile, ProfileUpdate
from fce import categorization, crosschecks, referral, rom, wizard
from fce.cardio import score_cardio_test
from fce.norms import infer_norms
from fce.references import format_reference, references_for_test
from fce.stats import summarize_test
from storage.database import SECTIONS, get_db
from test_types import registry

_logger = logging.getLogger(__name__)

router = APIRouter()


def _db_call(method_name: str, *args, **kwargs):
    """Call a database method, converting unexpected failures to a 500."""
    _db_logger = logging.getLogger("db_call")
    method = getattr(get_db(), method_name)
    try:
        return method(*args, **kwargs)
    except Exception as exc:
        _db_logger.exception("Database error in %s: %s", method_name, exc)
        raise HTTPException(
            status_code=500,
            detail="A database error occurred. Please try again.",
        )


def _db_guard(fn, *args):
    """Like _db_call for store functions that open the database themselves."""
    try:
        return fn(*args)
    except Exception as exc:
        logging.getLogger("db_call").exception("Database error in %s: %s", fn.__name__, exc)
        raise HTTPException(
            status_code=500,
            detail="A database error occurred. Please try again.",
        )


def _require_evaluation(evaluation_id: str) -> dict:
    record = _db_call("get_evaluation", evaluation_id)
    if not record:
        raise HTTPException(status_code=404, detail="Evaluation not found.")
    return record


@router.get("/health")
async def health_check():
    try:
        get_db()
        return {"status": "ok"}
    except Exception:
        return {"status": "starting"}


# --- Evaluator profile ---


@router.get("/profile", response_model=EvaluatorProfile)
async def get_profile():
    """Return the evaluator profile."""
    return _db_guard(settings_store.get_profile)


@router.patch("/profile", response_model=EvaluatorProfile)
async def update_profile(update: ProfileUpdate = Body(...)):
    """Update the evaluator profile (partial update)."""
    return _db_guard(settings_store.update_profile, update)


# --- Evaluations ---


@router.post("/evaluations", response_model=EvaluationResponse, status_code=201)
async def create_evaluation(request: Request, claimant: ClaimantModel = Body(...)):
    """Start a new evaluation from claimant info (wizard step 1)."""
    record = _db_call("create_evaluation", claimant.model_dump(exclude_none=True))
    await log_phi_access(request, "create_evaluation", "evaluation", record["id"])
    return EvaluationResponse(**record)


@router.get("/evaluations", response_model=EvaluationListResponse)
async def list_evaluations(
    request: Request,
    offset: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    search: str | None = Query(None),
):
    """Return paginated evaluations, newest first."""
    await log_phi_access(request, "list_evaluations", "evaluation")
    items, total = _db_call("list_evaluations", offset=offset, limit=limit, search=search)
    return EvaluationListResponse(
        items=[EvaluationListItem(**item) for item in items],
        total=total,
        offset=offset,
        limit=limit,
    )


@router.get("/evaluations/{evaluation_id}", response_model=EvaluationResponse)
async def get_evaluation(request: Request, evaluation_id: str):
    """Return one evaluation with all wizard data."""
    record = _require_evaluation(evaluation_id)
    await log_phi_access(request, "view_evaluation", "evaluation", evaluation_id)
    return EvaluationResponse(**record)


@router.delete("/evaluations/{evaluation_id}", response_model=EvaluationDeleteResponse)
async def delete_evaluation(request: Request, evaluation_id: str):
    """Delete an evaluation."""
    deleted = _db_call("delete_evaluation", evaluation_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Evaluation not found.")
    await log_phi_access(request, "delete_evaluation", "evaluation", evaluation_id)
    return EvaluationDeleteResponse(deleted=True, id=evaluation_id)


@router.put("/evaluations/{evaluation_id}/claimant", response_model=EvaluationResponse)
async def update_claimant(request: Request, evaluation_id: str, claimant: ClaimantModel = Body(...)):
    """Replace the claimant section."""
    record = _db_call(
        "update_evaluation_section", evaluation_id, "claimant", claimant.model_dump(exclude_none=True),
    )
    if not record:
        raise HTTPException(status_code=404, detail="Evaluation not found.")
    await log_phi_access(request, "edit_evaluation", "evaluation", evaluation_id)
    return EvaluationResponse(**record)


@router.put("/evaluations/{evaluation_id}/sections/{section}", response_model=EvaluationResponse)
async def update_section(
    request: Request,
    evaluation_id: str,
    section: str,
    body: SectionUpdateRequest = Body(...),
):
    """Replace one wizard section of an evaluation."""
    if section not in SECTIONS:
        raise HTTPException(status_code=400, detail=f"Unknown section '{section}'.")
    if section == "claimant":
        try:
            body.data = ClaimantModel(**(body.data or {})).model_dump(exclude_none=True)
        except (TypeError, ValueError):
            raise HTTPException(
                status_code=400,
                detail="Claimant requires claimantId, firstName and lastName.",
            )
    elif section == "referral" and isinstance(body.data, dict):
        body.data = {**body.data, "questions": referral.migrate_questions(body.data.get("questions"))}
    record = _db_call("update_evaluation_section", evaluation_id, section, body.data)
    if not record:
        raise HTTPException(status_code=404, detail="Evaluation not found.")
    await log_phi_access(request, "edit_evaluation", "evaluation", evaluation_id)
    return EvaluationResponse(**record)


@router.put("/evaluations/{evaluation_id}/protocol", response_model=EvaluationResponse)
async def update_protocol(evaluation_id: str, body: ProtocolUpdateRequest = Body(...)):
    """Store the selected protocol tests after dropping legacy and unknown ids."""
    selected = registry.clean_protocol_selection(body.selectedTests)
    if len(selected) != len(body.selectedTests):
        _logger.info(
            "Protocol for evaluation %s: kept %d of %d test ids",
            evaluation_id, len(selected), len(body.selectedTests),
        )
    record = _db_call(
        "update_evaluation_section", evaluation_id, "protocol", {"selectedTests": selected},
    )
    if not record:
        raise HTTPException(status_code=404, detail="Evaluation not found.")
    return EvaluationResponse(**record)


@router.get("/evaluations/{evaluation_id}/progress", response_model=ProgressResponse)
async def get_progress(evaluation_id: str):
    """Wizard progress: completed steps, next step and percentage."""
    record = _require_evaluation(evaluation_id)
    return ProgressResponse(**wizard.progress(record["completed_steps"]))


@router.post("/evaluations/{evaluation_id}/steps/{step_id}/complete", response_model=ProgressResponse)
async def complete_step(evaluation_id: str, step_id: int):
    """Mark a wizard step complete. 409 if its predecessor is not complete."""
    record = _require_evaluation(evaluation_id)
    try:
        completed = wizard.complete_step(step_id, record["completed_steps"])
    except wizard.StepUnavailableError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    _db_call("set_completed_steps", evaluation_id, completed)
    return ProgressResponse(**wizard.progress(completed))


# --- Protocol catalog ---


@router.get("/protocol/categories")
async def list_protocol_categories():
    """Test categories in protocol tab order."""
    return registry.list_types()


@router.get("/protocol/tests")
async def list_protocol_tests(category: str | None = Query(None)):
    """Catalog tests, optionally limited to one category."""
    if category:
        _, handler = registry.resolve(category)
        if handler is None:
            raise HTTPException(status_code=404, detail="Test category not found.")
        handlers = [handler]
    else:
        handlers = [registry.get(t["test_type_id"]) for t in registry.list_types()]
    return [
        {**test.to_dict(), "category": handler.category}
        for handler in handlers
        for test in handler.tests()
    ]


@router.get("/protocol/tests/{test_id}")
async def get_protocol_test(test_id: str):
    """One catalog test with its norms, references and type-specific detail."""
    test, handler = registry.find_test(test_id)
    if test is None:
        raise HTTPException(status_code=404, detail="Test not found.")
    refs = references_for_test(test.id)
    return {
        **test.to_dict(),
        "category": handler.category,
        "norms": asdict(infer_norms(f"{test.id} {test.name}")),
        "references": [ref.to_dict() for ref in refs],
        "citations": [format_reference(ref) for ref in refs],
        **handler.describe(test.id),
    }


# --- Referral vocabulary ---


@router.get("/referral/defaults")
async def referral_defaults():
    """Default referral questions and the conclusion vocabulary."""
    return {
        "questions": referral.default_questions(),
        "conclusion": referral.default_conclusion(),
        "returnToWorkOptions": [
            {"status": status, "description": text}
            for status, text in referral.RETURN_TO_WORK_OPTIONS.items()
        ],
        "rpdrBehaviors": list(referral.RPDR_BEHAVIORS),
        "ctpBehaviors": list(referral.CTP_BEHAVIORS),
        "pdcLevels": [asdict(level) for level in referral.PDC_LEVELS],
    }


# --- Calculations ---


@router.post("/calculations/test-summary")
async def test_summary(test: dict = Body(...)):
    """Averages, variation, bilateral deficiency and norm comparison for one test."""
    test_id = test.get("testId")
    test_name = test.get("testName")
    labels = rom.motion_labels(test_id, test_name)
    area = rom.full_area_evaluated_labels(test_name, test_id)
    return {
        **summarize_test(test),
        "category": categorization.categorize_test(test),
        "motionLabels": labels,
        "areaLabels": list(area) if area else None,
    }


@router.post("/calculations/cardio")
async def cardio_score(body: dict = Body(...)):
    """Score a cardio test. Body is ``{"test": {...}, "claimant": {...}}``."""
    test = body.get("test")
    if not isinstance(test, dict):
        raise HTTPException(status_code=400, detail="A cardio test is required.")
    claimant = body.get("claimant") if isinstance(body.get("claimant"), dict) else None
    return score_cardio_test(test, claimant)


@router.post("/calculations/crosschecks")
async def crosscheck_results(body: dict = Body(...)):
    """Consistency crosschecks. Body is ``{"tests": [...], "referral": {...}}``."""
    tests = body.get("tests")
    if not isinstance(tests, list):
        raise HTTPException(status_code=400, detail="A list of tests is required.")
    referral_data = body.get("referral") if isinstance(body.get("referral"), dict) else None
    return [check.to_dict() for check in crosschecks.compute_crosschecks(tests, referral_data)]
