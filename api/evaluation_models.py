"""Pydantic models for the /evaluations endpoints."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ClaimantModel(BaseModel):
    """Claimant demographics entered on wizard step 1.

    Field names follow the wizard's JSON (camelCase). Unknown fields are kept
    so newer forms can add demographics without a server change.
    """

    model_config = ConfigDict(extra="allow")

    claimantId: str = Field(..., min_length=1, max_length=100)
    firstName: str = Field(..., min_length=1, max_length=100)
    lastName: str = Field(..., min_length=1, max_length=100)
    dateOfBirth: Optional[str] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    workPhone: Optional[str] = None
    email: Optional[str] = None
    height: Optional[str] = None
    heightUnit: Optional[str] = None
    weight: Optional[str] = None
    weightUnit: Optional[str] = None
    dominantHand: Optional[str] = None
    occupation: Optional[str] = None
    employer: Optional[str] = None
    insurance: Optional[str] = None
    referredBy: Optional[str] = None
    claimNumber: Optional[str] = None
    evaluationDate: Optional[str] = None
    restingPulse: Optional[str] = None
    bpSitting: Optional[str] = None
    history: Optional[str] = None


class SectionUpdateRequest(BaseModel):
    """Request body for PUT /evaluations/{id}/sections/{section}."""

    data: Any = Field(..., description="Section payload, stored as-is.")


class ProtocolUpdateRequest(BaseModel):
    """Request body for PUT /evaluations/{id}/protocol."""

    selectedTests: list[str] = Field(default_factory=list)


class EvaluationResponse(BaseModel):
    """Single evaluation with its full wizard data."""

    id: str
    created_at: str
    updated_at: str
    claimant_id: str
    first_name: str
    last_name: str
    data: dict[str, Any]
    completed_steps: list[int]


class EvaluationListItem(BaseModel):
    """Evaluation summary for list views (no wizard data)."""

    id: str
    created_at: str
    updated_at: str
    claimant_id: str
    first_name: str
    last_name: str
    completed_steps: list[int]


class EvaluationListResponse(BaseModel):
    """Paginated list of evaluations."""

    items: list[EvaluationListItem]
    total: int
    offset: int
    limit: int


class EvaluationDeleteResponse(BaseModel):
    """Response for DELETE /evaluations/{id}."""

    deleted: bool
    id: str


class StepProgress(BaseModel):
    id: int
    key: str
    title: str
    description: str
    available: bool
    status: str


class ProgressResponse(BaseModel):
    """Wizard progress for one evaluation."""

    completedSteps: list[int]
    nextStep: Optional[int] = None
    percent: int
    steps: list[StepProgress]
