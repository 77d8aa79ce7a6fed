"""Pydantic models for the /contact endpoint."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class ContactRequest(BaseModel):
    """Contact form submission.

    Required fields are validated in the route so a missing field gets the
    form's own 400 message rather than a 422.
    """

    name: Optional[str] = None
    clinicName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    evaluationTypes: list[str] = Field(default_factory=list)
    comments: Optional[str] = Field(default=None, max_length=5000)


class ContactResponse(BaseModel):
    success: bool
    message: str
    id: Optional[int] = None
