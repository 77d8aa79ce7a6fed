"""Pydantic models for the /profile endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class EvaluatorProfile(BaseModel):
    """Evaluator and clinic details printed on every report."""

    name: Optional[str] = None
    license_no: Optional[str] = None
    clinic_name: Optional[str] = None
    clinic_address: Optional[str] = None
    clinic_phone: Optional[str] = None
    clinic_fax: Optional[str] = None
    clinic_logo: Optional[str] = Field(
        default=None,
        description="Logo as a data URL (data:image/png;base64,...).",
    )
    address: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    zipcode: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None


class ProfileUpdate(BaseModel):
    """Partial profile update. Only provided fields are changed; null clears."""

    name: Optional[str] = Field(default=None, max_length=200)
    license_no: Optional[str] = Field(default=None, max_length=100)
    clinic_name: Optional[str] = Field(default=None, max_length=200)
    clinic_address: Optional[str] = Field(default=None, max_length=500)
    clinic_phone: Optional[str] = Field(default=None, max_length=50)
    clinic_fax: Optional[str] = Field(default=None, max_length=50)
    clinic_logo: Optional[str] = None
    address: Optional[str] = Field(default=None, max_length=500)
    country: Optional[str] = Field(default=None, max_length=100)
    city: Optional[str] = Field(default=None, max_length=100)
    zipcode: Optional[str] = Field(default=None, max_length=20)
    email: Optional[str] = Field(default=None, max_length=254)
    phone: Optional[str] = Field(default=None, max_length=50)
    website: Optional[str] = Field(default=None, max_length=500)
