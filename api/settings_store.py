"""
Evaluator profile store backed by the SQLite settings table.

Each profile field is one key, prefixed with ``profile.`` so the table can
hold other settings later.
"""

from __future__ import annotations

from api.profile_models import EvaluatorProfile, ProfileUpdate
from storage.database import get_db

_PREFIX = "profile."

_PROFILE_KEYS = tuple(EvaluatorProfile.model_fields)


def get_profile() -> EvaluatorProfile:
    """Return the current evaluator profile (loaded fresh from SQLite)."""
    db = get_db()
    all_db = db.get_all_settings()
    return EvaluatorProfile(
        **{key: all_db[_PREFIX + key] for key in _PROFILE_KEYS if _PREFIX + key in all_db}
    )


def update_profile(update: ProfileUpdate) -> EvaluatorProfile:
    """Apply partial update and return the new profile."""
    db = get_db()

    update_data = update.model_dump(exclude_unset=True)

    for key in _PROFILE_KEYS:
        if key in update_data:
            val = update_data[key]
            if val is None or val == "":
                db.delete_setting(_PREFIX + key)
            else:
                db.set_setting(_PREFIX + key, str(val))

    return get_profile()


def evaluator_data(profile: EvaluatorProfile) -> dict:
    """Profile in the shape report bodies carry it (``evaluatorData``)."""
    return {
        "name": profile.name or "",
        "licenseNo": profile.license_no or "",
        "clinicName": profile.clinic_name or "",
        "clinicAddress": profile.clinic_address or "",
        "clinicPhone": profile.clinic_phone or "",
        "clinicFax": profile.clinic_fax or "",
        "clinicLogo": profile.clinic_logo,
        "address": profile.address or "",
        "country": profile.country or "",
        "city": profile.city or "",
        "zipcode": profile.zipcode or "",
        "email": profile.email or "",
        "phone": profile.phone or "",
        "website": profile.website or "",
    }
