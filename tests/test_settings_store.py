"""Tests for the evaluator profile store."""

import tempfile
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from storage.database import Database
from api.profile_models import ProfileUpdate
from api import settings_store


@pytest.fixture
def mock_db():
    """Create an isolated Database using a temp file."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    try:
        yield Database(db_path=path)
    finally:
        os.unlink(path)


class TestGetProfile:
    def test_defaults_when_empty(self, mock_db):
        with patch.object(settings_store, "get_db", return_value=mock_db):
            p = settings_store.get_profile()
            assert p.name is None
            assert p.clinic_name is None
            assert p.clinic_logo is None

    def test_reads_prefixed_values(self, mock_db):
        mock_db.set_setting("profile.name", "Dr. Smith")
        mock_db.set_setting("profile.clinic_name", "Rehab Works")
        mock_db.set_setting("unrelated", "ignored")

        with patch.object(settings_store, "get_db", return_value=mock_db):
            p = settings_store.get_profile()
            assert p.name == "Dr. Smith"
            assert p.clinic_name == "Rehab Works"


class TestUpdateProfile:
    def test_partial_update(self, mock_db):
        mock_db.set_setting("profile.name", "Dr. Smith")
        with patch.object(settings_store, "get_db", return_value=mock_db):
            p = settings_store.update_profile(ProfileUpdate(clinic_phone="555-0100"))
            assert p.clinic_phone == "555-0100"
            assert p.name == "Dr. Smith"

    def test_null_clears_value(self, mock_db):
        mock_db.set_setting("profile.license_no", "PT-1")
        with patch.object(settings_store, "get_db", return_value=mock_db):
            p = settings_store.update_profile(ProfileUpdate(license_no=None))
            assert p.license_no is None
            assert mock_db.get_setting("profile.license_no") is None

    def test_empty_string_clears_value(self, mock_db):
        mock_db.set_setting("profile.city", "Richmond")
        with patch.object(settings_store, "get_db", return_value=mock_db):
            p = settings_store.update_profile(ProfileUpdate(city=""))
            assert p.city is None

    def test_unset_fields_untouched(self, mock_db):
        mock_db.set_setting("profile.email", "pt@example.com")
        with patch.object(settings_store, "get_db", return_value=mock_db):
            settings_store.update_profile(ProfileUpdate(name="New"))
            assert mock_db.get_setting("profile.email") == "pt@example.com"

    def test_max_length_enforced(self):
        with pytest.raises(ValidationError):
            ProfileUpdate(zipcode="1" * 21)


class TestEvaluatorData:
    def test_camel_case_shape(self, mock_db):
        mock_db.set_setting("profile.name", "Dr. Smith")
        mock_db.set_setting("profile.license_no", "PT-1")
        mock_db.set_setting("profile.clinic_fax", "555-0199")
        with patch.object(settings_store, "get_db", return_value=mock_db):
            data = settings_store.evaluator_data(settings_store.get_profile())
        assert data["name"] == "Dr. Smith"
        assert data["licenseNo"] == "PT-1"
        assert data["clinicFax"] == "555-0199"
        assert data["clinicName"] == ""
        assert data["clinicLogo"] is None
