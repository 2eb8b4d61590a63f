# tests/test_validation.py
from __future__ import annotations

import pytest

from lease_engine.domain.validation import (
    ApplicationStatus,
    is_valid_email,
    validate_status_value,
    validate_submission,
)
from lease_engine.errors import InvalidEmailError, InvalidStatusError, MissingFieldError


def _payload(**overrides):
    out = {
        "property_id": 1,
        "tenant_cognito_id": "T1",
        "name": "Ann",
        "email": "ann@t.local",
        "phone_number": "555-0101",
    }
    out.update(overrides)
    return out


def test_complete_submission_passes():
    validate_submission(_payload())


def test_missing_fields_are_all_reported():
    with pytest.raises(MissingFieldError) as ei:
        validate_submission(_payload(name="", phone_number=None))
    assert ei.value.context["fields"] == ["name", "phone_number"]
    assert ei.value.status_code == 400


def test_missing_field_wins_over_bad_email():
    with pytest.raises(MissingFieldError):
        validate_submission(_payload(email="nope", property_id=None))


@pytest.mark.parametrize("email", ["nope", "a@b", "a b@c.d", "@c.d", "a@.", ""])
def test_bad_email_rejected(email):
    assert not is_valid_email(email)


def test_bad_email_raises_after_presence_check():
    with pytest.raises(InvalidEmailError):
        validate_submission(_payload(email="ann@local"))


def test_profile_fields_are_not_validated():
    validate_submission(_payload(annual_income="not a number", has_pets="maybe"))


def test_status_values_are_exact():
    assert validate_status_value("Approved") is ApplicationStatus.APPROVED
    assert validate_status_value(ApplicationStatus.DENIED) is ApplicationStatus.DENIED
    for bad in ("approved", "APPROVED", "Active", "", None, 1):
        with pytest.raises(InvalidStatusError):
            validate_status_value(bad)


@pytest.mark.parametrize("property_id", [0, -3])
def test_non_positive_property_id_is_missing(property_id):
    with pytest.raises(MissingFieldError) as ei:
        validate_submission(_payload(property_id=property_id))
    assert ei.value.context["fields"] == ["property_id"]
