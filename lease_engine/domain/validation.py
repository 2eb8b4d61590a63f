# lease_engine/domain/validation.py
from __future__ import annotations

import re
from enum import Enum
from typing import Any, Mapping

from ..errors import InvalidEmailError, InvalidStatusError, MissingFieldError


class ApplicationStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    DENIED = "Denied"


# statuses that block a new submission for the same (tenant, property)
ACTIVE_STATUSES = (ApplicationStatus.PENDING.value, ApplicationStatus.APPROVED.value)

REQUIRED_SUBMISSION_FIELDS = ("property_id", "tenant_cognito_id", "name", "email", "phone_number")

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _is_blank(v: Any) -> bool:
    if v is None:
        return True
    if isinstance(v, str) and not v.strip():
        return True
    return False


def _is_missing(field: str, v: Any) -> bool:
    # ids start at 1; 0 or below was never a real property
    if field == "property_id" and isinstance(v, int) and v <= 0:
        return True
    return _is_blank(v)


def is_valid_email(email: Any) -> bool:
    return isinstance(email, str) and bool(EMAIL_RE.match(email))


def validate_submission(payload: Mapping[str, Any]) -> None:
    """
    Shape checks only; no I/O.

    Raises MissingFieldError (listing every absent field) before
    InvalidEmailError. Profile fields are never checked here.
    """
    missing = [k for k in REQUIRED_SUBMISSION_FIELDS if _is_missing(k, payload.get(k))]
    if missing:
        raise MissingFieldError(fields=missing)

    if not is_valid_email(payload.get("email")):
        raise InvalidEmailError()


def validate_status_value(status: Any) -> ApplicationStatus:
    """Exact, case-sensitive match against the three status names."""
    if isinstance(status, ApplicationStatus):
        return status
    for s in ApplicationStatus:
        if status == s.value:
            return s
    raise InvalidStatusError(received=status if isinstance(status, str) else None)
