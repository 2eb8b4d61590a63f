# lease_engine/errors.py
from __future__ import annotations

from typing import Any, Optional


class LeasingError(Exception):
    """
    Base for every error the application/lease core raises on purpose.

    status_code / error_code are what the HTTP layer reports; services never
    build responses themselves.
    """

    status_code: int = 500
    error_code: str = "LEASING_ERROR"
    default_message: str = "leasing error"

    def __init__(self, message: Optional[str] = None, **context: Any) -> None:
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"message": self.message, "error_code": self.error_code}
        if self.context:
            out["context"] = self.context
        return out


# -------------------- Input (400) --------------------

class InputError(LeasingError):
    status_code = 400
    error_code = "INVALID_INPUT"


class MissingFieldError(InputError):
    error_code = "MISSING_FIELD"
    default_message = "Missing required fields"


class InvalidEmailError(InputError):
    error_code = "INVALID_EMAIL"
    default_message = "Invalid email format"


class InvalidStatusError(InputError):
    error_code = "INVALID_STATUS"
    default_message = "Invalid status. Must be one of: Pending, Approved, Denied"


class InvalidSelectorError(InputError):
    error_code = "INVALID_SELECTOR"
    default_message = "Filter by either tenant or manager, not both"


class CannotModifyApprovedError(InputError):
    error_code = "CANNOT_MODIFY_APPROVED"
    default_message = "Cannot change status of an already approved application"


# -------------------- Not found (404) --------------------

class NotFoundError(LeasingError):
    status_code = 404
    error_code = "NOT_FOUND"


class PropertyNotFoundError(NotFoundError):
    error_code = "PROPERTY_NOT_FOUND"
    default_message = "Property not found"


class TenantNotFoundError(NotFoundError):
    error_code = "TENANT_NOT_FOUND"
    default_message = "Tenant not found"


class ApplicationNotFoundError(NotFoundError):
    error_code = "APPLICATION_NOT_FOUND"
    default_message = "Application not found"


# -------------------- Conflict (409) --------------------

class ConflictError(LeasingError):
    status_code = 409
    error_code = "CONFLICT"


class DuplicatePendingError(ConflictError):
    error_code = "DUPLICATE_PENDING"
    default_message = "You already have a pending application for this property"


class DuplicateApprovedError(ConflictError):
    error_code = "DUPLICATE_APPROVED"
    default_message = "You have already been approved for this property"


class LeaseAlreadyExistsError(ConflictError):
    error_code = "LEASE_ALREADY_EXISTS"
    default_message = "A lease already exists for this application"


class ActiveLeaseExistsError(ConflictError):
    error_code = "ACTIVE_LEASE_EXISTS"
    default_message = "Tenant already has an active lease for this property"


# -------------------- Transient (503) --------------------

class TransientError(LeasingError):
    """Nothing was committed; the caller may retry the whole operation."""

    status_code = 503
    error_code = "TRANSIENT"


class TransactionTimeoutError(TransientError):
    error_code = "TRANSACTION_TIMEOUT"
    default_message = "Transaction timed out; no changes were committed"


class StoreUnavailableError(TransientError):
    error_code = "STORE_UNAVAILABLE"
    default_message = "Data store unavailable; no changes were committed"
