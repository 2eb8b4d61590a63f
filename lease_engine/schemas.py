# lease_engine/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


# -------------------- Submission --------------------

class _ProfileFields(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[datetime] = None

    current_address: Optional[str] = None
    current_city: Optional[str] = None
    current_state: Optional[str] = None
    current_zip: Optional[str] = None
    move_in_date: Optional[datetime] = None

    employment_status: Optional[str] = None
    employer: Optional[str] = None
    occupation: Optional[str] = None
    annual_income: Optional[float] = None
    employment_length: Optional[str] = None

    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    emergency_contact_relationship: Optional[str] = None

    previous_landlord_name: Optional[str] = None
    previous_landlord_phone: Optional[str] = None

    number_of_occupants: Optional[int] = None
    has_pets: bool = False
    pet_details: Optional[str] = None
    has_vehicles: bool = False
    vehicle_details: Optional[str] = None
    has_eviction_history: bool = False
    eviction_details: Optional[str] = None
    has_criminal_history: bool = False
    criminal_details: Optional[str] = None
    additional_notes: Optional[str] = None


class ApplicantProfile(_ProfileFields):
    """
    Extended applicant data. Everything optional; stored verbatim.
    Accepts snake_case or camelCase keys.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


PROFILE_FIELDS: tuple[str, ...] = tuple(ApplicantProfile.model_fields.keys())


class ApplicationCreate(BaseModel):
    """
    Required fields are Optional here on purpose: absence is reported by
    validate_submission as MISSING_FIELD (400), not as a 422.

    Profile keys may be nested under "profile" or sent flat next to the
    contact fields (the older client sends them flat, in camelCase).
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    property_id: Optional[int] = Field(default=None, validation_alias=AliasChoices("property_id", "propertyId"))
    tenant_cognito_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("tenant_cognito_id", "tenantCognitoId", "tenant_id", "tenantId"),
    )
    name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = Field(default=None, validation_alias=AliasChoices("phone_number", "phoneNumber"))
    message: Optional[str] = None
    application_date: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("application_date", "applicationDate")
    )

    profile: ApplicantProfile = Field(default_factory=ApplicantProfile)

    @model_validator(mode="before")
    @classmethod
    def _lift_flat_profile(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "profile" in data:
            return data
        flat_keys = set(PROFILE_FIELDS) | {to_camel(k) for k in PROFILE_FIELDS}
        lifted = {k: v for k, v in data.items() if k in flat_keys}
        if not lifted:
            return data
        out = {k: v for k, v in data.items() if k not in flat_keys}
        out["profile"] = lifted
        return out

    def to_submission(self) -> dict[str, Any]:
        """Flat dict: contact fields + every profile field."""
        out = self.model_dump(exclude={"profile"})
        out.update(self.profile.model_dump())
        return out


class ApplicationStatusUpdate(BaseModel):
    # left untyped: the service validates the value so a bad one is INVALID_STATUS, not a 422
    status: Optional[Any] = None


# -------------------- Read side --------------------

class LocationOut(BaseModel):
    id: int
    address: str
    city: str
    state: str
    country: str
    postal_code: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    model_config = ConfigDict(from_attributes=True)


class ManagerOut(BaseModel):
    id: int
    cognito_id: str
    name: str
    email: str
    phone_number: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class TenantOut(BaseModel):
    id: int
    cognito_id: str
    name: str
    email: str
    phone_number: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class PropertyOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price_per_month: float
    security_deposit: float
    application_fee: Optional[float] = None
    manager_cognito_id: str
    location_id: int
    location: Optional[LocationOut] = None
    manager: Optional[ManagerOut] = None
    model_config = ConfigDict(from_attributes=True)


class LeaseOut(BaseModel):
    id: int
    start_date: datetime
    end_date: datetime
    rent: float
    deposit: float
    property_id: int
    tenant_cognito_id: str
    model_config = ConfigDict(from_attributes=True)


class LeaseViewOut(LeaseOut):
    next_payment_date: datetime


class ApplicationOut(_ProfileFields):
    """Full application row joined with property (+location +manager), tenant and lease."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    application_date: datetime
    status: str
    property_id: int
    tenant_cognito_id: str
    name: str
    email: str
    phone_number: str
    message: Optional[str] = None
    lease_id: Optional[int] = None

    property: Optional[PropertyOut] = None
    tenant: Optional[TenantOut] = None
    lease: Optional[LeaseOut] = None


class ApplicationViewOut(ApplicationOut):
    """List projection: adds a flattened address, the manager and the latest lease with next payment date."""

    address: Optional[str] = None
    manager: Optional[ManagerOut] = None
    lease: Optional[LeaseViewOut] = None
