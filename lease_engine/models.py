# lease_engine/models.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .clock import utcnow
from .db import Base

# Statuses that count as "active" for the one-application-per-pair rule.
ACTIVE_STATUS_SQL = "status IN ('Pending', 'Approved')"


# -----------------------------
# Identity-backed actors
# -----------------------------
class Manager(Base):
    __tablename__ = "managers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    cognito_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(200), nullable=False)
    phone_number: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)

    properties: Mapped[List["Property"]] = relationship(back_populates="manager")


# Many-to-many: tenants currently linked to a property (populated on approval).
property_tenants = Table(
    "property_tenants",
    Base.metadata,
    Column("property_id", Integer, ForeignKey("properties.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "tenant_cognito_id",
        String(128),
        ForeignKey("tenants.cognito_id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Tenant(Base):
    __tablename__ = "tenants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    cognito_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(200), nullable=False)
    phone_number: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)

    properties: Mapped[List["Property"]] = relationship(secondary=property_tenants, back_populates="tenants")
    applications: Mapped[List["Application"]] = relationship(back_populates="tenant")
    leases: Mapped[List["Lease"]] = relationship(back_populates="tenant")


# -----------------------------
# Listings
# -----------------------------
class Location(Base):
    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(120), nullable=False)
    state: Mapped[str] = mapped_column(String(60), nullable=False)
    country: Mapped[str] = mapped_column(String(60), nullable=False, default="United States")
    postal_code: Mapped[str] = mapped_column(String(20), nullable=False)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)


class Property(Base):
    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    price_per_month: Mapped[float] = mapped_column(Float, nullable=False)
    security_deposit: Mapped[float] = mapped_column(Float, nullable=False)
    application_fee: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    manager_cognito_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("managers.cognito_id"), nullable=False, index=True
    )
    location_id: Mapped[int] = mapped_column(Integer, ForeignKey("locations.id"), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    manager: Mapped["Manager"] = relationship(back_populates="properties")
    location: Mapped["Location"] = relationship()
    tenants: Mapped[List["Tenant"]] = relationship(secondary=property_tenants, back_populates="properties")
    applications: Mapped[List["Application"]] = relationship(back_populates="property")
    leases: Mapped[List["Lease"]] = relationship(back_populates="property")


# -----------------------------
# Application -> Lease lifecycle
# -----------------------------
class Lease(Base):
    __tablename__ = "leases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    rent: Mapped[float] = mapped_column(Float, nullable=False)
    deposit: Mapped[float] = mapped_column(Float, nullable=False)

    property_id: Mapped[int] = mapped_column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    tenant_cognito_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("tenants.cognito_id"), nullable=False, index=True
    )

    property: Mapped["Property"] = relationship(back_populates="leases")
    tenant: Mapped["Tenant"] = relationship(back_populates="leases")
    application: Mapped[Optional["Application"]] = relationship(back_populates="lease", uselist=False)


class Application(Base):
    __tablename__ = "applications"
    __table_args__ = (
        # at most one Pending/Approved application per (tenant, property); Denied rows are unrestricted
        Index(
            "uq_applications_active_tenant_property",
            "tenant_cognito_id",
            "property_id",
            unique=True,
            postgresql_where=text(ACTIVE_STATUS_SQL),
            sqlite_where=text(ACTIVE_STATUS_SQL),
        ),
        Index("ix_applications_property_status", "property_id", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    application_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Pending")

    property_id: Mapped[int] = mapped_column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    tenant_cognito_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("tenants.cognito_id"), nullable=False, index=True
    )

    # contact
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(200), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(40), nullable=False)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # applicant profile (captured at submission, never re-validated)
    first_name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    date_of_birth: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    current_address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    current_city: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    current_state: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    current_zip: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    move_in_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    employment_status: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    employer: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    occupation: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    annual_income: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    employment_length: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)

    emergency_contact_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    emergency_contact_phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    emergency_contact_relationship: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)

    previous_landlord_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    previous_landlord_phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)

    number_of_occupants: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    has_pets: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    pet_details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    has_vehicles: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    vehicle_details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    has_eviction_history: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    eviction_details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    has_criminal_history: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    criminal_details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    additional_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # set only by the lease issuance transaction
    lease_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("leases.id"), nullable=True, unique=True)

    property: Mapped["Property"] = relationship(back_populates="applications")
    tenant: Mapped["Tenant"] = relationship(back_populates="applications")
    lease: Mapped[Optional["Lease"]] = relationship(back_populates="application")


# -----------------------------
# Audit trail
# -----------------------------
class AuditEvent(Base):
    __tablename__ = "audit_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    actor_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    action: Mapped[str] = mapped_column(String(80), nullable=False, index=True)
    entity_type: Mapped[str] = mapped_column(String(80), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(80), nullable=False)

    before_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    after_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
