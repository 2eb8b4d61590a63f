# lease_engine/cli/seed_demo.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from lease_engine.models import Location, Manager, Property, Tenant


@dataclass(frozen=True)
class SeedResult:
    manager_id: str
    property_id: int
    tenant_ids: tuple[str, ...]


def _get_or_create_manager(db: Session, cognito_id: str) -> Manager:
    row = db.scalar(select(Manager).where(Manager.cognito_id == cognito_id))
    if row:
        return row
    row = Manager(
        cognito_id=cognito_id,
        name="Demo Manager",
        email=f"{cognito_id}@demo.local",
        phone_number="555-0100",
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def _get_or_create_tenant(db: Session, cognito_id: str) -> Tenant:
    row = db.scalar(select(Tenant).where(Tenant.cognito_id == cognito_id))
    if row:
        return row
    row = Tenant(
        cognito_id=cognito_id,
        name=f"Tenant {cognito_id}",
        email=f"{cognito_id}@demo.local",
        phone_number="555-0101",
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def _get_or_create_property(db: Session, manager: Manager, *, name: str, rent: float, deposit: float) -> Property:
    row = db.scalar(
        select(Property).where(Property.manager_cognito_id == manager.cognito_id, Property.name == name)
    )
    if row:
        return row

    loc = Location(
        address="123 Demo St",
        city="Detroit",
        state="MI",
        country="United States",
        postal_code="48201",
    )
    db.add(loc)
    db.flush()

    row = Property(
        name=name,
        description="Seeded demo listing",
        price_per_month=float(rent),
        security_deposit=float(deposit),
        application_fee=50.0,
        manager_cognito_id=manager.cognito_id,
        location_id=loc.id,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def seed_demo(
    db: Session,
    *,
    manager_id: str = "demo-manager",
    tenant_ids: Sequence[str] = ("demo-tenant-1", "demo-tenant-2"),
    property_name: str = "Demo Loft",
    rent: float = 1500.0,
    deposit: float = 1500.0,
) -> SeedResult:
    manager = _get_or_create_manager(db, manager_id)
    prop = _get_or_create_property(db, manager, name=property_name, rent=rent, deposit=deposit)
    tenants = [_get_or_create_tenant(db, t) for t in tenant_ids]
    return SeedResult(
        manager_id=manager.cognito_id,
        property_id=int(prop.id),
        tenant_ids=tuple(t.cognito_id for t in tenants),
    )
