# tests/conftest.py
from __future__ import annotations

from dataclasses import dataclass

import pytest
from fastapi.testclient import TestClient

from lease_engine.db import Database
from lease_engine.main import create_app
from lease_engine.models import Location, Manager, Property, Tenant


@dataclass(frozen=True)
class Seed:
    manager_id: str
    property_id: int
    tenant_ids: tuple[str, ...]


@pytest.fixture()
def database(tmp_path):
    database = Database(f"sqlite:///{tmp_path / 'leasing.db'}", lock_wait_seconds=5.0)
    database.create_all()
    try:
        yield database
    finally:
        database.dispose()


@pytest.fixture()
def db(database):
    s = database.session()
    try:
        yield s
    finally:
        s.close()


def seed_listing(db, *, rent: float = 1500.0, deposit: float = 1500.0, tenants=("T1", "T2")) -> Seed:
    mgr = Manager(cognito_id="M1", name="Mia Manager", email="m1@t.local", phone_number="555-0100")
    loc = Location(address="1 Main St", city="Detroit", state="MI", country="United States", postal_code="48201")
    db.add_all([mgr, loc])
    db.flush()

    prop = Property(
        name="Loft",
        description="two bed",
        price_per_month=rent,
        security_deposit=deposit,
        application_fee=50.0,
        manager_cognito_id=mgr.cognito_id,
        location_id=loc.id,
    )
    db.add(prop)
    for t in tenants:
        db.add(Tenant(cognito_id=t, name=f"Tenant {t}", email=f"{t.lower()}@t.local", phone_number="555-0101"))
    db.commit()
    return Seed(manager_id=mgr.cognito_id, property_id=int(prop.id), tenant_ids=tuple(tenants))


def add_property(db, *, manager_id: str, name: str, rent: float = 900.0, deposit: float = 900.0) -> int:
    loc = Location(address=f"{name} Ave", city="Detroit", state="MI", country="United States", postal_code="48202")
    db.add(loc)
    db.flush()
    prop = Property(
        name=name,
        price_per_month=rent,
        security_deposit=deposit,
        manager_cognito_id=manager_id,
        location_id=loc.id,
    )
    db.add(prop)
    db.commit()
    return int(prop.id)


def submission(property_id: int, tenant_id: str, **overrides) -> dict:
    out = {
        "property_id": property_id,
        "tenant_cognito_id": tenant_id,
        "name": f"Applicant {tenant_id}",
        "email": f"{tenant_id.lower()}@t.local",
        "phone_number": "555-0199",
    }
    out.update(overrides)
    return out


@pytest.fixture()
def seed(db) -> Seed:
    return seed_listing(db)


@pytest.fixture()
def client(database):
    app = create_app(database=database)
    return TestClient(app)
