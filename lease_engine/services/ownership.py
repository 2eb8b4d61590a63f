# lease_engine/services/ownership.py
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ..errors import ApplicationNotFoundError, PropertyNotFoundError, TenantNotFoundError
from ..models import Application, Property, Tenant


def must_get_property(db: Session, *, property_id: int) -> Property:
    row = db.scalar(select(Property).where(Property.id == int(property_id)))
    if not row:
        raise PropertyNotFoundError(property_id=property_id)
    return row


def must_get_tenant(db: Session, *, cognito_id: str) -> Tenant:
    row = db.scalar(select(Tenant).where(Tenant.cognito_id == str(cognito_id)))
    if not row:
        raise TenantNotFoundError(tenant_id=cognito_id)
    return row


def must_get_application(db: Session, *, application_id: int) -> Application:
    row = db.scalar(
        select(Application)
        .options(selectinload(Application.property), selectinload(Application.lease))
        .where(Application.id == int(application_id))
    )
    if not row:
        raise ApplicationNotFoundError(application_id=application_id)
    return row
