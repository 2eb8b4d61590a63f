# lease_engine/services/application_queries.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload, selectinload

from ..clock import utcnow
from ..domain.payments import next_payment_date
from ..errors import InvalidSelectorError
from ..models import Application, Lease, Property
from ..schemas import ApplicationOut, ApplicationViewOut, LeaseOut, LeaseViewOut, ManagerOut
from .lease_rules import latest_lease


def application_view(app: Application, lease: Optional[Lease], now: datetime) -> ApplicationViewOut:
    """
    Read-side shape: application + property/tenant, flattened address, the
    manager, and the pair's latest lease with its next payment date.

    The lease here is a display convenience looked up by (tenant, property);
    Application.lease_id is the authoritative link.
    """
    base = ApplicationOut.model_validate(app).model_dump()
    base.pop("lease", None)

    prop = app.property
    lease_view = None
    if lease is not None:
        lease_view = LeaseViewOut(
            **LeaseOut.model_validate(lease).model_dump(),
            next_payment_date=next_payment_date(lease.start_date, now),
        )

    return ApplicationViewOut(
        **base,
        address=prop.location.address if prop is not None and prop.location is not None else None,
        manager=ManagerOut.model_validate(prop.manager) if prop is not None and prop.manager is not None else None,
        lease=lease_view,
    )


def list_applications(
    db: Session,
    *,
    tenant_id: Optional[str] = None,
    manager_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> list[ApplicationViewOut]:
    """
    Applications submitted by a tenant, or against properties a manager owns.
    No selector lists everything; both at once is an input error.
    No match is an empty list, never an error.
    """
    if tenant_id and manager_id:
        raise InvalidSelectorError()

    q = select(Application).options(
        joinedload(Application.property).joinedload(Property.location),
        joinedload(Application.property).joinedload(Property.manager),
        joinedload(Application.tenant),
        selectinload(Application.lease),
    )
    if tenant_id:
        q = q.where(Application.tenant_cognito_id == str(tenant_id))
    elif manager_id:
        q = q.where(
            Application.property_id.in_(
                select(Property.id).where(Property.manager_cognito_id == str(manager_id))
            )
        )

    rows = db.scalars(q.order_by(Application.id)).unique().all()

    now = now or utcnow()
    out: list[ApplicationViewOut] = []
    for app in rows:
        lease = latest_lease(db, property_id=app.property_id, tenant_id=app.tenant_cognito_id)
        out.append(application_view(app, lease, now))
    return out
