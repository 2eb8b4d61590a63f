# lease_engine/services/lease_rules.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..clock import utcnow
from ..errors import ActiveLeaseExistsError
from ..models import Lease


def find_active_lease(
    db: Session,
    *,
    property_id: int,
    tenant_id: str,
    now: Optional[datetime] = None,
) -> Optional[Lease]:
    """
    A lease is active (or upcoming) while end_date >= now.
    End dates are inclusive.
    """
    now = now or utcnow()
    q = (
        select(Lease)
        .where(
            Lease.property_id == int(property_id),
            Lease.tenant_cognito_id == str(tenant_id),
            Lease.end_date >= now,
        )
        .order_by(Lease.id.desc())
        .limit(1)
    )
    return db.scalar(q)


def ensure_no_active_lease(
    db: Session,
    *,
    property_id: int,
    tenant_id: str,
    now: Optional[datetime] = None,
) -> None:
    """Raise ActiveLeaseExistsError if the tenant already holds a live lease on the property."""
    existing = find_active_lease(db, property_id=property_id, tenant_id=tenant_id, now=now)
    if existing is not None:
        raise ActiveLeaseExistsError(
            lease_id=int(existing.id),
            end_date=existing.end_date.isoformat(),
        )


def latest_lease(db: Session, *, property_id: int, tenant_id: str) -> Optional[Lease]:
    """Most recent lease for the pair by start date; display only."""
    q = (
        select(Lease)
        .where(Lease.property_id == int(property_id), Lease.tenant_cognito_id == str(tenant_id))
        .order_by(Lease.start_date.desc(), Lease.id.desc())
        .limit(1)
    )
    return db.scalar(q)
