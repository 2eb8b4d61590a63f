# lease_engine/services/application_store.py
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload

from ..clock import utcnow
from ..domain.audit import audit_write, row_snapshot
from ..domain.validation import ApplicationStatus, validate_submission
from ..errors import ApplicationNotFoundError
from ..models import Application, Property
from ..schemas import PROFILE_FIELDS
from .application_guard import check_duplicate
from .ownership import must_get_property, must_get_tenant

log = logging.getLogger(__name__)

AUDIT_FIELDS = ("id", "status", "property_id", "tenant_cognito_id", "lease_id", "application_date")

_BOOL_FIELDS = {"has_pets", "has_vehicles", "has_eviction_history", "has_criminal_history"}
_DATE_FIELDS = {"date_of_birth", "move_in_date"}


def _as_datetime(v: Any) -> Optional[datetime]:
    if v is None or v == "":
        return None
    if isinstance(v, date) and not isinstance(v, datetime):
        return datetime(v.year, v.month, v.day)
    d = v if isinstance(v, datetime) else datetime.fromisoformat(str(v))
    if d.tzinfo is not None:
        # store naive UTC like every other DateTime column
        d = d.astimezone(timezone.utc).replace(tzinfo=None)
    return d


def _profile_values(payload: Mapping[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for k in PROFILE_FIELDS:
        v = payload.get(k)
        if k in _BOOL_FIELDS:
            out[k] = bool(v) if v is not None else False
        elif k in _DATE_FIELDS:
            out[k] = _as_datetime(v)
        elif isinstance(v, str) and not v.strip():
            out[k] = None
        else:
            out[k] = v
    return out


def load_application(db: Session, application_id: int) -> Application:
    """Application joined with property (+location +manager), tenant and lease."""
    row = db.scalar(
        select(Application)
        .options(
            joinedload(Application.property).joinedload(Property.location),
            joinedload(Application.property).joinedload(Property.manager),
            joinedload(Application.tenant),
            selectinload(Application.lease),
        )
        .where(Application.id == int(application_id))
        .execution_options(populate_existing=True)
    )
    if row is None:
        raise ApplicationNotFoundError(application_id=application_id)
    return row


def create_application(
    db: Session,
    payload: Mapping[str, Any],
    *,
    actor_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Application:
    """
    Submit an application: validate -> property/tenant exist -> no active
    duplicate -> insert as Pending with no lease.

    A lease is never created here; only approval issues one. The caller's
    status (if any) is ignored.
    """
    validate_submission(payload)

    prop = must_get_property(db, property_id=payload["property_id"])
    tenant = must_get_tenant(db, cognito_id=payload["tenant_cognito_id"])
    tenant_id, property_id = tenant.cognito_id, int(prop.id)
    check_duplicate(db, tenant_id=tenant_id, property_id=property_id)

    row = Application(
        application_date=_as_datetime(payload.get("application_date")) or now or utcnow(),
        status=ApplicationStatus.PENDING.value,
        lease_id=None,
        property_id=property_id,
        tenant_cognito_id=tenant_id,
        name=payload["name"],
        email=payload["email"],
        phone_number=payload["phone_number"],
        message=payload.get("message") or None,
        **_profile_values(payload),
    )
    db.add(row)

    try:
        db.flush()
        audit_write(
            db,
            actor_id=actor_id,
            action="application.create",
            entity_type="Application",
            entity_id=row.id,
            before=None,
            after=row_snapshot(row, AUDIT_FIELDS),
        )
        app_id = int(row.id)
        db.commit()
    except IntegrityError:
        db.rollback()
        # lost a race against a concurrent submission for the same pair;
        # the partial unique index caught it, report it like the guard would
        check_duplicate(db, tenant_id=tenant_id, property_id=property_id)
        raise

    log.info(
        "application.created",
        extra={"application_id": app_id, "property_id": property_id, "tenant_id": tenant_id},
    )
    return load_application(db, app_id)
