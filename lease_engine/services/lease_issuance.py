# lease_engine/services/lease_issuance.py
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from ..clock import utcnow
from ..config import settings
from ..domain.audit import audit_write, row_snapshot
from ..domain.payments import lease_end_date
from ..domain.validation import ApplicationStatus, validate_status_value
from ..errors import (
    ApplicationNotFoundError,
    CannotModifyApprovedError,
    LeaseAlreadyExistsError,
    PropertyNotFoundError,
)
from ..models import Application, Lease, Property
from .application_guard import check_duplicate
from .application_store import AUDIT_FIELDS, load_application
from .lease_rules import ensure_no_active_lease
from .ownership import must_get_application, must_get_tenant
from .unit_of_work import run_in_transaction

log = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Application status transitions
# -----------------------------------------------------------------------------
#   Pending  -> Approved | Denied
#   Denied   -> Pending | Approved
#   Approved -> (terminal)
#
# Approval is the only way a Lease comes into existence. It runs as one unit
# of work: create lease, link tenant to property, deny every other Pending
# application on the property, approve + link the application.
# -----------------------------------------------------------------------------

LEASE_AUDIT_FIELDS = ("id", "start_date", "end_date", "rent", "deposit", "property_id", "tenant_cognito_id")


@dataclass(frozen=True)
class ApprovalResult:
    application_id: int
    lease_id: int
    denied_application_ids: tuple[int, ...]


def check_transition(app: Application, target: ApplicationStatus) -> None:
    """Guards 3 and 4: approved is terminal, and a linked lease can't be issued twice."""
    approved = ApplicationStatus.APPROVED.value

    if app.status == approved and target.value != approved:
        raise CannotModifyApprovedError(application_id=app.id, current_status=app.status)

    if app.lease_id is not None and target.value == approved:
        raise LeaseAlreadyExistsError(application_id=app.id, lease_id=app.lease_id)

    if app.status == approved and target.value == approved:
        # approved without a lease row: still terminal, never issue one after the fact
        raise CannotModifyApprovedError(application_id=app.id, current_status=app.status)


def _lock_property(db: Session, property_id: int) -> Property:
    """
    Serialize approvals per property. Postgres: row lock via FOR UPDATE.
    sqlite has no row locks (FOR UPDATE is dropped), so a no-op write grabs
    the database write lock up front instead of at the first INSERT.
    """
    if db.get_bind().dialect.name == "sqlite":
        t = Property.__table__
        db.execute(t.update().where(t.c.id == int(property_id)).values(created_at=t.c.created_at))

    prop = db.scalar(
        select(Property)
        .options(selectinload(Property.tenants))
        .where(Property.id == int(property_id))
        .with_for_update(of=Property)
        .execution_options(populate_existing=True)
    )
    if prop is None:
        raise PropertyNotFoundError(property_id=property_id)
    return prop


def _issue_lease(
    db: Session,
    *,
    application_id: int,
    property_id: int,
    observed_status: str,
    now: datetime,
    actor_id: Optional[str],
) -> ApprovalResult:
    prop = _lock_property(db, property_id)

    app = db.scalar(
        select(Application)
        .where(Application.id == int(application_id))
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    if app is None:
        raise ApplicationNotFoundError(application_id=application_id)

    # re-check against the locked rows; a racing approval may have won
    if app.lease_id is not None or app.status == ApplicationStatus.APPROVED.value:
        raise LeaseAlreadyExistsError(application_id=app.id, lease_id=app.lease_id)
    if app.status != observed_status:
        # e.g. auto-denied by a rival approval that committed after our pre-check
        raise LeaseAlreadyExistsError(
            application_id=app.id,
            observed_status=observed_status,
            current_status=app.status,
        )
    ensure_no_active_lease(db, property_id=prop.id, tenant_id=app.tenant_cognito_id, now=now)

    tenant = must_get_tenant(db, cognito_id=app.tenant_cognito_id)
    before = row_snapshot(app, AUDIT_FIELDS)

    # a. lease, priced from the property as it is right now
    lease = Lease(
        start_date=now,
        end_date=lease_end_date(now, settings.lease_term_months),
        rent=prop.price_per_month,
        deposit=prop.security_deposit,
        property_id=prop.id,
        tenant_cognito_id=app.tenant_cognito_id,
    )
    db.add(lease)
    db.flush()

    # b. tenant membership (idempotent)
    if tenant not in prop.tenants:
        prop.tenants.append(tenant)

    # c. deny the other pending applications on this property. Runs before the
    # approval is flushed: a newer Pending row from the same tenant would
    # otherwise collide with it on uq_applications_active_tenant_property.
    rival_ids = tuple(
        int(x)
        for x in db.scalars(
            select(Application.id).where(
                Application.property_id == prop.id,
                Application.id != app.id,
                Application.status == ApplicationStatus.PENDING.value,
            )
        ).all()
    )
    if rival_ids:
        db.execute(
            update(Application)
            .where(
                Application.id.in_(rival_ids),
                Application.status == ApplicationStatus.PENDING.value,
            )
            .values(status=ApplicationStatus.DENIED.value)
            .execution_options(synchronize_session="fetch")
        )

    # d. approve + link
    app.status = ApplicationStatus.APPROVED.value
    app.lease_id = lease.id
    db.flush()

    audit_write(
        db,
        actor_id=actor_id,
        action="lease.create",
        entity_type="Lease",
        entity_id=lease.id,
        after=row_snapshot(lease, LEASE_AUDIT_FIELDS),
    )
    audit_write(
        db,
        actor_id=actor_id,
        action="application.status",
        entity_type="Application",
        entity_id=app.id,
        before=before,
        after=row_snapshot(app, AUDIT_FIELDS),
    )
    for rid in rival_ids:
        audit_write(
            db,
            actor_id=actor_id,
            action="application.auto_deny",
            entity_type="Application",
            entity_id=rid,
            before={"status": ApplicationStatus.PENDING.value},
            after={"status": ApplicationStatus.DENIED.value, "approved_application_id": app.id},
        )

    return ApprovalResult(application_id=int(app.id), lease_id=int(lease.id), denied_application_ids=rival_ids)


def _write_status(
    db: Session,
    app: Application,
    target: ApplicationStatus,
    *,
    actor_id: Optional[str],
) -> None:
    """Non-approval path: a single-row status write, no other side effects."""
    if target is ApplicationStatus.PENDING and app.status != target.value:
        # re-opening must not produce a second active application for the pair
        check_duplicate(
            db,
            tenant_id=app.tenant_cognito_id,
            property_id=app.property_id,
            exclude_application_id=app.id,
        )

    before = row_snapshot(app, AUDIT_FIELDS)
    app.status = target.value
    try:
        db.flush()
        audit_write(
            db,
            actor_id=actor_id,
            action="application.status",
            entity_type="Application",
            entity_id=app.id,
            before=before,
            after=row_snapshot(app, AUDIT_FIELDS),
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        check_duplicate(
            db,
            tenant_id=before["tenant_cognito_id"],
            property_id=before["property_id"],
            exclude_application_id=before["id"],
        )
        raise


def update_status(
    db: Session,
    application_id: int,
    new_status: Any,
    *,
    actor_id: Optional[str] = None,
    now: Optional[datetime] = None,
    max_wait_seconds: Optional[float] = None,
    timeout_seconds: Optional[float] = None,
    clock: Callable[[], float] = time.monotonic,
) -> Application:
    """
    Move an application to new_status and return it joined with property
    (+location +manager), tenant and lease.

    Guards run in order and short-circuit before any write:
      1. status value is one of Pending/Approved/Denied
      2. application exists
      3. Approved is terminal
      4. no lease already linked when approving
      5. when approving, tenant holds no active lease on the property
    """
    target = validate_status_value(new_status)
    app = must_get_application(db, application_id=application_id)
    check_transition(app, target)

    if target is ApplicationStatus.APPROVED:
        now = now or utcnow()
        ensure_no_active_lease(db, property_id=app.property_id, tenant_id=app.tenant_cognito_id, now=now)

        observed_status = app.status
        property_id = int(app.property_id)
        try:
            result = run_in_transaction(
                db,
                lambda s: _issue_lease(
                    s,
                    application_id=int(application_id),
                    property_id=property_id,
                    observed_status=observed_status,
                    now=now,
                    actor_id=actor_id,
                ),
                max_wait_seconds=max_wait_seconds,
                timeout_seconds=timeout_seconds,
                clock=clock,
                name="lease_issuance",
            )
        except IntegrityError as e:
            # a uniqueness check fired at flush/commit: someone else linked or approved first
            log.warning("lease issuance lost a race", extra={"application_id": int(application_id)})
            raise LeaseAlreadyExistsError(application_id=int(application_id)) from e

        log.info(
            "lease.issued",
            extra={
                "application_id": result.application_id,
                "lease_id": result.lease_id,
                "property_id": property_id,
            },
        )
        if result.denied_application_ids:
            log.info(
                "applications.auto_denied count=%d ids=%s",
                len(result.denied_application_ids),
                list(result.denied_application_ids),
                extra={"property_id": property_id},
            )
    else:
        previous = app.status
        _write_status(db, app, target, actor_id=actor_id)
        log.info(
            "application.status_changed %s -> %s",
            previous,
            target.value,
            extra={"application_id": int(application_id)},
        )

    return load_application(db, application_id)
