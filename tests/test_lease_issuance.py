# tests/test_lease_issuance.py
from __future__ import annotations

import threading
from datetime import datetime

import pytest
from sqlalchemy import func, select

from conftest import add_property, submission
from lease_engine.errors import (
    ActiveLeaseExistsError,
    ApplicationNotFoundError,
    CannotModifyApprovedError,
    InvalidStatusError,
    LeaseAlreadyExistsError,
)
from lease_engine.models import Application, AuditEvent, Lease, property_tenants
from lease_engine.services import lease_issuance
from lease_engine.services.application_store import create_application
from lease_engine.services.lease_issuance import _issue_lease, update_status
from lease_engine.services.unit_of_work import run_in_transaction

NOW = datetime(2026, 1, 15, 10, 30)


def _lease_count(db) -> int:
    return int(db.scalar(select(func.count()).select_from(Lease)))


def _status(db, application_id: int) -> str:
    db.expire_all()
    return db.get(Application, application_id).status


def test_approval_issues_exactly_one_lease(db, seed):
    app = create_application(db, submission(seed.property_id, "T1"))
    out = update_status(db, app.id, "Approved", actor_id=seed.manager_id, now=NOW)

    assert out.status == "Approved"
    assert out.lease is not None
    assert out.lease_id == out.lease.id
    assert out.lease.rent == 1500.0
    assert out.lease.deposit == 1500.0
    assert out.lease.start_date == NOW
    assert out.lease.end_date == datetime(2027, 1, 15, 10, 30)
    assert out.lease.tenant_cognito_id == "T1"
    assert out.lease.property_id == seed.property_id
    assert _lease_count(db) == 1


def test_approval_links_tenant_to_property(db, seed):
    app = create_application(db, submission(seed.property_id, "T1"))
    update_status(db, app.id, "Approved", now=NOW)

    members = db.execute(
        select(property_tenants.c.tenant_cognito_id).where(property_tenants.c.property_id == seed.property_id)
    ).scalars().all()
    assert members == ["T1"]


def test_rent_is_read_at_approval_time(db, seed):
    app = create_application(db, submission(seed.property_id, "T1"))
    prop = app.property
    prop.price_per_month = 1750.0
    db.commit()

    out = update_status(db, app.id, "Approved", now=NOW)
    assert out.lease.rent == 1750.0


def test_approval_denies_other_pending_on_same_property(db, seed):
    a1 = create_application(db, submission(seed.property_id, "T1"))
    a2 = create_application(db, submission(seed.property_id, "T2"))

    other_prop = add_property(db, manager_id=seed.manager_id, name="Other")
    a3 = create_application(db, submission(other_prop, "T2"))

    update_status(db, a1.id, "Approved", now=NOW)

    assert _status(db, a1.id) == "Approved"
    assert _status(db, a2.id) == "Denied"
    # other properties are untouched
    assert _status(db, a3.id) == "Pending"

    actions = db.scalars(select(AuditEvent.action).order_by(AuditEvent.id)).all()
    assert "lease.create" in actions
    assert "application.auto_deny" in actions


def test_already_denied_rivals_stay_denied(db, seed):
    a1 = create_application(db, submission(seed.property_id, "T1"))
    a2 = create_application(db, submission(seed.property_id, "T2"))
    update_status(db, a2.id, "Denied")

    update_status(db, a1.id, "Approved", now=NOW)
    assert _status(db, a2.id) == "Denied"
    assert db.scalar(select(AuditEvent).where(AuditEvent.action == "application.auto_deny")) is None


def test_deny_has_no_side_effects(db, seed):
    a1 = create_application(db, submission(seed.property_id, "T1"))
    a2 = create_application(db, submission(seed.property_id, "T2"))

    out = update_status(db, a1.id, "Denied")
    assert out.status == "Denied"
    assert out.lease is None
    assert _status(db, a2.id) == "Pending"
    assert _lease_count(db) == 0


def test_denied_can_be_approved(db, seed):
    app = create_application(db, submission(seed.property_id, "T1"))
    update_status(db, app.id, "Denied")
    out = update_status(db, app.id, "Approved", now=NOW)
    assert out.status == "Approved"
    assert out.lease_id is not None


def test_approved_is_terminal(db, seed):
    app = create_application(db, submission(seed.property_id, "T1"))
    update_status(db, app.id, "Approved", now=NOW)

    for target in ("Pending", "Denied"):
        with pytest.raises(CannotModifyApprovedError):
            update_status(db, app.id, target)

    with pytest.raises(LeaseAlreadyExistsError):
        update_status(db, app.id, "Approved", now=NOW)

    assert _status(db, app.id) == "Approved"
    assert _lease_count(db) == 1


def test_active_lease_blocks_second_approval(db, seed):
    # an earlier tenancy for the same pair that is still running
    db.add(
        Lease(
            start_date=datetime(2025, 6, 1),
            end_date=datetime(2026, 6, 1),
            rent=1400.0,
            deposit=1400.0,
            property_id=seed.property_id,
            tenant_cognito_id="T1",
        )
    )
    db.commit()

    app = create_application(db, submission(seed.property_id, "T1"))
    with pytest.raises(ActiveLeaseExistsError):
        update_status(db, app.id, "Approved", now=NOW)

    assert _status(db, app.id) == "Pending"
    assert _lease_count(db) == 1


def test_expired_lease_does_not_block(db, seed):
    db.add(
        Lease(
            start_date=datetime(2024, 1, 1),
            end_date=datetime(2025, 1, 1),
            rent=1400.0,
            deposit=1400.0,
            property_id=seed.property_id,
            tenant_cognito_id="T1",
        )
    )
    db.commit()

    app = create_application(db, submission(seed.property_id, "T1"))
    out = update_status(db, app.id, "Approved", now=NOW)
    assert out.lease.rent == 1500.0
    assert _lease_count(db) == 2


def test_guards_run_in_order(db, seed):
    with pytest.raises(InvalidStatusError):
        update_status(db, 9999, "approved")
    with pytest.raises(ApplicationNotFoundError):
        update_status(db, 9999, "Approved")


def test_guard_failure_writes_nothing(db, seed):
    app = create_application(db, submission(seed.property_id, "T1"))
    audits_before = int(db.scalar(select(func.count()).select_from(AuditEvent)))

    with pytest.raises(InvalidStatusError):
        update_status(db, app.id, "Active")

    assert _status(db, app.id) == "Pending"
    assert int(db.scalar(select(func.count()).select_from(AuditEvent))) == audits_before


def test_approving_denied_application_denies_newer_one_from_same_tenant(db, seed):
    first = create_application(db, submission(seed.property_id, "T1"))
    update_status(db, first.id, "Denied")
    newer = create_application(db, submission(seed.property_id, "T1"))

    out = update_status(db, first.id, "Approved", now=NOW)

    assert out.status == "Approved"
    assert out.lease_id is not None
    assert _status(db, newer.id) == "Denied"
    assert _lease_count(db) == 1


def test_stale_observed_status_loses(db, seed):
    app = create_application(db, submission(seed.property_id, "T1"))

    with pytest.raises(LeaseAlreadyExistsError) as ei:
        run_in_transaction(
            db,
            lambda s: _issue_lease(
                s,
                application_id=app.id,
                property_id=seed.property_id,
                observed_status="Denied",
                now=NOW,
                actor_id=None,
            ),
        )

    assert ei.value.context["current_status"] == "Pending"
    assert _status(db, app.id) == "Pending"
    assert _lease_count(db) == 0


def test_concurrent_approvals_issue_one_lease(database, db, seed, monkeypatch):
    a1 = create_application(db, submission(seed.property_id, "T1"))
    a2 = create_application(db, submission(seed.property_id, "T2"))
    db.commit()

    # both requests pass their pre-checks before either enters the transaction
    barrier = threading.Barrier(2)
    real_run = lease_issuance.run_in_transaction

    def run_after_barrier(*args, **kwargs):
        barrier.wait(timeout=10)
        return real_run(*args, **kwargs)

    monkeypatch.setattr(lease_issuance, "run_in_transaction", run_after_barrier)

    outcomes: dict[int, str] = {}

    def approve(application_id: int) -> None:
        s = database.session()
        try:
            update_status(s, application_id, "Approved", now=NOW)
            outcomes[application_id] = "ok"
        except LeaseAlreadyExistsError:
            outcomes[application_id] = "lease_exists"
        finally:
            s.close()

    threads = [threading.Thread(target=approve, args=(i,)) for i in (a1.id, a2.id)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert sorted(outcomes.values()) == ["lease_exists", "ok"]
    assert _lease_count(db) == 1

    winner = next(i for i, v in outcomes.items() if v == "ok")
    loser = next(i for i, v in outcomes.items() if v == "lease_exists")
    assert _status(db, winner) == "Approved"
    assert _status(db, loser) == "Denied"
