# tests/test_duplicate_guard.py
from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from conftest import submission
from lease_engine.errors import DuplicateApprovedError, DuplicatePendingError
from lease_engine.services import application_store
from lease_engine.services.application_guard import check_duplicate
from lease_engine.services.application_store import create_application
from lease_engine.services.lease_issuance import update_status


def test_no_applications_passes(db, seed):
    check_duplicate(db, tenant_id="T1", property_id=seed.property_id)


def test_pending_blocks(db, seed):
    first = create_application(db, submission(seed.property_id, "T1"))
    with pytest.raises(DuplicatePendingError) as ei:
        check_duplicate(db, tenant_id="T1", property_id=seed.property_id)
    assert ei.value.context["existing_application_id"] == first.id
    assert ei.value.status_code == 409


def test_approved_blocks(db, seed):
    first = create_application(db, submission(seed.property_id, "T1"))
    update_status(db, first.id, "Approved")
    with pytest.raises(DuplicateApprovedError):
        create_application(db, submission(seed.property_id, "T1"))


def test_denied_does_not_block(db, seed):
    first = create_application(db, submission(seed.property_id, "T1"))
    update_status(db, first.id, "Denied")
    again = create_application(db, submission(seed.property_id, "T1"))
    assert again.status == "Pending"
    assert again.id != first.id


def test_other_tenant_is_not_blocked(db, seed):
    create_application(db, submission(seed.property_id, "T1"))
    create_application(db, submission(seed.property_id, "T2"))


def test_reopen_denied_blocked_by_newer_pending(db, seed):
    first = create_application(db, submission(seed.property_id, "T1"))
    update_status(db, first.id, "Denied")
    create_application(db, submission(seed.property_id, "T1"))
    with pytest.raises(DuplicatePendingError):
        update_status(db, first.id, "Pending")


def test_unique_index_catches_a_race_past_the_guard(db, seed, monkeypatch):
    create_application(db, submission(seed.property_id, "T1"))

    real = application_store.check_duplicate
    calls = []

    def racy(db_, **kw):
        # first call sees the world before the rival committed
        calls.append(kw)
        if len(calls) > 1:
            real(db_, **kw)

    monkeypatch.setattr(application_store, "check_duplicate", racy)
    with pytest.raises(DuplicatePendingError):
        create_application(db, submission(seed.property_id, "T1"))
    assert len(calls) == 2


def test_unique_index_blocks_raw_insert(db, seed):
    from lease_engine.models import Application

    base = dict(
        property_id=seed.property_id,
        tenant_cognito_id="T1",
        name="x",
        email="x@t.local",
        phone_number="1",
        status="Pending",
    )
    db.add(Application(**base))
    db.commit()
    db.add(Application(**base))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()
