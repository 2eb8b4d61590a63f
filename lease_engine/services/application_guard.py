# lease_engine/services/application_guard.py
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..domain.validation import ACTIVE_STATUSES, ApplicationStatus
from ..errors import DuplicateApprovedError, DuplicatePendingError
from ..models import Application

log = logging.getLogger(__name__)


def check_duplicate(
    db: Session,
    *,
    tenant_id: str,
    property_id: int,
    exclude_application_id: Optional[int] = None,
) -> None:
    """
    Raise if the tenant already has a Pending or Approved application for the
    property. Denied applications never block, which is what lets a tenant
    re-apply after a denial.

    Approved wins over Pending when both somehow exist.
    """
    q = select(Application.id, Application.status).where(
        Application.tenant_cognito_id == str(tenant_id),
        Application.property_id == int(property_id),
        Application.status.in_(ACTIVE_STATUSES),
    )
    if exclude_application_id is not None:
        q = q.where(Application.id != int(exclude_application_id))

    rows = db.execute(q).all()
    if not rows:
        return

    statuses = {r.status for r in rows}
    existing_id = int(rows[0].id)
    log.info(
        "duplicate application blocked",
        extra={"tenant_id": tenant_id, "property_id": property_id, "application_id": existing_id},
    )
    if ApplicationStatus.APPROVED.value in statuses:
        raise DuplicateApprovedError(existing_application_id=existing_id)
    raise DuplicatePendingError(existing_application_id=existing_id)
