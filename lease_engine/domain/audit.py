# lease_engine/domain/audit.py
from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..clock import utcnow
from ..models import AuditEvent


def _dumps(v: Optional[dict[str, Any]]) -> Optional[str]:
    if v is None:
        return None
    return json.dumps(v, sort_keys=True, default=str)


def row_snapshot(row: Any, fields: tuple[str, ...]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for f in fields:
        v = getattr(row, f, None)
        if isinstance(v, (datetime, date)):
            v = v.isoformat()
        out[f] = v
    return out


def audit_write(
    db: Session,
    *,
    actor_id: Optional[str],
    action: str,
    entity_type: str,
    entity_id: Any,
    before: Optional[dict[str, Any]] = None,
    after: Optional[dict[str, Any]] = None,
) -> AuditEvent:
    """
    Adds the audit row to the session without committing, so it lands in the
    same transaction as the change it records (and rolls back with it).
    """
    row = AuditEvent(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        before_json=_dumps(before),
        after_json=_dumps(after),
        created_at=utcnow(),
    )
    db.add(row)
    return row
