# lease_engine/clock.py
from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    # naive UTC, matching the DateTime columns
    return datetime.now(timezone.utc).replace(tzinfo=None)
