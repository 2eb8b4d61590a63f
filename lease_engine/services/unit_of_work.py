# lease_engine/services/unit_of_work.py
from __future__ import annotations

import logging
import time
from typing import Callable, Optional, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import StoreUnavailableError, TransactionTimeoutError

log = logging.getLogger(__name__)

T = TypeVar("T")

# driver messages that mean "we gave up waiting", across sqlite / postgres
_TIMEOUT_MARKERS = (
    "database is locked",
    "database table is locked",
    "lock timeout",
    "canceling statement due to statement timeout",
    "canceling statement due to lock timeout",
    "could not obtain lock",
)


def _looks_like_timeout(exc: BaseException) -> bool:
    msg = str(getattr(exc, "orig", exc) or "").lower()
    return any(m in msg for m in _TIMEOUT_MARKERS)


def _apply_bounds(db: Session, *, max_wait_seconds: float, timeout_seconds: float) -> None:
    """
    Push the bounds down to the database where it can enforce them.
    sqlite has no per-transaction knobs; its busy timeout is set on connect
    (see Database) and the body deadline below still applies. Its write lock
    is taken at BEGIN IMMEDIATE, so a second writer waits out the busy
    timeout instead of failing a lock upgrade.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "sqlite":
        db.connection(execution_options={"sqlite_begin": "IMMEDIATE"})
        return
    if dialect != "postgresql":
        return
    db.execute(text(f"SET LOCAL lock_timeout = '{int(max_wait_seconds * 1000)}ms'"))
    db.execute(text(f"SET LOCAL statement_timeout = '{int(timeout_seconds * 1000)}ms'"))


def run_in_transaction(
    db: Session,
    fn: Callable[[Session], T],
    *,
    max_wait_seconds: Optional[float] = None,
    timeout_seconds: Optional[float] = None,
    clock: Callable[[], float] = time.monotonic,
    name: str = "unit_of_work",
) -> T:
    """
    Run fn(db) as one transaction: commit if it returns, roll back if it
    raises. Nothing fn wrote is visible to other sessions before commit.

    max_wait_seconds bounds getting the connection and the locks fn takes;
    timeout_seconds bounds fn itself. Blowing either raises
    TransactionTimeoutError after rollback. Other driver-level failures
    surface as StoreUnavailableError. IntegrityError and LeasingError
    propagate unchanged so callers can translate them.
    """
    max_wait = float(max_wait_seconds if max_wait_seconds is not None else settings.transaction_max_wait_seconds)
    timeout = float(timeout_seconds if timeout_seconds is not None else settings.transaction_timeout_seconds)

    # close out the implicit read transaction left by the caller's pre-checks
    if db.in_transaction():
        db.commit()

    t0 = clock()
    try:
        _apply_bounds(db, max_wait_seconds=max_wait, timeout_seconds=timeout)
        waited = clock() - t0
        if waited > max_wait:
            raise TransactionTimeoutError(phase="acquire", waited_seconds=round(waited, 3))

        t_body = clock()
        result = fn(db)
        db.flush()

        elapsed = clock() - t_body
        if elapsed > timeout:
            raise TransactionTimeoutError(phase="execute", elapsed_seconds=round(elapsed, 3))

        db.commit()
        return result

    except TransactionTimeoutError as e:
        db.rollback()
        log.warning("%s timed out: %s", name, e.context)
        raise
    except PoolTimeoutError as e:
        db.rollback()
        log.warning("%s: no connection within pool timeout", name)
        raise TransactionTimeoutError(phase="acquire") from e
    except OperationalError as e:
        db.rollback()
        if _looks_like_timeout(e):
            log.warning("%s: lock/statement timeout from store", name)
            raise TransactionTimeoutError(phase="execute") from e
        log.error("%s: store error", name, exc_info=True)
        raise StoreUnavailableError() from e
    except Exception:
        db.rollback()
        raise
