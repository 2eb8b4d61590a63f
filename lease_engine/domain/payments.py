# lease_engine/domain/payments.py
from __future__ import annotations

import calendar
from datetime import datetime


def add_months(d: datetime, months: int) -> datetime:
    """
    Calendar-month shift. Day-of-month is clamped to the target month's
    length (Jan 31 + 1 month -> Feb 28/29).
    """
    idx = d.month - 1 + int(months)
    y = d.year + idx // 12
    m = idx % 12 + 1
    last_day = calendar.monthrange(y, m)[1]
    return d.replace(year=y, month=m, day=min(d.day, last_day))


def lease_end_date(start: datetime, term_months: int = 12) -> datetime:
    return add_months(start, term_months)


def next_payment_date(start_date: datetime, now: datetime) -> datetime:
    """
    Smallest start_date + k months (k >= 0) strictly after now.

    Each candidate is computed from start_date, not from the previous
    candidate, so a 31st-of-month lease keeps landing on the 31st where the
    month has one.
    """
    if start_date > now:
        return start_date

    # jump close to the answer, then step; the estimate never overshoots
    k = max(0, (now.year - start_date.year) * 12 + (now.month - start_date.month) - 1)
    candidate = add_months(start_date, k)
    while candidate <= now:
        k += 1
        candidate = add_months(start_date, k)
    return candidate
