"""Expiry-date arithmetic.

Validity is counted in whole days of 86400 seconds from a base timestamp and
rendered as a local calendar date. There is no calendar-year rounding: 365
days from 2024-01-01 is 2024-12-31 because 2024 is a leap year.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Union

from ..utils.validation import ensure_positive_days

SECONDS_PER_DAY = 86400


def capture_base() -> datetime:
    """Local, timezone-aware "now" shared by every key in a batch."""
    return datetime.now().astimezone()


def compute_expiry(base: Union[datetime, date], validity_days: int) -> date:
    days = ensure_positive_days(validity_days)
    if not isinstance(base, datetime):
        return base + timedelta(days=days)
    # naive datetimes are taken as local time, like time.time() based math
    expiry_ts = base.timestamp() + days * SECONDS_PER_DAY
    return datetime.fromtimestamp(expiry_ts).date()


def days_remaining(expiry: date, today: date | None = None) -> int:
    return (expiry - (today or date.today())).days


__all__ = ["SECONDS_PER_DAY", "capture_base", "compute_expiry", "days_remaining"]
