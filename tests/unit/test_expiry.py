from datetime import date, datetime, timedelta

import pytest

from keymaster.services.expiry import capture_base, compute_expiry, days_remaining
from keymaster.utils.errors import ValidationError


def test_365_days_from_leap_year_start_is_day_arithmetic() -> None:
    # 2024 has 366 days, so 365 days later is still in 2024
    assert compute_expiry(datetime(2024, 1, 1, 12, 0), 365) == date(2024, 12, 31)


def test_thirty_days_from_new_year() -> None:
    assert compute_expiry(datetime(2025, 1, 1, 12, 0), 30) == date(2025, 1, 31)


def test_plain_dates_are_accepted() -> None:
    assert compute_expiry(date(2023, 1, 1), 365) == date(2024, 1, 1)


def test_aware_base_is_rendered_in_local_time() -> None:
    base = capture_base()
    assert base.tzinfo is not None
    assert compute_expiry(base, 1) == (base + timedelta(days=1)).date()


@pytest.mark.parametrize("days", [0, -5, True, "30", 1.5])
def test_invalid_validity_is_rejected(days) -> None:
    with pytest.raises(ValidationError):
        compute_expiry(datetime(2025, 1, 1), days)


def test_days_remaining() -> None:
    assert days_remaining(date(2025, 1, 31), today=date(2025, 1, 1)) == 30
    assert days_remaining(date(2024, 12, 31), today=date(2025, 1, 1)) == -1
