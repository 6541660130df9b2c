from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from app.core.errors import ErrorKind
from app.engine.validation import (
    validate_booking_code_terms,
    validate_plan_terms,
    validate_restart_day,
    validate_result_day,
)


def test_valid_plan_terms():
    assert validate_plan_terms(Decimal("100"), Decimal("1.5"), 30) is None


@pytest.mark.parametrize("start_wager,odds,days,message", [
    ("0", "1.5", 3, "Start wager must be greater than 0"),
    ("-1", "1.5", 3, "Start wager must be greater than 0"),
    ("10", "1.00", 3, "Odds must be at least 1.01"),
    ("10", "100", 3, "Odds cannot exceed 99.99"),
    ("10", "1.5", 0, "Duration must be at least 1 day"),
    ("10", "1.5", 366, "Duration cannot exceed 365 days"),
])
def test_invalid_plan_terms(start_wager, odds, days, message):
    error = validate_plan_terms(Decimal(start_wager), Decimal(odds), days)
    assert error is not None
    assert error.kind == ErrorKind.VALIDATION
    assert error.status_code == 400
    assert error.message == message


def test_payout_beyond_storage_is_rejected():
    error = validate_plan_terms(Decimal("100"), Decimal("2"), 365)
    assert error is not None
    assert "too large" in error.message


@pytest.mark.parametrize("check", [validate_restart_day, validate_result_day])
def test_day_bounds(check):
    assert check(1, 3) is None
    assert check(3, 3) is None
    assert check(0, 3).kind == ErrorKind.VALIDATION
    assert check(4, 3).message == "Day must be between 1 and 3"


def test_booking_code_terms():
    now = datetime(2026, 1, 1, 12, 0)
    assert validate_booking_code_terms(Decimal("2.5"), None, now) is None
    assert validate_booking_code_terms(Decimal("2.5"), now + timedelta(hours=1), now) is None
    assert validate_booking_code_terms(Decimal("1.00"), None, now).message == "Odds must be at least 1.01"
    assert validate_booking_code_terms(Decimal("2.5"), now - timedelta(seconds=1), now).message == "Expiry must be in the future"
