"""
Input checks run before the compounding engine.

Each check returns ``None`` when the input is acceptable, or the
``AppError`` (kind ``validation``) describing the first problem found.
Callers decide whether to raise it.
"""
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from app.core.errors import AppError, validation_error
from app.engine.compounding import CENT, Number

MIN_ODDS = Decimal("1.01")
MAX_ODDS = Decimal("99.99")
MIN_DAYS = 1
MAX_DAYS = 365
# DECIMAL(20, 2) leaves 18 integer digits
MAX_AMOUNT = Decimal("1E18")


def _as_decimal(value: Number) -> Optional[Decimal]:
    if isinstance(value, float):
        value = str(value)
    try:
        result = Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not result.is_finite():
        return None
    return result


def _odds_error(odds: Number) -> Optional[AppError]:
    value = _as_decimal(odds)
    if value is None:
        return validation_error("Odds must be a number")
    if value < MIN_ODDS:
        return validation_error("Odds must be at least 1.01")
    if value > MAX_ODDS:
        return validation_error("Odds cannot exceed 99.99")
    return None


def _payout_exceeds(wager: Decimal, odds: Decimal, days: int, limit: Decimal) -> bool:
    # stop as soon as the chain crosses the limit, before it outgrows the decimal context
    wager = wager.quantize(CENT, rounding=ROUND_HALF_UP)
    odds = odds.quantize(CENT, rounding=ROUND_HALF_UP)
    for _ in range(days):
        wager = (wager * odds).quantize(CENT, rounding=ROUND_HALF_UP)
        if wager >= limit:
            return True
    return False


def validate_plan_terms(start_wager: Number, odds: Number, days: int) -> Optional[AppError]:
    wager = _as_decimal(start_wager)
    if wager is None:
        return validation_error("Start wager must be a number")
    if wager <= 0:
        return validation_error("Start wager must be greater than 0")
    if wager >= MAX_AMOUNT:
        return validation_error("Start wager is too large")
    if wager.quantize(CENT, rounding=ROUND_HALF_UP) <= 0:
        return validation_error("Start wager must be at least 0.01")

    error = _odds_error(odds)
    if error:
        return error

    if days < MIN_DAYS:
        return validation_error("Duration must be at least 1 day")
    if days > MAX_DAYS:
        return validation_error("Duration cannot exceed 365 days")

    if _payout_exceeds(wager, _as_decimal(odds), days, MAX_AMOUNT):
        return validation_error("Projected winnings are too large; lower the odds or the duration")
    return None


def _day_in_plan(day: int, days: int) -> bool:
    return MIN_DAYS <= day <= days


def validate_restart_day(day: int, plan_days: int) -> Optional[AppError]:
    if not _day_in_plan(day, plan_days):
        return validation_error(f"Day must be between 1 and {plan_days}")
    return None


def validate_result_day(day: int, plan_days: int) -> Optional[AppError]:
    if not _day_in_plan(day, plan_days):
        return validation_error(f"Day must be between 1 and {plan_days}")
    return None


def validate_booking_code_terms(odds: Number, expires_at: Optional[datetime], now: datetime) -> Optional[AppError]:
    error = _odds_error(odds)
    if error:
        return error
    if expires_at is not None and expires_at <= now:
        return validation_error("Expiry must be in the future")
    return None
