"""
Compounding schedule engine.

A plan stakes ``start_wager`` on day 1 at fixed ``odds``; every following day
re-stakes the previous day's winnings. The functions here project that
schedule assuming consecutive wins, and rebuild its tail when a plan restarts
from a given day. They are pure: persistence is the caller's job.

All arithmetic is done in ``Decimal`` and every winnings value is rounded to
cents, so a 365-day chain produces the same figures the database stores.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Protocol, Union

from app.models.plan import DayResult

CENT = Decimal("0.01")

Number = Union[Decimal, int, float, str]


class PlanTerms(Protocol):
    start_wager: Number
    odds: Number
    days: int


class PriorEntry(Protocol):
    day: int
    winnings: Number


@dataclass(frozen=True)
class DayEntryDraft:
    """One projected day, ready to be persisted as a DayEntry row."""

    day: int
    wager: Decimal
    odds: Decimal
    winnings: Decimal
    result: str = DayResult.PENDING.value

    def as_row(self) -> dict:
        return {
            "day": self.day,
            "wager": self.wager,
            "odds": self.odds,
            "winnings": self.winnings,
            "result": self.result,
        }


def to_money(value: Number) -> Decimal:
    """Coerce to Decimal and round to cents (floats go through str to avoid binary noise)."""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _project(base_wager: Decimal, odds: Decimal, first_day: int, last_day: int) -> List[DayEntryDraft]:
    entries = []
    wager = base_wager
    for day in range(first_day, last_day + 1):
        winnings = (wager * odds).quantize(CENT, rounding=ROUND_HALF_UP)
        entries.append(DayEntryDraft(day=day, wager=wager, odds=odds, winnings=winnings))
        wager = winnings
    return entries


def generate_plan_entries(start_wager: Number, odds: Number, days: int) -> List[DayEntryDraft]:
    """
    Project the full schedule for a new plan.

    Returns ``days`` drafts numbered 1..days, all pending, where day 1 stakes
    ``start_wager`` and day N stakes day N-1's winnings.
    """
    start = to_money(start_wager)
    plan_odds = to_money(odds)
    if start <= 0:
        raise ValueError("start_wager must be > 0")
    if plan_odds < Decimal("1.01"):
        raise ValueError("odds must be >= 1.01")
    if days < 1:
        raise ValueError("days must be >= 1")
    return _project(start, plan_odds, 1, days)


def generate(plan: PlanTerms) -> List[DayEntryDraft]:
    return generate_plan_entries(plan.start_wager, plan.odds, plan.days)


def recalculate_from_day(plan: PlanTerms, day: int, prior_entries: Iterable[PriorEntry] = ()) -> List[DayEntryDraft]:
    """
    Rebuild the schedule tail for days ``day``..``plan.days``.

    Day 1 restarts from the plan's start wager. Any later day resumes from the
    winnings already recorded on the entry for ``day - 1``; entries before
    ``day`` are never part of the output.
    """
    if day < 1 or day > plan.days:
        raise ValueError(f"restart day must be between 1 and {plan.days}")

    if day == 1:
        return generate(plan)

    previous = next((e for e in prior_entries if e.day == day - 1), None)
    if previous is None:
        raise ValueError(f"no entry recorded for day {day - 1}")

    return _project(to_money(previous.winnings), to_money(plan.odds), day, plan.days)


def projected_payout(start_wager: Number, odds: Number, days: int) -> Decimal:
    """Winnings on the last day if every day wins."""
    return generate_plan_entries(start_wager, odds, days)[-1].winnings
