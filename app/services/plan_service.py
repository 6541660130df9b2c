from __future__ import annotations

import logging
from decimal import Decimal
from typing import List, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import AppError, ErrorKind, forbidden, not_found
from app.engine.compounding import (
    DayEntryDraft,
    generate_plan_entries,
    projected_payout,
    recalculate_from_day,
    to_money,
)
from app.engine.plan_status import status_after_restart, status_after_result
from app.engine.validation import validate_plan_terms, validate_restart_day, validate_result_day
from app.models.plan import DayEntry, DayResult, Plan, PlanStatus

logger = logging.getLogger(__name__)


class PlanService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_plans(self, user_id: str) -> list[Plan]:
        stmt = (
            select(Plan)
            .where(Plan.user_id == user_id)
            .order_by(Plan.created_at.desc(), Plan.id)
        )
        res = await self.session.execute(stmt)
        return list(res.scalars().all())

    async def get_owned_plan(self, plan_id: str, user_id: str) -> Plan:
        plan = await self.session.get(Plan, plan_id)
        if plan is None:
            raise not_found("Plan not found")
        if plan.user_id != user_id:
            logger.warning(f"User {user_id} denied access to plan {plan_id}")
            raise forbidden()
        return plan

    async def get_entries(self, plan_id: str) -> list[DayEntry]:
        stmt = select(DayEntry).where(DayEntry.plan_id == plan_id).order_by(DayEntry.day)
        res = await self.session.execute(stmt)
        return list(res.scalars().all())

    async def get_plan_with_entries(self, plan_id: str, user_id: str) -> Tuple[Plan, list[DayEntry]]:
        plan = await self.get_owned_plan(plan_id, user_id)
        return plan, await self.get_entries(plan.id)

    def preview(self, payload: dict) -> Tuple[List[DayEntryDraft], Decimal]:
        error = validate_plan_terms(payload["start_wager"], payload["odds"], payload["days"])
        if error:
            raise error
        entries = generate_plan_entries(payload["start_wager"], payload["odds"], payload["days"])
        return entries, entries[-1].winnings

    async def create_plan(self, user_id: str, payload: dict) -> Plan:
        error = validate_plan_terms(payload["start_wager"], payload["odds"], payload["days"])
        if error:
            raise error

        plan = Plan(
            user_id=user_id,
            name=payload["name"].strip(),
            start_wager=to_money(payload["start_wager"]),
            odds=to_money(payload["odds"]),
            days=payload["days"],
            status=PlanStatus.ACTIVE.value,
        )
        self.session.add(plan)
        # flush to get plan.id before the entries reference it
        await self.session.flush()

        drafts = generate_plan_entries(plan.start_wager, plan.odds, plan.days)
        self._add_entries(plan.id, drafts)

        await self.session.commit()
        await self.session.refresh(plan)
        logger.info(f"Plan {plan.id} created for user {user_id}: {plan.days} days @ {plan.odds}")
        return plan

    async def delete_plan(self, plan_id: str, user_id: str) -> None:
        plan = await self.get_owned_plan(plan_id, user_id)
        await self.session.execute(delete(DayEntry).where(DayEntry.plan_id == plan.id))
        await self.session.delete(plan)
        await self.session.commit()
        logger.info(f"Plan {plan_id} deleted by user {user_id}")

    async def record_result(self, plan_id: str, user_id: str, day: int, result: str) -> Plan:
        plan = await self.get_owned_plan(plan_id, user_id)
        error = validate_result_day(day, plan.days)
        if error:
            raise error

        stmt = select(DayEntry).where(DayEntry.plan_id == plan.id, DayEntry.day == day)
        entry = (await self.session.execute(stmt)).scalars().first()
        if entry is None:
            raise not_found(f"Day {day} not found")

        entry.result = DayResult(result).value
        await self.session.flush()

        win_count = await self._count_wins(plan.id)
        new_status = status_after_result(PlanStatus(plan.status), DayResult(result), win_count, plan.days)
        if new_status.value != plan.status:
            logger.info(f"Plan {plan.id} status {plan.status} -> {new_status.value}")
            plan.status = new_status.value

        await self.session.commit()
        logger.info(f"Plan {plan.id} day {day} recorded as {result}")
        return plan

    async def restart_plan(self, plan_id: str, user_id: str, day: int) -> Plan:
        plan = await self.get_owned_plan(plan_id, user_id)
        error = validate_restart_day(day, plan.days)
        if error:
            raise error

        prior_entries = await self.get_entries(plan.id)
        try:
            drafts = recalculate_from_day(plan, day, prior_entries)
        except ValueError as e:
            # the entry for day - 1 is missing: stored schedule has a gap
            logger.error(f"Plan {plan.id} cannot restart from day {day}: {e}")
            raise AppError(ErrorKind.INTERNAL, "Plan schedule is inconsistent") from e

        try:
            await self.session.execute(
                delete(DayEntry).where(DayEntry.plan_id == plan.id, DayEntry.day >= day)
            )
            self._add_entries(plan.id, drafts)
            new_status = status_after_restart(PlanStatus(plan.status))
            if new_status.value != plan.status:
                logger.info(f"Plan {plan.id} status {plan.status} -> {new_status.value}")
                plan.status = new_status.value
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Plan {plan.id} restarted from day {day}")
        return plan

    async def summarize(self, user_id: str) -> dict:
        plans = await self.list_plans(user_id)
        counts = {status: 0 for status in PlanStatus}
        total_investment = Decimal("0.00")
        potential_winnings = Decimal("0.00")
        for plan in plans:
            counts[PlanStatus(plan.status)] += 1
            total_investment += to_money(plan.start_wager)
            if plan.status == PlanStatus.ACTIVE.value:
                potential_winnings += projected_payout(plan.start_wager, plan.odds, plan.days)

        return {
            "total_plans": len(plans),
            "active_plans": counts[PlanStatus.ACTIVE],
            "stopped_plans": counts[PlanStatus.STOPPED],
            "completed_plans": counts[PlanStatus.COMPLETED],
            "total_investment": total_investment,
            "potential_winnings": potential_winnings,
        }

    async def _count_wins(self, plan_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(DayEntry)
            .where(DayEntry.plan_id == plan_id, DayEntry.result == DayResult.WIN.value)
        )
        res = await self.session.execute(stmt)
        return res.scalar() or 0

    def _add_entries(self, plan_id: str, drafts: List[DayEntryDraft]) -> None:
        self.session.add_all([DayEntry(plan_id=plan_id, **draft.as_row()) for draft in drafts])
