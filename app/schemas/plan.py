from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class PlanTermsRequest(BaseModel):
    """Stake, odds and duration; ranges are checked by the validation layer."""
    start_wager: Decimal = Field(..., description="Day 1 stake")
    odds: Decimal = Field(..., description="Fixed decimal odds, at least 1.01")
    days: int = Field(..., description="Duration, 1..365")


class PlanCreateRequest(PlanTermsRequest):
    name: str = Field(..., min_length=1, max_length=128, description="Plan name")


class DayResultRequest(BaseModel):
    result: Literal["win", "loss"]


class RestartPlanRequest(BaseModel):
    day: int = Field(..., description="First day to regenerate")


class PlanView(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    user_id: str
    name: str
    start_wager: Decimal
    odds: Decimal
    days: int
    status: str
    created_at: datetime


class DayEntryView(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    day: int
    wager: Decimal
    odds: Decimal
    winnings: Decimal
    result: str


class StoredDayEntryView(DayEntryView):
    id: str
    plan_id: str


class PlanResponse(BaseModel):
    plan: PlanView


class PlanListResponse(BaseModel):
    total: int
    plans: list[PlanView]


class PlanDetailResponse(BaseModel):
    plan: PlanView
    day_entries: list[StoredDayEntryView]


class PlanPreviewResponse(BaseModel):
    entries: list[DayEntryView]
    projected_payout: Decimal


class PlanSummaryResponse(BaseModel):
    total_plans: int
    active_plans: int
    stopped_plans: int
    completed_plans: int
    total_investment: Decimal
    potential_winnings: Decimal


class MessageResponse(BaseModel):
    message: str
