from fastapi import APIRouter, Depends

from app.core.auth import RequestContext, get_request_context
from app.schemas.plan import (
    DayEntryView,
    DayResultRequest,
    MessageResponse,
    PlanCreateRequest,
    PlanDetailResponse,
    PlanListResponse,
    PlanPreviewResponse,
    PlanResponse,
    PlanSummaryResponse,
    PlanTermsRequest,
    PlanView,
    RestartPlanRequest,
    StoredDayEntryView,
)
from app.services.plan_service import PlanService

router = APIRouter(prefix="/plans")


async def _detail(svc: PlanService, plan) -> PlanDetailResponse:
    entries = await svc.get_entries(plan.id)
    return PlanDetailResponse(
        plan=PlanView.model_validate(plan),
        day_entries=[StoredDayEntryView.model_validate(e) for e in entries],
    )


@router.get("", response_model=PlanListResponse)
async def list_plans(ctx: RequestContext = Depends(get_request_context)):
    svc = PlanService(ctx.session)
    plans = await svc.list_plans(ctx.user.id)
    views = [PlanView.model_validate(p) for p in plans]
    return PlanListResponse(total=len(views), plans=views)


@router.post("", response_model=PlanResponse)
async def create_plan(
    payload: PlanCreateRequest,
    ctx: RequestContext = Depends(get_request_context),
):
    """Create a plan and its full day-by-day schedule."""
    svc = PlanService(ctx.session)
    plan = await svc.create_plan(ctx.user.id, payload.model_dump())
    return PlanResponse(plan=PlanView.model_validate(plan))


@router.get("/summary", response_model=PlanSummaryResponse)
async def plan_summary(ctx: RequestContext = Depends(get_request_context)):
    svc = PlanService(ctx.session)
    return PlanSummaryResponse(**await svc.summarize(ctx.user.id))


@router.post("/preview", response_model=PlanPreviewResponse)
async def preview_plan(
    payload: PlanTermsRequest,
    ctx: RequestContext = Depends(get_request_context),
):
    """Project a schedule without saving it."""
    svc = PlanService(ctx.session)
    entries, payout = svc.preview(payload.model_dump())
    return PlanPreviewResponse(
        entries=[DayEntryView(**e.as_row()) for e in entries],
        projected_payout=payout,
    )


@router.get("/{plan_id}", response_model=PlanDetailResponse)
async def get_plan(plan_id: str, ctx: RequestContext = Depends(get_request_context)):
    svc = PlanService(ctx.session)
    plan = await svc.get_owned_plan(plan_id, ctx.user.id)
    return await _detail(svc, plan)


@router.delete("/{plan_id}", response_model=MessageResponse)
async def delete_plan(plan_id: str, ctx: RequestContext = Depends(get_request_context)):
    svc = PlanService(ctx.session)
    await svc.delete_plan(plan_id, ctx.user.id)
    return MessageResponse(message="Plan deleted successfully")


@router.patch("/{plan_id}/days/{day}", response_model=PlanDetailResponse)
async def record_day_result(
    plan_id: str,
    day: int,
    payload: DayResultRequest,
    ctx: RequestContext = Depends(get_request_context),
):
    svc = PlanService(ctx.session)
    plan = await svc.record_result(plan_id, ctx.user.id, day, payload.result)
    return await _detail(svc, plan)


@router.post("/{plan_id}/restart", response_model=PlanDetailResponse)
async def restart_plan(
    plan_id: str,
    payload: RestartPlanRequest,
    ctx: RequestContext = Depends(get_request_context),
):
    """Regenerate the schedule from ``day`` onward, keeping earlier results."""
    svc = PlanService(ctx.session)
    plan = await svc.restart_plan(plan_id, ctx.user.id, payload.day)
    return await _detail(svc, plan)
