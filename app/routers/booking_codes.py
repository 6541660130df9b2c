from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import RequestContext, get_request_context, get_settings
from app.core.cache import RedisCache, get_cache
from app.core.config import Settings
from app.core.errors import not_found
from app.models.db import get_session
from app.schemas.booking_code import (
    BookingCodeCreateRequest,
    BookingCodeListResponse,
    BookingCodeResponse,
    BookingCodeStatusRequest,
    BookingCodeView,
)
from app.schemas.plan import MessageResponse
from app.services.booking_code_service import BookingCodeService

router = APIRouter(prefix="/booking-codes")


def _service(session: AsyncSession, cache: RedisCache, settings: Settings) -> BookingCodeService:
    return BookingCodeService(
        session,
        cache=cache,
        cache_ttl=settings.BOOKING_CODES_CACHE_TTL,
        default_limit=settings.BOOKING_CODES_DEFAULT_LIMIT,
        max_limit=settings.BOOKING_CODES_MAX_LIMIT,
    )


@router.get("", response_model=BookingCodeListResponse)
async def list_booking_codes(
    limit: Optional[int] = Query(None, description="Max codes to return"),
    session: AsyncSession = Depends(get_session),
    cache: RedisCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
):
    """Public listing of active, unexpired booking codes."""
    svc = _service(session, cache, settings)
    return BookingCodeListResponse(booking_codes=await svc.list_active(limit))


@router.post("", response_model=BookingCodeResponse, status_code=201)
async def create_booking_code(
    payload: BookingCodeCreateRequest,
    ctx: RequestContext = Depends(get_request_context),
    cache: RedisCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
):
    svc = _service(ctx.session, cache, settings)
    booking_code = await svc.create(ctx.user.id, payload.model_dump())
    return BookingCodeResponse(booking_code=BookingCodeView.model_validate(booking_code))


@router.get("/code/{code}", response_model=BookingCodeResponse)
async def get_booking_code_by_code(
    code: str,
    session: AsyncSession = Depends(get_session),
    cache: RedisCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
):
    svc = _service(session, cache, settings)
    booking_code = await svc.get_by_code(code)
    if booking_code is None:
        raise not_found("Booking code not found")
    return BookingCodeResponse(booking_code=BookingCodeView.model_validate(booking_code))


@router.get("/{booking_code_id}", response_model=BookingCodeResponse)
async def get_booking_code(
    booking_code_id: str,
    session: AsyncSession = Depends(get_session),
    cache: RedisCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
):
    svc = _service(session, cache, settings)
    booking_code = await svc.get_by_id(booking_code_id)
    return BookingCodeResponse(booking_code=BookingCodeView.model_validate(booking_code))


@router.patch("/{booking_code_id}/status", response_model=MessageResponse)
async def update_booking_code_status(
    booking_code_id: str,
    payload: BookingCodeStatusRequest,
    ctx: RequestContext = Depends(get_request_context),
    cache: RedisCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
):
    svc = _service(ctx.session, cache, settings)
    await svc.update_status(booking_code_id, ctx.user.id, payload.status)
    return MessageResponse(message="Status updated successfully")


@router.delete("/{booking_code_id}", response_model=MessageResponse)
async def delete_booking_code(
    booking_code_id: str,
    ctx: RequestContext = Depends(get_request_context),
    cache: RedisCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
):
    svc = _service(ctx.session, cache, settings)
    await svc.delete(booking_code_id, ctx.user.id)
    return MessageResponse(message="Booking code deleted successfully")
