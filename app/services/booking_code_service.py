from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import RedisCache
from app.core.errors import forbidden, not_found, validation_error
from app.engine.compounding import to_money
from app.engine.validation import validate_booking_code_terms
from app.models.booking_code import BookingCode, BookingCodeStatus
from app.schemas.booking_code import BookingCodeView

logger = logging.getLogger(__name__)

ACTIVE_LIST_CACHE_PREFIX = "booking_codes:active:"


def utcnow() -> datetime:
    """Naive UTC, matching how DateTime columns are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class BookingCodeService:
    def __init__(
        self,
        session: AsyncSession,
        cache: Optional[RedisCache] = None,
        cache_ttl: int = 30,
        default_limit: int = 50,
        max_limit: int = 100,
    ):
        self.session = session
        self.cache = cache or RedisCache()
        self.cache_ttl = cache_ttl
        self.default_limit = default_limit
        self.max_limit = max_limit

    def clamp_limit(self, limit: Optional[int]) -> int:
        if not limit or limit < 1:
            return self.default_limit
        return min(limit, self.max_limit)

    async def create(self, user_id: str, payload: dict) -> BookingCode:
        expires_at = _as_naive_utc(payload.get("expires_at"))
        error = validate_booking_code_terms(payload["odds"], expires_at, utcnow())
        if error:
            raise error

        code = payload["booking_code"].strip()
        if await self.get_by_code(code):
            raise validation_error("Booking code already exists")

        booking_code = BookingCode(
            user_id=user_id,
            booking_code=code,
            odds=to_money(payload["odds"]),
            description=payload.get("description"),
            betway_url=str(payload["betway_url"]),
            status=BookingCodeStatus.ACTIVE.value,
            expires_at=expires_at,
        )
        self.session.add(booking_code)
        await self.session.commit()
        await self.session.refresh(booking_code)
        await self._invalidate_listing()
        logger.info(f"Booking code {booking_code.id} published by user {user_id}")
        return booking_code

    async def list_active(self, limit: Optional[int] = None) -> list[BookingCodeView]:
        """Active codes with no expiry or an expiry still ahead, newest first."""
        limit = self.clamp_limit(limit)
        cache_key = f"{ACTIVE_LIST_CACHE_PREFIX}{limit}"
        cached = await self.cache.get(cache_key)
        if cached is not None:
            return [BookingCodeView.model_validate(item) for item in cached]

        stmt = (
            select(BookingCode)
            .where(
                BookingCode.status == BookingCodeStatus.ACTIVE.value,
                or_(BookingCode.expires_at.is_(None), BookingCode.expires_at > utcnow()),
            )
            .order_by(BookingCode.created_at.desc(), BookingCode.id)
            .limit(limit)
        )
        res = await self.session.execute(stmt)
        views = [BookingCodeView.model_validate(c) for c in res.scalars().all()]

        await self.cache.set(cache_key, [v.model_dump(mode="json") for v in views], expire=self.cache_ttl)
        return views

    async def get_by_id(self, booking_code_id: str) -> BookingCode:
        booking_code = await self.session.get(BookingCode, booking_code_id)
        if booking_code is None:
            raise not_found("Booking code not found")
        return booking_code

    async def get_by_code(self, code: str) -> Optional[BookingCode]:
        stmt = select(BookingCode).where(BookingCode.booking_code == code)
        res = await self.session.execute(stmt)
        return res.scalars().first()

    async def update_status(self, booking_code_id: str, user_id: str, status: str) -> BookingCode:
        booking_code = await self._get_owned(booking_code_id, user_id)
        booking_code.status = BookingCodeStatus(status).value
        await self.session.commit()
        await self._invalidate_listing()
        logger.info(f"Booking code {booking_code_id} marked {status}")
        return booking_code

    async def delete(self, booking_code_id: str, user_id: str) -> None:
        booking_code = await self._get_owned(booking_code_id, user_id)
        await self.session.delete(booking_code)
        await self.session.commit()
        await self._invalidate_listing()
        logger.info(f"Booking code {booking_code_id} deleted by user {user_id}")

    async def _get_owned(self, booking_code_id: str, user_id: str) -> BookingCode:
        booking_code = await self.get_by_id(booking_code_id)
        if booking_code.user_id != user_id:
            logger.warning(f"User {user_id} denied access to booking code {booking_code_id}")
            raise forbidden()
        return booking_code

    async def _invalidate_listing(self) -> None:
        await self.cache.delete_prefix(ACTIVE_LIST_CACHE_PREFIX)
