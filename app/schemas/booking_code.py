from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl


class BookingCodeCreateRequest(BaseModel):
    booking_code: str = Field(..., min_length=5, max_length=64)
    odds: Decimal
    description: Optional[str] = Field(None, max_length=2000)
    betway_url: HttpUrl
    expires_at: Optional[datetime] = None


class BookingCodeStatusRequest(BaseModel):
    status: Literal["active", "expired"]


class BookingCodeView(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    user_id: str
    booking_code: str
    odds: Decimal
    description: Optional[str] = None
    betway_url: str
    status: str
    created_at: datetime
    expires_at: Optional[datetime] = None


class BookingCodeResponse(BaseModel):
    booking_code: BookingCodeView


class BookingCodeListResponse(BaseModel):
    booking_codes: list[BookingCodeView]
