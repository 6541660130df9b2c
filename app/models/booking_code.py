import uuid
from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text, text

from app.models.db import Base
from app.models.types import Money


class BookingCodeStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"


class BookingCode(Base):
    __tablename__ = "booking_codes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    booking_code = Column(String(64), nullable=False, unique=True)
    odds = Column(Money(6, 2), nullable=False)
    description = Column(Text, nullable=True)
    betway_url = Column(String(512), nullable=False)
    status = Column(String(16), nullable=False, default=BookingCodeStatus.ACTIVE.value)

    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    expires_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_booking_code_status_created", "status", "created_at"),
    )
