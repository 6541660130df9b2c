import uuid
from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, text

from app.models.db import Base
from app.models.types import Money


class PlanStatus(str, Enum):
    ACTIVE = "active"
    STOPPED = "stopped"
    COMPLETED = "completed"


class DayResult(str, Enum):
    PENDING = "pending"
    WIN = "win"
    LOSS = "loss"


class Plan(Base):
    __tablename__ = "plans"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(128), nullable=False)

    start_wager = Column(Money(20, 2), nullable=False)
    odds = Column(Money(6, 2), nullable=False)
    days = Column(Integer, nullable=False)

    status = Column(String(16), nullable=False, default=PlanStatus.ACTIVE.value)

    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))

    __table_args__ = (
        Index("idx_plan_user_created", "user_id", "created_at"),
    )


class DayEntry(Base):
    __tablename__ = "day_entries"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    plan_id = Column(String(36), ForeignKey("plans.id", ondelete="CASCADE"), nullable=False)
    day = Column(Integer, nullable=False)

    wager = Column(Money(20, 2), nullable=False)
    odds = Column(Money(6, 2), nullable=False)
    winnings = Column(Money(20, 2), nullable=False)
    result = Column(String(16), nullable=False, default=DayResult.PENDING.value)

    __table_args__ = (
        UniqueConstraint("plan_id", "day", name="uq_day_entry_plan_day"),
    )
