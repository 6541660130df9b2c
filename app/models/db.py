import logging
from typing import AsyncGenerator, Optional

import redis.asyncio as redis
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.core.config import Settings

Base = declarative_base()

logger = logging.getLogger(__name__)


class Database:
    """Async engine + session factory, created at startup and disposed at shutdown."""

    def __init__(self, url: str, db_type: str = "sqlite", echo: bool = False):
        engine_kwargs = {
            "echo": echo,
            "future": True,
        }
        # SQLite needs no pool tuning, MySQL drops idle connections without it
        if db_type == "mysql":
            engine_kwargs.update({
                "pool_pre_ping": True,
                "pool_recycle": 3600,
                "pool_size": 10,
                "max_overflow": 20,
            })

        self.url = url
        self.engine = create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            expire_on_commit=False,
            class_=AsyncSession,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.DATABASE_URL, db_type=settings.DB_TYPE)

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def create_all(self) -> None:
        # import for side effects: registers every table on Base.metadata
        from app.models import booking_code, plan, user  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables checked and ensured")

    async def dispose(self) -> None:
        await self.engine.dispose()


def create_redis_client(settings: Settings) -> Optional[redis.Redis]:
    if not settings.REDIS_ENABLED:
        return None
    return redis.from_url(
        settings.REDIS_URL,
        encoding="utf-8",
        decode_responses=True,
    )


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency yielding one session per request from the app's Database."""
    db: Database = request.app.state.db
    async with db.session() as session:
        yield session
