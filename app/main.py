import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.core.cache import RedisCache
from app.core.config import Settings, settings as default_settings
from app.core.errors import AppError, ErrorKind
from app.core.logging_config import setup_logging
from app.models.db import Database, create_redis_client
from app.routers import auth, booking_codes, plans

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the database and cache clients on startup, release them on shutdown."""
    settings: Settings = app.state.settings

    db = Database.from_settings(settings)
    if settings.DB_AUTO_CREATE:
        await db.create_all()
    app.state.db = db

    cache = RedisCache(create_redis_client(settings))
    app.state.cache = cache
    if cache.enabled:
        logger.info("Redis cache enabled")
    else:
        logger.info("Redis cache disabled (REDIS_ENABLED=false)")

    yield

    await cache.close()
    # dispose explicitly so aiomysql/aiosqlite don't complain at loop shutdown
    try:
        await db.dispose()
        logger.info("Database engine disposed")
    except SQLAlchemyError as e:
        logger.warning(f"Failed to dispose engine gracefully: {e}")


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    msg = first.get("msg", "Invalid value")
    return f"{field}: {msg}" if field else msg


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        if exc.kind == ErrorKind.INTERNAL:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return ORJSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        error = AppError(ErrorKind.VALIDATION, _first_validation_message(exc))
        return ORJSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(SQLAlchemyError)
    async def handle_database_error(request: Request, exc: SQLAlchemyError):
        logger.exception(f"Database error on {request.method} {request.url.path}")
        error = AppError(ErrorKind.INTERNAL, "Internal server error")
        return ORJSONResponse(status_code=error.status_code, content=error.to_dict())


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL, settings.QUIET_LOGGERS)

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan, default_response_class=ORJSONResponse)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1024)

    register_exception_handlers(app)

    # plan and auth-protected routes resolve the caller through get_request_context
    app.include_router(auth.router, prefix="/api", tags=["auth"])
    app.include_router(plans.router, prefix="/api", tags=["plans"])
    app.include_router(booking_codes.router, prefix="/api", tags=["booking codes"])

    @app.get("/health")
    async def health():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    return app


app = create_app()
