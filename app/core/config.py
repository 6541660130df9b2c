from pathlib import Path
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Locate the nearest .env starting from this file's directory
def find_env_file() -> Path | None:
    current = Path(__file__).resolve()
    for parent in current.parents:
        env_file = parent / ".env"
        if env_file.exists():
            return env_file
    return None


ENV_FILE = find_env_file()
BASE_DIR = ENV_FILE.parent if ENV_FILE else Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    APP_NAME: str = "Money Marathon API"
    LOG_LEVEL: str = "INFO"
    # raised to WARNING at startup
    QUIET_LOGGERS: list[str] = ["uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx"]

    # sqlite / mysql
    DB_TYPE: str = "sqlite"
    DATABASE_URL: str = "sqlite+aiosqlite:///./money_marathon.db"
    DB_AUTO_CREATE: bool = True

    # Bearer tokens
    JWT_SECRET_KEY: str = "change-me-in-production"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    BCRYPT_ROUNDS: int = 10

    CORS_ALLOWED_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "https://money-marathon.vercel.app",
    ]

    # Redis is only used to cache the public booking code listing
    REDIS_ENABLED: bool = False
    REDIS_URL: str = "redis://localhost:6379/0"
    BOOKING_CODES_CACHE_TTL: int = 30

    BOOKING_CODES_DEFAULT_LIMIT: int = 50
    BOOKING_CODES_MAX_LIMIT: int = 100

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE else ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("DB_TYPE", mode="before")
    @classmethod
    def _normalize_db_type(cls, value: str | None) -> str:
        db_type = (value or "sqlite").strip().lower()
        if db_type not in ("sqlite", "mysql"):
            raise ValueError(f"Unsupported DB_TYPE: {value}")
        return db_type

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: str | None) -> str:
        return (value or "INFO").strip().upper()


settings = Settings()
