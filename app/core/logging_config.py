import logging
import sys
from typing import Iterable

LOG_FORMAT = "%(asctime)s.%(msecs)03d | %(levelname)-7s | %(name)s:%(funcName)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# servers whose own handlers should print in our format
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _resolve_level(level) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level="INFO", quiet_loggers: Iterable[str] = ()) -> logging.Logger:
    """
    Route all logs through one stdout handler.

    Line format: 2024-03-21 10:00:00.123 | INFO    | app.services.plan_service:restart_plan:120 - ...
    Loggers named in ``quiet_loggers`` are raised to WARNING.
    """
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    # re-running (tests, --reload) must not stack handlers
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(_resolve_level(level))

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)

    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        if server_logger.handlers:
            for existing in server_logger.handlers:
                existing.setFormatter(formatter)
        else:
            server_logger.addHandler(handler)

    root_logger.debug(f"Logging configured at {logging.getLevelName(root_logger.level)}")
    return root_logger
