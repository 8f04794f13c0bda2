"""Centralized logging configuration.

Usage:
    from core.logging_config import setup_logging
    setup_logging()   # Call once at startup (in main.py)
"""
import logging
import os
import sys

# Loggers that are too chatty at the application level
_NOISY_LOGGERS = {
    "sqlalchemy.engine": "LOG_LEVEL_SQL",
    "sqlalchemy.pool": "LOG_LEVEL_SQL",
    "uvicorn.access": "LOG_LEVEL_UVICORN",
}

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def _parse_level(value: str | None, default: int = logging.INFO) -> int:
    if not value:
        return default
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else default


def setup_logging() -> None:
    """Configure the root logger from LOG_LEVEL and cap noisy library loggers."""
    root = logging.getLogger()
    root.setLevel(_parse_level(os.getenv("LOG_LEVEL")))

    if not any(getattr(h, "_yard_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._yard_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    for logger_name, env_name in _NOISY_LOGGERS.items():
        logging.getLogger(logger_name).setLevel(_parse_level(os.getenv(env_name), logging.WARNING))
