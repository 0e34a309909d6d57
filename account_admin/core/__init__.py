"""Core configuration and infrastructure helpers."""

from .config import (
    ALLOWED_CORS_HEADERS,
    ALLOWED_CORS_METHODS,
    ALLOWED_CORS_ORIGINS,
    DB_RESET,
    LOG_LEVEL,
    ROUTE_PREFIX,
    Settings,
    get_settings,
    load_settings,
)
from .database import engine, get_session
from .app_logging import setup_logging
from .time import utcnow

__all__ = [
    "ALLOWED_CORS_HEADERS",
    "ALLOWED_CORS_METHODS",
    "ALLOWED_CORS_ORIGINS",
    "DB_RESET",
    "LOG_LEVEL",
    "ROUTE_PREFIX",
    "Settings",
    "engine",
    "get_session",
    "get_settings",
    "load_settings",
    "setup_logging",
    "utcnow",
]
