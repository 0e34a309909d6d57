"""Application settings and environment helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

from .errors import ConfigurationError

load_dotenv(override=False)


REQUIRED_ENV = (
    "SUPABASE_URL",
    "SUPABASE_SERVICE_ROLE_KEY",
    "SUPABASE_ANON_KEY",
)


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number") from exc


def _split_csv(raw: str | None) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    """Connection values for the identity provider and relational store."""

    supabase_url: str
    service_role_key: str
    anon_key: str
    identity_timeout: float = 20.0


def load_settings() -> Settings:
    """Read the required connection values or raise ``ConfigurationError``."""

    missing = [name for name in REQUIRED_ENV if not os.getenv(name)]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variable: {', '.join(missing)}"
        )
    return Settings(
        supabase_url=os.environ["SUPABASE_URL"].rstrip("/"),
        service_role_key=os.environ["SUPABASE_SERVICE_ROLE_KEY"],
        anon_key=os.environ["SUPABASE_ANON_KEY"],
        identity_timeout=_env_float("IDENTITY_TIMEOUT", 20.0),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """FastAPI dependency returning the process-wide settings.

    Failures are not cached, so a request made after the environment is fixed
    picks the values up.
    """

    return load_settings()


# CORS -----------------------------------------------------------------------
ALLOWED_CORS_ORIGINS = ["*"]
ALLOWED_CORS_METHODS = ["POST", "OPTIONS"]
ALLOWED_CORS_HEADERS = [
    "authorization",
    "x-client-info",
    "apikey",
    "content-type",
    *_split_csv(os.getenv("ADDITIONAL_ALLOWED_HEADERS")),
]


# Runtime behaviour ----------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DB_RESET = _env_bool("DB_RESET", False)

# Mount point for the function routes, e.g. "/functions/v1".
ROUTE_PREFIX = os.getenv("ROUTE_PREFIX", "").rstrip("/")


__all__ = [
    "ALLOWED_CORS_HEADERS",
    "ALLOWED_CORS_METHODS",
    "ALLOWED_CORS_ORIGINS",
    "DB_RESET",
    "LOG_LEVEL",
    "REQUIRED_ENV",
    "ROUTE_PREFIX",
    "Settings",
    "get_settings",
    "load_settings",
]
