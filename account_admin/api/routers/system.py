"""Liveness and readiness checks."""

from __future__ import annotations

from typing import Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ...core import get_settings
from ...core.errors import ConfigurationError

router = APIRouter(tags=["system"])


@router.get("/health")
def health() -> Dict[str, bool]:
    """Process is up."""

    return {"ok": True}


@router.get("/healthz")
def healthz() -> JSONResponse:
    """Ready only when the identity provider and store are configured."""

    try:
        get_settings()
    except ConfigurationError as exc:
        return JSONResponse({"ok": False, "error": exc.message}, status_code=503)
    return JSONResponse({"ok": True})


__all__ = ["router"]
