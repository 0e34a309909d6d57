"""API assembly helpers."""

from __future__ import annotations

from fastapi import FastAPI

from ..core import ROUTE_PREFIX
from .routers import ALL_ROUTERS, system_router


def register_routes(app: FastAPI, prefix: str = ROUTE_PREFIX) -> None:
    """Attach the routers; health checks stay at the root, functions under ``prefix``."""

    for router in ALL_ROUTERS:
        app.include_router(router, prefix="" if router is system_router else prefix)


__all__ = ["register_routes"]
