"""Aggregate API routers."""

from fastapi import APIRouter

from .system import router as system_router
from .users import router as users_router

ALL_ROUTERS: tuple[APIRouter, ...] = (
    system_router,
    users_router,
)

__all__ = ["ALL_ROUTERS", "system_router", "users_router"]
