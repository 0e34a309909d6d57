"""FastAPI application factory and configuration."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import SQLModel

from . import models  # noqa: F401 - ensure models are registered with SQLModel
from .api import register_routes
from .api.routers.users import CORS_HEADERS
from .core import (
    ALLOWED_CORS_HEADERS,
    ALLOWED_CORS_METHODS,
    ALLOWED_CORS_ORIGINS,
    DB_RESET,
    LOG_LEVEL,
    engine,
    get_settings,
    setup_logging,
)
from .core.errors import ConfigurationError, ServiceError

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(LOG_LEVEL)
    try:
        get_settings()
    except ConfigurationError as exc:
        # Keep serving so every request reports the configuration error.
        log.error("Startup configuration check failed: %s", exc.message)
    if DB_RESET:
        SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse({"success": False, "error": exc.message}, status_code=exc.status_code)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Runs outside CORSMiddleware, so the CORS headers are set here.
    log.exception("Manage users request failed", exc_info=exc)
    return JSONResponse(
        {"success": False, "error": "Internal server error"},
        status_code=500,
        headers=CORS_HEADERS,
    )


def create_app() -> FastAPI:
    app = FastAPI(title="Account Administration API", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_CORS_ORIGINS,
        allow_methods=ALLOWED_CORS_METHODS,
        allow_headers=ALLOWED_CORS_HEADERS,
    )
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    register_routes(app)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("account_admin.app:app", host="127.0.0.1", port=3000, reload=True)
