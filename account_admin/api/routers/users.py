"""User management endpoint for admin callers."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from sqlmodel import Session

from ...core import (
    ALLOWED_CORS_HEADERS,
    ALLOWED_CORS_METHODS,
    get_session,
    get_settings,
)
from ...core.errors import ValidationError
from ...models import UserProfile
from ...services.accounts import AdminContext, dispatch
from ...services.identity import IdentityProvider
from ..dependencies import get_identity_provider, require_admin

router = APIRouter(tags=["users"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": ", ".join(ALLOWED_CORS_HEADERS),
    "Access-Control-Allow-Methods": ",".join(ALLOWED_CORS_METHODS),
}


@router.options("/manage-users")
def manage_users_preflight() -> PlainTextResponse:
    """Answer bare OPTIONS requests that the CORS middleware lets through."""

    return PlainTextResponse("ok", headers=CORS_HEADERS)


@router.post("/manage-users", dependencies=[Depends(get_settings)])
async def manage_users(
    request: Request,
    caller: UserProfile = Depends(require_admin),
    session: Session = Depends(get_session),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> Dict[str, Any]:
    """Run ``createUser``, ``updateUser``, ``deleteUser``, ``getUser`` or ``listUsers``."""

    try:
        body = await request.json()
    except ValueError as exc:
        raise ValidationError("Invalid request body") from exc
    if not isinstance(body, dict):
        raise ValidationError("Invalid request body")

    payload = body.get("payload") or {}
    if not isinstance(payload, dict):
        raise ValidationError("payload must be an object")

    ctx = AdminContext(caller=caller, session=session, identity=identity)
    result = await dispatch(body.get("action"), payload, ctx)
    return {"success": True, **result}


__all__ = ["router"]
