"""Request dependencies enforcing the admin authorization contract."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Header
from sqlmodel import Session

from ..core import Settings, get_session, get_settings
from ..core.errors import AuthenticationError, AuthorizationError, UpstreamError
from ..models import ADMIN_ROLE, UserProfile
from ..services.identity import IdentityProvider, IdentityProviderError
from ..services.profiles import get_profile

log = logging.getLogger(__name__)


def get_identity_provider(settings: Settings = Depends(get_settings)) -> IdentityProvider:
    return IdentityProvider.from_settings(settings)


def bearer_token(authorization: Optional[str] = Header(None)) -> str:
    """Extract the token from an ``Authorization: Bearer`` header."""

    if not authorization:
        raise AuthenticationError()
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        log.debug("Authorization header is not a bearer token")
        raise AuthenticationError()
    return parts[1]


async def require_admin(
    token: str = Depends(bearer_token),
    identity: IdentityProvider = Depends(get_identity_provider),
    session: Session = Depends(get_session),
) -> UserProfile:
    """Resolve the caller's profile, rejecting anyone but an active admin."""

    try:
        account = await identity.get_user(token)
    except IdentityProviderError as exc:
        log.info("Token exchange rejected: %s", exc.message)
        raise AuthenticationError() from exc

    try:
        profile = get_profile(session, account.id)
    except UpstreamError as exc:
        raise AuthorizationError() from exc

    if profile is None or profile.role != ADMIN_ROLE or not profile.is_active:
        log.warning("Non-admin account %s attempted user management", account.id)
        raise AuthorizationError()
    return profile


__all__ = ["bearer_token", "get_identity_provider", "require_admin"]
