"""Account lifecycle actions spanning the identity provider and profile store.

Each action receives the request payload and an :class:`AdminContext` for an
already authorised admin, and returns the envelope fields to send back.
Failures are raised as :mod:`account_admin.core.errors` exceptions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from ..core.errors import (
    ConsistencyError,
    NotFoundError,
    UnknownActionError,
    UpdateError,
    UpstreamError,
    ValidationError,
)
from ..core.time import utcnow
from ..models import ADMIN_ROLE, ROLES, UserProfile
from .identity import IdentityProvider, IdentityProviderError
from .profiles import (
    count_active_admins,
    get_profile,
    list_profiles,
    profile_to_dict,
    resolve_outlet_name,
)

log = logging.getLogger(__name__)


@dataclass
class AdminContext:
    """Per-request collaborators for an authorised admin caller."""

    caller: UserProfile
    session: Session
    identity: IdentityProvider


def _require_user_id(payload: Dict[str, Any]) -> str:
    user_id = payload.get("user_id")
    if not user_id or not isinstance(user_id, str):
        raise ValidationError("user_id is required")
    return user_id


def _check_role(role: Any) -> None:
    if role not in ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ROLES)}")


def _staged_updates(updates: Dict[str, Any]) -> Dict[str, Any]:
    """Pick the recognised fields from ``updates``; wrongly typed values are ignored."""

    staged: Dict[str, Any] = {}
    for key in ("full_name", "role", "phone"):
        if isinstance(updates.get(key), str):
            staged[key] = updates[key]
    if isinstance(updates.get("is_active"), bool):
        staged["is_active"] = updates["is_active"]
    if "outlet_id" in updates and (updates["outlet_id"] is None or isinstance(updates["outlet_id"], str)):
        staged["outlet_id"] = updates["outlet_id"] or None
    return staged


def _is_last_active_admin(session: Session, profile: UserProfile) -> bool:
    if profile.role != ADMIN_ROLE or not profile.is_active:
        return False
    return count_active_admins(session) <= 1


async def create_user(payload: Dict[str, Any], ctx: AdminContext) -> Dict[str, Any]:
    email = payload.get("email")
    password = payload.get("password")
    full_name = payload.get("full_name")
    role = payload.get("role")
    phone = payload.get("phone") or None
    outlet_id = payload.get("outlet_id") or None
    is_active = payload.get("is_active", True)
    send_invite = payload.get("send_invite", False)

    if not email or not full_name or not role:
        raise ValidationError("Missing required fields")
    _check_role(role)
    if not isinstance(is_active, bool) or not isinstance(send_invite, bool):
        raise ValidationError("is_active and send_invite must be booleans")

    metadata = {
        "full_name": full_name,
        "role": role,
        "phone": phone,
        "outlet_id": outlet_id,
        "is_active": is_active,
    }

    try:
        account = await ctx.identity.create_user(
            email,
            password,
            email_confirm=not send_invite,
            user_metadata=metadata,
        )
    except IdentityProviderError as exc:
        log.error("Create user failed for %s: %s", email, exc.message)
        raise UpstreamError(exc.message) from exc

    # The account exists from here on; any failure leaves it without a profile.
    session = ctx.session
    now = utcnow()
    try:
        outlet_name = resolve_outlet_name(session, outlet_id)
        profile = session.get(UserProfile, account.id)
        if profile is None:
            profile = UserProfile(
                id=account.id,
                email=account.email or email,
                full_name=full_name,
                role=role,
                created_at=now,
            )
        profile.full_name = full_name
        profile.role = role
        profile.phone = phone
        profile.outlet_id = outlet_id
        profile.outlet_name = outlet_name
        profile.is_active = is_active
        profile.updated_at = now
        session.add(profile)
        session.commit()
        session.refresh(profile)
    except (SQLAlchemyError, UpstreamError) as exc:
        session.rollback()
        log.error(
            "Profile finalization failed; account %s has no profile",
            account.id,
            exc_info=exc,
        )
        raise ConsistencyError("Failed to finalize user profile") from exc

    if not is_active:
        try:
            await ctx.identity.update_user_metadata(account.id, {**metadata, "is_active": False})
        except IdentityProviderError as exc:
            log.warning(
                "Could not re-push inactive flag for account %s: %s", account.id, exc.message
            )

    log.info("Created user %s with role %s", account.id, role)
    return {"user": profile_to_dict(profile)}


async def update_user(payload: Dict[str, Any], ctx: AdminContext) -> Dict[str, Any]:
    user_id = _require_user_id(payload)
    updates = payload.get("updates") or {}
    if not isinstance(updates, dict):
        raise ValidationError("updates must be an object")

    staged = _staged_updates(updates)
    if "role" in staged:
        _check_role(staged["role"])

    session = ctx.session
    target = get_profile(session, user_id)
    if target is None:
        raise UpdateError()

    is_self = target.id == ctx.caller.id
    if "role" in staged and target.role == ADMIN_ROLE and staged["role"] != ADMIN_ROLE:
        if is_self:
            raise ValidationError("Cannot downgrade your own admin role")
        if _is_last_active_admin(session, target):
            raise ValidationError("Cannot downgrade the last active admin")
    if staged.get("is_active") is False and target.is_active:
        if is_self:
            raise ValidationError("Cannot deactivate your own account")
        if _is_last_active_admin(session, target):
            raise ValidationError("Cannot deactivate the last active admin")

    outlet_changed = "outlet_id" in staged
    outlet_name = resolve_outlet_name(session, staged.get("outlet_id")) if outlet_changed else None
    previous = {key: getattr(target, key) for key in staged}

    if staged:
        try:
            await ctx.identity.update_user_metadata(user_id, staged)
        except IdentityProviderError as exc:
            log.error("Auth metadata update failed for %s: %s", user_id, exc.message)
            raise UpstreamError(exc.message) from exc

    for key, value in staged.items():
        setattr(target, key, value)
    if outlet_changed:
        target.outlet_name = outlet_name
    target.updated_at = utcnow()

    try:
        session.add(target)
        session.commit()
        session.refresh(target)
    except SQLAlchemyError as exc:
        session.rollback()
        log.error("Profile update failed for %s", user_id, exc_info=exc)
        await _restore_metadata(ctx.identity, user_id, previous)
        raise UpdateError() from exc

    log.info("Updated user %s fields %s", user_id, sorted(staged))
    return {"user": profile_to_dict(target)}


async def _restore_metadata(
    identity: IdentityProvider, user_id: str, previous: Dict[str, Any]
) -> None:
    """Push the pre-update profile values back after a failed profile write."""

    if not previous:
        return
    try:
        await identity.update_user_metadata(user_id, previous)
    except IdentityProviderError as exc:
        log.error(
            "Metadata restore failed for %s; account and profile diverged: %s",
            user_id,
            exc.message,
        )
        raise ConsistencyError(
            "Account metadata updated but profile update failed"
        ) from exc
    log.warning("Restored account metadata for %s after failed profile update", user_id)


async def delete_user(payload: Dict[str, Any], ctx: AdminContext) -> Dict[str, Any]:
    user_id = _require_user_id(payload)
    if user_id == ctx.caller.id:
        raise ValidationError("Cannot delete your own account")

    session = ctx.session
    target = get_profile(session, user_id)
    if target is not None and _is_last_active_admin(session, target):
        raise ValidationError("Cannot delete the last active admin")

    try:
        await ctx.identity.delete_user(user_id)
    except IdentityProviderError as exc:
        log.error("Delete user failed for %s: %s", user_id, exc.message)
        raise UpstreamError(exc.message) from exc

    # The profile store has no cascade from the identity provider.
    if target is not None:
        try:
            session.delete(target)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            log.error("Account %s deleted but profile remains", user_id, exc_info=exc)
            raise ConsistencyError("Account deleted but profile could not be removed") from exc

    log.info("Deleted user %s", user_id)
    return {}


async def get_user(payload: Dict[str, Any], ctx: AdminContext) -> Dict[str, Any]:
    user_id = _require_user_id(payload)
    profile = get_profile(ctx.session, user_id)
    if profile is None:
        raise NotFoundError()
    return {"user": profile_to_dict(profile)}


async def list_users(payload: Dict[str, Any], ctx: AdminContext) -> Dict[str, Any]:
    role: Optional[str] = payload.get("role")
    if role is not None:
        _check_role(role)
    profiles = list_profiles(
        ctx.session,
        include_inactive=payload.get("include_inactive") is True,
        role=role,
        outlet_id=payload.get("outlet_id"),
    )
    return {"users": [profile_to_dict(profile) for profile in profiles]}


Action = Callable[[Dict[str, Any], AdminContext], Awaitable[Dict[str, Any]]]

ACTIONS: Dict[str, Action] = {
    "createUser": create_user,
    "updateUser": update_user,
    "deleteUser": delete_user,
    "getUser": get_user,
    "listUsers": list_users,
}


async def dispatch(action: Any, payload: Dict[str, Any], ctx: AdminContext) -> Dict[str, Any]:
    """Run the named action and return its envelope fields."""

    handler = ACTIONS.get(action) if isinstance(action, str) else None
    if handler is None:
        raise UnknownActionError()
    return await handler(payload, ctx)


__all__ = [
    "ACTIONS",
    "AdminContext",
    "create_user",
    "delete_user",
    "dispatch",
    "get_user",
    "list_users",
    "update_user",
]
