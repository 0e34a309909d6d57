"""Helpers for profile rows in the relational store."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, func, select

from ..core.errors import UpstreamError
from ..models import ADMIN_ROLE, Location, UserProfile


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    # Naive values are UTC as stored.
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat() + "Z"


def profile_to_dict(profile: UserProfile) -> Dict[str, Any]:
    """Serialise a profile to the public API shape, omitting empty fields."""

    data = {
        "id": profile.id,
        "email": profile.email,
        "full_name": profile.full_name,
        "role": profile.role,
        "phone": profile.phone,
        "outlet_id": profile.outlet_id,
        "outlet_name": profile.outlet_name,
        "is_active": profile.is_active,
        "created_at": _isoformat(profile.created_at),
        "updated_at": _isoformat(profile.updated_at),
        "last_login": _isoformat(profile.last_login),
    }
    return {key: value for key, value in data.items() if value is not None and value != ""}


def resolve_outlet_name(session: Session, outlet_id: Optional[str]) -> Optional[str]:
    """Look up the location name to cache on a profile.

    An unknown location gives ``None`` rather than an error.
    """

    if not outlet_id:
        return None
    try:
        name = session.exec(select(Location.name).where(Location.id == outlet_id)).first()
    except SQLAlchemyError as exc:
        raise UpstreamError("Failed to look up outlet") from exc
    return name


def get_profile(session: Session, user_id: str) -> Optional[UserProfile]:
    try:
        return session.get(UserProfile, user_id)
    except SQLAlchemyError as exc:
        raise UpstreamError("Failed to load user profile") from exc


def list_profiles(
    session: Session,
    *,
    include_inactive: bool = False,
    role: Optional[str] = None,
    outlet_id: Optional[str] = None,
) -> List[UserProfile]:
    query = select(UserProfile).order_by(UserProfile.created_at.desc())
    if not include_inactive:
        query = query.where(UserProfile.is_active == True)  # noqa: E712
    if role:
        query = query.where(UserProfile.role == role)
    if outlet_id:
        query = query.where(UserProfile.outlet_id == outlet_id)
    try:
        return list(session.exec(query).all())
    except SQLAlchemyError as exc:
        raise UpstreamError("Failed to list users") from exc


def count_active_admins(session: Session) -> int:
    try:
        return session.exec(
            select(func.count())
            .select_from(UserProfile)
            .where(UserProfile.role == ADMIN_ROLE)
            .where(UserProfile.is_active == True)  # noqa: E712
        ).one()
    except SQLAlchemyError as exc:
        raise UpstreamError("Failed to check admin count") from exc


__all__ = [
    "count_active_admins",
    "get_profile",
    "list_profiles",
    "profile_to_dict",
    "resolve_outlet_name",
]
