"""Database model for staff user profiles."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow

ROLES = ("admin", "manager", "accountant", "viewer")
ADMIN_ROLE = "admin"


class UserProfile(SQLModel, table=True):
    """Profile row mirroring an identity-provider account.

    ``outlet_name`` is a copy of the referenced location's name taken when
    ``outlet_id`` was last written, not a live join.
    """

    __tablename__ = "user_profiles"

    id: str = ORMField(primary_key=True, nullable=False)
    email: str = ORMField(index=True, unique=True)
    full_name: str
    role: str = ORMField(index=True)
    phone: Optional[str] = None
    outlet_id: Optional[str] = ORMField(default=None, index=True)
    outlet_name: Optional[str] = None
    is_active: bool = ORMField(default=True, index=True)
    created_at: datetime = ORMField(default_factory=utcnow)
    updated_at: datetime = ORMField(default_factory=utcnow)
    last_login: Optional[datetime] = None


__all__ = ["ADMIN_ROLE", "ROLES", "UserProfile"]
