"""Database model for outlets (rental locations)."""

from __future__ import annotations

from datetime import datetime

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow


class Location(SQLModel, table=True):
    """Outlet that staff profiles can be assigned to."""

    __tablename__ = "locations"

    id: str = ORMField(primary_key=True, nullable=False)
    name: str
    created_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["Location"]
