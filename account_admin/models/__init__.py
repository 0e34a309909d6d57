"""Database model exports."""

from .location import Location
from .profile import ADMIN_ROLE, ROLES, UserProfile

__all__ = [
    "ADMIN_ROLE",
    "Location",
    "ROLES",
    "UserProfile",
]
