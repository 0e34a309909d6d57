"""Service layer helpers."""

from .accounts import ACTIONS, AdminContext, dispatch
from .identity import Account, IdentityProvider, IdentityProviderError
from .profiles import profile_to_dict, resolve_outlet_name

__all__ = [
    "ACTIONS",
    "Account",
    "AdminContext",
    "IdentityProvider",
    "IdentityProviderError",
    "dispatch",
    "profile_to_dict",
    "resolve_outlet_name",
]
