"""Service error taxonomy.

Every error maps to an HTTP status and a message that is safe to return to
the caller inside the ``{"success": false, "error": ...}`` envelope.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for errors reported to the caller."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ConfigurationError(ServiceError):
    """Required environment wiring is missing."""

    status_code = 500
    default_message = "Server configuration error"


class AuthenticationError(ServiceError):
    status_code = 401
    default_message = "Unauthorized"


class AuthorizationError(ServiceError):
    status_code = 403
    default_message = "Forbidden"


class ValidationError(ServiceError):
    status_code = 400
    default_message = "Invalid request"


class UnknownActionError(ServiceError):
    status_code = 400
    default_message = "Invalid action"


class NotFoundError(ServiceError):
    status_code = 404
    default_message = "User not found"


class UpstreamError(ServiceError):
    """An identity provider or store call failed in a caller-correctable way."""

    status_code = 400
    default_message = "Upstream request failed"


class UpdateError(UpstreamError):
    default_message = "Failed to update user profile"


class ConsistencyError(ServiceError):
    """The identity provider and the profile store no longer agree."""

    status_code = 500
    default_message = "Account and profile are out of sync"


__all__ = [
    "AuthenticationError",
    "AuthorizationError",
    "ConfigurationError",
    "ConsistencyError",
    "NotFoundError",
    "ServiceError",
    "UnknownActionError",
    "UpdateError",
    "UpstreamError",
    "ValidationError",
]
