"""
Identity Provider Client
Session lookup and admin account management against the auth server.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from ..core.config import Settings

log = logging.getLogger(__name__)

AUTH_PATH = "/auth/v1"


class IdentityProviderError(Exception):
    """Raised when the auth server rejects a call or cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class Account:
    """Account as reported by the identity provider."""

    id: str
    email: Optional[str] = None
    email_confirmed: bool = False
    user_metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "Account":
        # Admin endpoints wrap the account as {"user": {...}} on some versions.
        user = data.get("user") if isinstance(data.get("user"), dict) else data
        if not user.get("id"):
            raise IdentityProviderError("Identity provider returned no account")
        return cls(
            id=str(user["id"]),
            email=user.get("email"),
            email_confirmed=bool(user.get("email_confirmed_at") or user.get("confirmed_at")),
            user_metadata=dict(user.get("user_metadata") or {}),
        )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("msg", "message", "error_description", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return f"Identity provider returned HTTP {response.status_code}"


def _json_object(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError as exc:
        raise IdentityProviderError(
            "Identity provider returned an invalid response", response.status_code
        ) from exc
    if not isinstance(body, dict):
        raise IdentityProviderError(
            "Identity provider returned an invalid response", response.status_code
        )
    return body


class IdentityProvider:
    """Thin async client for the auth server's user and admin endpoints.

    The anonymous key is only used to resolve a caller's own token; every
    admin call authenticates with the service-role key, which must never leave
    this process.
    """

    def __init__(
        self,
        base_url: str,
        service_role_key: str,
        anon_key: str,
        *,
        timeout: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") + AUTH_PATH
        self._service_role_key = service_role_key
        self._anon_key = anon_key
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "IdentityProvider":
        return cls(
            settings.supabase_url,
            settings.service_role_key,
            settings.anon_key,
            timeout=settings.identity_timeout,
        )

    def _admin_headers(self) -> Dict[str, str]:
        return {
            "apikey": self._service_role_key,
            "Authorization": f"Bearer {self._service_role_key}",
        }

    async def _request(
        self,
        method: str,
        path: str,
        *,
        headers: Dict[str, str],
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self._timeout, transport=self._transport
        ) as client:
            try:
                r = await client.request(method, path, headers=headers, json=json)
            except httpx.HTTPError as exc:
                log.error("Identity provider %s %s failed: %s", method, path, exc)
                raise IdentityProviderError("Identity provider unavailable") from exc
        if r.is_error:
            raise IdentityProviderError(_error_message(r), r.status_code)
        return r

    async def get_user(self, access_token: str) -> Account:
        """Resolve the account that owns ``access_token``."""
        r = await self._request(
            "GET",
            "/user",
            headers={"apikey": self._anon_key, "Authorization": f"Bearer {access_token}"},
        )
        data = _json_object(r)
        if not data.get("id"):
            raise IdentityProviderError("No account for token", r.status_code)
        return Account.from_payload(data)

    async def create_user(
        self,
        email: str,
        password: Optional[str],
        *,
        email_confirm: bool,
        user_metadata: Dict[str, Any],
    ) -> Account:
        """Create an account; unconfirmed accounts go through the invite flow."""
        body: Dict[str, Any] = {
            "email": email,
            "email_confirm": email_confirm,
            "user_metadata": user_metadata,
        }
        if password:
            body["password"] = password
        r = await self._request("POST", "/admin/users", headers=self._admin_headers(), json=body)
        return Account.from_payload(_json_object(r))

    async def update_user_metadata(self, user_id: str, user_metadata: Dict[str, Any]) -> Account:
        """Merge ``user_metadata`` into the account's metadata bag."""
        r = await self._request(
            "PUT",
            f"/admin/users/{user_id}",
            headers=self._admin_headers(),
            json={"user_metadata": user_metadata},
        )
        return Account.from_payload(_json_object(r))

    async def delete_user(self, user_id: str) -> None:
        await self._request("DELETE", f"/admin/users/{user_id}", headers=self._admin_headers())


__all__ = ["Account", "IdentityProvider", "IdentityProviderError"]
