"""
Supabase auth client.

Talks to the GoTrue REST API with httpx:
- POST {SUPABASE_URL}/auth/v1/token?grant_type=password  (login)
- GET  {SUPABASE_URL}/auth/v1/user                       (token introspection)

Testing:
- Use set_transport_for_tests() with an httpx.MockTransport (no network)
"""
import logging
from typing import Any, Dict, Optional

import httpx

from complipilot.core.config import settings
from complipilot.core.errors import AuthenticationError, AuthServiceUnavailableError

logger = logging.getLogger("complipilot")

_transport_override: Optional[httpx.AsyncBaseTransport] = None


def set_transport_for_tests(transport: Optional[httpx.AsyncBaseTransport]) -> None:
    """Set or clear the httpx transport override for deterministic testing."""
    global _transport_override
    _transport_override = transport


class SupabaseAuthClient:
    def __init__(
        self,
        base_url: str,
        anon_key: str,
        *,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
            headers={"apikey": self.anon_key},
        )

    async def get_user(self, access_token: str) -> Dict[str, Any]:
        """Return the user object for a token.

        Raises AuthenticationError for a rejected token and
        AuthServiceUnavailableError when the provider cannot answer.
        """
        try:
            async with self._client() as client:
                response = await client.get(
                    "/auth/v1/user",
                    headers={"Authorization": f"Bearer {access_token}"},
                )
        except httpx.HTTPError as e:
            logger.error("auth.provider_unreachable", extra={"error_message": str(e)})
            raise AuthServiceUnavailableError("Authentication service temporarily unavailable.")

        if response.status_code >= 500:
            logger.error("auth.provider_error", extra={"status": response.status_code})
            raise AuthServiceUnavailableError("Authentication service temporarily unavailable.")
        if response.status_code != 200:
            logger.warning("auth.invalid_token", extra={"status": response.status_code})
            raise AuthenticationError("Authentication required.")

        user = response.json()
        if not user or not user.get("id"):
            raise AuthenticationError("Authentication required.")
        return user

    async def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        """Password grant. Returns ``{"token", "user": {"id", "email"}}``."""
        try:
            async with self._client() as client:
                response = await client.post(
                    "/auth/v1/token",
                    params={"grant_type": "password"},
                    json={"email": email, "password": password},
                )
        except httpx.HTTPError as e:
            logger.error("auth.provider_unreachable", extra={"error_message": str(e)})
            raise AuthServiceUnavailableError("Authentication service unavailable")

        if response.status_code >= 500:
            raise AuthServiceUnavailableError("Authentication service unavailable")
        if response.status_code != 200:
            logger.warning("auth.login_failed", extra={"status": response.status_code})
            raise AuthenticationError("Invalid credentials")

        data = response.json()
        token = data.get("access_token")
        user = data.get("user") or {}
        if not token:
            raise AuthenticationError("Login failed")
        return {"token": token, "user": {"id": user.get("id"), "email": user.get("email")}}


def is_configured() -> bool:
    return bool(settings.SUPABASE_URL and settings.SUPABASE_ANON_KEY)


def get_auth_client() -> SupabaseAuthClient:
    """Build a client from settings; 503 when auth is not configured."""
    if not is_configured():
        logger.error("auth.not_configured")
        raise AuthServiceUnavailableError("Authentication service unavailable")
    return SupabaseAuthClient(
        settings.SUPABASE_URL,
        settings.SUPABASE_ANON_KEY,
        timeout=settings.AUTH_TIMEOUT_SECONDS,
        transport=_transport_override,
    )
