"""Admin authentication against a hosted auth provider."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import httpx

from sandglobal.config import SandGlobalConfig
from sandglobal.exceptions import AuthenticationError, LoginTimeoutError
from sandglobal.protocols import AuthProvider

logger = logging.getLogger(__name__)

LOGIN_TIMEOUT_MESSAGE = "Login timed out. Please retry or contact support."
DEMO_EMAIL = "demo@sandglobalexpress.com"


@dataclass(frozen=True)
class AuthSession:
    email: str
    access_token: str | None = None
    demo: bool = False


class DemoAuthProvider:
    """Stand-in used when no auth provider is configured."""

    async def sign_in(self, email: str, password: str) -> AuthSession:
        return AuthSession(email=email or DEMO_EMAIL, demo=True)

    async def get_session(self, token: str | None) -> AuthSession | None:
        return AuthSession(email=DEMO_EMAIL, demo=True)


class HostedAuthProvider:
    """Password sign-in and session lookup over the provider's REST API."""

    def __init__(
        self,
        config: SandGlobalConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not config.auth_url or not config.auth_api_key:
            raise ValueError("auth_url and auth_api_key are required")
        self.config = config
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.auth_url,
            headers={"apikey": self.config.auth_api_key},
            timeout=30.0,
            transport=self.transport,
        )

    async def sign_in(self, email: str, password: str) -> AuthSession:
        try:
            async with self._client() as client:
                response = await client.post(
                    "/auth/v1/token",
                    params={"grant_type": "password"},
                    json={"email": email, "password": password},
                )
        except httpx.HTTPError as exc:
            raise AuthenticationError(
                f"Auth provider unreachable: {exc}"
            ) from exc

        if response.status_code != 200:
            raise AuthenticationError("Invalid email or password")
        try:
            data = response.json()
            user = data.get("user") or {}
        except (ValueError, AttributeError) as exc:
            raise AuthenticationError(
                "Auth provider returned an unreadable response"
            ) from exc
        return AuthSession(
            email=user.get("email", email),
            access_token=data.get("access_token"),
        )

    async def get_session(self, token: str | None) -> AuthSession | None:
        if not token:
            return None
        try:
            async with self._client() as client:
                response = await client.get(
                    "/auth/v1/user",
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.HTTPError as exc:
            logger.warning("Session lookup failed: %s", exc)
            return None
        if response.status_code != 200:
            return None
        try:
            email = response.json().get("email", "")
        except (ValueError, AttributeError) as exc:
            logger.warning("Unreadable session response: %s", exc)
            return None
        return AuthSession(email=email, access_token=token)


def build_auth_provider(config: SandGlobalConfig) -> AuthProvider:
    if config.demo_mode:
        logger.info("Auth provider not configured, running in demo mode")
        return DemoAuthProvider()
    return HostedAuthProvider(config)


async def login(
    provider: AuthProvider,
    email: str,
    password: str,
    *,
    timeout: float = 20.0,
) -> AuthSession:
    """Sign in, giving up after ``timeout`` seconds."""
    try:
        return await asyncio.wait_for(
            provider.sign_in(email, password), timeout=timeout
        )
    except TimeoutError as exc:
        logger.warning("Login for %s timed out after %ss", email, timeout)
        raise LoginTimeoutError(LOGIN_TIMEOUT_MESSAGE) from exc
