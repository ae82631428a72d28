"""Dependency providers for request handlers."""

from __future__ import annotations

from fastapi import Depends, Request

from sandglobal.auth import AuthSession
from sandglobal.config import SandGlobalConfig
from sandglobal.exceptions import AuthenticationError
from sandglobal.flow import ShipmentFlow
from sandglobal.notifications import NotificationDispatcher
from sandglobal.protocols import (
    AuthProvider,
    BlogPostRepository,
    ContactMessageRepository,
    Geocoder,
    MapProviderStore,
    ShipmentRepository,
    TrackingEventRepository,
)
from sandglobal.ratelimit import SlidingWindowRateLimiter


def get_config(request: Request) -> SandGlobalConfig:
    """Read config from FastAPI app state."""
    return request.app.state.sandglobal_config


def get_shipment_repository(request: Request) -> ShipmentRepository:
    """Read shipment repository from FastAPI app state."""
    return request.app.state.sandglobal_shipments


def get_event_repository(request: Request) -> TrackingEventRepository:
    """Read tracking event repository from FastAPI app state."""
    return request.app.state.sandglobal_events


def get_contact_repository(
    request: Request,
) -> ContactMessageRepository | None:
    """Read contact message repository from FastAPI app state."""
    return getattr(request.app.state, "sandglobal_contacts", None)


def get_blog_repository(request: Request) -> BlogPostRepository | None:
    """Read blog post repository from FastAPI app state."""
    return getattr(request.app.state, "sandglobal_blog", None)


def get_map_provider_store(request: Request) -> MapProviderStore | None:
    """Read map provider store from FastAPI app state."""
    return getattr(request.app.state, "sandglobal_map_settings", None)


def get_geocoder(request: Request) -> Geocoder | None:
    """Read geocoder from FastAPI app state."""
    return getattr(request.app.state, "sandglobal_geocoder", None)


def get_dispatcher(request: Request) -> NotificationDispatcher:
    """Read notification dispatcher from FastAPI app state."""
    return request.app.state.sandglobal_dispatcher


def get_rate_limiter(request: Request) -> SlidingWindowRateLimiter:
    """Read contact rate limiter from FastAPI app state."""
    return request.app.state.sandglobal_rate_limiter


def get_auth_provider(request: Request) -> AuthProvider:
    """Read auth provider from FastAPI app state."""
    return request.app.state.sandglobal_auth


def get_flow(request: Request) -> ShipmentFlow:
    """Create ShipmentFlow for the current request."""
    return ShipmentFlow(
        shipments=get_shipment_repository(request),
        events=get_event_repository(request),
        config=get_config(request),
        geocoder=get_geocoder(request),
    )


def bearer_token(request: Request) -> str | None:
    """Extract the bearer token from the Authorization header."""
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def require_admin(
    request: Request,
    auth: AuthProvider = Depends(get_auth_provider),
) -> AuthSession:
    """Reject requests without a valid admin session."""
    session = await auth.get_session(bearer_token(request))
    if session is None:
        raise AuthenticationError("Authentication required")
    return session
