"""Router factory for the back-office API."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI

from sandglobal.auth import build_auth_provider
from sandglobal.config import SandGlobalConfig
from sandglobal.exceptions import register_exception_handlers
from sandglobal.mailer import HttpMailSender
from sandglobal.notifications import NotificationDispatcher
from sandglobal.protocols import (
    AuthProvider,
    BlogPostRepository,
    ContactMessageRepository,
    Geocoder,
    MailSender,
    MapProviderStore,
    NotificationRetryStore,
    ShipmentRepository,
    TrackingEventRepository,
)
from sandglobal.ratelimit import SlidingWindowRateLimiter
from sandglobal.routes.admin import router as admin_router
from sandglobal.routes.auth import router as auth_router
from sandglobal.routes.contact import router as contact_router
from sandglobal.routes.content import router as content_router
from sandglobal.routes.shipments import router as shipments_router
from sandglobal.routes.tracking import router as tracking_router


def create_logistics_router(
    *,
    config: SandGlobalConfig,
    shipments: ShipmentRepository,
    events: TrackingEventRepository,
    contacts: ContactMessageRepository | None = None,
    blog: BlogPostRepository | None = None,
    map_settings: MapProviderStore | None = None,
    mail_sender: MailSender | None = None,
    retry_store: NotificationRetryStore | None = None,
    geocoder: Geocoder | None = None,
    auth_provider: AuthProvider | None = None,
    rate_limiter: SlidingWindowRateLimiter | None = None,
) -> APIRouter:
    """Create a configured API router."""
    actual_sender = mail_sender or HttpMailSender(config)
    actual_auth = auth_provider or build_auth_provider(config)
    actual_limiter = rate_limiter or SlidingWindowRateLimiter(
        max_requests=config.contact_rate_limit,
        window_seconds=config.contact_rate_window_seconds,
    )
    dispatcher = NotificationDispatcher(
        actual_sender,
        config=config,
        retry_store=retry_store,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        app.state.sandglobal_config = config
        app.state.sandglobal_shipments = shipments
        app.state.sandglobal_events = events
        app.state.sandglobal_contacts = contacts
        app.state.sandglobal_blog = blog
        app.state.sandglobal_map_settings = map_settings
        app.state.sandglobal_mail_sender = actual_sender
        app.state.sandglobal_retry_store = retry_store
        app.state.sandglobal_dispatcher = dispatcher
        app.state.sandglobal_geocoder = geocoder
        app.state.sandglobal_auth = actual_auth
        app.state.sandglobal_rate_limiter = actual_limiter
        register_exception_handlers(app)
        yield

    router = APIRouter(lifespan=lifespan)
    router.include_router(shipments_router)
    router.include_router(tracking_router)
    router.include_router(contact_router)
    router.include_router(content_router)
    router.include_router(admin_router)
    router.include_router(auth_router)
    return router
