"""Example app wiring the back-office API to SQLite."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from sandglobal import (
    SandGlobalConfig,
    create_logistics_router,
    register_exception_handlers,
)
from sandglobal.contrib.sqlalchemy.content import (
    SQLAlchemyBlogPostRepository,
    SQLAlchemyContactMessageRepository,
    SQLAlchemyMapProviderStore,
)
from sandglobal.contrib.sqlalchemy.models import Base
from sandglobal.contrib.sqlalchemy.repository import (
    SQLAlchemyShipmentRepository,
    SQLAlchemyTrackingEventRepository,
)
from sandglobal.contrib.sqlalchemy.retry_store import (
    SQLAlchemyNotificationRetryStore,
)
from sandglobal.dependencies import require_admin
from sandglobal.geocoding import NominatimGeocoder
from sandglobal.mailer import HttpMailSender
from sandglobal.retry import process_due_notifications

logging.basicConfig(level=logging.INFO)

# --- Database setup ---

config = SandGlobalConfig()
engine = create_async_engine(config.database_url, echo=False)
async_session = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

# --- Library integration ---

shipments = SQLAlchemyShipmentRepository(async_session)
events = SQLAlchemyTrackingEventRepository(async_session)
contacts = SQLAlchemyContactMessageRepository(async_session)
blog = SQLAlchemyBlogPostRepository(async_session)
map_settings = SQLAlchemyMapProviderStore(async_session)
retry_store = SQLAlchemyNotificationRetryStore(
    async_session, backoff_seconds=config.retry_backoff_seconds
)
mail_sender = HttpMailSender(config)

logistics_router = create_logistics_router(
    config=config,
    shipments=shipments,
    events=events,
    contacts=contacts,
    blog=blog,
    map_settings=map_settings,
    mail_sender=mail_sender,
    retry_store=retry_store,
    geocoder=NominatimGeocoder(config) if config.geocoding_enabled else None,
)

# --- FastAPI app ---


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


app = FastAPI(title="Sand Global Express", lifespan=lifespan)
register_exception_handlers(app)
app.include_router(logistics_router, prefix="/api")


@app.post(
    "/api/jobs/notification-retries",
    dependencies=[Depends(require_admin)],
)
async def run_notification_retries() -> dict[str, int]:
    """Drain due email retries; meant to be called by a scheduler."""
    processed = await process_due_notifications(
        retry_store=retry_store,
        sender=mail_sender,
        config=config,
    )
    return {"processed": processed}
