"""Shared fixtures for sandglobal tests."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from sandglobal.exceptions import (
    BlogPostNotFoundError,
    NotificationError,
    ShipmentNotFoundError,
)

SHIPMENT_PAYLOAD = {
    "sender_name": "Amina Yusuf",
    "sender_phone": "+971500000001",
    "sender_email": "amina@example.com",
    "sender_address_line1": "12 Creek Road",
    "sender_city": "Dubai",
    "sender_state": "Dubai",
    "sender_postal_code": "00000",
    "sender_country": "UAE",
    "recipient_name": "Liam Carter",
    "recipient_phone": "+447700900123",
    "recipient_email": "liam@example.co.uk",
    "recipient_address_line1": "4 Baker Street",
    "recipient_city": "London",
    "recipient_state": "Greater London",
    "recipient_postal_code": "NW1 6XE",
    "recipient_country": "UK",
    "shipment_type": "Parcel",
    "package_count": 1,
    "weight": "2.50",
    "length": "30",
    "width": "20",
    "height": "10",
    "shipment_description": "Documents",
    "declared_value": "250.00",
    "delivery_speed": "Express",
    "payment_method": "Card",
}

_RECORD_DEFAULTS = {
    "sender_address_line2": None,
    "recipient_address_line2": None,
    "fragile": False,
    "special_instructions": None,
    "sender_lat": None,
    "sender_lng": None,
    "recipient_lat": None,
    "recipient_lng": None,
    "current_lat": None,
    "current_lng": None,
    "current_location_name": None,
    "agent_name": None,
    "agent_phone": None,
    "agent_email": None,
    "system_notes": None,
    "estimated_delivery_date": None,
    "delivered_at": None,
    "last_notified_status": None,
    "last_notified_hash": None,
    "last_notified_at": None,
}


def make_shipment(**overrides) -> SimpleNamespace:
    """Build a shipment record without touching any store."""
    now = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
    fields = {
        **_RECORD_DEFAULTS,
        **SHIPMENT_PAYLOAD,
        "weight": Decimal("2.50"),
        "length": Decimal("30"),
        "width": Decimal("20"),
        "height": Decimal("10"),
        "declared_value": Decimal("250.00"),
        "id": str(uuid.uuid4()),
        "tracking_number": "SGE-0A1B2C3D",
        "reference_code": "REF-12345",
        "barcode_value": "123456789012",
        "status": "Pending",
        "created_at": now,
        "updated_at": now,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


class InMemoryShipmentRepo:
    def __init__(self) -> None:
        self.items: dict[str, SimpleNamespace] = {}

    async def get_by_id(self, shipment_id: str) -> SimpleNamespace:
        try:
            return self.items[shipment_id]
        except KeyError as e:
            raise ShipmentNotFoundError(shipment_id) from e

    async def get_by_tracking_number(
        self, tracking_number: str
    ) -> SimpleNamespace:
        for shipment in self.items.values():
            if shipment.tracking_number == tracking_number:
                return shipment
        raise ShipmentNotFoundError(tracking_number)

    async def tracking_number_exists(self, tracking_number: str) -> bool:
        return any(
            s.tracking_number == tracking_number for s in self.items.values()
        )

    async def create(self, **fields) -> SimpleNamespace:
        shipment = SimpleNamespace(**{**_RECORD_DEFAULTS, **fields})
        self.items[shipment.id] = shipment
        return shipment

    async def update(self, shipment_id: str, **fields) -> SimpleNamespace:
        shipment = await self.get_by_id(shipment_id)
        for key, value in fields.items():
            setattr(shipment, key, value)
        return shipment

    async def list_shipments(
        self, limit: int | None = None
    ) -> list[SimpleNamespace]:
        ordered = sorted(
            self.items.values(), key=lambda s: s.created_at, reverse=True
        )
        return ordered if limit is None else ordered[:limit]


class InMemoryEventRepo:
    def __init__(self) -> None:
        self.events: list[SimpleNamespace] = []

    async def append(self, **fields) -> SimpleNamespace:
        event = SimpleNamespace(id=f"e-{len(self.events) + 1}", **fields)
        self.events.append(event)
        return event

    async def list_for_shipment(
        self, shipment_id: str
    ) -> list[SimpleNamespace]:
        return sorted(
            (e for e in self.events if e.shipment_id == shipment_id),
            key=lambda e: e.timestamp,
        )


class InMemoryContactRepo:
    def __init__(self) -> None:
        self.messages: list[dict] = []

    async def create(self, **fields) -> SimpleNamespace:
        self.messages.append(fields)
        return SimpleNamespace(id=f"c-{len(self.messages)}", **fields)


class InMemoryBlogRepo:
    def __init__(self, posts=()) -> None:
        self.posts = list(posts)

    async def list_published(self, limit: int = 50) -> list[SimpleNamespace]:
        ordered = sorted(
            self.posts, key=lambda p: p.published_at, reverse=True
        )
        return ordered[:limit]

    async def get_by_slug(self, slug: str) -> SimpleNamespace:
        for post in self.posts:
            if post.slug == slug:
                return post
        raise BlogPostNotFoundError(slug)

    async def create(self, **fields) -> SimpleNamespace:
        post = SimpleNamespace(id=f"b-{len(self.posts) + 1}", **fields)
        self.posts.append(post)
        return post

    async def update(self, slug: str, **fields) -> SimpleNamespace:
        post = await self.get_by_slug(slug)
        for key, value in fields.items():
            setattr(post, key, value)
        return post

    async def delete(self, slug: str) -> None:
        post = await self.get_by_slug(slug)
        self.posts.remove(post)


class InMemoryMapProviderStore:
    def __init__(self, provider: str | None = None) -> None:
        self.provider = provider

    async def get_provider(self) -> str | None:
        return self.provider

    async def set_provider(self, provider: str) -> str:
        self.provider = provider
        return provider


class RecordingMailSender:
    """Collects sent messages; raises for addresses in ``failing``."""

    def __init__(self, failing=()) -> None:
        self.sent: list = []
        self.failing = set(failing)

    async def send(self, message) -> None:
        if self.failing.intersection(message.to):
            raise NotificationError("mail API returned 500")
        self.sent.append(message)


class RetryStore:
    def __init__(self) -> None:
        self.events: list[dict] = []

    async def store_failed_notification(
        self, payload: dict, error: str
    ) -> str:
        self.events.append({"payload": payload, "error": error})
        return f"retry-{len(self.events)}"

    async def get_due_retries(self, limit: int = 10) -> list[dict]:
        return []

    async def mark_succeeded(self, retry_id: str) -> None:
        pass

    async def mark_failed(self, retry_id: str, error: str) -> None:
        pass

    async def mark_exhausted(self, retry_id: str) -> None:
        pass


@pytest.fixture()
def shipment_repository() -> InMemoryShipmentRepo:
    return InMemoryShipmentRepo()


@pytest.fixture()
def event_repository() -> InMemoryEventRepo:
    return InMemoryEventRepo()


@pytest.fixture()
def mail_sender() -> RecordingMailSender:
    return RecordingMailSender()


@pytest.fixture()
def retry_store() -> RetryStore:
    return RetryStore()


@pytest.fixture()
async def async_engine():
    """Create an in-memory aiosqlite async engine."""
    from sqlalchemy.ext.asyncio import create_async_engine

    from sandglobal.contrib.sqlalchemy.models import Base

    engine = create_async_engine("sqlite+aiosqlite://", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture()
async def async_session_factory(async_engine):
    """Create an async session factory bound to the in-memory engine."""
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    factory = async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False
    )
    yield factory


@pytest.fixture()
def sqlalchemy_repository(async_session_factory):
    from sandglobal.contrib.sqlalchemy.repository import (
        SQLAlchemyShipmentRepository,
    )

    return SQLAlchemyShipmentRepository(async_session_factory)


@pytest.fixture()
def sqlalchemy_event_repository(async_session_factory):
    from sandglobal.contrib.sqlalchemy.repository import (
        SQLAlchemyTrackingEventRepository,
    )

    return SQLAlchemyTrackingEventRepository(async_session_factory)


@pytest.fixture()
def sqlalchemy_retry_store(async_session_factory):
    from sandglobal.contrib.sqlalchemy.retry_store import (
        SQLAlchemyNotificationRetryStore,
    )

    return SQLAlchemyNotificationRetryStore(async_session_factory)
