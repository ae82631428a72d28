"""SQLAlchemy models for shipments, history, content and the email queue."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""


class ShipmentModel(Base):
    """Shipment record. Progress is derived from status, never stored."""

    __tablename__ = "shipments"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=_uuid
    )
    tracking_number: Mapped[str] = mapped_column(
        String(32), unique=True, index=True
    )
    reference_code: Mapped[str] = mapped_column(String(16), default="")
    barcode_value: Mapped[str] = mapped_column(String(32), default="")
    status: Mapped[str] = mapped_column(String(40), default="Pending")

    sender_name: Mapped[str] = mapped_column(String(255))
    sender_phone: Mapped[str] = mapped_column(String(64))
    sender_email: Mapped[str] = mapped_column(String(255))
    sender_address_line1: Mapped[str] = mapped_column(String(255))
    sender_address_line2: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    sender_city: Mapped[str] = mapped_column(String(128))
    sender_state: Mapped[str] = mapped_column(String(128))
    sender_postal_code: Mapped[str] = mapped_column(String(32))
    sender_country: Mapped[str] = mapped_column(String(128))

    recipient_name: Mapped[str] = mapped_column(String(255))
    recipient_phone: Mapped[str] = mapped_column(String(64))
    recipient_email: Mapped[str] = mapped_column(String(255))
    recipient_address_line1: Mapped[str] = mapped_column(String(255))
    recipient_address_line2: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    recipient_city: Mapped[str] = mapped_column(String(128))
    recipient_state: Mapped[str] = mapped_column(String(128))
    recipient_postal_code: Mapped[str] = mapped_column(String(32))
    recipient_country: Mapped[str] = mapped_column(String(128))

    shipment_type: Mapped[str] = mapped_column(String(64))
    package_count: Mapped[int] = mapped_column(Integer, default=1)
    weight: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    length: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    width: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    height: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    shipment_description: Mapped[str] = mapped_column(Text)
    declared_value: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0")
    )
    fragile: Mapped[bool] = mapped_column(Boolean, default=False)
    special_instructions: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )
    delivery_speed: Mapped[str] = mapped_column(String(32))
    payment_method: Mapped[str] = mapped_column(String(64))

    sender_lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    sender_lng: Mapped[float | None] = mapped_column(Float, nullable=True)
    recipient_lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    recipient_lng: Mapped[float | None] = mapped_column(Float, nullable=True)
    current_lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    current_lng: Mapped[float | None] = mapped_column(Float, nullable=True)
    current_location_name: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    agent_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    agent_phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    agent_email: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    system_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    estimated_delivery_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    delivered_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    last_notified_status: Mapped[str | None] = mapped_column(
        String(40), nullable=True
    )
    last_notified_hash: Mapped[str | None] = mapped_column(
        String(64), nullable=True
    )
    last_notified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )


class TrackingEventModel(Base):
    """One entry of a shipment's history, with a progress snapshot."""

    __tablename__ = "tracking_events"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=_uuid
    )
    shipment_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("shipments.id"), index=True
    )
    status: Mapped[str] = mapped_column(String(40))
    description: Mapped[str] = mapped_column(Text, default="")
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    lng: Mapped[float | None] = mapped_column(Float, nullable=True)
    handler: Mapped[str | None] = mapped_column(String(255), nullable=True)
    progress: Mapped[int] = mapped_column(Integer, default=0)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )


class ContactMessageModel(Base):
    __tablename__ = "contact_messages"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=_uuid
    )
    name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    message: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )


class BlogPostModel(Base):
    __tablename__ = "blog_posts"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=_uuid
    )
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    title: Mapped[str] = mapped_column(String(255))
    excerpt: Mapped[str | None] = mapped_column(Text, nullable=True)
    content: Mapped[str] = mapped_column(Text, default="")
    author: Mapped[str | None] = mapped_column(String(255), nullable=True)
    cover_image_url: Mapped[str | None] = mapped_column(
        String(512), nullable=True
    )
    published_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )


class MapProviderSettingModel(Base):
    """Single-row table holding the active map provider."""

    __tablename__ = "map_provider_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    provider: Mapped[str] = mapped_column(String(32))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )


class NotificationRetryModel(Base):
    """Queued email payload awaiting redelivery."""

    __tablename__ = "notification_retries"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=_uuid
    )
    payload: Mapped[dict] = mapped_column(JSON)
    attempts: Mapped[int] = mapped_column(Integer, default=0)
    next_retry_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), default="pending")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
