"""Pydantic request and response schemas."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, computed_field, field_validator
from pydantic.alias_generators import to_camel

from sandglobal.dashboard import Customer, DashboardStats
from sandglobal.lifecycle import (
    ShipmentStatus,
    classify_live_or_exception,
    progress_for_status,
)

REQUIRED_SHIPMENT_FIELDS = (
    "sender_name",
    "sender_phone",
    "sender_email",
    "sender_address_line1",
    "sender_city",
    "sender_state",
    "sender_postal_code",
    "sender_country",
    "recipient_name",
    "recipient_phone",
    "recipient_email",
    "recipient_address_line1",
    "recipient_city",
    "recipient_state",
    "recipient_postal_code",
    "recipient_country",
    "shipment_type",
    "package_count",
    "weight",
    "length",
    "width",
    "height",
    "shipment_description",
    "declared_value",
    "delivery_speed",
    "payment_method",
)


def _missing(model: BaseModel, names: tuple[str, ...]) -> list[str]:
    missing = []
    for name in names:
        value = getattr(model, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing


def _as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from the store."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class MapProvider(StrEnum):
    GOOGLE = "google"
    OPENSTREETMAP = "openstreetmap"
    MAPBOX = "mapbox"


class CreateShipmentRequest(BaseModel):
    """Shipment creation payload.

    Every field is optional at the schema level so that missing values
    can be reported together instead of one validation error at a time.
    """

    model_config = ConfigDict(extra="ignore")

    status: ShipmentStatus | None = None

    sender_name: str | None = None
    sender_phone: str | None = None
    sender_email: str | None = None
    sender_address_line1: str | None = None
    sender_address_line2: str | None = None
    sender_city: str | None = None
    sender_state: str | None = None
    sender_postal_code: str | None = None
    sender_country: str | None = None

    recipient_name: str | None = None
    recipient_phone: str | None = None
    recipient_email: str | None = None
    recipient_address_line1: str | None = None
    recipient_address_line2: str | None = None
    recipient_city: str | None = None
    recipient_state: str | None = None
    recipient_postal_code: str | None = None
    recipient_country: str | None = None

    shipment_type: str | None = None
    package_count: int | None = None
    weight: Decimal | None = None
    length: Decimal | None = None
    width: Decimal | None = None
    height: Decimal | None = None
    shipment_description: str | None = None
    declared_value: Decimal | None = None
    fragile: bool = False
    special_instructions: str | None = None
    delivery_speed: str | None = None
    payment_method: str | None = None

    sender_lat: float | None = None
    sender_lng: float | None = None
    recipient_lat: float | None = None
    recipient_lng: float | None = None
    current_lat: float | None = None
    current_lng: float | None = None
    current_location_name: str | None = None

    agent_name: str | None = None
    agent_phone: str | None = None
    agent_email: str | None = None

    def missing_fields(self) -> list[str]:
        return _missing(self, REQUIRED_SHIPMENT_FIELDS)

    def shipment_fields(self) -> dict[str, Any]:
        """Column values for the new shipment, status excluded."""
        return self.model_dump(exclude={"status"})


class ShipmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tracking_number: str
    reference_code: str = ""
    barcode_value: str = ""
    status: str

    sender_name: str
    sender_phone: str | None = None
    sender_email: str | None = None
    sender_address_line1: str | None = None
    sender_address_line2: str | None = None
    sender_city: str
    sender_state: str | None = None
    sender_postal_code: str | None = None
    sender_country: str

    recipient_name: str
    recipient_phone: str | None = None
    recipient_email: str | None = None
    recipient_address_line1: str | None = None
    recipient_address_line2: str | None = None
    recipient_city: str
    recipient_state: str | None = None
    recipient_postal_code: str | None = None
    recipient_country: str

    shipment_type: str | None = None
    package_count: int | None = None
    weight: Decimal | None = None
    length: Decimal | None = None
    width: Decimal | None = None
    height: Decimal | None = None
    shipment_description: str | None = None
    declared_value: Decimal | None = None
    fragile: bool = False
    special_instructions: str | None = None
    delivery_speed: str | None = None
    payment_method: str | None = None

    sender_lat: float | None = None
    sender_lng: float | None = None
    recipient_lat: float | None = None
    recipient_lng: float | None = None
    current_lat: float | None = None
    current_lng: float | None = None
    current_location_name: str | None = None

    agent_name: str | None = None
    agent_phone: str | None = None
    agent_email: str | None = None
    system_notes: str | None = None

    estimated_delivery_date: datetime | None = None
    delivered_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator(
        "estimated_delivery_date",
        "delivered_at",
        "created_at",
        "updated_at",
    )
    @classmethod
    def attach_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    @computed_field
    @property
    def progress(self) -> int:
        return progress_for_status(self.status)

    @computed_field
    @property
    def classification(self) -> str | None:
        bucket = classify_live_or_exception(self.status)
        return str(bucket) if bucket else None

    @classmethod
    def from_shipment(cls, shipment: Any) -> ShipmentResponse:
        return cls.model_validate(shipment)


class TrackingEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    shipment_id: str
    status: str
    description: str = ""
    location: str | None = None
    lat: float | None = None
    lng: float | None = None
    handler: str | None = None
    progress: int = 0
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def attach_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    @classmethod
    def from_event(cls, event: Any) -> TrackingEventResponse:
        return cls.model_validate(event)


class TrackingResponse(BaseModel):
    shipment: ShipmentResponse
    history: list[TrackingEventResponse]


class UpdateShipmentRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: ShipmentStatus | None = None
    estimated_delivery_date: datetime | None = None
    current_location_name: str | None = None
    current_lat: float | None = None
    current_lng: float | None = None
    agent_name: str | None = None
    agent_phone: str | None = None
    agent_email: str | None = None
    note: str | None = None

    def has_primary_update(self) -> bool:
        """Agent and coordinate fields only ride along with these."""
        return any(
            (
                self.status,
                self.estimated_delivery_date,
                self.current_location_name,
                self.note,
            )
        )

    def changes(self) -> dict[str, Any]:
        """Provided fields mapped to shipment columns."""
        updates: dict[str, Any] = {}
        for name, value in self.model_dump(exclude_none=True).items():
            if name == "note":
                updates["system_notes"] = value
            elif name == "status":
                updates["status"] = str(value)
            else:
                updates[name] = value
        return updates


class NotificationState(BaseModel):
    attempted: bool = False
    skipped: bool = False
    queued: int = 0
    reason: str | None = None


class UpdateShipmentResponse(BaseModel):
    shipment: ShipmentResponse
    changed: bool
    message: str
    notification: NotificationState


class NotifyRequest(BaseModel):
    type: Literal["created", "updated"] | None = None
    old_status: str | None = None


class NotifyResponse(BaseModel):
    attempted: int
    sent: int


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ContactRequest(_CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    subject: str | None = None
    inquiry_type: str | None = None
    message: str | None = None

    def missing_fields(self) -> list[str]:
        return _missing(self, ("email", "message"))

    @property
    def full_name(self) -> str:
        parts = [
            (self.first_name or "").strip(),
            (self.last_name or "").strip(),
        ]
        return " ".join(p for p in parts if p) or "Customer"

    def composed_message(self) -> str:
        parts = []
        if self.subject and self.subject.strip():
            parts.append(f"Subject: {self.subject.strip()}")
        if self.inquiry_type and self.inquiry_type.strip():
            parts.append(f"Inquiry Type: {self.inquiry_type.strip()}")
        parts.append((self.message or "").strip())
        return "\n\n".join(parts)


class QuoteRequest(_CamelModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    origin: str | None = None
    destination: str | None = None
    service_type: str | None = None
    weight: str | None = None
    dimensions: str | None = None
    notes: str | None = None

    def missing_fields(self) -> list[str]:
        return _missing(self, ("email", "origin", "destination"))


class AcknowledgementResponse(BaseModel):
    ok: bool = True
    message: str


class BlogPostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    slug: str
    title: str
    excerpt: str | None = None
    content: str = ""
    author: str | None = None
    cover_image_url: str | None = None
    published_at: datetime

    @field_validator("published_at")
    @classmethod
    def attach_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)


class BlogPostCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    slug: str | None = None
    excerpt: str | None = None
    content: str | None = None
    author: str | None = None
    cover_image_url: str | None = None
    published_at: datetime | None = None

    def missing_fields(self) -> list[str]:
        return _missing(self, ("title",))


class BlogPostUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    slug: str | None = None
    excerpt: str | None = None
    content: str | None = None
    author: str | None = None
    cover_image_url: str | None = None
    published_at: datetime | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class MapProviderResponse(BaseModel):
    provider: MapProvider


class MapProviderUpdate(BaseModel):
    provider: str | None = None


class GeocodeResponse(BaseModel):
    lat: float
    lon: float
    display_name: str


class ExceptionSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    ref: str
    issue: str
    lane: str
    eta: datetime | None = None

    @field_validator("eta")
    @classmethod
    def attach_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)


class DashboardResponse(BaseModel):
    total: int
    live: int
    exceptions: int
    on_time_percent: int
    revenue: Decimal
    recent_exceptions: list[ExceptionSummaryResponse]

    @classmethod
    def from_stats(cls, stats: DashboardStats) -> DashboardResponse:
        return cls(
            total=stats.total,
            live=stats.live,
            exceptions=stats.exceptions,
            on_time_percent=stats.on_time_percent,
            revenue=stats.revenue,
            recent_exceptions=[
                ExceptionSummaryResponse.model_validate(item)
                for item in stats.recent_exceptions
            ],
        )


class CustomerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    type: str
    name: str
    email: str
    phone: str
    city: str
    country: str

    @classmethod
    def from_customer(cls, customer: Customer) -> CustomerResponse:
        return cls.model_validate(customer)


class LoginRequest(BaseModel):
    email: str
    password: str


class SessionResponse(BaseModel):
    authenticated: bool
    email: str | None = None
    demo: bool = False
    access_token: str | None = None
