"""Dashboard aggregates over the shipment collection."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sandglobal.lifecycle import (
    ShipmentStatus,
    StatusClass,
    classify_live_or_exception,
)

REVENUE_RATE = Decimal("0.1")


@dataclass(frozen=True)
class ExceptionSummary:
    ref: str
    issue: str
    lane: str
    eta: datetime | None


@dataclass(frozen=True)
class DashboardStats:
    total: int = 0
    live: int = 0
    exceptions: int = 0
    on_time_percent: int = 0
    revenue: Decimal = Decimal("0")
    recent_exceptions: list[ExceptionSummary] = field(default_factory=list)


@dataclass(frozen=True)
class Customer:
    type: str
    name: str
    email: str
    phone: str
    city: str
    country: str


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def count_live(shipments: Iterable[Any]) -> int:
    return sum(
        1
        for s in shipments
        if classify_live_or_exception(s.status) is StatusClass.LIVE
    )


def count_exceptions(shipments: Iterable[Any]) -> int:
    return sum(
        1
        for s in shipments
        if classify_live_or_exception(s.status) is StatusClass.EXCEPTION
    )


def compute_on_time_performance(shipments: Iterable[Any]) -> int:
    """Share of delivered shipments that arrived by their ETA.

    The denominator counts shipments with a delivery time or a Delivered
    status; the numerator those delivered on or before their estimate.
    Rounded half-up to an integer percent, 0 when nothing was delivered.
    """
    delivered = 0
    on_time = 0
    for shipment in shipments:
        delivered_at = getattr(shipment, "delivered_at", None)
        eta = getattr(shipment, "estimated_delivery_date", None)
        delivered_status = shipment.status == ShipmentStatus.DELIVERED
        if delivered_at is None and not delivered_status:
            continue
        delivered += 1
        if delivered_at is not None and eta is not None:
            if _as_utc(delivered_at) <= _as_utc(eta):
                on_time += 1
    if delivered == 0:
        return 0
    ratio = Decimal(on_time * 100) / Decimal(delivered)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_revenue(shipments: Iterable[Any]) -> Decimal:
    total = Decimal("0")
    for shipment in shipments:
        value = getattr(shipment, "declared_value", None)
        if value is None:
            continue
        total += Decimal(str(value)) * REVENUE_RATE
    return total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def recent_exceptions(
    shipments: Iterable[Any],
    limit: int = 3,
) -> list[ExceptionSummary]:
    """Summaries of the first ``limit`` exception shipments."""
    summaries: list[ExceptionSummary] = []
    for shipment in shipments:
        if len(summaries) >= limit:
            break
        if (
            classify_live_or_exception(shipment.status)
            is not StatusClass.EXCEPTION
        ):
            continue
        summaries.append(
            ExceptionSummary(
                ref=shipment.reference_code or shipment.tracking_number,
                issue=str(shipment.status),
                lane=f"{shipment.sender_city} → {shipment.recipient_city}",
                eta=shipment.estimated_delivery_date,
            )
        )
    return summaries


def compute_dashboard_stats(shipments: Sequence[Any]) -> DashboardStats:
    return DashboardStats(
        total=len(shipments),
        live=count_live(shipments),
        exceptions=count_exceptions(shipments),
        on_time_percent=compute_on_time_performance(shipments),
        revenue=compute_revenue(shipments),
        recent_exceptions=recent_exceptions(shipments),
    )


def derive_customers(shipments: Iterable[Any]) -> list[Customer]:
    """Collect senders and recipients, deduplicated by role, name and email."""
    seen: set[tuple[str, str, str]] = set()
    customers: list[Customer] = []
    for shipment in shipments:
        for role in ("sender", "recipient"):
            name = getattr(shipment, f"{role}_name", "") or ""
            email = getattr(shipment, f"{role}_email", "") or ""
            key = (role, name.strip().lower(), email.strip().lower())
            if key in seen:
                continue
            seen.add(key)
            customers.append(
                Customer(
                    type=role,
                    name=name,
                    email=email,
                    phone=getattr(shipment, f"{role}_phone", "") or "",
                    city=getattr(shipment, f"{role}_city", "") or "",
                    country=getattr(shipment, f"{role}_country", "") or "",
                )
            )
    return customers
