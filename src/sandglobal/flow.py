"""Shipment creation and update orchestration."""

from __future__ import annotations

import hashlib
import json
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from sandglobal.config import SandGlobalConfig
from sandglobal.exceptions import InvalidPayloadError, MissingFieldsError
from sandglobal.identifiers import (
    allocate_tracking_number,
    estimate_delivery_date,
    generate_barcode_value,
    generate_reference_code,
)
from sandglobal.lifecycle import (
    ShipmentStatus,
    check_transition,
    progress_for_status,
)
from sandglobal.protocols import (
    Geocoder,
    ShipmentRepository,
    TrackingEventRepository,
)
from sandglobal.schemas import CreateShipmentRequest, UpdateShipmentRequest

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def notification_fingerprint(shipment: Any) -> str:
    """Hash of the fields customers are notified about."""
    eta = shipment.estimated_delivery_date
    payload = {
        "status": str(shipment.status),
        "eta": eta.isoformat() if eta else None,
        "location": shipment.current_location_name,
        "note": shipment.system_notes,
        "agent_name": shipment.agent_name,
        "agent_phone": shipment.agent_phone,
        "agent_email": shipment.agent_email,
    }
    raw = json.dumps(payload, sort_keys=True)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


@dataclass
class UpdateResult:
    shipment: Any
    previous_status: str
    changed: bool


class ShipmentFlow:
    """Creates and updates shipments and keeps their history in step."""

    def __init__(
        self,
        *,
        shipments: ShipmentRepository,
        events: TrackingEventRepository,
        config: SandGlobalConfig,
        geocoder: Geocoder | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.shipments = shipments
        self.events = events
        self.config = config
        self.geocoder = geocoder
        self.clock = clock

    async def create_shipment(self, request: CreateShipmentRequest) -> Any:
        missing = request.missing_fields()
        if missing:
            raise MissingFieldsError(missing)

        now = self.clock()
        status = request.status or ShipmentStatus.PENDING
        tracking_number = await allocate_tracking_number(
            self.shipments.tracking_number_exists,
            attempts=self.config.tracking_number_attempts,
        )
        fields = request.shipment_fields()
        await self._fill_coordinates(fields)

        shipment = await self.shipments.create(
            id=str(uuid.uuid4()),
            tracking_number=tracking_number,
            reference_code=generate_reference_code(),
            barcode_value=generate_barcode_value(),
            status=str(status),
            estimated_delivery_date=estimate_delivery_date(
                request.delivery_speed, now
            ),
            created_at=now,
            updated_at=now,
            **fields,
        )
        await self.events.append(
            shipment_id=shipment.id,
            status=str(status),
            description=f"Shipment created with status: {status}",
            location=request.current_location_name or request.sender_city,
            lat=request.current_lat,
            lng=request.current_lng,
            handler=request.agent_name,
            progress=progress_for_status(status),
            timestamp=now,
        )
        logger.info(
            "Created shipment %s (%s) with status %s",
            shipment.id,
            tracking_number,
            status,
        )
        return shipment

    async def _fill_coordinates(self, fields: dict[str, Any]) -> None:
        if self.geocoder is None:
            return
        for role in ("sender", "recipient"):
            if fields.get(f"{role}_lat") is not None:
                continue
            query = ", ".join(
                str(fields[key])
                for key in (
                    f"{role}_address_line1",
                    f"{role}_city",
                    f"{role}_state",
                    f"{role}_country",
                )
                if fields.get(key)
            )
            result = await self.geocoder.geocode(query)
            if result is not None:
                fields[f"{role}_lat"] = result.lat
                fields[f"{role}_lng"] = result.lon

    async def update_shipment(
        self,
        shipment_id: str,
        request: UpdateShipmentRequest,
    ) -> UpdateResult:
        shipment = await self.shipments.get_by_id(shipment_id)
        if not request.has_primary_update():
            raise InvalidPayloadError("No updates provided.")
        updates = request.changes()

        previous_status = str(shipment.status)
        effective = {
            key: value
            for key, value in updates.items()
            if getattr(shipment, key, None) != value
        }
        if not effective:
            return UpdateResult(shipment, previous_status, changed=False)

        now = self.clock()
        new_status = effective.get("status")
        if new_status is not None:
            check_transition(
                previous_status,
                new_status,
                strict=self.config.strict_transitions,
            )
            if (
                new_status == ShipmentStatus.DELIVERED
                and shipment.delivered_at is None
            ):
                effective["delivered_at"] = now
        effective["updated_at"] = now

        shipment = await self.shipments.update(shipment_id, **effective)

        if new_status is not None or "current_location_name" in effective:
            status = str(shipment.status)
            await self.events.append(
                shipment_id=shipment.id,
                status=status,
                description=f"Shipment status updated to: {status}",
                location=shipment.current_location_name
                or shipment.sender_city,
                lat=shipment.current_lat,
                lng=shipment.current_lng,
                handler=shipment.agent_name,
                progress=progress_for_status(status),
                timestamp=now,
            )
        logger.info(
            "Updated shipment %s: %s",
            shipment_id,
            ", ".join(sorted(effective)),
        )
        return UpdateResult(shipment, previous_status, changed=True)

    def should_notify(self, shipment: Any) -> bool:
        return (
            getattr(shipment, "last_notified_hash", None)
            != notification_fingerprint(shipment)
        )

    async def mark_notified(self, shipment: Any) -> Any:
        return await self.shipments.update(
            shipment.id,
            last_notified_status=str(shipment.status),
            last_notified_hash=notification_fingerprint(shipment),
            last_notified_at=self.clock(),
        )
