"""Public tracking endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from sandglobal.dependencies import (
    get_event_repository,
    get_shipment_repository,
)
from sandglobal.schemas import (
    ShipmentResponse,
    TrackingEventResponse,
    TrackingResponse,
)

router = APIRouter()


@router.get("/tracking/{tracking_number}", response_model=TrackingResponse)
async def track_shipment(
    tracking_number: str,
    repository=Depends(get_shipment_repository),
    events=Depends(get_event_repository),
) -> TrackingResponse:
    """Look up a shipment by tracking number with its history."""
    shipment = await repository.get_by_tracking_number(
        tracking_number.strip().upper()
    )
    history = await events.list_for_shipment(shipment.id)
    return TrackingResponse(
        shipment=ShipmentResponse.from_shipment(shipment),
        history=[TrackingEventResponse.from_event(e) for e in history],
    )
