"""Shipment status vocabulary, progress table and classification."""

from __future__ import annotations

from enum import StrEnum
from types import MappingProxyType

from sandglobal.exceptions import InvalidTransitionError


class ShipmentStatus(StrEnum):
    """Closed set of shipment statuses."""

    PENDING = "Pending"
    AWAITING_PAYMENT = "Awaiting Payment"
    PAYMENT_CONFIRMED = "Payment Confirmed"
    PROCESSING = "Processing"
    READY_FOR_PICKUP = "Ready for Pickup"
    DRIVER_EN_ROUTE = "Driver En Route"
    PICKED_UP = "Picked Up"
    AT_WAREHOUSE = "At Warehouse"
    IN_TRANSIT = "In Transit"
    DEPARTED_FACILITY = "Departed Facility"
    ARRIVED_AT_FACILITY = "Arrived at Facility"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"
    RETURNED_TO_SENDER = "Returned to Sender"
    CANCELLED = "Cancelled"
    ON_HOLD = "On Hold"
    DELAYED = "Delayed"
    WEATHER_DELAY = "Weather Delay"
    ADDRESS_ISSUE = "Address Issue"
    CUSTOMS_HOLD = "Customs Hold"
    INSPECTION_REQUIRED = "Inspection Required"
    PAYMENT_VERIFICATION_REQUIRED = "Payment Verification Required"
    LOST_PACKAGE = "Lost Package"
    DAMAGED_PACKAGE = "Damaged Package"


class StatusClass(StrEnum):
    """Dashboard bucket for a status."""

    LIVE = "live"
    EXCEPTION = "exception"


STATUS_PROGRESS = MappingProxyType(
    {
        ShipmentStatus.PENDING: 5,
        ShipmentStatus.AWAITING_PAYMENT: 10,
        ShipmentStatus.PAYMENT_CONFIRMED: 20,
        ShipmentStatus.PROCESSING: 30,
        ShipmentStatus.READY_FOR_PICKUP: 35,
        ShipmentStatus.DRIVER_EN_ROUTE: 40,
        ShipmentStatus.PICKED_UP: 45,
        ShipmentStatus.AT_WAREHOUSE: 50,
        ShipmentStatus.IN_TRANSIT: 60,
        ShipmentStatus.DEPARTED_FACILITY: 65,
        ShipmentStatus.ARRIVED_AT_FACILITY: 70,
        ShipmentStatus.OUT_FOR_DELIVERY: 85,
        ShipmentStatus.DELIVERED: 100,
        ShipmentStatus.RETURNED_TO_SENDER: 0,
        ShipmentStatus.CANCELLED: 0,
        ShipmentStatus.ON_HOLD: 15,
        ShipmentStatus.DELAYED: 25,
        ShipmentStatus.WEATHER_DELAY: 25,
        ShipmentStatus.ADDRESS_ISSUE: 25,
        ShipmentStatus.CUSTOMS_HOLD: 35,
        ShipmentStatus.INSPECTION_REQUIRED: 45,
        ShipmentStatus.PAYMENT_VERIFICATION_REQUIRED: 15,
        ShipmentStatus.LOST_PACKAGE: 0,
        ShipmentStatus.DAMAGED_PACKAGE: 0,
    }
)

LIVE_STATUSES = frozenset(
    {
        ShipmentStatus.IN_TRANSIT,
        ShipmentStatus.OUT_FOR_DELIVERY,
        ShipmentStatus.PICKED_UP,
        ShipmentStatus.AT_WAREHOUSE,
        ShipmentStatus.DEPARTED_FACILITY,
        ShipmentStatus.ARRIVED_AT_FACILITY,
    }
)

EXCEPTION_STATUSES = frozenset(
    {
        ShipmentStatus.ON_HOLD,
        ShipmentStatus.DELAYED,
        ShipmentStatus.WEATHER_DELAY,
        ShipmentStatus.ADDRESS_ISSUE,
        ShipmentStatus.CUSTOMS_HOLD,
        ShipmentStatus.INSPECTION_REQUIRED,
        ShipmentStatus.LOST_PACKAGE,
        ShipmentStatus.DAMAGED_PACKAGE,
    }
)

TERMINAL_STATUSES = frozenset(
    {
        ShipmentStatus.DELIVERED,
        ShipmentStatus.CANCELLED,
        ShipmentStatus.RETURNED_TO_SENDER,
        ShipmentStatus.LOST_PACKAGE,
        ShipmentStatus.DAMAGED_PACKAGE,
    }
)


def progress_for_status(status: str | None) -> int:
    """Return the completion percentage for a status.

    Unknown values (legacy rows, typos, ``None``) map to 0.
    """
    if status is None:
        return 0
    return STATUS_PROGRESS.get(str(status), 0)


def classify_live_or_exception(status: str | None) -> StatusClass | None:
    """Bucket a status for the dashboard, or ``None`` for neither."""
    if status is None:
        return None
    value = str(status)
    if value in LIVE_STATUSES:
        return StatusClass.LIVE
    if value in EXCEPTION_STATUSES:
        return StatusClass.EXCEPTION
    return None


def check_transition(
    current: str | None,
    new: str,
    *,
    strict: bool = False,
) -> None:
    """Validate a status change.

    Any transition is allowed unless ``strict`` is set, in which case a
    shipment can no longer leave a terminal status.
    """
    if not strict or current is None or str(current) == str(new):
        return
    if str(current) in TERMINAL_STATUSES:
        raise InvalidTransitionError(
            f"Cannot change status from {current} to {new}"
        )
