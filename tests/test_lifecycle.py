"""Status vocabulary, progress table and classification tests."""

from __future__ import annotations

import pytest

from sandglobal.exceptions import InvalidTransitionError
from sandglobal.lifecycle import (
    EXCEPTION_STATUSES,
    LIVE_STATUSES,
    STATUS_PROGRESS,
    ShipmentStatus,
    StatusClass,
    check_transition,
    classify_live_or_exception,
    progress_for_status,
)

EXPECTED_PROGRESS = {
    "Pending": 5,
    "Awaiting Payment": 10,
    "Payment Confirmed": 20,
    "Processing": 30,
    "Ready for Pickup": 35,
    "Driver En Route": 40,
    "Picked Up": 45,
    "At Warehouse": 50,
    "In Transit": 60,
    "Departed Facility": 65,
    "Arrived at Facility": 70,
    "Out for Delivery": 85,
    "Delivered": 100,
    "Returned to Sender": 0,
    "Cancelled": 0,
    "On Hold": 15,
    "Delayed": 25,
    "Weather Delay": 25,
    "Address Issue": 25,
    "Customs Hold": 35,
    "Inspection Required": 45,
    "Payment Verification Required": 15,
    "Lost Package": 0,
    "Damaged Package": 0,
}


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(("status", "expected"), EXPECTED_PROGRESS.items())
def test_progress_table(status: str, expected: int) -> None:
    assert progress_for_status(status) == expected


def test_every_status_has_a_progress_entry() -> None:
    assert set(STATUS_PROGRESS) == set(ShipmentStatus)
    assert len(ShipmentStatus) == 24


def test_progress_accepts_enum_members() -> None:
    assert progress_for_status(ShipmentStatus.OUT_FOR_DELIVERY) == 85


@pytest.mark.parametrize("value", ["Shipped", "in transit", "", None])
def test_unknown_status_has_zero_progress(value) -> None:
    assert progress_for_status(value) == 0


def test_progress_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        STATUS_PROGRESS["Pending"] = 50  # type: ignore[index]


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def test_live_and_exception_sets_are_disjoint() -> None:
    assert LIVE_STATUSES.isdisjoint(EXCEPTION_STATUSES)


@pytest.mark.parametrize("status", sorted(LIVE_STATUSES))
def test_live_statuses_classify_as_live(status) -> None:
    assert classify_live_or_exception(status) is StatusClass.LIVE


@pytest.mark.parametrize("status", sorted(EXCEPTION_STATUSES))
def test_exception_statuses_classify_as_exception(status) -> None:
    assert classify_live_or_exception(status) is StatusClass.EXCEPTION


@pytest.mark.parametrize(
    "status",
    [
        "Pending",
        "Processing",
        "Delivered",
        "Cancelled",
        "Payment Verification Required",
        "Driver En Route",
        "not-a-status",
        None,
    ],
)
def test_other_statuses_are_neither(status) -> None:
    assert classify_live_or_exception(status) is None


def test_classification_matches_set_membership() -> None:
    for status in ShipmentStatus:
        bucket = classify_live_or_exception(status)
        assert (bucket is StatusClass.LIVE) == (status in LIVE_STATUSES)
        assert (bucket is StatusClass.EXCEPTION) == (
            status in EXCEPTION_STATUSES
        )


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def test_any_transition_allowed_by_default() -> None:
    check_transition("Delivered", "Pending")
    check_transition("Cancelled", "In Transit")


def test_strict_mode_blocks_leaving_terminal_status() -> None:
    with pytest.raises(InvalidTransitionError, match="Delivered"):
        check_transition("Delivered", "In Transit", strict=True)


def test_strict_mode_allows_non_terminal_moves() -> None:
    check_transition("Delayed", "In Transit", strict=True)
    check_transition("Delivered", "Delivered", strict=True)
