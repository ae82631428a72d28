"""Tracking number, reference code, barcode, slug and ETA generators."""

from __future__ import annotations

import logging
import random
import re
import secrets
import string
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from enum import StrEnum

from sandglobal.exceptions import TrackingNumberExhaustedError

logger = logging.getLogger(__name__)

TRACKING_PREFIX = "SGE-"
REFERENCE_PREFIX = "REF-"
BARCODE_LENGTH = 12
SLUG_SUFFIX_LENGTH = 6

_SLUG_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


class DeliverySpeed(StrEnum):
    SAME_DAY = "Same-Day"
    NEXT_DAY = "Next-Day"
    EXPRESS = "Express"
    STANDARD = "Standard"


ETA_OFFSETS = {
    DeliverySpeed.SAME_DAY: timedelta(hours=8),
    DeliverySpeed.NEXT_DAY: timedelta(days=1),
    DeliverySpeed.EXPRESS: timedelta(days=2),
}
DEFAULT_ETA_OFFSET = timedelta(days=5)


def generate_tracking_number() -> str:
    """Return ``SGE-`` followed by 8 upper-case hex characters."""
    return TRACKING_PREFIX + secrets.token_hex(4).upper()


def generate_reference_code() -> str:
    """Return a human-friendly ``REF-NNNNN`` code. Not unique."""
    return f"{REFERENCE_PREFIX}{random.randint(10000, 99999)}"


def generate_barcode_value() -> str:
    # Digits after the decimal point of a random float, padded to length.
    digits = repr(random.random()).split(".", 1)[-1]
    digits = "".join(ch for ch in digits if ch.isdigit())
    return digits[:BARCODE_LENGTH].ljust(BARCODE_LENGTH, "0")


def generate_slug(title: str) -> str:
    """Lower-case, hyphenated ``title`` plus a short random suffix."""
    base = re.sub(r"\s+", "-", title.strip().lower())
    base = re.sub(r"[^a-z0-9-]", "", base)
    suffix = "".join(
        secrets.choice(_SLUG_SUFFIX_ALPHABET)
        for _ in range(SLUG_SUFFIX_LENGTH)
    )
    return f"{base}-{suffix}" if base else suffix


def estimate_delivery_date(
    speed: str | None,
    now: datetime | None = None,
) -> datetime:
    """Estimate delivery time from the chosen speed.

    Same-Day adds 8 hours, Next-Day one day, Express two days and any
    other value five days. No business-day or holiday adjustment.
    """
    base = now or datetime.now(tz=UTC)
    offset = ETA_OFFSETS.get(str(speed) if speed else "", DEFAULT_ETA_OFFSET)
    return base + offset


async def allocate_tracking_number(
    exists: Callable[[str], Awaitable[bool]],
    *,
    attempts: int = 5,
    generate: Callable[[], str] = generate_tracking_number,
) -> str:
    """Generate a tracking number not yet present in the store."""
    for attempt in range(1, attempts + 1):
        candidate = generate()
        if not await exists(candidate):
            return candidate
        logger.warning(
            "Tracking number collision on attempt %d: %s",
            attempt,
            candidate,
        )
    raise TrackingNumberExhaustedError(
        "Could not allocate a unique tracking number "
        f"after {attempts} attempts"
    )
