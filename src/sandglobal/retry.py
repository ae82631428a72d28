"""Email redelivery with exponential backoff."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from sandglobal.exceptions import NotificationError
from sandglobal.notifications import EmailMessage

if TYPE_CHECKING:
    from sandglobal.config import SandGlobalConfig
    from sandglobal.protocols import MailSender, NotificationRetryStore

logger = logging.getLogger(__name__)


def compute_next_retry_at(
    attempt: int,
    backoff_seconds: int,
) -> datetime:
    """Compute the next retry time with exponential backoff.

    delay = backoff_seconds * 2^(attempt - 1)
    """
    delay = backoff_seconds * (2 ** (attempt - 1))
    return datetime.now(tz=UTC) + timedelta(seconds=delay)


async def process_due_notifications(
    *,
    retry_store: NotificationRetryStore,
    sender: MailSender,
    config: SandGlobalConfig,
    limit: int = 10,
) -> int:
    """Redeliver queued emails that are due.

    Returns the number of retries processed.
    """
    retries = await retry_store.get_due_retries(limit=limit)
    processed = 0

    for retry in retries:
        retry_id = retry["id"]
        attempts = retry["attempts"]

        if attempts >= config.retry_max_attempts:
            logger.warning(
                "Email retry %s exhausted after %d attempts",
                retry_id,
                attempts,
            )
            await retry_store.mark_exhausted(retry_id)
            processed += 1
            continue

        try:
            message = EmailMessage.from_payload(retry["payload"])
        except (KeyError, TypeError) as exc:
            logger.error(
                "Email retry %s has a malformed payload: %s", retry_id, exc
            )
            await retry_store.mark_exhausted(retry_id)
            processed += 1
            continue

        try:
            await sender.send(message)
            await retry_store.mark_succeeded(retry_id)
            logger.info("Email retry %s succeeded", retry_id)
        except NotificationError as exc:
            new_attempts = attempts + 1
            await retry_store.mark_failed(retry_id, error=str(exc))
            if new_attempts >= config.retry_max_attempts:
                logger.warning(
                    "Email retry %s exhausted after %d attempts: %s",
                    retry_id,
                    new_attempts,
                    exc,
                )
                await retry_store.mark_exhausted(retry_id)
            else:
                logger.info(
                    "Email retry %s: attempt %d failed: %s",
                    retry_id,
                    new_attempts,
                    exc,
                )

        processed += 1

    return processed
