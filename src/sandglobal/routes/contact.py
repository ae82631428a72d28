"""Contact form and quote request endpoints."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response

from sandglobal.config import SandGlobalConfig
from sandglobal.dependencies import (
    get_config,
    get_contact_repository,
    get_dispatcher,
    get_rate_limiter,
)
from sandglobal.exceptions import (
    DataStoreError,
    MissingFieldsError,
    RateLimitExceededError,
)
from sandglobal.notifications import (
    NotificationDispatcher,
    build_contact_message,
)
from sandglobal.ratelimit import SlidingWindowRateLimiter, client_key
from sandglobal.schemas import (
    AcknowledgementResponse,
    ContactRequest,
    QuoteRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()

RATE_LIMIT_MESSAGE = "Too many submissions. Please try again shortly."
CONTACT_ACK = "Thanks for reaching out. We will respond shortly."


@router.post("/contact", response_model=AcknowledgementResponse)
async def submit_contact(
    body: ContactRequest,
    request: Request,
    response: Response,
    background_tasks: BackgroundTasks,
    contacts=Depends(get_contact_repository),
    limiter: SlidingWindowRateLimiter = Depends(get_rate_limiter),
    config: SandGlobalConfig = Depends(get_config),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> AcknowledgementResponse:
    """Record a contact message and forward it to the admin inbox."""
    key = client_key(request)
    if not limiter.hit(key):
        raise RateLimitExceededError(
            RATE_LIMIT_MESSAGE, retry_after=limiter.retry_after(key)
        )
    response.headers["X-RateLimit-Remaining"] = str(limiter.remaining(key))

    missing = body.missing_fields()
    if missing:
        raise MissingFieldsError(missing)

    name = body.full_name
    email = body.email.strip()
    composed = body.composed_message()

    if contacts is not None:
        try:
            await contacts.create(
                name=name,
                email=email,
                phone=body.phone,
                message=composed,
                created_at=datetime.now(tz=UTC),
            )
        except DataStoreError as exc:
            logger.error("Contact message from %s not stored: %s", email, exc)
            raise DataStoreError("Failed to record message.") from exc

    message = build_contact_message(
        name=name,
        email=email,
        phone=body.phone,
        subject=body.subject,
        inquiry_type=body.inquiry_type,
        message=body.message.strip(),
        admin_recipients=config.notification_recipients,
    )
    background_tasks.add_task(
        dispatcher.deliver, [message] if message is not None else []
    )
    return AcknowledgementResponse(message=CONTACT_ACK)


@router.post("/quote", response_model=AcknowledgementResponse)
async def request_quote(body: QuoteRequest) -> AcknowledgementResponse:
    missing = body.missing_fields()
    if missing:
        raise MissingFieldsError(missing)
    logger.info(
        "Quote request from %s: %s → %s (%s)",
        body.email,
        body.origin,
        body.destination,
        body.service_type or "unspecified",
    )
    return AcknowledgementResponse(message="Quote request received.")
