"""Exception hierarchy and handlers mapping it to HTTP responses."""

from __future__ import annotations

from collections.abc import Sequence

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class SandGlobalException(Exception):
    """Base class for back-office errors."""


class ShipmentNotFoundError(SandGlobalException):
    def __init__(self, shipment_id: str) -> None:
        self.shipment_id = shipment_id
        super().__init__(f"Shipment {shipment_id} not found")


class BlogPostNotFoundError(SandGlobalException):
    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"Blog post {slug} not found")


class MissingFieldsError(SandGlobalException):
    """Required request fields are absent or empty."""

    def __init__(self, fields: Sequence[str]) -> None:
        self.fields = list(fields)
        super().__init__(
            f"Missing required fields: {', '.join(self.fields)}"
        )


class InvalidPayloadError(SandGlobalException):
    pass


class InvalidTransitionError(SandGlobalException):
    pass


class RateLimitExceededError(SandGlobalException):
    def __init__(self, message: str, retry_after: int | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(message)


class AuthenticationError(SandGlobalException):
    pass


class LoginTimeoutError(AuthenticationError):
    pass


class NotificationError(SandGlobalException):
    """Outbound email could not be sent."""


class DataStoreError(SandGlobalException):
    """The persistence layer failed."""


class TrackingNumberExhaustedError(DataStoreError):
    pass


def _error_response(
    status_code: int,
    exc: Exception,
    code: str,
    headers: dict[str, str] | None = None,
    **extra,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "code": code, **extra},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register back-office exception handlers on a FastAPI app.

    More specific handlers must be registered first so FastAPI
    matches them before the generic SandGlobalException handler.

    Handler order (most specific first):
    1. ShipmentNotFoundError, BlogPostNotFoundError → 404
    2. MissingFieldsError → 400 (with the field list)
    3. InvalidPayloadError → 400
    4. InvalidTransitionError → 409
    5. RateLimitExceededError → 429
    6. AuthenticationError → 401
    7. NotificationError → 502
    8. DataStoreError → 500
    9. SandGlobalException → 400 (catch-all)
    """

    @app.exception_handler(ShipmentNotFoundError)
    async def _shipment_not_found(
        request: Request,
        exc: ShipmentNotFoundError,
    ) -> JSONResponse:
        return _error_response(404, exc, "shipment_not_found")

    @app.exception_handler(BlogPostNotFoundError)
    async def _blog_post_not_found(
        request: Request,
        exc: BlogPostNotFoundError,
    ) -> JSONResponse:
        return _error_response(404, exc, "blog_post_not_found")

    @app.exception_handler(MissingFieldsError)
    async def _missing_fields(
        request: Request,
        exc: MissingFieldsError,
    ) -> JSONResponse:
        return _error_response(
            400, exc, "missing_fields", fields=exc.fields
        )

    @app.exception_handler(InvalidPayloadError)
    async def _invalid_payload(
        request: Request,
        exc: InvalidPayloadError,
    ) -> JSONResponse:
        return _error_response(400, exc, "invalid_payload")

    @app.exception_handler(InvalidTransitionError)
    async def _invalid_transition(
        request: Request,
        exc: InvalidTransitionError,
    ) -> JSONResponse:
        return _error_response(409, exc, "invalid_transition")

    @app.exception_handler(RateLimitExceededError)
    async def _rate_limited(
        request: Request,
        exc: RateLimitExceededError,
    ) -> JSONResponse:
        headers = None
        if exc.retry_after is not None:
            headers = {"Retry-After": str(exc.retry_after)}
        return _error_response(429, exc, "rate_limited", headers=headers)

    @app.exception_handler(AuthenticationError)
    async def _unauthorized(
        request: Request,
        exc: AuthenticationError,
    ) -> JSONResponse:
        return _error_response(401, exc, "unauthorized")

    @app.exception_handler(NotificationError)
    async def _notification_error(
        request: Request,
        exc: NotificationError,
    ) -> JSONResponse:
        return _error_response(502, exc, "notification_error")

    @app.exception_handler(DataStoreError)
    async def _data_store_error(
        request: Request,
        exc: DataStoreError,
    ) -> JSONResponse:
        return _error_response(500, exc, "data_store_error")

    @app.exception_handler(SandGlobalException)
    async def _sandglobal_error(
        request: Request,
        exc: SandGlobalException,
    ) -> JSONResponse:
        return _error_response(400, exc, "shipment_error")
