"""Storage and collaborator protocols."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sandglobal.auth import AuthSession
    from sandglobal.geocoding import GeocodeResult
    from sandglobal.notifications import EmailMessage


@runtime_checkable
class ShipmentRepository(Protocol):
    """Shipment persistence. Shipments are never deleted."""

    async def get_by_id(self, shipment_id: str) -> Any: ...

    async def get_by_tracking_number(self, tracking_number: str) -> Any: ...

    async def tracking_number_exists(self, tracking_number: str) -> bool: ...

    async def create(self, **fields: Any) -> Any: ...

    async def update(self, shipment_id: str, **fields: Any) -> Any: ...

    async def list_shipments(self, limit: int | None = None) -> list[Any]: ...


@runtime_checkable
class TrackingEventRepository(Protocol):
    """Append-only tracking history."""

    async def append(self, **fields: Any) -> Any: ...

    async def list_for_shipment(self, shipment_id: str) -> list[Any]: ...


@runtime_checkable
class ContactMessageRepository(Protocol):
    async def create(self, **fields: Any) -> Any: ...


@runtime_checkable
class BlogPostRepository(Protocol):
    async def list_published(self, limit: int = 50) -> list[Any]: ...

    async def get_by_slug(self, slug: str) -> Any: ...

    async def create(self, **fields: Any) -> Any: ...

    async def update(self, slug: str, **fields: Any) -> Any: ...

    async def delete(self, slug: str) -> None: ...


@runtime_checkable
class MapProviderStore(Protocol):
    async def get_provider(self) -> str | None: ...

    async def set_provider(self, provider: str) -> str: ...


@runtime_checkable
class NotificationRetryStore(Protocol):
    """Storage abstraction for the outbound email retry queue."""

    async def store_failed_notification(
        self,
        payload: dict,
        error: str,
    ) -> str: ...

    async def get_due_retries(self, limit: int = 10) -> list[dict]: ...

    async def mark_succeeded(self, retry_id: str) -> None: ...

    async def mark_failed(
        self,
        retry_id: str,
        error: str,
    ) -> None: ...

    async def mark_exhausted(self, retry_id: str) -> None: ...


@runtime_checkable
class MailSender(Protocol):
    async def send(self, message: EmailMessage) -> None: ...


@runtime_checkable
class Geocoder(Protocol):
    async def geocode(self, query: str) -> GeocodeResult | None: ...


@runtime_checkable
class AuthProvider(Protocol):
    async def sign_in(self, email: str, password: str) -> AuthSession: ...

    async def get_session(self, token: str | None) -> AuthSession | None: ...
