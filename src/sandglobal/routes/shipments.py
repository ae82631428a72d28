"""Shipment endpoints."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends

from sandglobal.config import SandGlobalConfig
from sandglobal.dependencies import (
    get_config,
    get_dispatcher,
    get_event_repository,
    get_flow,
    get_shipment_repository,
    require_admin,
)
from sandglobal.exceptions import MissingFieldsError, NotificationError
from sandglobal.flow import ShipmentFlow
from sandglobal.notifications import (
    NotificationDispatcher,
    build_shipment_created_messages,
    build_shipment_updated_messages,
)
from sandglobal.schemas import (
    CreateShipmentRequest,
    NotificationState,
    NotifyRequest,
    NotifyResponse,
    ShipmentResponse,
    TrackingEventResponse,
    UpdateShipmentRequest,
    UpdateShipmentResponse,
)

router = APIRouter()


@router.get("/shipments/health")
async def shipments_health() -> dict[str, str]:
    """Healthcheck endpoint for shipment routes."""
    return {"status": "ok"}


@router.post(
    "/shipments",
    response_model=ShipmentResponse,
    status_code=201,
)
async def create_shipment(
    body: CreateShipmentRequest,
    background_tasks: BackgroundTasks,
    flow: ShipmentFlow = Depends(get_flow),
    config: SandGlobalConfig = Depends(get_config),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> ShipmentResponse:
    """Create a shipment and email both parties in the background."""
    shipment = await flow.create_shipment(body)
    messages = build_shipment_created_messages(
        shipment, config.notification_recipients
    )
    background_tasks.add_task(dispatcher.deliver, messages)
    return ShipmentResponse.from_shipment(shipment)


@router.get(
    "/shipments",
    response_model=list[ShipmentResponse],
    dependencies=[Depends(require_admin)],
)
async def list_shipments(
    repository=Depends(get_shipment_repository),
    config: SandGlobalConfig = Depends(get_config),
) -> list[ShipmentResponse]:
    shipments = await repository.list_shipments(limit=config.list_limit)
    return [ShipmentResponse.from_shipment(s) for s in shipments]


@router.get(
    "/shipments/{shipment_id}",
    response_model=ShipmentResponse,
    dependencies=[Depends(require_admin)],
)
async def get_shipment(
    shipment_id: str,
    repository=Depends(get_shipment_repository),
) -> ShipmentResponse:
    shipment = await repository.get_by_id(shipment_id)
    return ShipmentResponse.from_shipment(shipment)


@router.patch(
    "/shipments/{shipment_id}",
    response_model=UpdateShipmentResponse,
    dependencies=[Depends(require_admin)],
)
async def update_shipment(
    shipment_id: str,
    body: UpdateShipmentRequest,
    background_tasks: BackgroundTasks,
    flow: ShipmentFlow = Depends(get_flow),
    config: SandGlobalConfig = Depends(get_config),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> UpdateShipmentResponse:
    """Apply an update and email both parties on visible changes."""
    result = await flow.update_shipment(shipment_id, body)
    shipment = result.shipment

    if not result.changed:
        return UpdateShipmentResponse(
            shipment=ShipmentResponse.from_shipment(shipment),
            changed=False,
            message="No changes detected",
            notification=NotificationState(
                skipped=True, reason="no_changes"
            ),
        )

    if flow.should_notify(shipment):
        messages = build_shipment_updated_messages(
            shipment,
            config.notification_recipients,
            old_status=result.previous_status,
        )
        background_tasks.add_task(dispatcher.deliver, messages)
        shipment = await flow.mark_notified(shipment)
        notification = NotificationState(
            attempted=True, queued=len(messages)
        )
    else:
        notification = NotificationState(skipped=True, reason="duplicate")

    return UpdateShipmentResponse(
        shipment=ShipmentResponse.from_shipment(shipment),
        changed=True,
        message="Shipment updated",
        notification=notification,
    )


@router.post(
    "/shipments/{shipment_id}/notify",
    response_model=NotifyResponse,
    dependencies=[Depends(require_admin)],
)
async def notify_shipment(
    shipment_id: str,
    body: NotifyRequest,
    repository=Depends(get_shipment_repository),
    config: SandGlobalConfig = Depends(get_config),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> NotifyResponse:
    """Resend the created or updated email for a shipment."""
    if body.type is None:
        raise MissingFieldsError(["type"])
    shipment = await repository.get_by_id(shipment_id)
    if body.type == "created":
        messages = build_shipment_created_messages(
            shipment, config.notification_recipients
        )
    else:
        messages = build_shipment_updated_messages(
            shipment,
            config.notification_recipients,
            old_status=body.old_status,
        )
    if not messages:
        raise NotificationError("No valid email recipients configured")
    sent = await dispatcher.deliver(messages)
    return NotifyResponse(attempted=len(messages), sent=sent)


@router.get(
    "/shipments/{shipment_id}/events",
    response_model=list[TrackingEventResponse],
    dependencies=[Depends(require_admin)],
)
async def list_shipment_events(
    shipment_id: str,
    repository=Depends(get_shipment_repository),
    events=Depends(get_event_repository),
) -> list[TrackingEventResponse]:
    shipment = await repository.get_by_id(shipment_id)
    history = await events.list_for_shipment(shipment.id)
    return [TrackingEventResponse.from_event(e) for e in history]
