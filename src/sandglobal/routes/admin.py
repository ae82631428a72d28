"""Admin dashboard endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from sandglobal.config import SandGlobalConfig
from sandglobal.dashboard import (
    DashboardStats,
    compute_dashboard_stats,
    derive_customers,
)
from sandglobal.dependencies import (
    get_config,
    get_shipment_repository,
    require_admin,
)
from sandglobal.exceptions import DataStoreError
from sandglobal.schemas import CustomerResponse, DashboardResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    repository=Depends(get_shipment_repository),
) -> DashboardResponse:
    """Headline figures. A store failure yields zeroed stats."""
    try:
        shipments = await repository.list_shipments()
    except DataStoreError:
        logger.exception("Dashboard stats unavailable")
        return DashboardResponse.from_stats(DashboardStats())
    return DashboardResponse.from_stats(compute_dashboard_stats(shipments))


@router.get("/customers", response_model=list[CustomerResponse])
async def customers(
    repository=Depends(get_shipment_repository),
    config: SandGlobalConfig = Depends(get_config),
) -> list[CustomerResponse]:
    shipments = await repository.list_shipments(limit=config.list_limit)
    return [
        CustomerResponse.from_customer(c)
        for c in derive_customers(shipments)
    ]
