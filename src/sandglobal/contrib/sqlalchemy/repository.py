"""SQLAlchemy shipment and tracking event repositories."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import NoResultFound, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sandglobal.contrib.sqlalchemy.models import (
    ShipmentModel,
    TrackingEventModel,
)
from sandglobal.exceptions import DataStoreError, ShipmentNotFoundError


class SQLAlchemyShipmentRepository:
    """Shipment repository backed by SQLAlchemy async sessions."""

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        self.session_factory = session_factory

    async def get_by_id(self, shipment_id: str) -> ShipmentModel:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(ShipmentModel).where(
                        ShipmentModel.id == shipment_id
                    )
                )
                return result.scalar_one()
        except NoResultFound as e:
            raise ShipmentNotFoundError(shipment_id) from e
        except SQLAlchemyError as e:
            raise DataStoreError("Failed to load shipment") from e

    async def get_by_tracking_number(
        self, tracking_number: str
    ) -> ShipmentModel:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(ShipmentModel).where(
                        ShipmentModel.tracking_number == tracking_number
                    )
                )
                return result.scalar_one()
        except NoResultFound as e:
            raise ShipmentNotFoundError(tracking_number) from e
        except SQLAlchemyError as e:
            raise DataStoreError("Failed to load shipment") from e

    async def tracking_number_exists(self, tracking_number: str) -> bool:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(ShipmentModel.id).where(
                        ShipmentModel.tracking_number == tracking_number
                    )
                )
                return result.first() is not None
        except SQLAlchemyError as e:
            raise DataStoreError("Failed to check tracking number") from e

    async def create(self, **fields) -> ShipmentModel:
        shipment = ShipmentModel(**fields)
        try:
            async with self.session_factory() as session:
                session.add(shipment)
                await session.commit()
                await session.refresh(shipment)
        except SQLAlchemyError as e:
            raise DataStoreError(f"Failed to create shipment: {e}") from e
        return shipment

    async def update(self, shipment_id: str, **fields) -> ShipmentModel:
        try:
            async with self.session_factory() as session:
                shipment = await session.get(ShipmentModel, shipment_id)
                if shipment is None:
                    raise ShipmentNotFoundError(shipment_id)
                for key, value in fields.items():
                    if hasattr(shipment, key):
                        setattr(shipment, key, value)
                await session.commit()
                await session.refresh(shipment)
                return shipment
        except SQLAlchemyError as e:
            raise DataStoreError(f"Failed to update shipment: {e}") from e

    async def list_shipments(
        self, limit: int | None = None
    ) -> list[ShipmentModel]:
        """List shipments, newest first."""
        stmt = select(ShipmentModel).order_by(ShipmentModel.created_at.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise DataStoreError("Failed to load shipments") from e


class SQLAlchemyTrackingEventRepository:
    """Append-only tracking history backed by SQLAlchemy."""

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        self.session_factory = session_factory

    async def append(self, **fields) -> TrackingEventModel:
        event = TrackingEventModel(**fields)
        try:
            async with self.session_factory() as session:
                session.add(event)
                await session.commit()
                await session.refresh(event)
        except SQLAlchemyError as e:
            raise DataStoreError(
                f"Failed to record tracking event: {e}"
            ) from e
        return event

    async def list_for_shipment(
        self, shipment_id: str
    ) -> list[TrackingEventModel]:
        stmt = (
            select(TrackingEventModel)
            .where(TrackingEventModel.shipment_id == shipment_id)
            .order_by(TrackingEventModel.timestamp.asc())
        )
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise DataStoreError("Failed to load tracking history") from e
