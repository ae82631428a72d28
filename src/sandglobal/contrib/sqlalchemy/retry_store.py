"""SQLAlchemy email notification retry store."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sandglobal.contrib.sqlalchemy.models import NotificationRetryModel
from sandglobal.exceptions import DataStoreError
from sandglobal.retry import compute_next_retry_at


class SQLAlchemyNotificationRetryStore:
    """Persist failed email payloads for later redelivery."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        backoff_seconds: int = 60,
    ) -> None:
        self.session_factory = session_factory
        self.backoff_seconds = backoff_seconds

    async def store_failed_notification(
        self,
        payload: dict,
        error: str,
    ) -> str:
        retry_id = str(uuid.uuid4())
        retry = NotificationRetryModel(
            id=retry_id,
            payload=payload,
            last_error=error,
            next_retry_at=compute_next_retry_at(1, self.backoff_seconds),
        )
        try:
            async with self.session_factory() as session:
                session.add(retry)
                await session.commit()
        except SQLAlchemyError as e:
            raise DataStoreError(f"Failed to queue notification: {e}") from e
        return retry_id

    async def get_due_retries(self, limit: int = 10) -> list[dict]:
        now = datetime.now(tz=UTC)
        stmt = (
            select(NotificationRetryModel)
            .where(NotificationRetryModel.status == "pending")
            .where(
                or_(
                    NotificationRetryModel.next_retry_at.is_(None),
                    NotificationRetryModel.next_retry_at <= now,
                )
            )
            .order_by(NotificationRetryModel.created_at)
            .limit(limit)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return [
                {
                    "id": row.id,
                    "payload": row.payload,
                    "attempts": row.attempts,
                    "last_error": row.last_error,
                }
                for row in result.scalars().all()
            ]

    async def mark_succeeded(self, retry_id: str) -> None:
        async with self.session_factory() as session:
            retry = await session.get(NotificationRetryModel, retry_id)
            if retry is None:
                return
            retry.status = "succeeded"
            await session.commit()

    async def mark_failed(self, retry_id: str, error: str) -> None:
        async with self.session_factory() as session:
            retry = await session.get(NotificationRetryModel, retry_id)
            if retry is None:
                return
            retry.attempts += 1
            retry.last_error = error
            retry.next_retry_at = compute_next_retry_at(
                retry.attempts + 1, self.backoff_seconds
            )
            await session.commit()

    async def mark_exhausted(self, retry_id: str) -> None:
        async with self.session_factory() as session:
            retry = await session.get(NotificationRetryModel, retry_id)
            if retry is None:
                return
            retry.status = "exhausted"
            await session.commit()
