"""SQLAlchemy stores for contact messages, blog posts and map settings."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sandglobal.contrib.sqlalchemy.models import (
    BlogPostModel,
    ContactMessageModel,
    MapProviderSettingModel,
)
from sandglobal.exceptions import BlogPostNotFoundError, DataStoreError

SETTINGS_ROW_ID = 1


class SQLAlchemyContactMessageRepository:
    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        self.session_factory = session_factory

    async def create(self, **fields) -> ContactMessageModel:
        message = ContactMessageModel(**fields)
        try:
            async with self.session_factory() as session:
                session.add(message)
                await session.commit()
                await session.refresh(message)
        except SQLAlchemyError as e:
            raise DataStoreError(f"Failed to record message: {e}") from e
        return message


class SQLAlchemyBlogPostRepository:
    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        self.session_factory = session_factory

    async def list_published(self, limit: int = 50) -> list[BlogPostModel]:
        """Newest posts first."""
        stmt = (
            select(BlogPostModel)
            .order_by(BlogPostModel.published_at.desc())
            .limit(limit)
        )
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise DataStoreError("Failed to load blog posts") from e

    async def get_by_slug(self, slug: str) -> BlogPostModel:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(BlogPostModel).where(BlogPostModel.slug == slug)
                )
                post = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise DataStoreError("Failed to load blog post") from e
        if post is None:
            raise BlogPostNotFoundError(slug)
        return post

    async def create(self, **fields) -> BlogPostModel:
        post = BlogPostModel(**fields)
        try:
            async with self.session_factory() as session:
                session.add(post)
                await session.commit()
                await session.refresh(post)
        except SQLAlchemyError as e:
            raise DataStoreError(f"Failed to create blog post: {e}") from e
        return post

    async def update(self, slug: str, **fields) -> BlogPostModel:
        stmt = select(BlogPostModel).where(BlogPostModel.slug == slug)
        try:
            async with self.session_factory() as session:
                post = (await session.execute(stmt)).scalar_one_or_none()
                if post is None:
                    raise BlogPostNotFoundError(slug)
                for key, value in fields.items():
                    if hasattr(post, key):
                        setattr(post, key, value)
                await session.commit()
                await session.refresh(post)
                return post
        except SQLAlchemyError as e:
            raise DataStoreError(f"Failed to update blog post: {e}") from e

    async def delete(self, slug: str) -> None:
        stmt = select(BlogPostModel).where(BlogPostModel.slug == slug)
        try:
            async with self.session_factory() as session:
                post = (await session.execute(stmt)).scalar_one_or_none()
                if post is None:
                    raise BlogPostNotFoundError(slug)
                await session.delete(post)
                await session.commit()
        except SQLAlchemyError as e:
            raise DataStoreError(f"Failed to delete blog post: {e}") from e


class SQLAlchemyMapProviderStore:
    """Single-row map provider setting."""

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        self.session_factory = session_factory

    async def get_provider(self) -> str | None:
        try:
            async with self.session_factory() as session:
                row = await session.get(
                    MapProviderSettingModel, SETTINGS_ROW_ID
                )
                return row.provider if row is not None else None
        except SQLAlchemyError as e:
            raise DataStoreError("Failed to load map provider") from e

    async def set_provider(self, provider: str) -> str:
        try:
            async with self.session_factory() as session:
                row = await session.get(
                    MapProviderSettingModel, SETTINGS_ROW_ID
                )
                if row is None:
                    row = MapProviderSettingModel(id=SETTINGS_ROW_ID)
                    session.add(row)
                row.provider = provider
                row.updated_at = datetime.now(tz=UTC)
                await session.commit()
                return provider
        except SQLAlchemyError as e:
            raise DataStoreError(f"Failed to save map provider: {e}") from e
