"""Blog, map provider and geocoding endpoints."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Response

from sandglobal.config import SandGlobalConfig
from sandglobal.dependencies import (
    get_blog_repository,
    get_config,
    get_geocoder,
    get_map_provider_store,
    require_admin,
)
from sandglobal.exceptions import (
    BlogPostNotFoundError,
    DataStoreError,
    InvalidPayloadError,
    MissingFieldsError,
)
from sandglobal.identifiers import generate_slug
from sandglobal.schemas import (
    BlogPostCreate,
    BlogPostResponse,
    BlogPostUpdate,
    GeocodeResponse,
    MapProvider,
    MapProviderResponse,
    MapProviderUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/blogs", response_model=list[BlogPostResponse])
async def list_blog_posts(
    blog=Depends(get_blog_repository),
    config: SandGlobalConfig = Depends(get_config),
) -> list[BlogPostResponse]:
    if blog is None:
        return []
    posts = await blog.list_published(limit=config.blog_list_limit)
    return [BlogPostResponse.model_validate(p) for p in posts]


@router.get("/blogs/{slug}", response_model=BlogPostResponse)
async def get_blog_post(
    slug: str,
    blog=Depends(get_blog_repository),
) -> BlogPostResponse:
    if blog is None:
        raise BlogPostNotFoundError(slug)
    post = await blog.get_by_slug(slug)
    return BlogPostResponse.model_validate(post)


def _require_blog_store(blog):
    if blog is None:
        raise DataStoreError("Blog storage is not configured")
    return blog


@router.post(
    "/blogs",
    status_code=201,
    response_model=BlogPostResponse,
    dependencies=[Depends(require_admin)],
)
async def create_blog_post(
    body: BlogPostCreate,
    blog=Depends(get_blog_repository),
) -> BlogPostResponse:
    """Publish a post; the slug is derived from the title if omitted."""
    missing = body.missing_fields()
    if missing:
        raise MissingFieldsError(missing)
    blog = _require_blog_store(blog)

    title = body.title.strip()
    slug = (body.slug or "").strip() or generate_slug(title)
    post = await blog.create(
        title=title,
        slug=slug,
        excerpt=body.excerpt,
        content=body.content or "",
        author=body.author,
        cover_image_url=body.cover_image_url,
        published_at=body.published_at or datetime.now(tz=UTC),
    )
    logger.info("Blog post %s published", slug)
    return BlogPostResponse.model_validate(post)


@router.patch(
    "/blogs/{slug}",
    response_model=BlogPostResponse,
    dependencies=[Depends(require_admin)],
)
async def update_blog_post(
    slug: str,
    body: BlogPostUpdate,
    blog=Depends(get_blog_repository),
) -> BlogPostResponse:
    changes = body.changes()
    if not changes:
        raise InvalidPayloadError("No updates provided.")
    blank = [
        name
        for name in ("title", "slug")
        if name in changes and not changes[name].strip()
    ]
    if blank:
        raise MissingFieldsError(blank)
    for name in ("title", "slug"):
        if name in changes:
            changes[name] = changes[name].strip()

    blog = _require_blog_store(blog)
    post = await blog.update(slug, **changes)
    return BlogPostResponse.model_validate(post)


@router.delete(
    "/blogs/{slug}",
    status_code=204,
    dependencies=[Depends(require_admin)],
)
async def delete_blog_post(
    slug: str,
    blog=Depends(get_blog_repository),
) -> Response:
    blog = _require_blog_store(blog)
    await blog.delete(slug)
    logger.info("Blog post %s deleted", slug)
    return Response(status_code=204)


def _default_provider(config: SandGlobalConfig) -> MapProvider:
    try:
        return MapProvider(config.default_map_provider)
    except ValueError:
        return MapProvider.GOOGLE


@router.get("/map-provider", response_model=MapProviderResponse)
async def get_map_provider(
    store=Depends(get_map_provider_store),
    config: SandGlobalConfig = Depends(get_config),
) -> MapProviderResponse:
    """Active map provider; falls back to the default on any failure."""
    default = _default_provider(config)
    if store is None:
        return MapProviderResponse(provider=default)
    try:
        stored = await store.get_provider()
    except DataStoreError as exc:
        logger.warning("Map provider lookup failed: %s", exc)
        return MapProviderResponse(provider=default)
    try:
        return MapProviderResponse(provider=MapProvider(stored))
    except ValueError:
        return MapProviderResponse(provider=default)


@router.patch(
    "/map-provider",
    response_model=MapProviderResponse,
    dependencies=[Depends(require_admin)],
)
async def set_map_provider(
    body: MapProviderUpdate,
    store=Depends(get_map_provider_store),
) -> MapProviderResponse:
    if not body.provider:
        raise MissingFieldsError(["provider"])
    try:
        provider = MapProvider(body.provider.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(p.value for p in MapProvider)
        raise InvalidPayloadError(
            f"Invalid map provider {body.provider!r}; "
            f"expected one of {allowed}"
        ) from exc
    if store is None:
        raise DataStoreError("Map provider settings are not configured")
    await store.set_provider(provider.value)
    return MapProviderResponse(provider=provider)


@router.get("/geocode", response_model=GeocodeResponse | None)
async def geocode_address(
    q: str = "",
    geocoder=Depends(get_geocoder),
) -> GeocodeResponse | None:
    """Best-effort lookup; ``null`` when nothing was found."""
    if geocoder is None:
        return None
    result = await geocoder.geocode(q)
    if result is None:
        return None
    return GeocodeResponse(
        lat=result.lat,
        lon=result.lon,
        display_name=result.display_name,
    )
