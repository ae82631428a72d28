"""Blog, map provider and geocode route tests."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from types import SimpleNamespace

from fastapi import FastAPI
from fastapi.testclient import TestClient

from conftest import InMemoryBlogRepo, InMemoryMapProviderStore
from sandglobal.config import SandGlobalConfig
from sandglobal.exceptions import DataStoreError, register_exception_handlers
from sandglobal.geocoding import GeocodeResult
from sandglobal.router import create_logistics_router


def _post(slug: str, day: int) -> SimpleNamespace:
    return SimpleNamespace(
        id=f"post-{slug}",
        slug=slug,
        title=slug.replace("-", " ").title(),
        excerpt=None,
        content="Body",
        author="Ops",
        cover_image_url=None,
        published_at=datetime(2026, 2, day, tzinfo=UTC),
    )


class RejectingAuth:
    async def sign_in(self, email, password):
        raise AssertionError("not used")

    async def get_session(self, token):
        return None


class FailingMapProviderStore:
    async def get_provider(self) -> str | None:
        raise DataStoreError("connection reset")

    async def set_provider(self, provider: str) -> str:
        raise DataStoreError("connection reset")


class StubGeocoder:
    def __init__(self, result: GeocodeResult | None) -> None:
        self.result = result
        self.queries: list[str] = []

    async def geocode(self, query: str) -> GeocodeResult | None:
        self.queries.append(query)
        return self.result


def _create_client(
    shipment_repository,
    event_repository,
    mail_sender,
    **kwargs,
) -> TestClient:
    config = kwargs.pop("config", SandGlobalConfig())
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(
        create_logistics_router(
            config=config,
            shipments=shipment_repository,
            events=event_repository,
            mail_sender=mail_sender,
            **kwargs,
        )
    )
    return TestClient(app)


# ---------------------------------------------------------------------------
# Blog
# ---------------------------------------------------------------------------


def test_blog_list_newest_first(
    shipment_repository, event_repository, mail_sender
) -> None:
    blog = InMemoryBlogRepo([_post("older", 1), _post("newer", 20)])
    client = _create_client(
        shipment_repository, event_repository, mail_sender, blog=blog
    )

    with client:
        resp = client.get("/blogs")

    assert [p["slug"] for p in resp.json()] == ["newer", "older"]


def test_blog_list_without_store(
    shipment_repository, event_repository, mail_sender
) -> None:
    client = _create_client(shipment_repository, event_repository, mail_sender)
    with client:
        assert client.get("/blogs").json() == []


def test_blog_post_by_slug(
    shipment_repository, event_repository, mail_sender
) -> None:
    blog = InMemoryBlogRepo([_post("customs-101", 3)])
    client = _create_client(
        shipment_repository, event_repository, mail_sender, blog=blog
    )

    with client:
        found = client.get("/blogs/customs-101")
        missing = client.get("/blogs/nope")

    assert found.json()["title"] == "Customs 101"
    assert missing.status_code == 404
    assert missing.json()["code"] == "blog_post_not_found"


def test_create_blog_post_generates_slug(
    shipment_repository, event_repository, mail_sender
) -> None:
    blog = InMemoryBlogRepo()
    client = _create_client(
        shipment_repository, event_repository, mail_sender, blog=blog
    )

    with client:
        resp = client.post(
            "/blogs",
            json={"title": " Customs in Q3! ", "content": "Rules changed."},
        )

    assert resp.status_code == 201
    body = resp.json()
    assert body["title"] == "Customs in Q3!"
    assert re.fullmatch(r"customs-in-q3-[a-z0-9]{6}", body["slug"])
    assert body["published_at"] is not None
    assert len(blog.posts) == 1


def test_create_blog_post_keeps_given_slug(
    shipment_repository, event_repository, mail_sender
) -> None:
    blog = InMemoryBlogRepo()
    client = _create_client(
        shipment_repository, event_repository, mail_sender, blog=blog
    )

    with client:
        resp = client.post(
            "/blogs",
            json={
                "title": "Peak season",
                "slug": "peak-season",
                "published_at": "2026-02-10T08:00:00Z",
            },
        )
        listed = client.get("/blogs").json()

    assert resp.json()["slug"] == "peak-season"
    assert [p["slug"] for p in listed] == ["peak-season"]


def test_create_blog_post_requires_title(
    shipment_repository, event_repository, mail_sender
) -> None:
    blog = InMemoryBlogRepo()
    client = _create_client(
        shipment_repository, event_repository, mail_sender, blog=blog
    )

    with client:
        resp = client.post("/blogs", json={"title": "  ", "content": "x"})

    assert resp.status_code == 400
    assert resp.json()["fields"] == ["title"]
    assert blog.posts == []


def test_create_blog_post_without_store(
    shipment_repository, event_repository, mail_sender
) -> None:
    client = _create_client(shipment_repository, event_repository, mail_sender)
    with client:
        resp = client.post("/blogs", json={"title": "Hello"})
    assert resp.status_code == 500
    assert resp.json()["code"] == "data_store_error"


def test_update_blog_post(
    shipment_repository, event_repository, mail_sender
) -> None:
    blog = InMemoryBlogRepo([_post("customs-101", 3)])
    client = _create_client(
        shipment_repository, event_repository, mail_sender, blog=blog
    )

    with client:
        resp = client.patch(
            "/blogs/customs-101", json={"title": "Customs 102 "}
        )
        blank = client.patch("/blogs/customs-101", json={"slug": ""})
        empty = client.patch("/blogs/customs-101", json={})
        missing = client.patch("/blogs/nope", json={"title": "x"})

    assert resp.status_code == 200
    assert resp.json()["title"] == "Customs 102"
    assert resp.json()["content"] == "Body"
    assert blank.status_code == 400
    assert blank.json()["fields"] == ["slug"]
    assert empty.json()["code"] == "invalid_payload"
    assert missing.status_code == 404


def test_delete_blog_post(
    shipment_repository, event_repository, mail_sender
) -> None:
    blog = InMemoryBlogRepo([_post("customs-101", 3), _post("rates", 4)])
    client = _create_client(
        shipment_repository, event_repository, mail_sender, blog=blog
    )

    with client:
        resp = client.delete("/blogs/customs-101")
        again = client.delete("/blogs/customs-101")

    assert resp.status_code == 204
    assert again.status_code == 404
    assert [p.slug for p in blog.posts] == ["rates"]


def test_blog_management_requires_admin(
    shipment_repository, event_repository, mail_sender
) -> None:
    blog = InMemoryBlogRepo([_post("customs-101", 3)])
    client = _create_client(
        shipment_repository,
        event_repository,
        mail_sender,
        blog=blog,
        auth_provider=RejectingAuth(),
    )

    with client:
        created = client.post("/blogs", json={"title": "Hello"})
        updated = client.patch("/blogs/customs-101", json={"title": "x"})
        deleted = client.delete("/blogs/customs-101")
        listed = client.get("/blogs")

    assert created.status_code == 401
    assert updated.status_code == 401
    assert deleted.status_code == 401
    assert listed.status_code == 200
    assert len(blog.posts) == 1


# ---------------------------------------------------------------------------
# Map provider
# ---------------------------------------------------------------------------


def test_map_provider_defaults_without_store(
    shipment_repository, event_repository, mail_sender
) -> None:
    client = _create_client(shipment_repository, event_repository, mail_sender)
    with client:
        assert client.get("/map-provider").json() == {"provider": "google"}


def test_map_provider_uses_configured_default(
    shipment_repository, event_repository, mail_sender
) -> None:
    client = _create_client(
        shipment_repository,
        event_repository,
        mail_sender,
        config=SandGlobalConfig(default_map_provider="mapbox"),
        map_settings=InMemoryMapProviderStore(),
    )
    with client:
        assert client.get("/map-provider").json() == {"provider": "mapbox"}


def test_map_provider_falls_back_on_store_error(
    shipment_repository, event_repository, mail_sender
) -> None:
    client = _create_client(
        shipment_repository,
        event_repository,
        mail_sender,
        map_settings=FailingMapProviderStore(),
    )
    with client:
        resp = client.get("/map-provider")
    assert resp.status_code == 200
    assert resp.json() == {"provider": "google"}


def test_map_provider_ignores_unknown_stored_value(
    shipment_repository, event_repository, mail_sender
) -> None:
    client = _create_client(
        shipment_repository,
        event_repository,
        mail_sender,
        map_settings=InMemoryMapProviderStore("bing"),
    )
    with client:
        assert client.get("/map-provider").json() == {"provider": "google"}


def test_set_map_provider(
    shipment_repository, event_repository, mail_sender
) -> None:
    store = InMemoryMapProviderStore()
    client = _create_client(
        shipment_repository,
        event_repository,
        mail_sender,
        map_settings=store,
    )

    with client:
        resp = client.patch(
            "/map-provider", json={"provider": " OpenStreetMap "}
        )
        current = client.get("/map-provider").json()

    assert resp.json() == {"provider": "openstreetmap"}
    assert store.provider == "openstreetmap"
    assert current == {"provider": "openstreetmap"}


def test_set_map_provider_rejects_unknown(
    shipment_repository, event_repository, mail_sender
) -> None:
    store = InMemoryMapProviderStore("mapbox")
    client = _create_client(
        shipment_repository,
        event_repository,
        mail_sender,
        map_settings=store,
    )

    with client:
        invalid = client.patch("/map-provider", json={"provider": "bing"})
        missing = client.patch("/map-provider", json={})

    assert invalid.status_code == 400
    assert invalid.json()["code"] == "invalid_payload"
    assert missing.status_code == 400
    assert missing.json()["fields"] == ["provider"]
    assert store.provider == "mapbox"


def test_set_map_provider_without_store(
    shipment_repository, event_repository, mail_sender
) -> None:
    client = _create_client(shipment_repository, event_repository, mail_sender)
    with client:
        resp = client.patch("/map-provider", json={"provider": "google"})
    assert resp.status_code == 500


# ---------------------------------------------------------------------------
# Geocode
# ---------------------------------------------------------------------------


def test_geocode(shipment_repository, event_repository, mail_sender) -> None:
    geocoder = StubGeocoder(
        GeocodeResult(lat=51.5072, lon=-0.1276, display_name="London")
    )
    client = _create_client(
        shipment_repository,
        event_repository,
        mail_sender,
        geocoder=geocoder,
    )

    with client:
        resp = client.get("/geocode", params={"q": "London, UK"})

    assert resp.json() == {
        "lat": 51.5072,
        "lon": -0.1276,
        "display_name": "London",
    }
    assert geocoder.queries == ["London, UK"]


def test_geocode_no_match(
    shipment_repository, event_repository, mail_sender
) -> None:
    client = _create_client(
        shipment_repository,
        event_repository,
        mail_sender,
        geocoder=StubGeocoder(None),
    )
    with client:
        resp = client.get("/geocode", params={"q": "Atlantis"})
    assert resp.status_code == 200
    assert resp.json() is None


def test_geocode_disabled(
    shipment_repository, event_repository, mail_sender
) -> None:
    client = _create_client(shipment_repository, event_repository, mail_sender)
    with client:
        assert client.get("/geocode", params={"q": "London"}).json() is None
