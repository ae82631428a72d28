"""Dependency injection tests."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from sandglobal.auth import AuthSession, DemoAuthProvider
from sandglobal.config import SandGlobalConfig
from sandglobal.dependencies import (
    bearer_token,
    get_config,
    get_contact_repository,
    get_flow,
    get_geocoder,
    get_shipment_repository,
    require_admin,
)
from sandglobal.exceptions import AuthenticationError
from sandglobal.flow import ShipmentFlow


def _make_request(headers=None, **state_attrs):
    """Create a mock request with app.state attributes."""
    request = MagicMock()
    request.app.state = SimpleNamespace(**state_attrs)
    request.headers = headers or {}
    return request


class _NoSession:
    async def get_session(self, token):
        return None


class TestDependencies:
    def test_get_config_from_app_state(self) -> None:
        config = SandGlobalConfig()
        request = _make_request(sandglobal_config=config)
        assert get_config(request) is config

    def test_get_shipment_repository_from_app_state(self) -> None:
        repo = MagicMock()
        request = _make_request(sandglobal_shipments=repo)
        assert get_shipment_repository(request) is repo

    def test_optional_stores_default_to_none(self) -> None:
        request = _make_request()
        assert get_contact_repository(request) is None
        assert get_geocoder(request) is None

    def test_get_flow_creates_shipment_flow(self) -> None:
        config = SandGlobalConfig(strict_transitions=True)
        repo = MagicMock()
        events = MagicMock()
        request = _make_request(
            sandglobal_config=config,
            sandglobal_shipments=repo,
            sandglobal_events=events,
        )
        flow = get_flow(request)
        assert isinstance(flow, ShipmentFlow)
        assert flow.shipments is repo
        assert flow.events is events
        assert flow.config is config
        assert flow.geocoder is None


class TestBearerToken:
    @pytest.mark.parametrize(
        ("header", "expected"),
        [
            ("Bearer tok-1", "tok-1"),
            ("bearer  tok-1 ", "tok-1"),
            ("Basic dXNlcg==", None),
            ("Bearer ", None),
            ("", None),
        ],
    )
    def test_parsing(self, header, expected) -> None:
        request = _make_request(headers={"authorization": header})
        assert bearer_token(request) == expected


class TestRequireAdmin:
    async def test_demo_provider_allows(self) -> None:
        session = await require_admin(_make_request(), DemoAuthProvider())
        assert isinstance(session, AuthSession)
        assert session.demo is True

    async def test_missing_session_rejected(self) -> None:
        with pytest.raises(AuthenticationError):
            await require_admin(_make_request(), _NoSession())
