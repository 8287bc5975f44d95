"""Shared test fixtures."""

from datetime import datetime, timezone

import httpx
import pytest

from hazardfeed.core.models import AlertRecord, AlertSeverity, AlertType


def mock_client(handler) -> httpx.AsyncClient:
    """An AsyncClient whose requests are answered by ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def respond_with(status_code=200, **kwargs):
    """Handler returning a fixed response and recording requests."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, **kwargs)

    handler.requests = requests
    return handler


def failing_handler(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture
def fixed_now():
    return datetime(2025, 3, 14, 15, 20, tzinfo=timezone.utc)


@pytest.fixture
def make_alert():
    def _make(
        alert_id="a-1",
        source="Test",
        alert_type=AlertType.EARTHQUAKE,
        severity=AlertSeverity.MINOR,
        coordinates=(-122.35, 37.80),
        starts_at=None,
        **extra,
    ):
        return AlertRecord(
            id=alert_id,
            source=source,
            type=alert_type,
            severity=severity,
            headline=extra.pop("headline", f"Alert {alert_id}"),
            geometry={"type": "Point", "coordinates": list(coordinates)},
            starts_at=starts_at,
            **extra,
        )

    return _make
