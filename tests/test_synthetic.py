"""Tests for the synthetic offline source."""

import math

import pytest

from hazardfeed.api.synthetic import SyntheticAlertSource
from hazardfeed.core.models import AlertSeverity, AlertType


def _positions(coordinates):
    if coordinates and isinstance(coordinates[0], (int, float)):
        yield coordinates
    else:
        for item in coordinates:
            yield from _positions(item)


class TestSyntheticAlertSource:
    @pytest.mark.asyncio
    async def test_covers_every_geometry_kind(self, fixed_now):
        alerts = await SyntheticAlertSource(reference_time=fixed_now).fetch_alerts()

        assert {a.geometry.type for a in alerts} == {"Point", "LineString", "Polygon"}
        assert len({a.severity for a in alerts}) >= 2

    @pytest.mark.asyncio
    async def test_content_is_deterministic(self, fixed_now):
        source = SyntheticAlertSource(reference_time=fixed_now)

        first = await source.fetch_alerts()
        second = await source.fetch_alerts()

        assert first == second
        assert [a.id for a in first] == ["mock-earthquake-1", "mock-wildfire-1", "mock-flood-1"]

    @pytest.mark.asyncio
    async def test_schema_completeness(self, fixed_now):
        alerts = await SyntheticAlertSource(reference_time=fixed_now).fetch_alerts()

        for alert in alerts:
            assert isinstance(alert.type, AlertType)
            assert isinstance(alert.severity, AlertSeverity)
            for position in _positions(alert.geometry.coordinates):
                assert all(math.isfinite(v) for v in position)

    def test_flood_has_end_time(self, fixed_now):
        flood = SyntheticAlertSource().build_alerts(fixed_now)[2]
        assert flood.ends_at is not None and flood.ends_at > flood.starts_at
