"""
Synthetic offline source for development and tests.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from ..core.config import SyntheticConfig
from ..core.models import AlertRecord, AlertSeverity, AlertType
from .base import AlertSource


class SyntheticAlertSource(AlertSource):
    """Fixed set of alerts covering every geometry kind."""

    source_id = "mock"
    name = "Mock Alerts"

    def __init__(self, config: Optional[SyntheticConfig] = None, reference_time: Optional[datetime] = None):
        super().__init__()
        self.settings = config or SyntheticConfig()
        self.reference_time = reference_time

    async def _fetch(self) -> List[AlertRecord]:
        if self.settings.latency_seconds > 0:
            await asyncio.sleep(self.settings.latency_seconds)
        return self.build_alerts(self.reference_time or datetime.now(timezone.utc))

    def build_alerts(self, now: datetime) -> List[AlertRecord]:
        """Build the fixed alert set with times relative to ``now``."""
        return [
            AlertRecord(
                id="mock-earthquake-1",
                external_id="mock-usgs-001",
                source="Mock USGS",
                type=AlertType.EARTHQUAKE,
                severity=AlertSeverity.MODERATE,
                headline="M4.5 Earthquake - 10km NE of San Francisco, CA",
                description=(
                    "A magnitude 4.5 earthquake occurred 10km northeast of San Francisco. "
                    "Moderate shaking expected in the area."
                ),
                geometry={"type": "Point", "coordinates": [-122.3482, 37.8044]},
                starts_at=now,
                region_code="US-CA",
                payload={"magnitude": 4.5, "depth": 12.3, "place": "10km NE of San Francisco, CA"},
            ),
            AlertRecord(
                id="mock-wildfire-1",
                external_id="mock-calfire-002",
                source="Mock CAL FIRE",
                type=AlertType.WILDFIRE,
                severity=AlertSeverity.SEVERE,
                headline="Wildfire Alert - Sonoma County",
                description=(
                    "Active wildfire burning in Sonoma County. "
                    "Evacuation warnings issued for nearby communities."
                ),
                geometry={
                    "type": "Polygon",
                    "coordinates": [[
                        [-122.8, 38.3],
                        [-122.6, 38.3],
                        [-122.6, 38.5],
                        [-122.8, 38.5],
                        [-122.8, 38.3],
                    ]],
                },
                starts_at=now - timedelta(hours=1),
                region_code="US-CA",
                payload={"containment": "25%", "acresBurned": 2500, "personnel": 150},
            ),
            AlertRecord(
                id="mock-flood-1",
                external_id="mock-noaa-003",
                source="Mock NOAA",
                type=AlertType.FLOOD,
                severity=AlertSeverity.SEVERE,
                headline="Flood Warning - Russian River Basin",
                description=(
                    "Heavy rainfall has caused the Russian River to reach flood stage. "
                    "Residents in low-lying areas should prepare for evacuation."
                ),
                geometry={
                    "type": "LineString",
                    "coordinates": [
                        [-123.0, 38.4],
                        [-122.9, 38.5],
                        [-122.8, 38.6],
                        [-122.7, 38.7],
                    ],
                },
                starts_at=now + timedelta(minutes=30),
                ends_at=now + timedelta(hours=24),
                region_code="US-CA",
                payload={"floodStage": "32 ft", "currentLevel": "31.2 ft", "expectedCrest": "34 ft"},
            ),
        ]
