"""
NASA EONET open natural event source.
"""

import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
from dateutil import parser

from ..core.config import EonetConfig
from ..core.models import AlertRecord
from ..processing.classification import classify_event_categories
from .base import AlertSource, SourceError


def _is_position(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) >= 2
        and all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in value[:2])
        and all(math.isfinite(v) for v in value[:2])
    )


def _parse_date(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = parser.isoparse(value)
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def normalize_geometry(geometry: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Convert an EONET geometry entry into a Point or Polygon geometry.

    Anything else collapses to a Point on its first position.
    """
    coords = geometry.get("coordinates")
    kind = geometry.get("type")
    if kind == "Point" and _is_position(coords):
        return {"type": "Point", "coordinates": [float(coords[0]), float(coords[1])]}
    if kind == "Polygon" and isinstance(coords, list) and coords:
        return {"type": "Polygon", "coordinates": coords}
    position = coords
    while isinstance(position, list) and position and isinstance(position[0], list):
        position = position[0]
    if _is_position(position):
        return {"type": "Point", "coordinates": [float(position[0]), float(position[1])]}
    return None


class EonetEventSource(AlertSource):
    """Open natural events tracked by NASA EONET."""

    source_id = "eonet"
    name = "NASA EONET"

    def __init__(
        self,
        api_key: str = "DEMO_KEY",
        config: Optional[EonetConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(config or EonetConfig(), client)
        self.api_key = api_key

    async def _fetch(self) -> List[AlertRecord]:
        params = {"status": self.config.status, "limit": self.config.limit}
        if self.api_key:
            params["api_key"] = self.api_key
        data = await self._get_json(self.config.url, params=params)
        if not isinstance(data, dict) or not isinstance(data.get("events"), list):
            raise SourceError("Response has no 'events' list")

        alerts = []
        for event in data["events"]:
            if not isinstance(event, dict):
                continue
            alert = self._normalize_event(event)
            if alert is not None:
                alerts.append(alert)
        return alerts

    def _normalize_event(self, event: Dict[str, Any]) -> Optional[AlertRecord]:
        """Normalize an EONET event using its most recent geometry."""
        event_id = event.get("id")
        if not event_id:
            return None

        # v3 calls the list "geometry", v2.1 called it "geometries"
        geometries = event.get("geometry")
        if not isinstance(geometries, list):
            geometries = event.get("geometries")
        if not isinstance(geometries, list) or not geometries:
            self.logger.debug(f"Skipping EONET event {event_id} without geometry")
            return None

        latest = geometries[-1] if isinstance(geometries[-1], dict) else {}
        geometry = normalize_geometry(latest)
        if geometry is None:
            self.logger.debug(f"Skipping EONET event {event_id} with unusable geometry")
            return None

        categories = [
            c.get("title") or c.get("id") or ""
            for c in event.get("categories") or []
            if isinstance(c, dict)
        ]
        alert_type, severity = classify_event_categories(categories)

        sources = [s.get("url") for s in event.get("sources") or [] if isinstance(s, dict) and s.get("url")]
        payload = {"categories": categories, "sources": sources}
        if latest.get("magnitudeValue") is not None:
            payload["magnitudeValue"] = latest.get("magnitudeValue")
            payload["magnitudeUnit"] = latest.get("magnitudeUnit")

        return self._build_record(
            id=f"nasa-{event_id}",
            external_id=str(event_id),
            type=alert_type,
            severity=severity,
            headline=event.get("title") or "Natural Event",
            description=event.get("description") or None,
            geometry=geometry,
            starts_at=_parse_date(latest.get("date")) or _parse_date(event.get("date")),
            ends_at=_parse_date(event.get("closed")),
            payload=payload,
        )
