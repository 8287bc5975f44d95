"""
USGS earthquake catalog source.
"""

import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from ..core.config import UsgsConfig
from ..core.models import AlertRecord, AlertType
from ..processing.classification import classify_magnitude
from .base import AlertSource, SourceError


def _as_float(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


class UsgsEarthquakeSource(AlertSource):
    """Earthquakes from the USGS GeoJSON summary feed."""

    source_id = "usgs"
    name = "USGS"

    def __init__(self, config: Optional[UsgsConfig] = None, client: Optional[httpx.AsyncClient] = None):
        super().__init__(config or UsgsConfig(), client)

    async def _fetch(self) -> List[AlertRecord]:
        data = await self._get_json(self.config.url)
        if not isinstance(data, dict) or not isinstance(data.get("features"), list):
            raise SourceError("Response is not a GeoJSON FeatureCollection")

        alerts = []
        for feature in data["features"]:
            if not isinstance(feature, dict):
                continue
            alert = self._parse_feature(feature)
            if alert is not None:
                alerts.append(alert)
        return alerts

    def _parse_feature(self, feature: Dict[str, Any]) -> Optional[AlertRecord]:
        """Parse a GeoJSON feature into an AlertRecord."""
        feature_id = feature.get("id")
        if not feature_id:
            self.logger.debug("Skipping earthquake without id")
            return None

        props = feature.get("properties") if isinstance(feature.get("properties"), dict) else {}
        geom = feature.get("geometry") if isinstance(feature.get("geometry"), dict) else {}
        coords = geom.get("coordinates")
        if not isinstance(coords, list) or len(coords) < 2:
            self.logger.debug(f"Skipping earthquake {feature_id} without coordinates")
            return None

        longitude = _as_float(coords[0])
        latitude = _as_float(coords[1])
        if longitude is None or latitude is None:
            self.logger.debug(f"Skipping earthquake {feature_id} with bad coordinates {coords!r}")
            return None
        depth = _as_float(coords[2]) if len(coords) > 2 else None

        magnitude = _as_float(props.get("mag"))
        place = props.get("place") or "Unknown location"

        starts_at = None
        epoch_ms = _as_float(props.get("time"))
        if epoch_ms is not None:
            starts_at = datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)

        mag_text = f"M{magnitude:.1f}" if magnitude is not None else "M?"
        return self._build_record(
            id=f"usgs-{feature_id}",
            external_id=str(feature_id),
            type=AlertType.EARTHQUAKE,
            severity=classify_magnitude(magnitude),
            headline=f"{mag_text} Earthquake",
            description=f"{place}. Magnitude: {magnitude}, Depth: {depth}km.",
            geometry={"type": "Point", "coordinates": [longitude, latitude]},
            starts_at=starts_at,
            payload={
                "magnitude": magnitude,
                "depth": depth,
                "place": place,
                "tsunami": props.get("tsunami") or 0,
                "felt": props.get("felt") or 0,
                "cdi": props.get("cdi"),
                "mmi": props.get("mmi"),
                "url": props.get("url"),
            },
        )
