"""
Location, type and severity filtering of aggregated alerts.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..core.models import AlertRecord, AlertSeverity, AlertType

logger = logging.getLogger(__name__)

EARTH_RADIUS_M = 6_371_000.0
DEFAULT_LIMIT = 50

TYPE_ALIASES = {
    "tsunami": AlertType.TSUNAMI,
    "earthquake": AlertType.EARTHQUAKE,
    "fire": AlertType.WILDFIRE,
    "wildfire": AlertType.WILDFIRE,
    "hurricane": AlertType.HURRICANE,
    "flood": AlertType.FLOOD,
    "tornado": AlertType.TORNADO,
    "volcano": AlertType.VOLCANO,
    "chemical": AlertType.CHEMICAL,
    "other": AlertType.OTHER,
}


def normalize_type_name(name: str) -> AlertType:
    """Map a user supplied type name ('fire', 'FLOOD', ...) to an AlertType."""
    key = name.strip().lower()
    if key in TYPE_ALIASES:
        return TYPE_ALIASES[key]
    return AlertType(name.strip().upper())


def normalize_severity_name(name: str) -> AlertSeverity:
    """Map a user supplied severity name to an AlertSeverity."""
    return AlertSeverity(name.strip().upper())


@dataclass
class AlertQuery:
    """Filter criteria for aggregated alerts."""

    alert_type: Optional[AlertType] = None
    severity: Optional[AlertSeverity] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    radius_m: float = 50_000.0
    limit: Optional[int] = DEFAULT_LIMIT

    @property
    def has_location(self) -> bool:
        return self.lat is not None and self.lng is not None


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in metres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(min(1.0, a)))


def alert_vertices(alert: AlertRecord) -> List[Tuple[float, float]]:
    """
    Return the (longitude, latitude) vertices distances are measured to.

    Points give themselves, lines every vertex, polygons every vertex of the
    outer ring.
    """
    geometry = alert.geometry
    if geometry.type == "Point":
        return [(geometry.coordinates[0], geometry.coordinates[1])]
    positions = geometry.coordinates if geometry.type == "LineString" else geometry.coordinates[0]
    return [(p[0], p[1]) for p in positions]


def distance_to_alert(lat: float, lng: float, alert: AlertRecord) -> float:
    """Distance in metres from (lat, lng) to the closest vertex of the alert."""
    return min(
        haversine_m(lat, lng, vertex_lat, vertex_lng)
        for vertex_lng, vertex_lat in alert_vertices(alert)
    )


def filter_alerts(alerts: List[AlertRecord], query: AlertQuery) -> List[AlertRecord]:
    """
    Apply a query to a list of alerts.

    Results are ordered by distance when a location is given, then by
    severity (most severe first). The sort is stable, so ties keep their
    aggregation order. At most ``query.limit`` alerts are returned; a limit
    of None returns them all.
    """
    matched: List[Tuple[float, AlertRecord]] = []
    for alert in alerts:
        if query.alert_type is not None and alert.type != query.alert_type:
            continue
        if query.severity is not None and alert.severity != query.severity:
            continue
        distance = 0.0
        if query.has_location:
            distance = distance_to_alert(query.lat, query.lng, alert)
            if distance > query.radius_m:
                continue
        matched.append((distance, alert))

    matched.sort(key=lambda pair: (pair[0], -pair[1].severity.rank))
    logger.debug(f"Query matched {len(matched)} of {len(alerts)} alerts")
    if query.limit is not None:
        matched = matched[:query.limit]
    return [alert for _, alert in matched]
