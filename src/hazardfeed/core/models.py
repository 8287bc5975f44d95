"""
Core data models for HazardFeed.
"""

import math
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator


class AlertType(str, Enum):
    """Canonical hazard types."""

    EARTHQUAKE = "EARTHQUAKE"
    TSUNAMI = "TSUNAMI"
    WILDFIRE = "WILDFIRE"
    HURRICANE = "HURRICANE"
    FLOOD = "FLOOD"
    TORNADO = "TORNADO"
    VOLCANO = "VOLCANO"
    CHEMICAL = "CHEMICAL"
    OTHER = "OTHER"


class AlertSeverity(str, Enum):
    """Alert severity levels, ordered MINOR < MODERATE < SEVERE < EXTREME."""

    MINOR = "MINOR"
    MODERATE = "MODERATE"
    SEVERE = "SEVERE"
    EXTREME = "EXTREME"

    @property
    def rank(self) -> int:
        """Position of this level in the severity ordering."""
        return _SEVERITY_RANK[self]

    def __lt__(self, other):
        if not isinstance(other, AlertSeverity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, AlertSeverity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, AlertSeverity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, AlertSeverity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_RANK = {
    AlertSeverity.MINOR: 1,
    AlertSeverity.MODERATE: 2,
    AlertSeverity.SEVERE: 3,
    AlertSeverity.EXTREME: 4,
}


def _check_position(position: List[float]) -> List[float]:
    if len(position) < 2:
        raise ValueError(f"Position needs longitude and latitude, got {position!r}")
    for value in position:
        if not math.isfinite(value):
            raise ValueError(f"Non-finite coordinate in {position!r}")
    return position


class PointGeometry(BaseModel):
    """A single [longitude, latitude] position."""

    model_config = ConfigDict(frozen=True)

    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(..., description="[longitude, latitude]")

    @field_validator("coordinates")
    @classmethod
    def _validate_coordinates(cls, v: List[float]) -> List[float]:
        return _check_position(v)


class LineStringGeometry(BaseModel):
    """An ordered line of positions, e.g. a river reach."""

    model_config = ConfigDict(frozen=True)

    type: Literal["LineString"] = "LineString"
    coordinates: List[List[float]] = Field(..., description="Line vertices")

    @field_validator("coordinates")
    @classmethod
    def _validate_coordinates(cls, v: List[List[float]]) -> List[List[float]]:
        if len(v) < 2:
            raise ValueError("LineString needs at least two positions")
        for position in v:
            _check_position(position)
        return v


class PolygonGeometry(BaseModel):
    """A polygon made of linear rings, e.g. a fire perimeter."""

    model_config = ConfigDict(frozen=True)

    type: Literal["Polygon"] = "Polygon"
    coordinates: List[List[List[float]]] = Field(..., description="Linear rings")

    @field_validator("coordinates")
    @classmethod
    def _validate_coordinates(cls, v: List[List[List[float]]]) -> List[List[List[float]]]:
        if not v:
            raise ValueError("Polygon needs at least one ring")
        for ring in v:
            if len(ring) < 4:
                raise ValueError("Polygon ring needs at least four positions")
            for position in ring:
                _check_position(position)
        return v


Geometry = Annotated[
    Union[PointGeometry, LineStringGeometry, PolygonGeometry],
    Field(discriminator="type"),
]


class AlertRecord(BaseModel):
    """Normalized alert produced by every source."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Deterministic record identifier")
    external_id: Optional[str] = Field(None, description="Identifier used by the upstream feed")
    source: str = Field(..., description="Human readable feed name")
    type: AlertType = Field(AlertType.OTHER, description="Hazard type")
    severity: AlertSeverity = Field(AlertSeverity.MINOR, description="Alert severity")
    headline: str = Field(..., min_length=1, description="Short summary")
    description: Optional[str] = Field(None, description="Longer text")
    geometry: Geometry = Field(..., description="GeoJSON geometry in lon/lat order")
    starts_at: Optional[datetime] = Field(None, description="Event start")
    ends_at: Optional[datetime] = Field(None, description="Event end, None when ongoing")
    region_code: Optional[str] = Field(None, description="Administrative region hint")
    payload: Dict[str, Any] = Field(default_factory=dict, description="Source specific fields")
    safety_score: Optional[float] = Field(None, description="Risk score attached downstream")
