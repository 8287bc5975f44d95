"""
Core components for HazardFeed.
"""

from .config import (
    AppConfig,
    AdapterSet,
    SourceConfig,
    UsgsConfig,
    FirmsConfig,
    GdacsConfig,
    EonetConfig,
    SyntheticConfig,
    AggregatorConfig,
    DeduplicationConfig,
    DispatchConfig,
    LoggingConfig,
)
from .models import (
    AlertRecord,
    AlertSeverity,
    AlertType,
    Geometry,
    LineStringGeometry,
    PointGeometry,
    PolygonGeometry,
)

__all__ = [
    "AppConfig",
    "AdapterSet",
    "SourceConfig",
    "UsgsConfig",
    "FirmsConfig",
    "GdacsConfig",
    "EonetConfig",
    "SyntheticConfig",
    "AggregatorConfig",
    "DeduplicationConfig",
    "DispatchConfig",
    "LoggingConfig",
    "AlertRecord",
    "AlertSeverity",
    "AlertType",
    "Geometry",
    "LineStringGeometry",
    "PointGeometry",
    "PolygonGeometry",
]
