"""
HazardFeed - multi-source natural hazard alert aggregation.
"""

__version__ = "0.1.0"

from .core.models import AlertRecord, AlertSeverity, AlertType
from .core.config import AppConfig, AdapterSet
from .processing.aggregator import AlertAggregator, build_sources

__all__ = [
    "AlertRecord",
    "AlertSeverity",
    "AlertType",
    "AppConfig",
    "AdapterSet",
    "AlertAggregator",
    "build_sources",
]
