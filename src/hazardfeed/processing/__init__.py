"""
Alert classification, deduplication and filtering for HazardFeed.

The aggregator lives in ``hazardfeed.processing.aggregator``; it is not
imported here because it depends on the source adapters, which in turn use
the classification rules in this package.
"""

from .classification import (
    classify_bulletin,
    classify_event_categories,
    classify_fire,
    classify_magnitude,
    infer_bulletin_type,
)
from .deduplication import AlertDeduplicator
from .filters import AlertQuery, distance_to_alert, filter_alerts, normalize_type_name

__all__ = [
    "classify_bulletin",
    "classify_event_categories",
    "classify_fire",
    "classify_magnitude",
    "infer_bulletin_type",
    "AlertDeduplicator",
    "AlertQuery",
    "distance_to_alert",
    "filter_alerts",
    "normalize_type_name",
]
