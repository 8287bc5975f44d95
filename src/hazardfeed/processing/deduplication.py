"""
Cross-source alert deduplication for HazardFeed.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Set, Tuple

from ..core.models import AlertRecord, AlertType

logger = logging.getLogger(__name__)

DedupKey = Tuple[AlertType, str, int]


class AlertDeduplicator:
    """
    Collapses records that describe the same physical event.

    Two records are duplicates when they share a key made of the alert type,
    the (optionally rounded) geometry coordinates and a coarse time bucket
    derived from ``starts_at``. Records are visited in arrival order and the
    first record seen for a key is kept, so sources registered earlier win
    ties.
    """

    def __init__(self, coordinate_precision: Optional[int] = None, bucket_minutes: int = 60):
        """
        Args:
            coordinate_precision: Decimal places kept when comparing
                coordinates; None compares full precision
            bucket_minutes: Width of the time bucket
        """
        if bucket_minutes <= 0:
            raise ValueError("bucket_minutes must be positive")
        self.coordinate_precision = coordinate_precision
        self.bucket_ms = bucket_minutes * 60 * 1000
        self.logger = logging.getLogger(__name__)

    def deduplicate_alerts(
        self, alerts: List[AlertRecord], now: Optional[datetime] = None
    ) -> List[AlertRecord]:
        """
        Deduplicate a list of alerts.

        Args:
            alerts: Alerts in arrival order
            now: Time used to bucket alerts without ``starts_at``; defaults to
                the current time, taken once per call

        Returns:
            The first alert seen for every key, in arrival order
        """
        if not alerts:
            return []

        run_time = now or datetime.now(timezone.utc)
        seen: Set[DedupKey] = set()
        unique = []

        for alert in alerts:
            key = self.make_key(alert, run_time)
            if key in seen:
                self.logger.debug(f"Dropping duplicate alert {alert.id} from {alert.source}")
                continue
            seen.add(key)
            unique.append(alert)

        self.logger.info(f"Deduplication complete: {len(alerts)} -> {len(unique)} alerts")
        return unique

    def make_key(self, alert: AlertRecord, run_time: datetime) -> DedupKey:
        """Build the dedup key for one alert."""
        return (alert.type, self._coordinate_key(alert.geometry.coordinates), self._time_bucket(alert, run_time))

    def _coordinate_key(self, coordinates) -> str:
        return repr(self._round(coordinates))

    def _round(self, value):
        if isinstance(value, list):
            return [self._round(v) for v in value]
        value = float(value)
        if self.coordinate_precision is not None:
            value = round(value, self.coordinate_precision)
        return value + 0.0  # folds -0.0 into 0.0

    def _time_bucket(self, alert: AlertRecord, run_time: datetime) -> int:
        moment = alert.starts_at or run_time
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        epoch_ms = int(moment.timestamp() * 1000)
        return epoch_ms // self.bucket_ms
