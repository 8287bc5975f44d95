"""
NASA FIRMS active fire source.
"""

import csv
import io
import math
from datetime import datetime, timezone
from typing import Dict, List, Optional

import httpx

from ..core.config import FirmsConfig
from ..core.models import AlertRecord, AlertType
from ..processing.classification import classify_fire
from .base import (
    AlertSource,
    MissingCredentialsError,
    RateLimitExceededError,
    SlidingWindowRateLimiter,
)

# Current VIIRS and MODIS area CSVs share this layout (instrument at 8,
# confidence at 9). The header row is preferred when it names a column.
DEFAULT_COLUMNS: Dict[str, int] = {
    "latitude": 0,
    "longitude": 1,
    "brightness": 2,
    "scan": 3,
    "track": 4,
    "acq_date": 5,
    "acq_time": 6,
    "satellite": 7,
    "confidence": 9,
}

# VIIRS calls the brightness column bright_ti4, MODIS calls it brightness.
COLUMN_ALIASES = {
    "brightness": ("brightness", "bright_ti4"),
}


def resolve_columns(header: Optional[List[str]]) -> Dict[str, int]:
    """Map field names to column indexes using the CSV header row."""
    names = [cell.strip().lower() for cell in header or []]
    columns = dict(DEFAULT_COLUMNS)
    for field in DEFAULT_COLUMNS:
        for alias in COLUMN_ALIASES.get(field, (field,)):
            if alias in names:
                columns[field] = names.index(alias)
                break
    return columns


def _parse_acquired(acq_date: str, acq_time: str) -> Optional[datetime]:
    """Parse FIRMS acquisition date (YYYY-MM-DD) and time (HHMM, UTC)."""
    try:
        clock = acq_time.strip().zfill(4)
        return datetime.strptime(f"{acq_date.strip()} {clock}", "%Y-%m-%d %H%M").replace(
            tzinfo=timezone.utc
        )
    except ValueError:
        return None


class FirmsFireSource(AlertSource):
    """Satellite fire detections from the FIRMS area CSV API."""

    source_id = "firms"
    name = "NASA FIRMS"

    def __init__(
        self,
        api_key: Optional[str],
        config: Optional[FirmsConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        config = config or FirmsConfig()
        super().__init__(config, client)
        self.api_key = api_key
        self.rate_limiter = SlidingWindowRateLimiter(config.max_requests, config.window_seconds)

    async def _fetch(self) -> List[AlertRecord]:
        if not self.api_key:
            raise MissingCredentialsError("FIRMS_API_KEY not set")
        if not self.rate_limiter.try_acquire():
            raise RateLimitExceededError(
                f"more than {self.config.max_requests} requests in {self.config.window_seconds}s"
            )

        url = self.config.url.format(
            api_key=self.api_key,
            product=self.config.product,
            area=self.config.area,
            day_range=self.config.day_range,
        )
        text = await self._get_text(url)
        return self.parse_csv(text)

    def parse_csv(self, text: str) -> List[AlertRecord]:
        """Parse a FIRMS CSV body, skipping the header and malformed rows."""
        alerts = []
        reader = csv.reader(io.StringIO(text))
        columns = resolve_columns(next(reader, None))
        for row in reader:
            if not row or not any(cell.strip() for cell in row):
                continue
            alert = self._parse_row(row, columns)
            if alert is not None:
                alerts.append(alert)
        return alerts

    def _parse_row(self, row: List[str], columns: Optional[Dict[str, int]] = None) -> Optional[AlertRecord]:
        """Parse one CSV row into an AlertRecord."""
        columns = columns or DEFAULT_COLUMNS
        if len(row) <= max(columns.values()):
            self.logger.debug(f"Skipping short FIRMS row: {row!r}")
            return None

        try:
            latitude = float(row[columns["latitude"]])
            longitude = float(row[columns["longitude"]])
        except ValueError:
            self.logger.debug(f"Skipping FIRMS row with bad coordinates: {row!r}")
            return None
        if not (math.isfinite(latitude) and math.isfinite(longitude)):
            return None

        try:
            brightness: Optional[float] = float(row[columns["brightness"]])
        except ValueError:
            brightness = None
        confidence = row[columns["confidence"]].strip()
        acq_date = row[columns["acq_date"]].strip()
        acq_time = row[columns["acq_time"]].strip()

        return self._build_record(
            id=f"firms-{latitude}-{longitude}-{acq_date}-{acq_time}",
            type=AlertType.WILDFIRE,
            severity=classify_fire(confidence, brightness),
            headline="Active Fire Detection",
            description=f"Fire detected with brightness {brightness}K and {confidence} confidence.",
            geometry={"type": "Point", "coordinates": [longitude, latitude]},
            starts_at=_parse_acquired(acq_date, acq_time),
            payload={
                "brightness": brightness,
                "confidence": confidence,
                "scan": row[columns["scan"]],
                "track": row[columns["track"]],
                "satellite": row[columns["satellite"]],
            },
        )
