"""
GDACS multi-hazard bulletin source.

The GDACS RSS feed is shallow and regular, so items are pulled out with a
tag scan rather than a full XML document model.
"""

import html
import math
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
from urllib.parse import parse_qs, urlsplit

import httpx
from dateutil import parser

from ..core.config import GdacsConfig
from ..core.models import AlertRecord
from ..processing.classification import classify_bulletin
from .base import AlertSource, SourceError, stable_id

_ITEM = re.compile(r"<item\b[^>]*>(.*?)</item>", re.DOTALL | re.IGNORECASE)
_CDATA = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)
_TAGS = re.compile(r"<[^>]+>")
_POINT_PAIR = re.compile(r"(-?\d+(?:\.\d+)?)[\s,]+(-?\d+(?:\.\d+)?)")
_TEXT_PAIR = re.compile(r"(-?\d+\.\d+),\s*(-?\d+\.\d+)")

ITEM_FIELDS = {
    "title": "title",
    "description": "description",
    "link": "link",
    "guid": "guid",
    "pubDate": "pub_date",
    "gdacs:alertlevel": "alert_level",
    "gdacs:eventtype": "event_type",
    "gdacs:eventid": "event_id",
    "gdacs:episodeid": "episode_id",
    "gdacs:country": "country",
    "gdacs:iso3": "iso3",
    "gdacs:fromdate": "from_date",
    "gdacs:todate": "to_date",
    "geo:lat": "lat",
    "geo:long": "long",
    "georss:point": "point",
}


def _tag_pattern(tag: str) -> re.Pattern:
    return re.compile(rf"<{re.escape(tag)}\b[^>]*>(.*?)</{re.escape(tag)}>", re.DOTALL | re.IGNORECASE)


_FIELD_PATTERNS = {tag: _tag_pattern(tag) for tag in ITEM_FIELDS}


def _clean(text: str) -> str:
    """Unwrap CDATA, drop markup and decode entities."""
    text = _CDATA.sub(lambda m: m.group(1), text)
    text = html.unescape(text)
    text = _TAGS.sub(" ", text)
    return " ".join(text.split())


def parse_rss_items(xml_text: str) -> List[Dict[str, str]]:
    """Extract the known child tags of every <item> block, in document order."""
    items = []
    for match in _ITEM.finditer(xml_text):
        content = match.group(1)
        item: Dict[str, str] = {}
        for tag, key in ITEM_FIELDS.items():
            found = _FIELD_PATTERNS[tag].search(content)
            if found:
                item[key] = _clean(found.group(1))
        items.append(item)
    return items


def _finite(value: str) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _valid_position(latitude: Optional[float], longitude: Optional[float]) -> bool:
    return (
        latitude is not None
        and longitude is not None
        and -90.0 <= latitude <= 90.0
        and -180.0 <= longitude <= 180.0
    )


def extract_position(item: Dict[str, str]) -> Optional[Tuple[float, float]]:
    """
    Find (latitude, longitude) for a bulletin item.

    Tried in order: geo:lat/geo:long, georss:point ("lat lon"), then a
    "lat, lon" pair in the description.
    """
    candidates = []
    if "lat" in item and "long" in item:
        candidates.append((item["lat"], item["long"]))
    for key, pattern in (("point", _POINT_PAIR), ("description", _TEXT_PAIR)):
        match = pattern.search(item.get(key, ""))
        if match:
            candidates.append((match.group(1), match.group(2)))

    for raw_lat, raw_lon in candidates:
        latitude, longitude = _finite(raw_lat), _finite(raw_lon)
        if _valid_position(latitude, longitude):
            return latitude, longitude
    return None


def _parse_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = parser.parse(value)
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class GdacsBulletinSource(AlertSource):
    """Disaster bulletins from the GDACS RSS feed."""

    source_id = "gdacs"
    name = "GDACS"

    def __init__(self, config: Optional[GdacsConfig] = None, client: Optional[httpx.AsyncClient] = None):
        super().__init__(config or GdacsConfig(), client)

    async def _fetch(self) -> List[AlertRecord]:
        text = await self._get_text(self.config.url)
        if "<item" not in text.lower():
            if "<rss" not in text.lower() and "<channel" not in text.lower():
                raise SourceError("Response is not an RSS document")
            return []

        alerts = []
        for item in parse_rss_items(text):
            alert = self._normalize_item(item)
            if alert is not None:
                alerts.append(alert)
        return alerts

    def _native_id(self, item: Dict[str, str]) -> str:
        if item.get("event_type") and item.get("event_id"):
            return f"{item['event_type']}{item['event_id']}"
        link = item.get("link", "").rstrip("/")
        if link:
            query = parse_qs(urlsplit(link).query)
            event_type, event_id = query.get("eventtype"), query.get("eventid")
            if event_type and event_id:
                return f"{event_type[0]}{event_id[0]}"
            return link.split("/")[-1]
        if item.get("guid"):
            return item["guid"]
        return stable_id(item.get("title"), item.get("pub_date"))

    def _normalize_item(self, item: Dict[str, str]) -> Optional[AlertRecord]:
        """Normalize one RSS item into an AlertRecord."""
        title = item.get("title", "").strip()
        description = item.get("description", "")
        if not title:
            self.logger.debug("Skipping GDACS item without title")
            return None

        position = extract_position(item)
        if position is None:
            self.logger.debug(f"Skipping GDACS item without coordinates: {title}")
            return None
        latitude, longitude = position

        alert_type, severity = classify_bulletin(title, description, item.get("alert_level"))
        native_id = self._native_id(item)

        return self._build_record(
            id=f"gdacs-{native_id}",
            external_id=native_id,
            type=alert_type,
            severity=severity,
            headline=title,
            description=description or None,
            geometry={"type": "Point", "coordinates": [longitude, latitude]},
            starts_at=_parse_date(item.get("from_date")) or _parse_date(item.get("pub_date")),
            ends_at=_parse_date(item.get("to_date")),
            region_code=item.get("iso3") or None,
            payload={
                "link": item.get("link"),
                "alertLevel": item.get("alert_level"),
                "eventType": item.get("event_type"),
                "episodeId": item.get("episode_id"),
                "country": item.get("country"),
            },
        )
