"""
Classification rules mapping source-native signals onto the canonical
alert type and severity enums.

Every function here is pure: identical native input always yields the same
type/severity.
"""

import re
from typing import Iterable, Optional, Tuple, Union

from ..core.models import AlertSeverity, AlertType

# Free-text hazard keywords, checked in order; the first hit wins.
BULLETIN_TYPE_KEYWORDS: Tuple[Tuple[AlertType, Tuple[str, ...]], ...] = (
    (AlertType.EARTHQUAKE, ("earthquake",)),
    (AlertType.TSUNAMI, ("tsunami",)),
    (AlertType.HURRICANE, ("hurricane", "cyclone", "typhoon")),
    (AlertType.FLOOD, ("flood",)),
    (AlertType.VOLCANO, ("volcano", "volcanic", "eruption")),
)

# EONET category titles, checked in order.
EVENT_CATEGORY_KEYWORDS: Tuple[Tuple[AlertType, Tuple[str, ...]], ...] = (
    (AlertType.EARTHQUAKE, ("earthquake",)),
    (AlertType.VOLCANO, ("volcano",)),
    (AlertType.WILDFIRE, ("wildfire", "fire")),
    (AlertType.HURRICANE, ("storm", "hurricane", "cyclone")),
    (AlertType.FLOOD, ("flood",)),
)

BULLETIN_DEFAULT_SEVERITY = {
    AlertType.EARTHQUAKE: AlertSeverity.MODERATE,
    AlertType.TSUNAMI: AlertSeverity.SEVERE,
    AlertType.HURRICANE: AlertSeverity.SEVERE,
    AlertType.FLOOD: AlertSeverity.MODERATE,
    AlertType.VOLCANO: AlertSeverity.SEVERE,
}

EVENT_DEFAULT_SEVERITY = {
    AlertType.EARTHQUAKE: AlertSeverity.MODERATE,
    AlertType.VOLCANO: AlertSeverity.SEVERE,
    AlertType.WILDFIRE: AlertSeverity.SEVERE,
    AlertType.HURRICANE: AlertSeverity.SEVERE,
    AlertType.FLOOD: AlertSeverity.MODERATE,
}

ALERT_LEVEL_SEVERITY = {
    "red": AlertSeverity.EXTREME,
    "orange": AlertSeverity.SEVERE,
}

_ALERT_LEVEL_TOKEN = re.compile(r"\b(red|orange)\b", re.IGNORECASE)

FIRE_CONFIDENCE_CODES = {
    "h": "high",
    "high": "high",
    "n": "nominal",
    "nominal": "nominal",
    "l": "low",
    "low": "low",
}


def classify_magnitude(magnitude: Optional[float]) -> AlertSeverity:
    """Map an earthquake magnitude to a severity."""
    if magnitude is None:
        return AlertSeverity.MINOR
    if magnitude >= 5.0:
        return AlertSeverity.SEVERE
    if magnitude >= 4.0:
        return AlertSeverity.MODERATE
    return AlertSeverity.MINOR


def normalize_fire_confidence(confidence: Union[str, int, float, None]) -> Optional[str]:
    """
    Normalize a fire detection confidence to 'high', 'nominal' or 'low'.

    VIIRS products report letter codes (h/n/l); MODIS reports a 0-100
    percentage, which is bucketed at 80 and 30.
    """
    if confidence is None:
        return None
    if isinstance(confidence, (int, float)):
        value = float(confidence)
    else:
        text = confidence.strip().lower()
        if text in FIRE_CONFIDENCE_CODES:
            return FIRE_CONFIDENCE_CODES[text]
        try:
            value = float(text)
        except ValueError:
            return None
    if value >= 80:
        return "high"
    if value >= 30:
        return "nominal"
    return "low"


def classify_fire(confidence: Optional[str], brightness: Optional[float]) -> AlertSeverity:
    """Map fire confidence and brightness temperature (Kelvin) to a severity."""
    level = normalize_fire_confidence(confidence)
    if level == "high" or (brightness is not None and brightness > 400):
        return AlertSeverity.SEVERE
    if level == "nominal" or (brightness is not None and brightness > 350):
        return AlertSeverity.MODERATE
    return AlertSeverity.MINOR


def infer_bulletin_type(title: str, description: str = "") -> AlertType:
    """Pick exactly one hazard type from free text."""
    text = f"{title} {description}".lower()
    for alert_type, keywords in BULLETIN_TYPE_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return alert_type
    return AlertType.OTHER


def alert_level_severity(*texts: Optional[str]) -> Optional[AlertSeverity]:
    """
    Find a GDACS-style alert level token in the given texts.

    Texts are checked in order and the first one carrying a recognised token
    decides. Returns None when no token is present.
    """
    for text in texts:
        if not text:
            continue
        match = _ALERT_LEVEL_TOKEN.search(text)
        if match:
            return ALERT_LEVEL_SEVERITY[match.group(1).lower()]
    return None


def classify_bulletin(
    title: str, description: str = "", alert_level: Optional[str] = None
) -> Tuple[AlertType, AlertSeverity]:
    """
    Classify a multi-hazard bulletin item.

    An explicit alert level is authoritative: a Green level keeps the type
    default even if the description mentions "red" or "orange". The
    description is only scanned when no alert level is given.
    """
    alert_type = infer_bulletin_type(title, description)
    if alert_level and alert_level.strip():
        severity = alert_level_severity(alert_level)
    else:
        severity = alert_level_severity(description)
    if severity is None:
        severity = BULLETIN_DEFAULT_SEVERITY.get(alert_type, AlertSeverity.MINOR)
    return alert_type, severity


def classify_event_categories(categories: Iterable[str]) -> Tuple[AlertType, AlertSeverity]:
    """Classify an open event from its category titles."""
    for category in categories:
        title = (category or "").lower()
        for alert_type, keywords in EVENT_CATEGORY_KEYWORDS:
            if any(keyword in title for keyword in keywords):
                return alert_type, EVENT_DEFAULT_SEVERITY[alert_type]
    return AlertType.OTHER, AlertSeverity.MINOR
