"""
Alert sources for external hazard feeds.
"""

from .base import (
    AlertSource,
    SourceError,
    MissingCredentialsError,
    RateLimitExceededError,
    SlidingWindowRateLimiter,
)
from .usgs_client import UsgsEarthquakeSource
from .firms_client import FirmsFireSource
from .gdacs_client import GdacsBulletinSource
from .eonet_client import EonetEventSource
from .synthetic import SyntheticAlertSource

__all__ = [
    "AlertSource",
    "SourceError",
    "MissingCredentialsError",
    "RateLimitExceededError",
    "SlidingWindowRateLimiter",
    "UsgsEarthquakeSource",
    "FirmsFireSource",
    "GdacsBulletinSource",
    "EonetEventSource",
    "SyntheticAlertSource",
]
