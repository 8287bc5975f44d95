"""
Utilities for HazardFeed.
"""

from .logging import setup_logging, PerformanceLogger, HazardFeedFormatter, get_logger

__all__ = [
    "setup_logging",
    "PerformanceLogger",
    "HazardFeedFormatter",
    "get_logger",
]
