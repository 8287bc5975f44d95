"""
Base class for alert sources.
"""

import asyncio
import hashlib
import logging
import time
from collections import deque
from typing import Any, Deque, Dict, List, Optional

import httpx
from pydantic import ValidationError

from ..core.config import SourceConfig
from ..core.models import AlertRecord

logger = logging.getLogger(__name__)


class SourceError(Exception):
    """Alert source error."""

    pass


class MissingCredentialsError(SourceError):
    """A required API key is not configured."""

    pass


class RateLimitExceededError(SourceError):
    """The source's private request window is full."""

    pass


def stable_id(*parts: Any) -> str:
    """Short deterministic digest of the given parts."""
    content = "|".join("" if part is None else str(part) for part in parts)
    return hashlib.sha1(content.encode("utf-8")).hexdigest()[:16]


class SlidingWindowRateLimiter:
    """Allow at most ``max_requests`` acquisitions per ``window_seconds``."""

    def __init__(self, max_requests: int, window_seconds: float, clock=time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._timestamps: Deque[float] = deque()

    def try_acquire(self) -> bool:
        """Record a request if the window has room."""
        now = self._clock()
        while self._timestamps and now - self._timestamps[0] >= self.window_seconds:
            self._timestamps.popleft()
        if len(self._timestamps) >= self.max_requests:
            return False
        self._timestamps.append(now)
        return True


class AlertSource:
    """
    Base class for alert sources.

    Subclasses implement ``_fetch()``; callers use ``fetch_alerts()``, which
    never raises. Any transport, parse or configuration failure is logged and
    turned into an empty result.
    """

    #: short tag used as the id prefix
    source_id: str = "source"
    #: human readable feed name written to AlertRecord.source
    name: str = "Alert Source"

    def __init__(self, config: Optional[SourceConfig] = None, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize the source.

        Args:
            config: Feed configuration (URL, timeout, user agent)
            client: Optional shared HTTP client; one is created when omitted
        """
        self.config = config
        self.logger = logging.getLogger(f"{__name__}.{self.source_id}")
        self._owns_client = client is None and config is not None
        if client is not None:
            self.client = client
        elif config is not None:
            self.client = httpx.AsyncClient(
                timeout=config.timeout,
                headers={"User-Agent": config.user_agent},
                follow_redirects=True,
            )
        else:
            self.client = None

    async def close(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._owns_client and self.client is not None:
            await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def fetch_alerts(self) -> List[AlertRecord]:
        """
        Fetch and normalize alerts from this source.

        Returns:
            Normalized alerts, or an empty list when the source failed
        """
        try:
            alerts = await self._fetch()
        except asyncio.CancelledError:
            raise
        except MissingCredentialsError as e:
            self.logger.warning(f"{self.name} skipped: {e}")
            return []
        except SourceError as e:
            self.logger.warning(f"Failed to fetch {self.name} alerts: {e}")
            return []
        except Exception as e:
            self.logger.warning(f"Unexpected error fetching {self.name} alerts: {e}", exc_info=True)
            return []

        self.logger.debug(f"Retrieved {len(alerts)} alerts from {self.name}")
        return alerts

    async def _fetch(self) -> List[AlertRecord]:
        """Fetch and normalize alerts. Override in subclasses."""
        raise NotImplementedError

    async def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """Issue a GET request, converting transport failures to SourceError."""
        if self.client is None:
            raise SourceError("No HTTP client configured")
        try:
            response = await self.client.get(url, params=params)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            raise SourceError(f"HTTP error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise SourceError(f"Request failed: {e}") from e

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a JSON document."""
        response = await self._get(url, params=params)
        try:
            return response.json()
        except ValueError as e:
            raise SourceError(f"Invalid JSON from {self.name}: {e}") from e

    async def _get_text(self, url: str, params: Optional[Dict[str, Any]] = None) -> str:
        """GET a text document."""
        response = await self._get(url, params=params)
        return response.text

    def _build_record(self, **fields: Any) -> Optional[AlertRecord]:
        """Build an AlertRecord, returning None when validation fails."""
        fields.setdefault("source", self.name)
        try:
            return AlertRecord(**fields)
        except ValidationError as e:
            self.logger.debug(f"Skipping invalid {self.name} record {fields.get('id')}: {e}")
            return None
