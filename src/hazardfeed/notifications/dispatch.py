"""
Dispatch hooks receiving each aggregation run's final alert list.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import aiohttp

from ..core.config import DispatchConfig
from ..core.models import AlertRecord

logger = logging.getLogger(__name__)


class DispatchHook:
    """Base class for dispatch hooks."""

    name = "dispatch"

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.name}")

    async def dispatch(self, alerts: List[AlertRecord]) -> None:
        """Deliver the deduplicated alerts of one run. Override in subclasses."""
        raise NotImplementedError


class LogDispatchHook(DispatchHook):
    """Logs what would be delivered."""

    name = "log"

    async def dispatch(self, alerts: List[AlertRecord]) -> None:
        self.logger.info(
            f"Would send push notifications for {len(alerts)} alerts",
            extra={"alert_ids": [alert.id for alert in alerts]},
        )


class WebhookDispatchHook(DispatchHook):
    """POSTs the alert list as JSON to a webhook URL."""

    name = "webhook"

    def __init__(self, config: DispatchConfig):
        super().__init__()
        if not config.webhook_url:
            raise ValueError("webhook_url is required for WebhookDispatchHook")
        self.config = config

    def _create_payload(self, alerts: List[AlertRecord]) -> Dict[str, Any]:
        return {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "count": len(alerts),
            "alerts": [alert.model_dump(mode="json") for alert in alerts],
        }

    async def dispatch(self, alerts: List[AlertRecord]) -> None:
        payload = self._create_payload(alerts)
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.config.webhook_url, json=payload) as response:
                    if response.status >= 400:
                        body = await response.text()
                        self.logger.error(f"Webhook returned {response.status}: {body[:200]}")
                        return
            self.logger.info(f"Dispatched {len(alerts)} alerts to webhook")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.error(f"Failed to send webhook: {e}")


def create_dispatch_hook(config: DispatchConfig) -> Optional[DispatchHook]:
    """Pick the dispatch hook for a configuration."""
    if config.webhook_url:
        return WebhookDispatchHook(config)
    return LogDispatchHook()
