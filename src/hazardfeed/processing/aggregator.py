"""
Alert aggregation across all configured sources.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Set, Union

from ..api.base import AlertSource
from ..api.eonet_client import EonetEventSource
from ..api.firms_client import FirmsFireSource
from ..api.gdacs_client import GdacsBulletinSource
from ..api.synthetic import SyntheticAlertSource
from ..api.usgs_client import UsgsEarthquakeSource
from ..core.config import AdapterSet, AppConfig
from ..core.models import AlertRecord
from ..notifications.dispatch import DispatchHook
from ..utils.logging import PerformanceLogger
from .deduplication import AlertDeduplicator

logger = logging.getLogger(__name__)

# Order matters: earlier sources win dedup ties.
ADAPTER_SETS: Dict[AdapterSet, Sequence[AdapterSet]] = {
    AdapterSet.MOCK: (AdapterSet.MOCK,),
    AdapterSet.NASA_LIVE: (AdapterSet.NASA_LIVE,),
    AdapterSet.FIRMS: (AdapterSet.FIRMS,),
    AdapterSet.USGS: (AdapterSet.USGS,),
    AdapterSet.GDACS: (AdapterSet.GDACS,),
    AdapterSet.ALL: (
        AdapterSet.MOCK,
        AdapterSet.NASA_LIVE,
        AdapterSet.FIRMS,
        AdapterSet.USGS,
        AdapterSet.GDACS,
    ),
}


def build_sources(config: AppConfig, adapter_set: Union[AdapterSet, str, None] = None) -> List[AlertSource]:
    """
    Construct the sources selected by an adapter set.

    Args:
        config: Application configuration
        adapter_set: Selector; defaults to ``config.alerts_adapter``

    Returns:
        Source instances in aggregation order

    Raises:
        ValueError: If the selector is not a known adapter set
    """
    if adapter_set is None:
        adapter_set = config.alerts_adapter
    elif isinstance(adapter_set, str) and not isinstance(adapter_set, AdapterSet):
        adapter_set = AdapterSet.parse(adapter_set)

    sources: List[AlertSource] = []
    for member in ADAPTER_SETS[adapter_set]:
        if member == AdapterSet.MOCK:
            sources.append(SyntheticAlertSource(config.synthetic))
        elif member == AdapterSet.NASA_LIVE:
            sources.append(EonetEventSource(config.nasa_eonet_api_key, config.eonet))
        elif member == AdapterSet.FIRMS:
            sources.append(FirmsFireSource(config.firms_api_key, config.firms))
        elif member == AdapterSet.USGS:
            sources.append(UsgsEarthquakeSource(config.usgs))
        elif member == AdapterSet.GDACS:
            sources.append(GdacsBulletinSource(config.gdacs))

    logger.info(f"Configured {len(sources)} alert sources for adapter set '{adapter_set.value}'")
    return sources


class AlertAggregator:
    """Fetches every source concurrently and deduplicates the result."""

    def __init__(
        self,
        sources: Sequence[AlertSource],
        deduplicator: Optional[AlertDeduplicator] = None,
        dispatch_hook: Optional[DispatchHook] = None,
        source_timeout: float = 30.0,
        performance_logger: Optional[PerformanceLogger] = None,
    ):
        """
        Initialize the aggregator.

        Args:
            sources: Sources in priority order
            deduplicator: Deduplicator; a full-precision, one-hour one is used when omitted
            dispatch_hook: Receives each run's final list without being awaited
            source_timeout: Seconds each source may take before it is abandoned
            performance_logger: Optional timing logger for per-source fetches
        """
        self.sources = list(sources)
        self.deduplicator = deduplicator or AlertDeduplicator()
        self.dispatch_hook = dispatch_hook
        self.source_timeout = source_timeout
        self.performance_logger = performance_logger
        self.logger = logging.getLogger(__name__)
        self._dispatch_tasks: Set[asyncio.Task] = set()

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        adapter_set: Union[AdapterSet, str, None] = None,
        dispatch_hook: Optional[DispatchHook] = None,
        performance_logger: Optional[PerformanceLogger] = None,
    ) -> "AlertAggregator":
        """Build an aggregator from application configuration."""
        return cls(
            build_sources(config, adapter_set),
            deduplicator=AlertDeduplicator(
                coordinate_precision=config.deduplication.coordinate_precision,
                bucket_minutes=config.deduplication.bucket_minutes,
            ),
            dispatch_hook=dispatch_hook,
            source_timeout=config.aggregator.source_timeout,
            performance_logger=performance_logger,
        )

    async def close(self) -> None:
        """Wait for pending dispatches and close every source."""
        await self.wait_for_dispatches()
        for source in self.sources:
            await source.close()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def fetch_all_alerts(self) -> List[AlertRecord]:
        """
        Fetch, concatenate and deduplicate alerts from every source.

        Never raises for source failures: a failing or timed-out source
        contributes no alerts.

        Returns:
            Deduplicated alerts in source order
        """
        run_time = datetime.now(timezone.utc)
        results = await asyncio.gather(*(self._fetch_source(source) for source in self.sources))

        all_alerts: List[AlertRecord] = []
        for alerts in results:
            all_alerts.extend(alerts)

        deduplicated = self.deduplicator.deduplicate_alerts(all_alerts, now=run_time)
        self.logger.info(
            f"Aggregated {len(deduplicated)} alerts ({len(all_alerts)} before deduplication) "
            f"from {len(self.sources)} sources"
        )

        self._dispatch(deduplicated)
        return deduplicated

    async def fetch_by_source(self) -> Dict[str, List[AlertRecord]]:
        """Fetch every source without deduplication, keyed by source name."""
        results = await asyncio.gather(*(self._fetch_source(source) for source in self.sources))
        return {source.name: alerts for source, alerts in zip(self.sources, results)}

    async def _fetch_source(self, source: AlertSource) -> List[AlertRecord]:
        """Fetch one source, bounded by the per-source timeout."""
        timer_id = self.performance_logger.start_timer(f"fetch:{source.source_id}") if self.performance_logger else None
        success = False
        alerts: List[AlertRecord] = []
        try:
            alerts = await asyncio.wait_for(source.fetch_alerts(), timeout=self.source_timeout)
            success = True
        except asyncio.TimeoutError:
            self.logger.warning(f"Source {source.name} timed out after {self.source_timeout}s")
        except Exception as e:
            self.logger.warning(f"Source {source.name} failed: {e}", exc_info=True)
        finally:
            if timer_id is not None:
                self.performance_logger.end_timer(
                    timer_id, success=success, source=source.name, alert_count=len(alerts)
                )
        return alerts

    def _dispatch(self, alerts: List[AlertRecord]) -> None:
        """Hand the final list to the dispatch hook without waiting for it."""
        if self.dispatch_hook is None:
            return
        task = asyncio.create_task(self.dispatch_hook.dispatch(list(alerts)))
        self._dispatch_tasks.add(task)
        task.add_done_callback(self._on_dispatch_done)

    def _on_dispatch_done(self, task: asyncio.Task) -> None:
        self._dispatch_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.logger.error(f"Dispatch hook failed: {error}")

    async def wait_for_dispatches(self) -> None:
        """Wait until all dispatches started so far have finished."""
        if self._dispatch_tasks:
            await asyncio.gather(*list(self._dispatch_tasks), return_exceptions=True)
