"""
Cluster Insights Service - keeps the latest enriched clusters for the admin console.

Flow:
    ReportStore snapshot -> ClusterAggregator -> EnrichmentPipeline -> published result

KEY PRINCIPLES:
- Clusters are recomputed wholesale from the newest snapshot, never patched
- Re-aggregation fires at most once per AGGREGATION_MIN_INTERVAL_SECONDS;
  a trailing run always picks up the newest snapshot
- Runs are never cancelled; a run that finishes after a newer run has
  published is discarded (last result wins)
"""

import asyncio
import itertools
import time
from typing import Callable, List, Optional, Set
import logging

from cityfix.core.settings import settings
from cityfix.models.cluster import AggregationResult
from cityfix.models.report import Report
from cityfix.services.cluster_aggregation_service import ClusterAggregator, build_cluster_aggregator
from cityfix.services.enrichment_pipeline import EnrichmentPipeline, build_enrichment_pipeline
from cityfix.services.report_store import ReportStore, Subscription, get_report_store

logger = logging.getLogger(__name__)


class ClusterInsightsService:
    """Subscribes to the report store and maintains the published cluster result."""

    def __init__(
        self,
        store: ReportStore,
        aggregator: ClusterAggregator,
        pipeline: EnrichmentPipeline,
        min_interval_seconds: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.aggregator = aggregator
        self.pipeline = pipeline
        self.min_interval_seconds = min_interval_seconds
        self._clock = clock

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._subscription: Optional[Subscription] = None
        self._latest_reports: Optional[List[Report]] = None
        self._pending_handle: Optional[asyncio.Handle] = None
        self._tasks: Set[asyncio.Task] = set()

        self._run_ids = itertools.count(1)
        self._published_run = 0
        self._last_started: Optional[float] = None
        self._result: Optional[AggregationResult] = None
        self.runs_started = 0

    @property
    def latest(self) -> Optional[AggregationResult]:
        """Most recently published result, or None before the first run completes."""
        return self._result

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Subscribe to the store. Must be called from (or given) the serving event loop."""
        if self._subscription is not None:
            return
        self._loop = loop or asyncio.get_running_loop()
        self._subscription = self.store.subscribe(self._on_snapshot)
        logger.info("Cluster insights subscribed to report store")

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        if self._pending_handle is not None:
            self._pending_handle.cancel()
            self._pending_handle = None

    def _on_snapshot(self, reports: List[Report]) -> None:
        # Store listeners may call from a background thread
        self._latest_reports = reports
        if self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._schedule)

    def _schedule(self) -> None:
        if self._pending_handle is not None:
            return
        delay = 0.0
        if self._last_started is not None:
            delay = max(0.0, self._last_started + self.min_interval_seconds - self._clock())
        self._pending_handle = self._loop.call_later(delay, self._fire)

    def _fire(self) -> None:
        self._pending_handle = None
        task = self._loop.create_task(self._run_in_background())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_in_background(self) -> None:
        try:
            await self.refresh()
        except Exception as e:
            logger.error(f"Cluster insights refresh failed: {e}", exc_info=True)

    async def refresh(self, reports: Optional[List[Report]] = None) -> AggregationResult:
        """
        Run aggregation + enrichment now and publish the result unless a
        newer run already published.

        Returns:
            This run's result (published or not)
        """
        loop = asyncio.get_running_loop()
        if reports is None:
            reports = self._latest_reports
        if reports is None:
            reports = await loop.run_in_executor(None, self.store.snapshot)

        run_id = next(self._run_ids)
        self._last_started = self._clock()
        self.runs_started += 1
        logger.info(f"Cluster insights run {run_id} started over {len(reports)} reports")

        result = await loop.run_in_executor(None, self.aggregator.aggregate, reports)
        clusters = await self.pipeline.enrich(result.clusters)
        result = result.model_copy(update={"clusters": clusters})

        if run_id > self._published_run:
            self._published_run = run_id
            self._result = result
            logger.info(f"Cluster insights run {run_id} published {len(clusters)} clusters")
        else:
            logger.info(f"Cluster insights run {run_id} superseded by run {self._published_run}; discarded")
        return result


_insights_service: Optional[ClusterInsightsService] = None


def get_insights_service() -> ClusterInsightsService:
    """Get or create the ClusterInsightsService singleton."""
    global _insights_service
    if _insights_service is None:
        _insights_service = ClusterInsightsService(
            store=get_report_store(),
            aggregator=build_cluster_aggregator(),
            pipeline=build_enrichment_pipeline(),
            min_interval_seconds=settings.AGGREGATION_MIN_INTERVAL_SECONDS,
        )
    return _insights_service


def stop_insights_service() -> None:
    """Stop the singleton if it was ever created."""
    if _insights_service is not None:
        _insights_service.stop()
