"""
Enrichment Pipeline - attaches place names to clusters and reports.

Key principles:
- Enrichment is strictly additive; clusters are valid without a name
- Lookups run in fixed-size batches; lookups inside a batch run
  concurrently, batches are separated by a fixed delay
- Each lookup is fault-isolated: a failure becomes the synthetic
  coordinate name for that item only
- Output order always matches input order
"""

import asyncio
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple
import logging

from cityfix.core.settings import settings
from cityfix.models.cluster import Cluster
from cityfix.models.report import Report
from cityfix.services.geocoding import GeocodingGateway, get_geocoding_gateway
from cityfix.utils.geocoding import synthetic_location_name

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


def chunked(items: Sequence, size: int) -> List[Sequence]:
    """Split items into consecutive batches of at most `size`."""
    size = max(1, int(size))
    return [items[i:i + size] for i in range(0, len(items), size)]


class EnrichmentPipeline:
    """
    Batched, rate-limited place-name enrichment on top of a GeocodingGateway.

    The gateway is synchronous (requests-based); each lookup runs in the
    default executor so lookups of one batch overlap.
    """

    def __init__(
        self,
        gateway: GeocodingGateway,
        batch_size: int = 3,
        batch_delay_seconds: float = 1.0,
        lookup_timeout_seconds: Optional[float] = 45.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.gateway = gateway
        self.batch_size = max(1, int(batch_size))
        self.batch_delay_seconds = batch_delay_seconds
        self.lookup_timeout_seconds = lookup_timeout_seconds
        self._sleep = sleep

    async def enrich(self, clusters: Sequence[Cluster]) -> List[Cluster]:
        """
        Return the same clusters, in the same order, each with location_name set.
        """
        if not clusters:
            return []

        names = await self._resolve_many([(c.centroid.lat, c.centroid.lng) for c in clusters])
        logger.info(f"Enriched {len(clusters)} clusters with location names")
        return [
            cluster.model_copy(update={"location_name": name})
            for cluster, name in zip(clusters, names)
        ]

    async def enrich_reports(self, reports: Sequence[Report]) -> Dict[str, str]:
        """
        Resolve place names for individual reports.

        Returns:
            {report_id: location_name} for reports with valid coordinates
        """
        locatable = [r for r in reports if r.has_valid_location]
        if not locatable:
            return {}

        names = await self._resolve_many([(r.location.lat, r.location.lng) for r in locatable])
        return {report.id: name for report, name in zip(locatable, names)}

    async def _resolve_many(self, points: List[Point]) -> List[str]:
        names: List[str] = []
        batches = chunked(points, self.batch_size)

        for index, batch in enumerate(batches):
            if index > 0 and self.batch_delay_seconds > 0:
                await self._sleep(self.batch_delay_seconds)

            logger.debug(f"Enrichment batch {index + 1}/{len(batches)} ({len(batch)} lookups)")
            results = await asyncio.gather(
                *(self._lookup(lat, lng) for lat, lng in batch),
                return_exceptions=True,
            )

            for (lat, lng), result in zip(batch, results):
                if isinstance(result, BaseException) or not result:
                    if isinstance(result, BaseException):
                        logger.warning(f"Location lookup failed for ({lat}, {lng}): {result!r}")
                    names.append(synthetic_location_name(lat, lng))
                else:
                    names.append(result)

        return names

    async def _lookup(self, latitude: float, longitude: float) -> str:
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(None, self.gateway.resolve, latitude, longitude)
        if self.lookup_timeout_seconds is None:
            return await future
        try:
            return await asyncio.wait_for(future, timeout=self.lookup_timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                f"Location lookup for ({latitude}, {longitude}) exceeded {self.lookup_timeout_seconds}s"
            )
            return synthetic_location_name(latitude, longitude)


def build_enrichment_pipeline(gateway: Optional[GeocodingGateway] = None) -> EnrichmentPipeline:
    """EnrichmentPipeline configured from settings."""
    return EnrichmentPipeline(
        gateway=gateway or get_geocoding_gateway(),
        batch_size=settings.ENRICHMENT_BATCH_SIZE,
        batch_delay_seconds=settings.ENRICHMENT_BATCH_DELAY_SECONDS,
        lookup_timeout_seconds=settings.ENRICHMENT_LOOKUP_TIMEOUT_SECONDS,
    )
