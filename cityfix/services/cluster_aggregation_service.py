"""
Cluster Aggregation Service

Turns a raw report snapshot into spatial clusters with status counts,
dominant category, urgency and priority.

KEY PRINCIPLE:
- Reports are raw signals; clusters are derived and never persisted
- Every run starts from the full snapshot and produces fresh clusters
- Reports without finite coordinates are skipped, never an error

STRATEGIES:
- Remote cluster service (when CLUSTER_SERVICE_URL is configured)
- Local grid bucketing: coordinates rounded to CLUSTER_GRID_PRECISION
  decimals; also the fallback whenever the service fails
"""

from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
import logging
import math
import time

from cityfix.core.settings import settings
from cityfix.models.cluster import (
    AggregationResult,
    AggregationState,
    Cluster,
    ClusterSource,
    ClusterStats,
    Urgency,
)
from cityfix.models.report import Location, Report, sort_newest_first
from cityfix.services.cluster_service_client import ClusterServiceClient, ClusterServiceError
from cityfix.services.priority_scoring import PriorityScoringService
from cityfix.services.status_workflow import stat_key
from cityfix.utils.geocoding import quantize

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Other"
NO_LOCATABLE_REPORTS_NOTICE = "No clusters found. Make sure reports have valid location data."
SERVICE_FALLBACK_NOTICE = "Clustering service unavailable; showing locally computed clusters."


def compute_stats(reports: Iterable[Report]) -> ClusterStats:
    """Count normalized statuses; pending + doing + completed == total."""
    counts = {"pending": 0, "doing": 0, "completed": 0}
    for report in reports:
        counts[stat_key(report.status)] += 1
    return ClusterStats(total=sum(counts.values()), **counts)


def dominant_category(reports: Sequence[Report]) -> str:
    """Most frequent category; ties go to the category seen first."""
    categories = [r.category or DEFAULT_CATEGORY for r in reports]
    if not categories:
        return DEFAULT_CATEGORY
    counts = Counter(categories)
    # max() keeps the first maximal element, and Counter preserves insertion order
    return max(counts, key=counts.get)


def mean_location(reports: Sequence[Report]) -> Location:
    lat = sum(r.location.lat for r in reports) / len(reports)
    lng = sum(r.location.lng for r in reports) / len(reports)
    return Location(lat=lat, lng=lng)


def _now_ms() -> int:
    return int(time.time() * 1000)


class ClusterAggregator:
    """
    Groups reports into clusters.

    Side-effect free: running aggregate() twice on the same snapshot (and
    the same `now_ms`) yields equal clusters.
    """

    def __init__(
        self,
        grid_precision: int = 1,
        service_client: Optional[ClusterServiceClient] = None,
        scoring: Optional[PriorityScoringService] = None,
    ):
        self.grid_precision = grid_precision
        self.service_client = service_client
        self.scoring = scoring or PriorityScoringService()

    def aggregate(self, reports: Iterable[Report], now_ms: Optional[int] = None) -> AggregationResult:
        """
        Aggregate a report snapshot into clusters.

        Returns:
            AggregationResult. An input without locatable reports yields an
            empty cluster list with state NO_LOCATABLE_REPORTS.
        """
        now_ms = _now_ms() if now_ms is None else now_ms
        generated_at = datetime.fromtimestamp(now_ms / 1000, tz=timezone.utc)

        locatable = sort_newest_first(r for r in reports if r.has_valid_location)
        if not locatable:
            logger.info("Aggregation skipped: no locatable reports")
            return AggregationResult(
                clusters=[],
                state=AggregationState.NO_LOCATABLE_REPORTS,
                source=ClusterSource.LOCAL,
                notice=NO_LOCATABLE_REPORTS_NOTICE,
                generated_at=generated_at,
            )

        if self.service_client is not None:
            try:
                groups = self.service_client.cluster(locatable)
                clusters = self._map_service_groups(groups, locatable, now_ms)
                logger.info(f"Aggregated {len(locatable)} reports into {len(clusters)} clusters (service)")
                return AggregationResult(
                    clusters=clusters,
                    source=ClusterSource.SERVICE,
                    generated_at=generated_at,
                )
            except ClusterServiceError as e:
                logger.warning(f"Cluster service failed, falling back to local grid: {e}")
                clusters = self.aggregate_locally(locatable, now_ms)
                return AggregationResult(
                    clusters=clusters,
                    source=ClusterSource.LOCAL,
                    notice=SERVICE_FALLBACK_NOTICE,
                    generated_at=generated_at,
                )

        clusters = self.aggregate_locally(locatable, now_ms)
        logger.info(f"Aggregated {len(locatable)} reports into {len(clusters)} clusters (local grid)")
        return AggregationResult(clusters=clusters, source=ClusterSource.LOCAL, generated_at=generated_at)

    def aggregate_locally(self, reports: Sequence[Report], now_ms: int) -> List[Cluster]:
        """Grid bucketing over reports that already have valid locations."""
        buckets: Dict[Tuple[float, float], List[Report]] = {}
        for report in reports:
            bucket = quantize(report.location.lat, report.location.lng, self.grid_precision)
            buckets.setdefault(bucket, []).append(report)

        clusters = []
        for (lat_bucket, lng_bucket), members in buckets.items():
            key = f"{lat_bucket + 0.0:.{self.grid_precision}f}_{lng_bucket + 0.0:.{self.grid_precision}f}"
            clusters.append(self._build_cluster(key, members, mean_location(members), now_ms))
        return self._ordered(clusters)

    def _map_service_groups(
        self,
        groups: List[Dict[str, Any]],
        reports: Sequence[Report],
        now_ms: int,
    ) -> List[Cluster]:
        """
        Map service groups onto Cluster objects.

        Stats are always recounted from our own normalized reports. The
        response must assign every submitted report to exactly one group,
        otherwise it is treated as malformed.
        """
        by_id = {r.id: r for r in reports}
        assigned = set()
        clusters = []

        for index, group in enumerate(groups):
            items = group.get("reports") or []
            if not isinstance(items, list):
                raise ClusterServiceError(f"cluster {index} has a non-list 'reports' field")

            member_ids = []
            for item in items:
                report_id = item.get("id") if isinstance(item, dict) else item
                report_id = None if report_id is None else str(report_id)
                if report_id not in by_id or report_id in assigned:
                    raise ClusterServiceError(f"unknown or duplicate report id {report_id!r} in response")
                assigned.add(report_id)
                member_ids.append(report_id)

            if not member_ids:
                continue

            members = [by_id[i] for i in member_ids]
            centroid = Location(lat=group.get("lat"), lng=group.get("lng"))
            if not centroid.is_valid:
                centroid = mean_location(members)

            cluster = self._build_cluster(str(group.get("cluster_id", index)), members, centroid, now_ms)
            clusters.append(self._apply_service_labels(cluster, group))

        if assigned != set(by_id):
            raise ClusterServiceError(
                f"response covers {len(assigned)} of {len(by_id)} submitted reports"
            )
        return self._ordered(clusters)

    def _build_cluster(self, key: str, members: Sequence[Report], centroid: Location, now_ms: int) -> Cluster:
        stats = compute_stats(members)
        created = [r.created_at for r in members if r.created_at is not None]
        latest = max(created) if created else None
        scored = self.scoring.calculate_priority(stats, latest, now_ms)

        return Cluster(
            cluster_key=key,
            centroid=centroid,
            member_report_ids=[r.id for r in members],
            stats=stats,
            category=dominant_category(members),
            urgency=scored["urgency"],
            priority=scored["priority_score"],
            priority_reason=scored["priority_reason"],
            latest_created_at=latest,
        )

    def _apply_service_labels(self, cluster: Cluster, group: Dict[str, Any]) -> Cluster:
        """Prefer service-provided labels when they are well formed."""
        updates: Dict[str, Any] = {}

        category = group.get("category")
        if isinstance(category, str) and category.strip():
            updates["category"] = category.strip()

        urgency = group.get("urgency")
        if isinstance(urgency, str):
            matched = next((u for u in Urgency if u.value.lower() == urgency.strip().lower()), None)
            if matched is not None:
                updates["urgency"] = matched

        priority = group.get("priority")
        if isinstance(priority, (int, float)) and not isinstance(priority, bool) and math.isfinite(priority):
            updates["priority"] = max(0, min(100, int(round(priority))))
            updates["priority_reason"] = "Provided by clustering service"

        return cluster.model_copy(update=updates) if updates else cluster

    @staticmethod
    def _ordered(clusters: List[Cluster]) -> List[Cluster]:
        return sorted(clusters, key=lambda c: (-c.priority, c.cluster_key))


def build_cluster_aggregator() -> ClusterAggregator:
    """ClusterAggregator configured from settings."""
    client = None
    if settings.CLUSTER_SERVICE_URL:
        client = ClusterServiceClient(
            settings.CLUSTER_SERVICE_URL,
            timeout=settings.CLUSTER_SERVICE_TIMEOUT_SECONDS,
        )
    return ClusterAggregator(grid_precision=settings.CLUSTER_GRID_PRECISION, service_client=client)
