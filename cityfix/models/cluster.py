"""
Cluster models - derived, non-persisted groupings of reports.
Recomputed wholesale on every aggregation run.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from cityfix.models.base import CityFixModel
from cityfix.models.report import Location


class Urgency(str, Enum):
    """Cluster urgency label."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ClusterStats(CityFixModel):
    """Status counts over a cluster's member reports."""
    total: int = 0
    pending: int = 0
    doing: int = 0
    completed: int = 0


class Cluster(CityFixModel):
    """
    A spatial grouping of reports.

    member_report_ids holds report identities, never copies of reports.
    location_name stays None until enrichment resolves it.
    """
    cluster_key: str
    centroid: Location
    member_report_ids: List[str] = Field(default_factory=list)
    stats: ClusterStats = Field(default_factory=ClusterStats)
    category: str = "Other"
    urgency: Urgency = Urgency.LOW
    priority: int = Field(0, ge=0, le=100, description="Derived priority score (0-100)")
    priority_reason: Optional[str] = None
    latest_created_at: Optional[int] = Field(None, description="Newest member createdAt, epoch millis")
    location_name: Optional[str] = None


class AggregationState(str, Enum):
    """Outcome of an aggregation run."""
    OK = "ok"
    NO_LOCATABLE_REPORTS = "no_locatable_reports"


class ClusterSource(str, Enum):
    """Which strategy produced the clusters."""
    SERVICE = "service"
    LOCAL = "local"


class AggregationResult(CityFixModel):
    """
    Clusters for one report snapshot plus how they were produced.

    notice carries a transient, user-dismissible message (e.g. the cluster
    service was unreachable and the local grid was used instead).
    """
    clusters: List[Cluster] = Field(default_factory=list)
    state: AggregationState = AggregationState.OK
    source: ClusterSource = ClusterSource.LOCAL
    notice: Optional[str] = None
    generated_at: Optional[datetime] = None
