"""
Analytics Service - aggregate counts for the admin dashboard.
Pure reductions over normalized report status; no I/O.
"""

from collections import defaultdict
from typing import Dict, Iterable, List
import logging

from cityfix.models.analytics import Analytics, LocalitySummary
from cityfix.models.report import Report
from cityfix.services.status_workflow import stat_key

logger = logging.getLogger(__name__)

UNKNOWN_AREA = "Unknown Area"
UNKNOWN_CATEGORY = "Unknown"


def summarize(reports: Iterable[Report]) -> Analytics:
    """
    Reduce a report snapshot to dashboard counts.

    An empty input yields all-zero counts and empty distributions.
    """
    counts = {"pending": 0, "doing": 0, "completed": 0}
    categories: Dict[str, int] = defaultdict(int)
    statuses: Dict[str, int] = defaultdict(int)

    for report in reports:
        counts[stat_key(report.status)] += 1
        categories[report.category or UNKNOWN_CATEGORY] += 1
        statuses[report.status.value] += 1

    return Analytics(
        total=sum(counts.values()),
        category_distribution=dict(categories),
        status_distribution=dict(statuses),
        **counts,
    )


def locality_name(report: Report) -> str:
    """Pin code, then area, then locality."""
    for value in (report.pin_code, report.area, report.locality):
        if value and str(value).strip():
            return str(value).strip()
    return UNKNOWN_AREA


def summarize_localities(reports: Iterable[Report]) -> List[LocalitySummary]:
    """
    Per-locality breakdown, busiest first.

    lat/lng is the mean of members with valid coordinates, or None.
    """
    groups: Dict[str, Dict] = {}

    for report in reports:
        name = locality_name(report)
        group = groups.setdefault(name, {
            "pending": 0, "doing": 0, "completed": 0,
            "lat_sum": 0.0, "lng_sum": 0.0, "located": 0,
        })
        group[stat_key(report.status)] += 1
        if report.has_valid_location:
            group["lat_sum"] += report.location.lat
            group["lng_sum"] += report.location.lng
            group["located"] += 1

    summaries = []
    for name, group in groups.items():
        total = group["pending"] + group["doing"] + group["completed"]
        located = group["located"]
        summaries.append(LocalitySummary(
            name=name,
            total=total,
            pending=group["pending"],
            doing=group["doing"],
            completed=group["completed"],
            completion_rate=int(round(100 * group["completed"] / total)) if total else 0,
            lat=group["lat_sum"] / located if located else None,
            lng=group["lng_sum"] / located if located else None,
        ))

    summaries.sort(key=lambda s: s.total, reverse=True)
    return summaries
