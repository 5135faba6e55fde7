"""
Priority Scoring - system-derived cluster priority and urgency.

DESIGN PRINCIPLES:
- Priority is SYSTEM-DERIVED and recalculated on every aggregation run
- Priority score: 0-100 (higher = needs attention sooner)
- Non-decreasing in pending count and in total count
- Recency of the newest report only breaks ties between similar clusters
"""

from typing import Dict, Optional
import logging

from cityfix.models.cluster import ClusterStats, Urgency

logger = logging.getLogger(__name__)

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS


class PriorityScoringService:
    """
    Calculates a cluster's priority score (0-100) and urgency label.

    Factors:
    1. Pending volume (saturates at PENDING_CAP reports)
    2. Total volume (saturates at TOTAL_CAP reports)
    3. Recency of the newest member report
    """

    # Configuration: factor weights (sum to 100)
    PENDING_WEIGHT = 55
    VOLUME_WEIGHT = 35
    RECENCY_WEIGHT = 10

    # Configuration: saturation points
    PENDING_CAP = 5
    TOTAL_CAP = 20

    # Configuration: recency windows
    RECENT_WINDOW_MS = DAY_MS          # newest report <24h old: full recency bonus
    STALE_WINDOW_MS = 7 * DAY_MS       # newest report <7 days old: half bonus

    # Configuration: urgency thresholds on the priority score
    HIGH_THRESHOLD = 55
    MEDIUM_THRESHOLD = 25

    def calculate_priority(
        self,
        stats: ClusterStats,
        latest_created_at: Optional[int],
        now_ms: int,
    ) -> Dict:
        """
        Calculate priority for a cluster.

        Args:
            stats: Normalized status counts of the cluster
            latest_created_at: Newest member createdAt (epoch millis), if known
            now_ms: Reference "now" in epoch millis

        Returns:
            Dict with priority_score, urgency and priority_reason
        """
        pending_factor = min(stats.pending, self.PENDING_CAP) / self.PENDING_CAP
        volume_factor = min(stats.total, self.TOTAL_CAP) / self.TOTAL_CAP
        recency_factor = self._recency_factor(latest_created_at, now_ms)

        pending_score = self.PENDING_WEIGHT * pending_factor
        volume_score = self.VOLUME_WEIGHT * volume_factor
        recency_score = self.RECENCY_WEIGHT * recency_factor

        score = int(round(pending_score + volume_score + recency_score))
        score = max(0, min(100, score))

        reasons = [
            f"Pending: {stats.pending} (+{pending_score:.0f})",
            f"Volume: {stats.total} (+{volume_score:.0f})",
        ]
        if recency_score > 0:
            reasons.append(f"Recent activity (+{recency_score:.0f})")

        return {
            "priority_score": score,
            "urgency": self.urgency_for(score),
            "priority_reason": " | ".join(reasons),
        }

    def urgency_for(self, score: int) -> Urgency:
        if score >= self.HIGH_THRESHOLD:
            return Urgency.HIGH
        if score >= self.MEDIUM_THRESHOLD:
            return Urgency.MEDIUM
        return Urgency.LOW

    def _recency_factor(self, latest_created_at: Optional[int], now_ms: int) -> float:
        if latest_created_at is None:
            return 0.0
        age_ms = now_ms - latest_created_at
        if age_ms <= self.RECENT_WINDOW_MS:
            return 1.0
        if age_ms <= self.STALE_WINDOW_MS:
            return 0.5
        return 0.0
