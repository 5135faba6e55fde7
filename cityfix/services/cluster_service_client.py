"""
Client for the optional remote clustering service.

The service is an opaque HTTP endpoint: it receives a JSON array of point
records and answers with a JSON array of cluster groups. Any failure is
recoverable; the aggregator falls back to local grid bucketing.
"""

from typing import Any, Dict, List, Sequence
import logging

import requests

from cityfix.models.report import Report

logger = logging.getLogger(__name__)


class ClusterServiceError(Exception):
    """Remote clustering failed, timed out or returned an unusable body."""


def to_service_record(report: Report) -> Dict[str, Any]:
    """Wire shape of one report: {id, lat, lng, description, category, status}."""
    return {
        "id": report.id,
        "lat": report.location.lat,
        "lng": report.location.lng,
        "description": report.description,
        "category": report.category or "Other",
        "status": report.status.value,
    }


class ClusterServiceClient:
    """POSTs locatable reports to the clustering service."""

    def __init__(self, url: str, timeout: float = 15.0):
        self.url = url
        self.timeout = timeout

    def cluster(self, reports: Sequence[Report]) -> List[Dict[str, Any]]:
        """
        Submit a batch and return the raw cluster groups.

        Raises:
            ClusterServiceError: on timeout, transport error, non-2xx status
                or a body that is not a JSON array of objects
        """
        payload = [to_service_record(r) for r in reports]
        try:
            resp = requests.post(self.url, json=payload, timeout=self.timeout)
        except requests.Timeout as e:
            raise ClusterServiceError(f"cluster service timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise ClusterServiceError(f"cluster service request failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise ClusterServiceError(f"cluster service returned status {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise ClusterServiceError("cluster service returned malformed JSON") from e

        if not isinstance(data, list) or not all(isinstance(group, dict) for group in data):
            raise ClusterServiceError("cluster service response is not an array of cluster objects")

        logger.info(f"Cluster service returned {len(data)} clusters for {len(payload)} reports")
        return data
