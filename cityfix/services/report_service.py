"""
Report Service - admin write intents (status, department, remarks).

DESIGN PRINCIPLES:
- The service never mutates a report; it sends partial updates to the store
- One in-flight write per report: a second write for the same report is
  rejected until the first one settles
- Store failures surface to the caller as ReportUpdateError; nothing is
  retried automatically
"""

import threading
from typing import Dict, Optional, Set
import logging

from cityfix.services.department_classifier import DepartmentClassifier, get_department_classifier
from cityfix.services.report_store import ReportNotFound, ReportStore, ReportStoreError, get_report_store
from cityfix.services.status_workflow import ReportStatus, parse_status

logger = logging.getLogger(__name__)


class ReportUpdateError(Exception):
    """A write intent for one report failed; the report keeps its prior state."""

    def __init__(self, report_id: str, message: str):
        super().__init__(message)
        self.report_id = report_id


class ReportUpdateInProgress(ReportUpdateError):
    """Another write for the same report has not settled yet."""


class InFlightTracker:
    """Set of report ids with a pending write; add/remove are atomic."""

    def __init__(self):
        self._ids: Set[str] = set()
        self._lock = threading.Lock()

    def try_acquire(self, report_id: str) -> bool:
        with self._lock:
            if report_id in self._ids:
                return False
            self._ids.add(report_id)
            return True

    def release(self, report_id: str) -> None:
        with self._lock:
            self._ids.discard(report_id)

    def __contains__(self, report_id: str) -> bool:
        with self._lock:
            return report_id in self._ids


class ReportService:
    """Validates admin actions and forwards them to the report store."""

    def __init__(
        self,
        store: ReportStore,
        classifier: Optional[DepartmentClassifier] = None,
        in_flight: Optional[InFlightTracker] = None,
    ):
        self.store = store
        self.classifier = classifier or get_department_classifier()
        self.in_flight = in_flight or InFlightTracker()

    def update_status(self, report_id: str, status: str) -> Dict:
        """
        Move a report to a new status.

        Raises:
            ValueError: status does not parse to a canonical status
            ReportNotFound: unknown report
            ReportUpdateInProgress: another write for this report is pending
            ReportUpdateError: the store rejected the write
        """
        canonical = parse_status(status)
        if canonical is None:
            allowed = [s.value for s in ReportStatus]
            raise ValueError(f"Invalid status {status!r}. Allowed: {allowed}")

        self._write(report_id, "status", lambda: self.store.update_status(report_id, canonical.value))
        logger.info(f"Report {report_id} status -> {canonical.value}")
        return {"id": report_id, "status": canonical.value}

    def assign_department(self, report_id: str, department: str) -> Dict:
        """
        Manually assign a department. Manual assignments always win over
        the classifier's suggestion.

        Raises:
            ValueError: department is not one of the configured departments
        """
        department = (department or "").strip()
        if department not in self.classifier.departments:
            raise ValueError(f"Unknown department {department!r}. Allowed: {self.classifier.departments}")

        self._write(report_id, "department", lambda: self.store.assign_department(report_id, department))
        logger.info(f"Report {report_id} assigned to {department}")
        return {"id": report_id, "department": department}

    def add_remarks(self, report_id: str, remarks: str) -> Dict:
        remarks = (remarks or "").strip()
        if not remarks:
            raise ValueError("Remarks must not be empty")

        self._write(report_id, "remarks", lambda: self.store.add_remarks(report_id, remarks))
        logger.info(f"Remarks added to report {report_id}")
        return {"id": report_id, "remarks": remarks}

    def _write(self, report_id: str, field: str, write) -> None:
        if not self.in_flight.try_acquire(report_id):
            raise ReportUpdateInProgress(report_id, f"An update for report {report_id} is already in progress")
        try:
            write()
        except ReportNotFound:
            raise
        except ReportStoreError as e:
            logger.error(f"Failed to update {field} for report {report_id}: {e}")
            raise ReportUpdateError(report_id, f"Failed to update {field}: {e}") from e
        finally:
            self.in_flight.release(report_id)


_report_service: Optional[ReportService] = None


def get_report_service() -> ReportService:
    """Get or create the ReportService singleton."""
    global _report_service
    if _report_service is None:
        _report_service = ReportService(get_report_store())
    return _report_service
