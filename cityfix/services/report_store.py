"""
Report Store - the push-based source of report snapshots.

The store owns every report. The rest of the system only:
- subscribes and receives full snapshots (initial + after each change)
- sends partial-field update intents (status, department, remarks)

Implementations:
- FirebaseReportStore: Firebase Realtime Database listener + local mirror
- InMemoryReportStore: local development (USE_MOCK_DB) and tests
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional
import itertools
import json
import logging
import os
import threading

from pydantic import ValidationError

from cityfix.core.settings import settings
from cityfix.models.report import Report, sort_newest_first

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[List[Report]], None]


class ReportStoreError(Exception):
    """Store read or write failed."""


class ReportNotFound(ReportStoreError):
    def __init__(self, report_id: str):
        super().__init__(f"Report {report_id} not found")
        self.report_id = report_id


class Subscription:
    """Cancellation handle returned by ReportStore.subscribe()."""

    def __init__(self, cancel: Callable[[], None]):
        self._cancel = cancel
        self._lock = threading.Lock()
        self.cancelled = False

    def cancel(self) -> None:
        with self._lock:
            if self.cancelled:
                return
            self.cancelled = True
        self._cancel()


def records_to_reports(records: Optional[Mapping[str, Any]]) -> List[Report]:
    """
    Parse raw store records into Reports, newest first.

    Records that are not objects or fail validation are logged and skipped.
    """
    reports = []
    for report_id, data in (records or {}).items():
        if not isinstance(data, dict):
            logger.warning(f"Skipping report {report_id}: record is not an object")
            continue
        try:
            reports.append(Report.from_record(str(report_id), data))
        except ValidationError as e:
            logger.warning(f"Skipping report {report_id}: invalid record ({e.error_count()} errors)")
    return sort_newest_first(reports)


def _updated_at() -> str:
    return datetime.now(timezone.utc).isoformat()


class ReportStore(ABC):
    """Push-based report collection with partial-field write intents."""

    def __init__(self):
        self._subscribers: Dict[int, SnapshotCallback] = {}
        self._subscriber_ids = itertools.count(1)
        self._subscribers_lock = threading.Lock()

    @abstractmethod
    def snapshot(self) -> List[Report]:
        """Current reports, newest first."""

    @abstractmethod
    def _write(self, report_id: str, fields: Dict[str, Any]) -> None:
        """Apply a partial update. Raises ReportStoreError / ReportNotFound."""

    def _on_first_subscriber(self) -> None:
        pass

    def _on_last_unsubscribe(self) -> None:
        pass

    def get(self, report_id: str) -> Optional[Report]:
        return next((r for r in self.snapshot() if r.id == report_id), None)

    def subscribe(self, callback: SnapshotCallback) -> Subscription:
        """
        Register for snapshots. The current snapshot is delivered right
        away, then a full snapshot after every change.
        """
        with self._subscribers_lock:
            token = next(self._subscriber_ids)
            first = not self._subscribers
            self._subscribers[token] = callback

        if first:
            try:
                self._on_first_subscriber()
            except ReportStoreError:
                with self._subscribers_lock:
                    self._subscribers.pop(token, None)
                raise
        self._deliver(callback, self.snapshot())
        return Subscription(lambda: self._unsubscribe(token))

    def _unsubscribe(self, token: int) -> None:
        with self._subscribers_lock:
            self._subscribers.pop(token, None)
            last = not self._subscribers
        if last:
            self._on_last_unsubscribe()

    def _notify(self) -> None:
        with self._subscribers_lock:
            callbacks = list(self._subscribers.values())
        if not callbacks:
            return
        reports = self.snapshot()
        for callback in callbacks:
            self._deliver(callback, reports)

    @staticmethod
    def _deliver(callback: SnapshotCallback, reports: List[Report]) -> None:
        try:
            callback(reports)
        except Exception as e:
            logger.error(f"Report snapshot subscriber failed: {e}", exc_info=True)

    # Write intents

    def update_status(self, report_id: str, status: str) -> None:
        self._write(report_id, {"status": status, "updatedAt": _updated_at()})

    def assign_department(self, report_id: str, department: str) -> None:
        self._write(report_id, {"department": department, "updatedAt": _updated_at()})

    def add_remarks(self, report_id: str, remarks: str) -> None:
        self._write(report_id, {"remarks": remarks, "updatedAt": _updated_at()})


class InMemoryReportStore(ReportStore):
    """Dict-backed store; every write notifies subscribers synchronously."""

    def __init__(self, records: Optional[Mapping[str, Dict[str, Any]]] = None):
        super().__init__()
        self._records: Dict[str, Dict[str, Any]] = {k: dict(v) for k, v in (records or {}).items()}
        self._lock = threading.Lock()

    @classmethod
    def from_json_file(cls, path: str) -> "InMemoryReportStore":
        """Load {"reports": {id: record}} from a JSON file; missing file -> empty store."""
        if not os.path.exists(path):
            logger.warning(f"Mock DB file {path} not found, starting with an empty store")
            return cls()
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls(data.get("reports") or {})

    def snapshot(self) -> List[Report]:
        with self._lock:
            records = {k: dict(v) for k, v in self._records.items()}
        return records_to_reports(records)

    def put(self, report_id: str, record: Dict[str, Any]) -> None:
        """Insert or replace a whole record (simulates a citizen submission)."""
        with self._lock:
            self._records[report_id] = dict(record)
        self._notify()

    def delete(self, report_id: str) -> None:
        with self._lock:
            self._records.pop(report_id, None)
        self._notify()

    def _write(self, report_id: str, fields: Dict[str, Any]) -> None:
        with self._lock:
            if report_id not in self._records:
                raise ReportNotFound(report_id)
            self._records[report_id].update(fields)
        self._notify()


def apply_event(mirror: Dict[str, Any], event_type: str, path: str, data: Any) -> Dict[str, Any]:
    """
    Apply one Realtime Database listener event to a local mirror.

    put at "/" replaces everything; put at a child path sets (or, with
    None data, deletes) that node; patch merges keys into the node.
    """
    parts = [p for p in (path or "").split("/") if p]

    if not parts and event_type == "put":
        return dict(data) if isinstance(data, dict) else {}

    if event_type == "put":
        parent = mirror
        for part in parts[:-1]:
            child = parent.get(part)
            if not isinstance(child, dict):
                child = {}
                parent[part] = child
            parent = child
        if data is None:
            parent.pop(parts[-1], None)
        else:
            parent[parts[-1]] = data
        return mirror

    if event_type == "patch" and isinstance(data, dict):
        node = mirror
        for part in parts:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        for key, value in data.items():
            if value is None:
                node.pop(key, None)
            else:
                node[key] = value
        return mirror

    logger.debug(f"Ignoring listener event {event_type} at {path!r}")
    return mirror


class FirebaseReportStore(ReportStore):
    """
    Realtime Database store.

    A single listener keeps a local mirror of the reports node while at
    least one subscriber is registered; each event produces a full
    snapshot for every subscriber.
    """

    def __init__(self, reference):
        super().__init__()
        self.reference = reference
        self._mirror: Dict[str, Any] = {}
        self._primed = False
        self._lock = threading.Lock()
        self._registration = None

    def _on_first_subscriber(self) -> None:
        try:
            self._registration = self.reference.listen(self._on_event)
        except Exception as e:
            raise ReportStoreError(f"Failed to listen to reports: {e}") from e
        logger.info(f"Listening to report changes at /{self.reference.path.strip('/')}")

    def _on_last_unsubscribe(self) -> None:
        if self._registration is not None:
            self._registration.close()
            self._registration = None
        with self._lock:
            self._primed = False

    def _on_event(self, event) -> None:
        with self._lock:
            self._mirror = apply_event(self._mirror, event.event_type, event.path, event.data)
            self._primed = True
        self._notify()

    def snapshot(self) -> List[Report]:
        with self._lock:
            if self._primed:
                return records_to_reports(dict(self._mirror))
        try:
            data = self.reference.get()
        except Exception as e:
            raise ReportStoreError(f"Failed to read reports: {e}") from e
        return records_to_reports(data if isinstance(data, dict) else {})

    def _write(self, report_id: str, fields: Dict[str, Any]) -> None:
        child = self.reference.child(report_id)
        try:
            if child.get() is None:
                raise ReportNotFound(report_id)
            child.update(fields)
        except ReportStoreError:
            raise
        except Exception as e:
            raise ReportStoreError(f"Failed to update report {report_id}: {e}") from e


_report_store: Optional[ReportStore] = None


def get_report_store() -> ReportStore:
    """Get or create the configured ReportStore singleton."""
    global _report_store
    if _report_store is None:
        if settings.USE_MOCK_DB:
            _report_store = InMemoryReportStore.from_json_file(settings.MOCK_DB_PATH)
            logger.info("[STORE] USING MOCK REPORT STORE")
        else:
            from cityfix.config.firebase import get_reports_reference
            _report_store = FirebaseReportStore(get_reports_reference())
            logger.info("[STORE] USING FIREBASE REALTIME DATABASE")
    return _report_store
