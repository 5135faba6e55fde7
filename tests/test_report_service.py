"""Tests for admin write intents."""

import pytest

from cityfix.services.report_service import (
    InFlightTracker,
    ReportService,
    ReportUpdateError,
    ReportUpdateInProgress,
)
from cityfix.services.report_store import InMemoryReportStore, ReportNotFound, ReportStoreError


@pytest.fixture
def service(store):
    return ReportService(store)


def test_update_status_accepts_aliases_and_writes_canonical(service, store):
    assert service.update_status("r1", "done") == {"id": "r1", "status": "resolved"}
    assert store.get("r1").status.value == "resolved"


def test_update_status_rejects_unknown_status(service, store):
    with pytest.raises(ValueError):
        service.update_status("r1", "rejected")
    assert store.get("r1").status.value == "pending"


def test_update_status_unknown_report(service):
    with pytest.raises(ReportNotFound):
        service.update_status("missing", "resolved")
    assert "missing" not in service.in_flight


def test_assign_department_validates_name(service, store):
    service.assign_department("r1", " Electricity Department ")
    assert store.get("r1").department == "Electricity Department"

    with pytest.raises(ValueError):
        service.assign_department("r1", "Ministry of Magic")


def test_add_remarks_rejects_blank(service, store):
    service.add_remarks("r2", "Crew dispatched")
    assert store.get("r2").remarks == "Crew dispatched"

    with pytest.raises(ValueError):
        service.add_remarks("r2", "   ")


def test_second_write_while_in_flight_is_rejected(store):
    tracker = InFlightTracker()
    service = ReportService(store, in_flight=tracker)
    assert tracker.try_acquire("r1")

    with pytest.raises(ReportUpdateInProgress):
        service.update_status("r1", "resolved")

    # Other reports are unaffected
    service.update_status("r2", "resolved")

    tracker.release("r1")
    service.update_status("r1", "resolved")
    assert store.get("r1").status.value == "resolved"


def test_store_failure_surfaces_and_releases_report():
    class FailingStore(InMemoryReportStore):
        def _write(self, report_id, fields):
            raise ReportStoreError("network down")

    service = ReportService(FailingStore({"a": {"status": "pending"}}))

    with pytest.raises(ReportUpdateError) as exc_info:
        service.update_status("a", "resolved")

    assert exc_info.value.report_id == "a"
    assert "a" not in service.in_flight
