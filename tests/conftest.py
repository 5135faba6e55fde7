"""Pytest configuration and fixtures."""

import os

# Must be set before cityfix.core.settings is imported
os.environ.setdefault("USE_MOCK_DB", "true")
os.environ.setdefault("MOCK_DB_PATH", "./tests/does-not-exist.json")
os.environ.setdefault("ENRICHMENT_BATCH_DELAY_SECONDS", "0")

from typing import Any, Dict

import pytest

from cityfix.models.report import Report
from cityfix.services.report_store import InMemoryReportStore

from tests.helpers import HOUR_MS, NOW_MS, RecordingGateway


@pytest.fixture
def make_report():
    """Factory for Report objects built the way the store builds them."""

    def _make(report_id: str, lat: Any = None, lng: Any = None, **fields) -> Report:
        record: Dict[str, Any] = dict(fields)
        if lat is not None or lng is not None:
            record["location"] = {"lat": lat, "lng": lng}
        return Report.from_record(report_id, record)

    return _make


@pytest.fixture
def sample_records() -> Dict[str, Dict[str, Any]]:
    """Raw store records: two Trichy reports, two Madurai reports, one without location."""
    return {
        "r1": {
            "category": "Pothole",
            "description": "Deep pothole near the bus stand",
            "location": {"lat": 10.81, "lng": 78.71},
            "status": "pending",
            "area": "Thillai Nagar",
            "pinCode": 620018,
            "user": "citizen-001",
            "createdAt": NOW_MS - 2 * HOUR_MS,
        },
        "r2": {
            "category": "Pothole",
            "description": "Road surface broken",
            "location": {"lat": 10.79, "lng": 78.68},
            "status": "in-progress",
            "area": "Thillai Nagar",
            "pinCode": "620018",
            "user": "citizen-002",
            "createdAt": NOW_MS - 5 * HOUR_MS,
        },
        "r3": {
            "category": "Garbage",
            "description": "Garbage dump overflowing",
            "location": {"lat": 9.92, "lng": 78.12},
            "status": "completed",
            "area": "Anna Nagar",
            "user": "citizen-001",
            "department": "Sanitation Department",
            "createdAt": NOW_MS - 30 * HOUR_MS,
            "updatedAt": "2024-05-31T10:30:00Z",
        },
        "r4": {
            "category": "Water Leakage",
            "description": "Pipeline burst",
            "location": {"lat": "9.93", "lng": "78.11"},
            "user": "citizen-003",
            "createdAt": NOW_MS - 1 * HOUR_MS,
        },
        "r5": {
            "category": "Other",
            "description": "Fallen tree branch",
            "status": "pending",
            "locality": "Cantonment",
            "user": "citizen-004",
        },
    }


@pytest.fixture
def store(sample_records) -> InMemoryReportStore:
    return InMemoryReportStore(sample_records)


@pytest.fixture
def recording_gateway() -> RecordingGateway:
    return RecordingGateway()
