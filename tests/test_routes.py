"""API tests using FastAPI TestClient with dependency overrides."""

import csv
import io

import pytest
from fastapi.testclient import TestClient

from cityfix.main import app
from cityfix.routes.reports import get_enrichment_pipeline
from cityfix.services.department_classifier import DepartmentClassifier, get_department_classifier
from cityfix.services.enrichment_pipeline import EnrichmentPipeline
from cityfix.services.insights_service import ClusterInsightsService, get_insights_service
from cityfix.services.cluster_aggregation_service import ClusterAggregator
from cityfix.services.report_service import InFlightTracker, ReportService, get_report_service
from cityfix.services.report_store import ReportStoreError, get_report_store

from tests.helpers import RecordingGateway


@pytest.fixture
def in_flight():
    return InFlightTracker()


@pytest.fixture
def client(store, in_flight):
    classifier = DepartmentClassifier()
    pipeline = EnrichmentPipeline(RecordingGateway(), batch_delay_seconds=0)
    insights = ClusterInsightsService(store, ClusterAggregator(), pipeline, min_interval_seconds=0)

    app.dependency_overrides[get_report_store] = lambda: store
    app.dependency_overrides[get_department_classifier] = lambda: classifier
    app.dependency_overrides[get_report_service] = lambda: ReportService(store, classifier, in_flight)
    app.dependency_overrides[get_insights_service] = lambda: insights
    app.dependency_overrides[get_enrichment_pipeline] = lambda: pipeline

    yield TestClient(app)

    app.dependency_overrides.clear()


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "running"
    assert client.get("/health").json()["status"] == "healthy"

    store_health = client.get("/health/store").json()
    assert store_health["connected"] is True
    assert store_health["reports_count"] == 5


def test_store_health_failure(client, store, monkeypatch):
    def broken():
        raise ReportStoreError("unreachable")

    monkeypatch.setattr(store, "snapshot", broken)
    assert client.get("/health/store").status_code == 503


def test_clusters(client):
    response = client.get("/admin/clusters")

    assert response.status_code == 200
    body = response.json()
    assert body["state"] == "ok"
    assert body["source"] == "local"
    assert body["notice"] is None
    assert {c["clusterKey"] for c in body["clusters"]} == {"10.8_78.7", "9.9_78.1"}
    for cluster in body["clusters"]:
        assert cluster["locationName"].startswith("Place ")
        assert cluster["stats"]["total"] == len(cluster["memberReportIds"])


def test_clusters_refresh_sees_new_reports(client, store):
    client.get("/admin/clusters")
    store.put("r9", {"category": "Pothole", "location": {"lat": 12.97, "lng": 77.59}})

    body = client.get("/admin/clusters", params={"refresh": "true"}).json()

    assert "13.0_77.6" in {c["clusterKey"] for c in body["clusters"]}


def test_clusters_with_no_locatable_reports(client, store):
    for report_id in ("r1", "r2", "r3", "r4"):
        store.delete(report_id)

    body = client.get("/admin/clusters", params={"refresh": "true"}).json()

    assert body["clusters"] == []
    assert body["state"] == "no_locatable_reports"
    assert body["notice"]


def test_analytics(client):
    body = client.get("/admin/analytics").json()

    assert body["total"] == 5
    assert body["pending"] == 3
    assert body["doing"] == 1
    assert body["completed"] == 1
    assert body["categoryDistribution"]["Pothole"] == 2


def test_localities(client):
    body = client.get("/admin/localities").json()
    assert body[0]["name"] == "620018"
    assert body[0]["total"] == 2


def test_departments(client):
    groups = client.get("/admin/departments").json()
    assert len(groups) == 5
    assert sum(g["count"] for g in groups) == 5

    only = client.get("/admin/departments", params={"department": "Sanitation Department"}).json()
    assert only == [{"department": "Sanitation Department", "count": 1, "reportIds": ["r3"]}]


def test_change_status(client, store):
    response = client.patch("/admin/reports/r1/status", json={"status": "in-progress"})

    assert response.status_code == 200
    assert response.json()["report"] == {"id": "r1", "status": "in-progress"}
    assert store.get("r1").status.value == "in-progress"


@pytest.mark.parametrize(
    "path,payload,expected",
    [
        ("/admin/reports/r1/status", {"status": "rejected"}, 422),
        ("/admin/reports/r1/status", {}, 422),
        ("/admin/reports/nope/status", {"status": "resolved"}, 404),
        ("/admin/reports/r1/department", {"department": "Ministry of Magic"}, 422),
    ],
)
def test_write_errors(client, path, payload, expected):
    assert client.patch(path, json=payload).status_code == expected


def test_write_while_in_flight_conflicts(client, in_flight):
    in_flight.try_acquire("r1")
    response = client.patch("/admin/reports/r1/status", json={"status": "resolved"})
    assert response.status_code == 409


def test_store_write_failure_is_bad_gateway(client, store, monkeypatch):
    def broken(report_id, fields):
        raise ReportStoreError("permission denied")

    monkeypatch.setattr(store, "_write", broken)
    response = client.patch("/admin/reports/r1/status", json={"status": "resolved"})
    assert response.status_code == 502


def test_assign_department_and_remarks(client, store):
    assert client.patch(
        "/admin/reports/r1/department", json={"department": "Electricity Department"}
    ).status_code == 200
    assert client.post("/admin/reports/r1/remarks", json={"remarks": "Crew dispatched"}).status_code == 200

    report = store.get("r1")
    assert report.department == "Electricity Department"
    assert report.remarks == "Crew dispatched"


def test_blank_remarks_rejected(client):
    assert client.post("/admin/reports/r1/remarks", json={"remarks": ""}).status_code == 422


def test_export_csv(client):
    response = client.get("/admin/reports/export.csv", params={"status": "pending"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0][0] == "Report ID"
    assert [row[0] for row in rows[1:]] == ["r4", "r1", "r5"]


def test_export_csv_rejects_unknown_status(client):
    assert client.get("/admin/reports/export.csv", params={"status": "rejected"}).status_code == 422


def test_reports_listing(client):
    body = client.get("/reports").json()
    assert [r["id"] for r in body] == ["r4", "r1", "r2", "r3", "r5"]
    assert "locationName" not in body[0]


def test_reports_for_user_with_location_names(client):
    body = client.get("/reports", params={"user": "citizen-001", "with_location_names": "true"}).json()

    assert [r["id"] for r in body] == ["r1", "r3"]
    assert body[0]["locationName"] == "Place 10.81,78.71"
    assert body[0]["pinCode"] == "620018"


def test_startup_survives_unavailable_store(monkeypatch, caplog):
    import cityfix.main as main_module

    def unavailable():
        raise ReportStoreError("no credentials")

    monkeypatch.setattr(main_module, "get_insights_service", unavailable)

    with caplog.at_level("WARNING", logger="cityfix.main"):
        with TestClient(app) as started:
            assert started.get("/health").status_code == 200

    warnings = [r.getMessage() for r in caplog.records if r.name == "cityfix.main"]
    assert "Cluster insights not started: no credentials" in warnings
    assert all(message == message.lstrip() for message in warnings)
