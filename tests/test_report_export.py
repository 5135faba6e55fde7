"""Tests for the CSV report export."""

import csv
import io

from cityfix.services.report_export import EXPORT_COLUMNS, export_reports_csv, filter_reports, format_timestamp
from cityfix.services.report_store import records_to_reports
from cityfix.services.status_workflow import ReportStatus


def _rows(text):
    return list(csv.reader(io.StringIO(text)))


def test_format_timestamp():
    assert format_timestamp(1717200000000) == "01-06-2024 00:00"
    assert format_timestamp(None) == "N/A"
    assert format_timestamp(10 ** 17) == "N/A"
    assert format_timestamp(-(10 ** 17)) == "N/A"


def test_export_columns_and_missing_values(make_report):
    report = make_report("a", 10.8, 78.7, category="Pothole", description="Big hole", createdAt=1717200000000)

    rows = _rows(export_reports_csv([report]))

    assert rows[0] == EXPORT_COLUMNS
    assert rows[1] == [
        "a", "Pothole", "Big hole", "pending", "Road & Transport Department",
        "N/A", "N/A", "10.8", "78.7", "01-06-2024 00:00", "N/A",
    ]


def test_export_quotes_commas(make_report):
    report = make_report("a", category="Other", description="Broken bench, near gate")
    rows = _rows(export_reports_csv([report]))
    assert rows[1][2] == "Broken bench, near gate"


def test_filter_by_status_and_department(sample_records):
    reports = records_to_reports(sample_records)

    pending = filter_reports(reports, status=ReportStatus.PENDING)
    assert [r.id for r in pending] == ["r4", "r1", "r5"]

    sanitation = filter_reports(reports, department="Sanitation Department")
    assert [r.id for r in sanitation] == ["r3"]

    both = filter_reports(reports, status=ReportStatus.PENDING, department="Road & Transport Department")
    assert [r.id for r in both] == ["r1"]


def test_out_of_range_timestamps_export_as_missing(make_report):
    report = make_report("a", category="Pothole", createdAt=10 ** 17, updatedAt=-(10 ** 17))

    rows = _rows(export_reports_csv([report]))

    assert rows[1][-2:] == ["N/A", "N/A"]
