"""Tests for dashboard analytics and the locality breakdown."""

import pytest

from cityfix.services.analytics_service import locality_name, summarize, summarize_localities
from cityfix.services.report_store import records_to_reports


def test_summarize_normalizes_missing_status(make_report):
    reports = [
        make_report("a", status="pending", category="Pothole"),
        make_report("b", status=None, category="Pothole"),
        make_report("c", status="resolved", category="Garbage"),
    ]

    analytics = summarize(reports)

    assert analytics.total == 3
    assert analytics.pending == 2
    assert analytics.doing == 0
    assert analytics.completed == 1
    assert analytics.category_distribution == {"Pothole": 2, "Garbage": 1}
    assert analytics.status_distribution == {"pending": 2, "resolved": 1}


def test_summarize_empty():
    analytics = summarize([])
    assert analytics.total == 0
    assert analytics.category_distribution == {}


def test_summarize_counts_add_up(sample_records):
    analytics = summarize(records_to_reports(sample_records))
    assert analytics.pending + analytics.doing + analytics.completed == analytics.total == 5


def test_locality_name_precedence(make_report):
    assert locality_name(make_report("a", pinCode=620018, area="Thillai Nagar")) == "620018"
    assert locality_name(make_report("b", area="Thillai Nagar", locality="Trichy")) == "Thillai Nagar"
    assert locality_name(make_report("c", locality="Cantonment")) == "Cantonment"
    assert locality_name(make_report("d")) == "Unknown Area"


def test_summarize_localities(sample_records):
    summaries = summarize_localities(records_to_reports(sample_records))
    by_name = {s.name: s for s in summaries}

    assert summaries[0].name == "620018"
    trichy = by_name["620018"]
    assert trichy.total == 2
    assert trichy.pending == 1
    assert trichy.doing == 1
    assert trichy.completion_rate == 0
    assert trichy.lat == pytest.approx(10.80)

    anna_nagar = by_name["Anna Nagar"]
    assert anna_nagar.completion_rate == 100

    cantonment = by_name["Cantonment"]
    assert cantonment.lat is None
    assert cantonment.lng is None
