"""Tests for keyword-based department routing."""

import pytest

from cityfix.config.departments import DEFAULT_DEPARTMENT, DEPARTMENT_KEYWORDS
from cityfix.services.department_classifier import DepartmentClassifier, classify


@pytest.fixture
def classifier():
    return DepartmentClassifier()


@pytest.mark.parametrize(
    "text,expected",
    [
        ("there is a pothole on main road", "Road & Transport Department"),
        ("POTHOLE!!", "Road & Transport Department"),
        ("Transformer sparking since morning", "Electricity Department"),
        ("Garbage piling up near the market", "Sanitation Department"),
        ("Water leakage in the lane", "Water Supply Department"),
        ("random unrelated text", "General Maintenance"),
        ("", "General Maintenance"),
        (None, "General Maintenance"),
    ],
)
def test_classify(classifier, text, expected):
    assert classifier.classify(text) == expected


def test_first_department_in_table_order_wins(classifier):
    # Matches both sanitation ("garbage") and roads ("road"); roads come first
    assert classifier.classify("garbage thrown on the road") == "Road & Transport Department"


def test_module_level_classify_uses_shared_table():
    assert classify("there is a pothole on main road") == "Road & Transport Department"


def test_departments_follow_table_order(classifier):
    assert classifier.departments == [name for name, _ in DEPARTMENT_KEYWORDS]
    assert classifier.departments[-1] == DEFAULT_DEPARTMENT


def test_manual_department_always_wins(classifier, make_report):
    report = make_report("a", category="Pothole", department="Water Supply Department")
    assert classifier.effective_department(report) == "Water Supply Department"


def test_description_is_consulted_when_category_is_generic(classifier, make_report):
    report = make_report("a", category="Other", description="Burst pipe flooding the lane")
    assert classifier.suggest(report) == "Water Supply Department"


def test_category_takes_precedence_over_description(classifier, make_report):
    report = make_report("a", category="Pothole", description="Water collecting inside it")
    assert classifier.suggest(report) == "Road & Transport Department"


def test_group_by_department_includes_empty_departments(classifier, make_report):
    reports = [
        make_report("old", category="Pothole", createdAt=1000),
        make_report("new", category="Pothole", createdAt=2000),
        make_report("g", category="Garbage", createdAt=1500),
    ]

    groups = {g.department: g for g in classifier.group_by_department(reports)}

    assert list(groups) == classifier.departments
    assert groups["Road & Transport Department"].report_ids == ["new", "old"]
    assert groups["Sanitation Department"].count == 1
    assert groups["Electricity Department"].count == 0
    assert sum(g.count for g in groups.values()) == 3


def test_custom_table_and_default():
    custom = DepartmentClassifier(table=[("Parks", ["tree"])], default_department="Front Desk")
    assert custom.classify("tree fell") == "Parks"
    assert custom.classify("noise") == "Front Desk"
    assert custom.departments == ["Parks", "Front Desk"]
