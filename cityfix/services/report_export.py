"""
Report export - filtered CSV download for administrators.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional
import csv
import io

from cityfix.models.report import Report, sort_newest_first
from cityfix.services.department_classifier import DepartmentClassifier, get_department_classifier
from cityfix.services.status_workflow import ReportStatus

EXPORT_COLUMNS = [
    "Report ID",
    "Category",
    "Description",
    "Status",
    "Department",
    "Area",
    "Pin Code",
    "Latitude",
    "Longitude",
    "Submitted On",
    "Last Updated",
]

MISSING = "N/A"


def format_timestamp(epoch_millis: Optional[int]) -> str:
    """DD-MM-YYYY HH:MM in UTC, or N/A."""
    if epoch_millis is None:
        return MISSING
    try:
        moment = datetime.fromtimestamp(epoch_millis / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return MISSING
    return moment.strftime("%d-%m-%Y %H:%M")


def filter_reports(
    reports: Iterable[Report],
    status: Optional[ReportStatus] = None,
    department: Optional[str] = None,
    classifier: Optional[DepartmentClassifier] = None,
) -> List[Report]:
    """Reports matching a normalized status and/or effective department, newest first."""
    classifier = classifier or get_department_classifier()
    selected = []
    for report in reports:
        if status is not None and report.status != status:
            continue
        if department and classifier.effective_department(report) != department:
            continue
        selected.append(report)
    return sort_newest_first(selected)


def export_reports_csv(reports: Iterable[Report], classifier: Optional[DepartmentClassifier] = None) -> str:
    classifier = classifier or get_department_classifier()
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(EXPORT_COLUMNS)

    for r in reports:
        located = r.location is not None
        writer.writerow([
            r.id,
            r.category or MISSING,
            r.description or MISSING,
            r.status.value,
            classifier.effective_department(r),
            r.area or r.locality or MISSING,
            r.pin_code or MISSING,
            r.location.lat if located and r.location.lat is not None else MISSING,
            r.location.lng if located and r.location.lng is not None else MISSING,
            format_timestamp(r.created_at),
            format_timestamp(r.updated_at),
        ])

    return buffer.getvalue()
