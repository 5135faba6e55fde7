"""
Department Classifier - keyword-based routing of reports to departments.

DESIGN PRINCIPLES:
- First match wins, in table order (no scoring across departments)
- A manually assigned department is never overwritten; classification is
  only a suggestion for reports without one
- Policy data lives in config.departments, dispatch logic lives here
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import logging

from cityfix.config.departments import DEFAULT_DEPARTMENT, DEPARTMENT_KEYWORDS
from cityfix.models.analytics import DepartmentGroup
from cityfix.models.report import Report, sort_newest_first

logger = logging.getLogger(__name__)


class DepartmentClassifier:
    """Maps free text to a responsible department."""

    def __init__(
        self,
        table: Sequence[Tuple[str, Sequence[str]]] = DEPARTMENT_KEYWORDS,
        default_department: str = DEFAULT_DEPARTMENT,
    ):
        self.table = [(name, tuple(k.lower() for k in keywords)) for name, keywords in table]
        self.default_department = default_department

    @property
    def departments(self) -> List[str]:
        """All routable departments, table order, default included."""
        names = [name for name, _ in self.table]
        if self.default_department not in names:
            names.append(self.default_department)
        return names

    def classify(self, text: Optional[str]) -> str:
        """
        Classify free text.

        Example:
            classify("there is a pothole on main road") -> "Road & Transport Department"
        """
        search_text = (text or "").lower()
        if search_text:
            for department, keywords in self.table:
                if any(keyword in search_text for keyword in keywords):
                    return department
        return self.default_department

    def suggest(self, report: Report) -> str:
        """
        Suggested department from the report's own text.

        Category/title first; the description is only consulted when the
        category text alone lands on the default department.
        """
        department = self.classify(f"{report.issue_name or report.category or ''} {report.category or ''}")
        if department == self.default_department and report.description:
            department = self.classify(report.description)
        return department

    def effective_department(self, report: Report) -> str:
        """Manual assignment if present, otherwise the suggestion."""
        return report.department or self.suggest(report)

    def group_by_department(self, reports: Iterable[Report]) -> List[DepartmentGroup]:
        """Every department (zero-count included) with its reports, newest first."""
        grouped: Dict[str, List[str]] = {name: [] for name in self.departments}
        for report in sort_newest_first(reports):
            department = self.effective_department(report)
            # Manually assigned departments outside the table still get a group
            grouped.setdefault(department, []).append(report.id)

        return [
            DepartmentGroup(department=name, count=len(ids), report_ids=ids)
            for name, ids in grouped.items()
        ]


_classifier: Optional[DepartmentClassifier] = None


def get_department_classifier() -> DepartmentClassifier:
    """Get or create the DepartmentClassifier singleton (table loaded once)."""
    global _classifier
    if _classifier is None:
        _classifier = DepartmentClassifier()
        logger.info(f"Department classifier loaded with {len(_classifier.table)} departments")
    return _classifier


def classify(text: Optional[str]) -> str:
    return get_department_classifier().classify(text)
