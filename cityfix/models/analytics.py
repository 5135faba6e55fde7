"""
Analytics models for the admin dashboard (overview and locality views).
"""

from typing import Dict, List, Optional

from pydantic import Field

from cityfix.models.base import CityFixModel


class Analytics(CityFixModel):
    """Aggregate counts over a report snapshot."""
    total: int = 0
    pending: int = 0
    doing: int = 0
    completed: int = 0
    category_distribution: Dict[str, int] = Field(default_factory=dict)  # {"Pothole": 4, "Garbage": 2}
    status_distribution: Dict[str, int] = Field(default_factory=dict)  # {"pending": 3, "resolved": 1}


class LocalitySummary(CityFixModel):
    """Per-locality (pin code / area) breakdown."""
    name: str
    total: int = 0
    pending: int = 0
    doing: int = 0
    completed: int = 0
    completion_rate: int = Field(0, ge=0, le=100, description="Percent resolved")
    lat: Optional[float] = None
    lng: Optional[float] = None


class DepartmentGroup(CityFixModel):
    """Reports routed to one department."""
    department: str
    count: int = 0
    report_ids: List[str] = Field(default_factory=list)
