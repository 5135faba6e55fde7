"""
Pydantic models for citizen reports.
These models are the read boundary for raw store records: coordinates,
timestamps and status are normalized here, once, for every consumer.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
import math

from pydantic import Field, field_validator

from cityfix.models.base import CityFixModel
from cityfix.services.status_workflow import ReportStatus, normalize_status
from cityfix.utils.geocoding import is_valid_coordinate


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_text(value: Any) -> Optional[str]:
    """Scalars as strings; nested objects and null are dropped."""
    if value is None or isinstance(value, (dict, list)):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    return None


def parse_epoch_millis(value: Any) -> Optional[int]:
    """
    Parse a stored timestamp into epoch milliseconds.

    Accepts epoch millis (int/float/numeric string) and ISO-8601 strings.
    Returns None for anything unparseable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp() * 1000)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(float(text))
        except ValueError:
            pass
        try:
            dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return int(dt.timestamp() * 1000)
    return None


class Location(CityFixModel):
    """GPS position attached to a report. Either coordinate may be missing."""
    lat: Optional[float] = None
    lng: Optional[float] = None

    @field_validator("lat", "lng", mode="before")
    @classmethod
    def _coerce_coordinate(cls, value):
        return _to_float(value)

    @property
    def is_valid(self) -> bool:
        """Both coordinates present, finite and on the globe."""
        return is_valid_coordinate(self.lat, self.lng)


class Report(CityFixModel):
    """
    One citizen submission as read from the report store.

    The core never mutates a Report; state changes go back to the store as
    update intents (see services.report_service).
    """
    id: str = Field(..., description="Store-assigned report key")
    category: Optional[str] = Field(None, description="User-chosen category (Pothole, Streetlight, ...)")
    issue_name: Optional[str] = Field(None, description="Optional short title")
    predicted_category: Optional[str] = Field(None, description="Machine suggestion, informational only")
    description: str = ""
    location: Optional[Location] = None
    status: ReportStatus = ReportStatus.PENDING
    department: Optional[str] = Field(None, description="Manually assigned department (always wins)")
    remarks: Optional[str] = None
    area: Optional[str] = None
    locality: Optional[str] = None
    pin_code: Optional[str] = None
    user: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[int] = Field(None, description="Epoch milliseconds")
    updated_at: Optional[int] = Field(None, description="Epoch milliseconds")

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value):
        return normalize_status(value)

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _parse_timestamp(cls, value):
        return parse_epoch_millis(value)

    @field_validator("pin_code", mode="before")
    @classmethod
    def _stringify_pin_code(cls, value):
        if value is None or value == "":
            return None
        return _to_text(value)

    @field_validator(
        "category", "issue_name", "predicted_category", "area", "locality",
        "user", "remarks", "image_url", mode="before",
    )
    @classmethod
    def _stringify_text(cls, value):
        return _to_text(value)

    @field_validator("description", mode="before")
    @classmethod
    def _description_text(cls, value):
        return _to_text(value) or ""

    @field_validator("department", mode="before")
    @classmethod
    def _blank_department_is_unset(cls, value):
        value = _to_text(value)
        if value is not None and not value.strip():
            return None
        return value

    @field_validator("location", mode="before")
    @classmethod
    def _drop_non_mapping_location(cls, value):
        if value is not None and not isinstance(value, (dict, Location)):
            return None
        return value

    @classmethod
    def from_record(cls, report_id: str, data: Dict[str, Any]) -> "Report":
        """Build a Report from a raw store record keyed by report_id."""
        return cls.model_validate({**data, "id": report_id})

    @property
    def has_valid_location(self) -> bool:
        return self.location is not None and self.location.is_valid


class StatusUpdateRequest(CityFixModel):
    """Admin request to move a report to a new status."""
    status: str = Field(..., min_length=1, description="pending | in-progress | resolved")


class DepartmentAssignmentRequest(CityFixModel):
    """Admin request to manually assign a department."""
    department: str = Field(..., min_length=1, max_length=100)


class RemarksRequest(CityFixModel):
    """Admin remarks attached to a report."""
    remarks: str = Field(..., min_length=1, max_length=1000)

    class Config:
        json_schema_extra = {
            "example": {
                "remarks": "Crew dispatched, expected fix by Friday.",
            }
        }


def sort_newest_first(reports):
    """Reports ordered by createdAt descending; reports without createdAt go last."""
    return sorted(
        reports,
        key=lambda r: (r.created_at is not None, r.created_at or 0),
        reverse=True,
    )
