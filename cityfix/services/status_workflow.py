"""
Status normalization - the single read boundary for report status.

DESIGN PRINCIPLES:
- One canonical enumeration: pending, in-progress, resolved
- Absent or unknown status reads as pending, everywhere
- Writes only accept values that parse to a canonical status
"""

from enum import Enum
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)


class ReportStatus(str, Enum):
    """
    Canonical report lifecycle.

    PENDING → IN_PROGRESS → RESOLVED
    """
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"


# Spellings seen in stored records and older admin views
STATUS_ALIASES: Dict[str, ReportStatus] = {
    "pending": ReportStatus.PENDING,
    "open": ReportStatus.PENDING,
    "new": ReportStatus.PENDING,
    "in-progress": ReportStatus.IN_PROGRESS,
    "in_progress": ReportStatus.IN_PROGRESS,
    "in progress": ReportStatus.IN_PROGRESS,
    "inprogress": ReportStatus.IN_PROGRESS,
    "doing": ReportStatus.IN_PROGRESS,
    "resolved": ReportStatus.RESOLVED,
    "completed": ReportStatus.RESOLVED,
    "complete": ReportStatus.RESOLVED,
    "done": ReportStatus.RESOLVED,
    "closed": ReportStatus.RESOLVED,
}

# Keys used by cluster stats and analytics counters
STAT_KEYS: Dict[ReportStatus, str] = {
    ReportStatus.PENDING: "pending",
    ReportStatus.IN_PROGRESS: "doing",
    ReportStatus.RESOLVED: "completed",
}


def parse_status(value) -> Optional[ReportStatus]:
    """
    Strictly parse a status value.

    Returns:
        The canonical status, or None when the value is not a known spelling
    """
    if isinstance(value, ReportStatus):
        return value
    if not isinstance(value, str):
        return None
    return STATUS_ALIASES.get(value.strip().lower())


def normalize_status(value) -> ReportStatus:
    """
    Normalize any stored status value to the canonical enumeration.

    Absent, empty and unrecognized values all read as PENDING.
    """
    status = parse_status(value)
    if status is None:
        if value not in (None, ""):
            logger.debug(f"Unrecognized report status {value!r}, treating as pending")
        return ReportStatus.PENDING
    return status


def stat_key(value) -> str:
    """Counter key ("pending" / "doing" / "completed") for a raw status value."""
    return STAT_KEYS[normalize_status(value)]
