"""
Admin endpoints - the administrator console's read models and write intents.

DESIGN PRINCIPLES:
- Read endpoints only derive (clusters, analytics, localities, departments);
  they never write back to the store
- Write endpoints send one partial update per action (status, department,
  remarks); the store's next snapshot carries the change to every view
- Cluster and geocoding failures never surface as HTTP errors; the
  clusters payload carries a notice instead

SCOPE OF ADMIN:
✅ Change report status (pending / in-progress / resolved)
✅ Manually assign a department (overrides the keyword suggestion)
✅ Add remarks
✅ Export filtered reports as CSV

❌ NOT edit report content
❌ NOT delete reports
"""

from typing import List, Optional
import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response

from cityfix.models.analytics import Analytics, DepartmentGroup, LocalitySummary
from cityfix.models.cluster import AggregationResult
from cityfix.models.report import DepartmentAssignmentRequest, RemarksRequest, StatusUpdateRequest
from cityfix.services.analytics_service import summarize, summarize_localities
from cityfix.services.department_classifier import DepartmentClassifier, get_department_classifier
from cityfix.services.insights_service import ClusterInsightsService, get_insights_service
from cityfix.services.report_export import export_reports_csv, filter_reports
from cityfix.services.report_service import (
    ReportService,
    ReportUpdateError,
    ReportUpdateInProgress,
    get_report_service,
)
from cityfix.services.report_store import ReportNotFound, ReportStore, ReportStoreError, get_report_store
from cityfix.services.status_workflow import ReportStatus, parse_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


async def _snapshot(store: ReportStore):
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(None, store.snapshot)
    except ReportStoreError as e:
        logger.error(f"Failed to read reports: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to read reports: {str(e)}"
        )


async def _run_write(action, *args):
    """Run a blocking ReportService write and map its errors to HTTP."""
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(None, action, *args)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except ReportNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ReportUpdateInProgress as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ReportUpdateError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.get("/clusters", response_model=AggregationResult)
async def get_clusters(
    refresh: bool = Query(False, description="Force a new aggregation run"),
    insights: ClusterInsightsService = Depends(get_insights_service),
):
    """
    Latest enriched clusters, highest priority first.

    The payload always has a state and, when something degraded (no
    locatable reports, clustering service down), a notice string.
    """
    result = insights.latest
    if refresh or result is None:
        result = await insights.refresh()
    return result


@router.get("/analytics", response_model=Analytics)
async def get_analytics(store: ReportStore = Depends(get_report_store)):
    """Total / pending / doing / completed plus category and status distributions."""
    reports = await _snapshot(store)
    return summarize(reports)


@router.get("/localities", response_model=List[LocalitySummary])
async def get_localities(store: ReportStore = Depends(get_report_store)):
    """Per-locality breakdown (pin code, area, locality), busiest first."""
    reports = await _snapshot(store)
    return summarize_localities(reports)


@router.get("/departments", response_model=List[DepartmentGroup])
async def get_departments(
    department: Optional[str] = Query(None, description="Only this department"),
    store: ReportStore = Depends(get_report_store),
    classifier: DepartmentClassifier = Depends(get_department_classifier),
):
    """Reports grouped by effective department (manual assignment wins)."""
    reports = await _snapshot(store)
    groups = classifier.group_by_department(reports)
    if department:
        groups = [g for g in groups if g.department == department]
    return groups


@router.patch("/reports/{report_id}/status")
async def change_status(
    report_id: str,
    request: StatusUpdateRequest,
    service: ReportService = Depends(get_report_service),
):
    """
    Change report status.

    Raises:
        404: Report not found
        409: Another update for this report is in flight
        422: Status is not pending / in-progress / resolved
        502: Store rejected the write
    """
    updated = await _run_write(service.update_status, report_id, request.status)
    return {"success": True, "message": f"Status updated to {updated['status']}", "report": updated}


@router.patch("/reports/{report_id}/department")
async def assign_department(
    report_id: str,
    request: DepartmentAssignmentRequest,
    service: ReportService = Depends(get_report_service),
):
    """Manually assign a department; it overrides the keyword suggestion from now on."""
    updated = await _run_write(service.assign_department, report_id, request.department)
    return {"success": True, "message": f"Assigned to {updated['department']}", "report": updated}


@router.post("/reports/{report_id}/remarks")
async def add_remarks(
    report_id: str,
    request: RemarksRequest,
    service: ReportService = Depends(get_report_service),
):
    updated = await _run_write(service.add_remarks, report_id, request.remarks)
    return {"success": True, "message": "Remarks saved", "report": updated}


@router.get("/reports/export.csv")
async def export_reports(
    status_filter: Optional[str] = Query(None, alias="status", description="pending | in-progress | resolved"),
    department: Optional[str] = Query(None),
    store: ReportStore = Depends(get_report_store),
    classifier: DepartmentClassifier = Depends(get_department_classifier),
):
    """Download the filtered reports as CSV."""
    canonical: Optional[ReportStatus] = None
    if status_filter:
        canonical = parse_status(status_filter)
        if canonical is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Invalid status {status_filter!r}. Allowed: {[s.value for s in ReportStatus]}"
            )

    reports = await _snapshot(store)
    selected = filter_reports(reports, status=canonical, department=department, classifier=classifier)
    logger.info(f"Exporting {len(selected)} of {len(reports)} reports")

    return Response(
        content=export_reports_csv(selected, classifier=classifier),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="reports_export.csv"'},
    )
