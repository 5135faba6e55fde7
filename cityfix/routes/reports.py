"""
Report endpoints - read-only report listing for the citizen dashboard.
"""

from typing import Dict, List, Optional
import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from cityfix.models.report import Report
from cityfix.services.enrichment_pipeline import EnrichmentPipeline, build_enrichment_pipeline
from cityfix.services.report_store import ReportStore, ReportStoreError, get_report_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])

_pipeline: Optional[EnrichmentPipeline] = None


def get_enrichment_pipeline() -> EnrichmentPipeline:
    """Get or create the EnrichmentPipeline used for per-report names."""
    global _pipeline
    if _pipeline is None:
        _pipeline = build_enrichment_pipeline()
    return _pipeline


@router.get("")
async def get_reports(
    user: Optional[str] = Query(None, description="Only reports submitted by this user"),
    with_location_names: bool = Query(False, description="Resolve a place name for each report"),
    store: ReportStore = Depends(get_report_store),
    pipeline: EnrichmentPipeline = Depends(get_enrichment_pipeline),
):
    """
    Reports, newest first.

    With with_location_names=true, each located report also gets a
    locationName; lookups that fail fall back to a coordinate label.
    """
    loop = asyncio.get_running_loop()
    try:
        reports: List[Report] = await loop.run_in_executor(None, store.snapshot)
    except ReportStoreError as e:
        logger.error(f"GET /reports failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to retrieve reports: {str(e)}",
        )

    if user:
        reports = [r for r in reports if r.user == user]

    names: Dict[str, str] = {}
    if with_location_names:
        names = await pipeline.enrich_reports(reports)

    payload = []
    for report in reports:
        item = report.model_dump(mode="json", by_alias=True)
        if with_location_names:
            item["locationName"] = names.get(report.id)
        payload.append(item)
    return payload
