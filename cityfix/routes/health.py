"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

from fastapi import APIRouter, Depends, HTTPException
from cityfix.core.settings import settings
from cityfix.services.report_store import ReportStore, get_report_store
from datetime import datetime, timezone
import asyncio


router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check():
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/store")
async def store_health(store: ReportStore = Depends(get_report_store)):
    """
    Report store connectivity check.
    Reads the current snapshot and reports how many reports it holds.
    """
    try:
        loop = asyncio.get_running_loop()
        reports = await loop.run_in_executor(None, store.snapshot)

        return {
            "status": "healthy",
            "store": "mock" if settings.USE_MOCK_DB else "firebase-rtdb",
            "connected": True,
            "reports_count": len(reports),
            "timestamp": datetime.now(timezone.utc).isoformat()
        }
    except Exception as e:
        raise HTTPException(
            status_code=503,
            detail=f"Report store connection failed: {str(e)}"
        )
