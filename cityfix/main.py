"""
CityFix Insights - FastAPI Application Entry Point

Geographic intelligence for citizen infrastructure reports: spatial
clusters, place names, priority scores and department routing for the
administrator console.

DESIGN PRINCIPLES:
- The report store is the single source of truth; everything here is derived
- Derived views degrade (fallback names, local clusters) instead of failing
- Admin writes are partial updates sent back to the store
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cityfix.core.settings import settings
from cityfix.routes import admin, health, reports
from cityfix.services.insights_service import get_insights_service, stop_insights_service

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Clusters, place names, priorities and department routing for civic issue reports",
    debug=settings.DEBUG
)


# Global exception handler to catch ALL exceptions
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and log them with full traceback."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}",
        exc_info=(type(exc), exc, exc.__traceback__),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": f"Internal server error: {str(exc)}"}
    )


# Pydantic validation error handler
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Catch Pydantic validation errors and log them."""
    logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.errors(), "body": exc.body}
    )


# CORS: explicit origins from settings, never "*"
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Application lifecycle events
@app.on_event("startup")
async def startup_event():
    """
    Initialize services on application startup.
    Currently: report store subscription driving cluster insights
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    try:
        get_insights_service().start()
    except Exception as e:
        logger.warning(f"Cluster insights not started: {e}")
        logger.warning("The app will start but clusters are computed on request only.")


@app.on_event("shutdown")
async def shutdown_event():
    """
    Cleanup on application shutdown.
    """
    stop_insights_service()
    logger.info(f"Shutting down {settings.APP_NAME}")


# Include routers
app.include_router(health.router)
app.include_router(reports.router)
app.include_router(admin.router)


# Root endpoint
@app.get("/")
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "clusters": "/admin/clusters"
    }
