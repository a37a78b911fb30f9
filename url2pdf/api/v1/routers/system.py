"""
System Router - Health and status endpoints.
"""

from fastapi import APIRouter

from ....config import settings
from ....models import HealthResponse, utc_timestamp
from ....services.browser_pool import session_manager

router = APIRouter(tags=["system"])


@router.api_route("/health", methods=["GET", "HEAD"], response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Check service health.

    Returns:
        HealthResponse with status and session usage
    """
    return HealthResponse(
        status="OK",
        timestamp=utc_timestamp(),
        active_sessions=session_manager.active_sessions,
        max_concurrent_sessions=session_manager.max_sessions,
    )


@router.api_route("/", methods=["GET", "HEAD"])
async def root() -> dict:
    """Root endpoint."""
    return {
        "message": "URL to PDF API is running",
        "service": settings.api_title,
        "version": settings.api_version,
        "endpoints": {
            "GET /health": "Health check",
            "POST /generate-pdf": "Generate PDF from URL",
            "GET /generate-pdf": "Generate PDF from URL (query params)",
        },
    }
