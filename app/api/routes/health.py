from __future__ import annotations

from fastapi import APIRouter

from app.services.submission_service import utc_timestamp

router = APIRouter(tags=["Health"])

SERVICE_NAME = "form-intake-api"
SERVICE_VERSION = "1.0.0"


@router.get("/")
@router.get("/health")
def health_check() -> dict:
    """Health check endpoint.

    Used by load balancers and monitoring systems to determine service health.

    Returns:
        dict: Service name, version, status and current server time.
    """

    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "status": "healthy",
        "timestamp": utc_timestamp(),
    }
