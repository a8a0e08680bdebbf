"""
Health check endpoints.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Response, status

from ..config import settings
from ..models.api_responses import HealthCheckResponse, ReadinessResponse
from ..services import SessionManager
from ..utils.constants import SessionStatus
from ..utils.dependencies import get_session_manager

router = APIRouter()


@router.get(
    "/health",
    status_code=status.HTTP_200_OK,
    summary="Basic Health Check",
    description="Returns the basic health status of the API service",
    response_description="Service health information",
    response_model=HealthCheckResponse,
    tags=["Health Checks"]
)
async def health_check() -> HealthCheckResponse:
    """
    **Basic health check endpoint**

    Returns the service status, version and environment. Does not touch
    the identity service or the database.
    """
    return HealthCheckResponse(
        status="healthy",
        timestamp=datetime.utcnow().isoformat(),
        version=settings.version,
        environment=settings.environment,
        app_name=settings.app_name
    )


@router.get(
    "/ready",
    status_code=status.HTTP_200_OK,
    response_model=ReadinessResponse,
    responses={503: {"description": "Initial auth state not known yet"}},
    tags=["Health Checks"]
)
async def readiness_check(
    response: Response,
    session: SessionManager = Depends(get_session_manager)
) -> ReadinessResponse:
    """Ready once the first auth-state callback has been handled."""
    session_status = session.status
    if session_status in (SessionStatus.UNINITIALIZED, SessionStatus.LOADING):
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(status="loading", session=session_status)

    return ReadinessResponse(status="ready", session=session_status)
