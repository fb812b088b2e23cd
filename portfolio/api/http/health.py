"""Health check endpoint for monitoring service status."""

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from portfolio.dependencies import ConnectionManagerDep, DatabaseDep

router = APIRouter()


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    database: str
    websocket_connections: int


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check endpoint",
    tags=["health"],
)
async def health_check(
    response: Response,
    database: DatabaseDep,
    manager: ConnectionManagerDep,
) -> HealthResponse:
    """
    Check health status of the application and its database.

    Returns:
        HealthResponse: Health status of the service and dependencies.
        Returns 503 Service Unavailable if the database is unreachable.
    """
    if database is None:
        db_status = "not configured"
    elif await database.ping():
        db_status = "healthy"
    else:
        db_status = "unhealthy"

    overall_status = "unhealthy" if db_status == "unhealthy" else "healthy"
    if overall_status == "unhealthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status=overall_status,
        database=db_status,
        websocket_connections=manager.active_connections,
    )
