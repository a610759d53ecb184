"""
Health check endpoints.

Provides liveness and readiness probes. Readiness requires a loadable
cosmetics catalog.
"""

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from lockerscope.services.catalog_database import get_catalog_index

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    catalog: str | None = None
    catalog_records: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(response: Response) -> HealthResponse:
    """
    Readiness probe.

    Returns ready once the catalog index can be built. Returns 503 if the
    catalog file is missing or corrupted.
    """
    try:
        index = get_catalog_index()
    except (FileNotFoundError, ValueError):
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", catalog="missing")

    return HealthResponse(status="ready", catalog="loaded", catalog_records=len(index))
