"""
Health Router

Liveness probe for load balancers and the deployment platform.
"""

from fastapi import APIRouter

from folio import __version__
from folio.models.contracts.common import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Report that the process is serving requests, with the running version."""
    return HealthResponse(status="healthy", version=__version__)
