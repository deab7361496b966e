"""Health check endpoints."""
from fastapi import APIRouter

from leasecore import __version__

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_liveness() -> dict[str, str]:
    """
    Liveness check endpoint.

    Returns 200 OK if the service is running; dependencies are not checked.
    """
    return {"status": "healthy", "version": __version__}
