"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from dnav import __version__
from dnav.api.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint.

    Returns server status and version.
    """
    return HealthResponse(status="healthy", version=__version__)
