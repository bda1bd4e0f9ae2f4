"""Health check endpoints.

Public endpoints for service health monitoring.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from vault_api.models import HealthResponse


router = APIRouter(tags=["Health"])


@router.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Cockpit Vault API"}


@router.get("/api/health", response_model=HealthResponse)
async def health_check():
    """Detailed health check."""
    return HealthResponse(status="ok", time=datetime.now(timezone.utc).isoformat())
