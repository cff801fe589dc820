"""Health check endpoint — public, no auth required."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from src.cycles.config_loader import get_cycle_config
from src.dependencies import AppSettings

router = APIRouter(tags=["system"])


@router.get("/health")
async def health_check(settings: AppSettings) -> dict:
    """Liveness probe. Returns 200 if the API process is up."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "cycle_config_version": get_cycle_config().version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
