"""
Health check endpoint covering the session and alert-store files.
"""

from pathlib import Path

from fastapi import APIRouter

from fleetwatch import __version__
from fleetwatch.api.models import ComponentHealth, HealthResponse
from fleetwatch.config.settings import get_settings
from fleetwatch.sessions.directory import SESSIONS_INDEX

router = APIRouter()


def _check_path(path: Path, kind: str) -> ComponentHealth:
    """A missing file is degraded (no data yet), not unhealthy."""
    if path.exists():
        return ComponentHealth(status="healthy", details={"path": str(path)})
    return ComponentHealth(status="degraded", details={"path": str(path), "reason": f"{kind} not found"})


@router.get("/health", response_model=HealthResponse, summary="Service health")
async def health() -> HealthResponse:
    settings = get_settings()

    components = {
        "sessions": _check_path(settings.sessions_dir / SESSIONS_INDEX, "session index"),
        "alert_store": _check_path(settings.alerts_path, "alert store"),
    }

    overall = "healthy"
    if any(c.status != "healthy" for c in components.values()):
        overall = "degraded"

    return HealthResponse(status=overall, version=__version__, components=components)
