# dealcatalog/api/v1/routers/health.py
import time
import subprocess
from fastapi import APIRouter, Depends
from dealcatalog.api.deps import catalog_dep
from dealcatalog.core.config import get_settings
from dealcatalog.domain.services.catalog_svc import CatalogService

router = APIRouter()
START_TIME = time.time()


def _git_sha(short: bool = True) -> str:
    try:
        cmd = ["git", "rev-parse", "--short" if short else "HEAD"]
        return subprocess.check_output(cmd, stderr=subprocess.DEVNULL).decode().strip()
    except (OSError, subprocess.CalledProcessError):
        return "unknown"


@router.get("/health")
async def health(svc: CatalogService = Depends(catalog_dep)):
    """
    Health check:
    - basic app info
    - catalog size, last update, staleness and whether a refresh is running
    Never triggers a refresh itself.
    """
    settings = get_settings()
    snapshot = svc.store.snapshot()
    checks: dict[str, object] = {
        "app_name": settings.APP_NAME,
        "env": settings.APP_ENV,
        "debug": settings.DEBUG,
        "version": settings.GIT_SHA if settings.GIT_SHA != "unknown" else _git_sha(),
        "uptime_seconds": int(time.time() - START_TIME),
        "sources": len(svc.coordinator.urls),
        "products": len(snapshot.products),
        "last_updated": snapshot.last_updated.isoformat(),
        "stale": svc.is_stale(),
        "refresh_in_progress": svc.coordinator.in_progress,
    }
    status = "ok" if svc.coordinator.urls else "error"
    return {"status": status, "checks": checks, "timestamp": int(time.time())}
