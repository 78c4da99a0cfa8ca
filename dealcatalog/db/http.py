# dealcatalog/db/http.py
import logging
import httpx
from dealcatalog.core.config import get_settings

logger = logging.getLogger(__name__)

_client: httpx.AsyncClient | None = None


async def connect():
    """
    Open the shared outbound client used to call the upstream scrapers.
    One pooled client for the whole process; per-request timeouts are applied by the caller.
    """
    global _client
    settings = get_settings()
    _client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.upstream_timeout_s),
        follow_redirects=True,
        headers={"Accept": "application/json", "User-Agent": f"{settings.APP_NAME}/{settings.GIT_SHA}"},
    )
    logger.info("✅ HTTP client ready (timeout=%ss)", settings.upstream_timeout_s)


async def disconnect():
    """Close the shared HTTP client if it is open."""
    global _client
    if _client:
        await _client.aclose()
        _client = None
        logger.info("🔌 HTTP client closed")


def get_client() -> httpx.AsyncClient:
    if _client is None:
        raise RuntimeError("HTTP client not initialized")
    return _client
