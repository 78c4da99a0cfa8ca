# dealcatalog/core/lifespan.py
from contextlib import asynccontextmanager
from datetime import timedelta
import logging

import httpx
from fastapi import FastAPI

from dealcatalog.core.config import Settings, get_settings
from dealcatalog.db import http
from dealcatalog.domain.repositories.catalog_store import CatalogStore
from dealcatalog.domain.repositories.upstream_repo import UpstreamRepo
from dealcatalog.domain.services.catalog_svc import CatalogService
from dealcatalog.domain.services.refresh_svc import RefreshCoordinator

logger = logging.getLogger(__name__)


def build_catalog_service(settings: Settings, client: httpx.AsyncClient) -> CatalogService:
    store = CatalogStore()
    coordinator = RefreshCoordinator(
        store,
        UpstreamRepo(client, timeout_s=settings.upstream_timeout_s),
        settings.upstream_urls,
        keep_stale_on_total_failure=settings.keep_stale_on_total_failure,
    )
    return CatalogService(store, coordinator, ttl=timedelta(seconds=settings.catalog_ttl_s))


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # --- Startup ---
    await http.connect()
    if not settings.upstream_urls:
        logger.warning("⚠️ No UPSTREAM_URLS configured, the catalog will stay empty")
    app.state.catalog = build_catalog_service(settings, http.get_client())
    logger.info("✅ Catalog ready sources=%s ttl=%ss", len(settings.upstream_urls), settings.catalog_ttl_s)

    # Application runs
    yield

    # --- Shutdown ---
    await http.disconnect()
