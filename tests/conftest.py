"""Pytest fixtures: a controllable clock and a catalog service wired to fake upstreams."""

from datetime import timedelta

import httpx
import pytest

from dealcatalog.domain.repositories.catalog_store import CatalogStore
from dealcatalog.domain.repositories.upstream_repo import UpstreamRepo
from dealcatalog.domain.services.catalog_svc import CatalogService
from dealcatalog.domain.services.refresh_svc import RefreshCoordinator

from tests.factories import FakeClock, make_transport


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def build_service(clock):
    """Factory: store -> coordinator -> service over fake upstreams, URLs in `routes` order."""
    def _build(routes, urls=None, timeout_s=2.0, keep_stale_on_total_failure=False, ttl=timedelta(hours=4)):
        client = httpx.AsyncClient(transport=make_transport(routes))
        store = CatalogStore()
        coordinator = RefreshCoordinator(
            store,
            UpstreamRepo(client, timeout_s=timeout_s),
            urls if urls is not None else list(routes),
            keep_stale_on_total_failure=keep_stale_on_total_failure,
            clock=clock,
        )
        return CatalogService(store, coordinator, ttl=ttl, clock=clock)

    return _build
