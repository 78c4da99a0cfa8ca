from __future__ import annotations
from datetime import datetime, timedelta
from typing import Callable, List, Optional
import logging

from dealcatalog.domain.models.product import ProductRecord, RefreshReport
from dealcatalog.domain.repositories.catalog_store import CatalogStore
from dealcatalog.domain.services.constants import CATALOG_TTL_S
from dealcatalog.domain.services.refresh_svc import RefreshCoordinator, utcnow

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Read side of the catalog: refresh first when stale, then return a sorted copy.

    The staleness clock is stamped when the refresh is triggered, not when it publishes.
    Requests landing while that refresh runs see a fresh timestamp and read the previous
    snapshot instead of starting refreshes of their own.
    """
    def __init__(
        self,
        store: CatalogStore,
        coordinator: RefreshCoordinator,
        ttl: timedelta = timedelta(seconds=CATALOG_TTL_S),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.coordinator = coordinator
        self.ttl = ttl
        self.clock = clock

    def is_stale(self) -> bool:
        return self.store.is_stale(self.clock(), self.ttl)

    async def get_products(self, sort_key: Optional[str] = None) -> List[ProductRecord]:
        now = self.clock()
        previous = self.store.claim_if_stale(now, self.ttl)
        if previous is not None:
            logger.info("Old products! Fetching new data... last_updated=%s", previous.isoformat())
            report = await self.coordinator.refresh()
            if not report.published:
                # old snapshot kept: it must stay stale so the next request retries
                self.store.unclaim(now, previous)
        return self.store.read(sort_key)

    async def refresh(self) -> RefreshReport:
        return await self.coordinator.refresh()
