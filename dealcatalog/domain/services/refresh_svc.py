from __future__ import annotations
from datetime import datetime, timezone
from typing import Callable, List, Sequence
import asyncio
import logging
import time

from dealcatalog.domain.models.product import FetchOutcome, RefreshReport
from dealcatalog.domain.repositories.catalog_store import CatalogStore
from dealcatalog.domain.repositories.upstream_repo import UpstreamRepo
from dealcatalog.domain.services.merge_svc import merge_products

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RefreshCoordinator:
    """
    Runs one refresh cycle: fan out to every upstream, wait for all of them, merge, publish.

    Cycles are serialized by an asyncio.Lock. A trigger arriving while a cycle runs waits for
    it to finish and then runs its own fresh cycle; results are never shared between triggers.
    """
    def __init__(
        self,
        store: CatalogStore,
        upstream: UpstreamRepo,
        urls: Sequence[str],
        keep_stale_on_total_failure: bool = False,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.upstream = upstream
        self.urls = list(urls)
        self.keep_stale_on_total_failure = keep_stale_on_total_failure
        self.clock = clock
        self._lock = asyncio.Lock()

    @property
    def in_progress(self) -> bool:
        return self._lock.locked()

    async def _fan_out(self) -> List[FetchOutcome]:
        # gather keeps input order, so outcomes line up with registration order whatever finishes first
        results = await asyncio.gather(
            *(self.upstream.fetch(url) for url in self.urls),
            return_exceptions=True,
        )
        outcomes: List[FetchOutcome] = []
        for url, res in zip(self.urls, results):
            if isinstance(res, BaseException):
                if isinstance(res, asyncio.CancelledError):
                    raise res
                logger.error("refresh unexpected error url=%s", url, exc_info=res)
                res = FetchOutcome(url=url, error=f"unexpected error: {res!r}")
            outcomes.append(res)
        return outcomes

    async def refresh(self) -> RefreshReport:
        if self._lock.locked():
            logger.info("refresh already running, waiting for it before starting a new cycle")
        async with self._lock:
            started_at = self.clock()
            t0 = time.perf_counter()
            logger.info("refresh start sources=%s", len(self.urls))

            outcomes = await self._fan_out()
            ok = [o for o in outcomes if o.ok]
            failed = [o.url for o in outcomes if not o.ok]
            merged = merge_products(o.products for o in ok)

            published = True
            if self.urls and not ok:
                # operators need to tell "no discounts today" apart from "every scraper is down"
                logger.error("refresh all %s upstream sources failed", len(self.urls))
                if self.keep_stale_on_total_failure:
                    published = False
            if published:
                self.store.replace(merged, self.clock())

            dt = time.perf_counter() - t0
            logger.info(
                "refresh done products=%s ok=%s failed=%s published=%s total_time=%.3fs",
                len(merged), len(ok), len(failed), published, dt,
            )
            return RefreshReport(
                started_at=started_at,
                finished_at=self.clock(),
                product_count=len(merged),
                sources_ok=len(ok),
                sources_failed=failed,
                published=published,
            )
