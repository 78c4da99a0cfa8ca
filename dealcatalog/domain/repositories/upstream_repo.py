# dealcatalog/domain/repositories/upstream_repo.py
from __future__ import annotations
from typing import List
import asyncio
import logging
import time

import httpx
from pydantic import TypeAdapter, ValidationError

from dealcatalog.domain.models.product import FetchOutcome, ProductRecord

logger = logging.getLogger(__name__)

_PRODUCT_LIST = TypeAdapter(List[ProductRecord])


class UpstreamRepo:
    """
    Adapter for one kind of upstream: a scraper endpoint returning a JSON array of products.
    Every failure is reported in the returned FetchOutcome; nothing here raises for a bad source.
    No retries: a failed source contributes zero records to this cycle.
    """
    def __init__(self, client: httpx.AsyncClient, timeout_s: float = 20.0):
        self.client = client
        self.timeout_s = timeout_s

    async def _get_body(self, url: str) -> bytes:
        resp = await self.client.get(url, timeout=self.timeout_s)
        resp.raise_for_status()
        return resp.content

    async def fetch(self, url: str) -> FetchOutcome:
        t0 = time.perf_counter()
        logger.info("Scraping data from: %s", url)
        try:
            # httpx timeouts are per phase; wait_for bounds the whole request including a slow body
            body = await asyncio.wait_for(self._get_body(url), timeout=self.timeout_s)
            products = _PRODUCT_LIST.validate_json(body)
        except asyncio.TimeoutError:
            error = f"timeout after {self.timeout_s}s"
        except httpx.HTTPStatusError as e:
            error = f"status {e.response.status_code}"
        except httpx.RequestError as e:
            error = f"transport error: {e.__class__.__name__}: {e}"
        except ValidationError as e:
            error = f"decode error: {e.error_count()} issue(s), first: {e.errors()[0]['msg']}"
        else:
            dt = (time.perf_counter() - t0) * 1000.0
            logger.info("upstream ok url=%s items=%s time_ms=%.1f", url, len(products), dt)
            return FetchOutcome(url=url, products=tuple(products), elapsed_ms=dt)

        dt = (time.perf_counter() - t0) * 1000.0
        logger.warning("upstream failed url=%s err=%s time_ms=%.1f", url, error, dt)
        return FetchOutcome(url=url, error=error, elapsed_ms=dt)
