# dealcatalog/domain/repositories/catalog_store.py
from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional, Tuple
import threading

from dealcatalog.domain.models.product import CatalogSnapshot, ProductRecord
from dealcatalog.domain.services.constants import (
    DEFAULT_SORT,
    SORT_BIGGEST_DISCOUNT_AMOUNT,
    SORT_HIGHEST_PERCENTAGE,
    SORT_LOWEST_PRICE,
)

# Anything older than the TTL: the first request after startup triggers a refresh
NEVER = datetime(1970, 1, 1, tzinfo=timezone.utc)

# sort key -> (record field getter, descending)
_SORTS: dict[str, Tuple[Callable[[ProductRecord], object], bool]] = {
    SORT_LOWEST_PRICE: (lambda p: p.current_price, False),
    SORT_BIGGEST_DISCOUNT_AMOUNT: (lambda p: p.discount_amount, True),
    SORT_HIGHEST_PERCENTAGE: (lambda p: p.discount_percentage, True),
}


def resolve_sort(sort_key: Optional[str]) -> str:
    """Map a client-provided key to a known one; unknown keys get the default."""
    return sort_key if sort_key in _SORTS else DEFAULT_SORT


class CatalogStore:
    """
    Owner of the current catalog snapshot.
    The snapshot is an immutable object swapped as a whole, so a reader holds either the
    old one or the new one. The lock only serializes the swap itself and never spans I/O.
    """
    def __init__(self, products: Iterable[ProductRecord] = (), last_updated: datetime = NEVER):
        self._lock = threading.Lock()
        self._snapshot = CatalogSnapshot(products=tuple(products), last_updated=last_updated)

    def snapshot(self) -> CatalogSnapshot:
        with self._lock:
            return self._snapshot

    @property
    def last_updated(self) -> datetime:
        return self.snapshot().last_updated

    def read(self, sort_key: Optional[str] = None) -> List[ProductRecord]:
        """
        Return a sorted copy of the current products.
        Never waits on a refresh in flight; an empty snapshot gives an empty list.
        """
        products = self.snapshot().products
        getter, descending = _SORTS[resolve_sort(sort_key)]
        return sorted(products, key=getter, reverse=descending)

    def replace(self, products: Iterable[ProductRecord], timestamp: datetime) -> None:
        new = CatalogSnapshot(products=tuple(products), last_updated=timestamp)
        with self._lock:
            self._snapshot = new

    def is_stale(self, now: datetime, ttl: timedelta) -> bool:
        return now - self.last_updated >= ttl

    def claim_if_stale(self, now: datetime, ttl: timedelta) -> Optional[datetime]:
        """
        Check staleness and, if stale, stamp `now` in the same critical section.
        Returns the timestamp that was replaced, or None when the catalog is fresh.
        Only the caller that gets a timestamp back should start a refresh.
        """
        with self._lock:
            previous = self._snapshot.last_updated
            if now - previous < ttl:
                return None
            self._snapshot = self._snapshot.model_copy(update={"last_updated": now})
            return previous

    def unclaim(self, stamped: datetime, previous: datetime) -> bool:
        """
        Put back the timestamp a claim replaced, when no new snapshot was published.
        Does nothing if something else moved the clock since the claim.
        """
        with self._lock:
            if self._snapshot.last_updated != stamped:
                return False
            self._snapshot = self._snapshot.model_copy(update={"last_updated": previous})
            return True
