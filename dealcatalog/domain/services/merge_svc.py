from typing import Iterable, List
from dealcatalog.domain.models.product import ProductRecord


def merge_products(per_source: Iterable[Iterable[ProductRecord]]) -> List[ProductRecord]:
    """
    Concatenate per-source lists in registration order and keep the first record per item name.
    Identity is the exact item name; retailer and prices play no part, so a later source's
    cheaper offer for the same name is dropped.
    """
    seen: set[str] = set()
    merged: List[ProductRecord] = []
    for products in per_source:
        for p in products:
            if p.item_name in seen:
                continue
            seen.add(p.item_name)
            merged.append(p)
    return merged
