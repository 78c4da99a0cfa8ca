from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional
import time

from dealcatalog.api.deps import catalog_dep
from dealcatalog.api.v1.schemas.catalog import RefreshIn, RefreshOut
from dealcatalog.domain.models.product import ProductRecord
from dealcatalog.domain.services.catalog_svc import CatalogService
from dealcatalog.domain.services.constants import REFRESH_AFFIRMATIVE

import logging
logger = logging.getLogger(__name__)

router = APIRouter(tags=["catalog"])


@router.get("/products", response_model=List[ProductRecord])
async def get_products(
    sort: Optional[str] = Query(None, description="lowest-price | biggest-discount-amount | highest-percentage"),
    svc: CatalogService = Depends(catalog_dep),
):
    """
    Current discounted products, refreshed first when the catalog is older than the TTL.
    """
    t0 = time.perf_counter()
    products = await svc.get_products(sort)
    logger.info("Response: get_products returned %s items sort=%s in %.4fs", len(products), sort, time.perf_counter() - t0)
    return products


def _is_affirmative(value) -> bool:
    if isinstance(value, bool):
        return value
    return value.strip().lower() == REFRESH_AFFIRMATIVE


@router.post("/refresh", response_model=RefreshOut, status_code=status.HTTP_202_ACCEPTED)
async def post_refresh(body: RefreshIn, svc: CatalogService = Depends(catalog_dep)):
    """
    Rebuild the catalog now when the body is {"refresh": "true"}; returns once the cycle finished.
    """
    if not _is_affirmative(body.refresh):
        logger.info("Request: refresh rejected value=%r", body.refresh)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    report = await svc.refresh()
    return RefreshOut(
        message="Successfully Refreshed Products",
        product_count=report.product_count,
        sources_ok=report.sources_ok,
        sources_failed=report.sources_failed,
        published=report.published,
        finished_at=report.finished_at,
    )
