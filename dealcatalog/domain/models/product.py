from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple, List

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

_ONE = Decimal("1")
_ZERO = Decimal("0")


class ProductRecord(BaseModel):
    """
    One discounted item as observed from one retailer.
    Wire format is camelCase (itemName, currentPrice, ...); prices may arrive as numbers or strings.
    """
    item_name: str = Field(min_length=1)
    retailer: str = ""
    product_link: str = ""
    image_link: str = ""
    current_price: Decimal
    rrp: Decimal
    discount_amount: Optional[Decimal] = None
    discount_percentage: Optional[Decimal] = None

    model_config = ConfigDict(
        frozen=True,  # immuable = safe to share between snapshots
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def _fill_derived(self):
        # only fill what the upstream left out; supplied values are trusted as-is
        if self.discount_amount is None:
            object.__setattr__(self, "discount_amount", self.rrp - self.current_price)
        if self.discount_percentage is None:
            pct = _ONE - self.current_price / self.rrp if self.rrp else _ZERO
            object.__setattr__(self, "discount_percentage", pct)
        return self


class CatalogSnapshot(BaseModel):
    products: Tuple[ProductRecord, ...] = ()
    last_updated: datetime
    model_config = ConfigDict(frozen=True)


class FetchOutcome(BaseModel):
    """Tagged result of one upstream fetch: either products or an error, never both."""
    url: str
    products: Optional[Tuple[ProductRecord, ...]] = None
    error: Optional[str] = None
    elapsed_ms: float = 0.0
    model_config = ConfigDict(frozen=True)

    @property
    def ok(self) -> bool:
        return self.error is None and self.products is not None


class RefreshReport(BaseModel):
    started_at: datetime
    finished_at: datetime
    product_count: int
    sources_ok: int
    sources_failed: List[str] = Field(default_factory=list)
    published: bool = True
    model_config = ConfigDict(frozen=True)
