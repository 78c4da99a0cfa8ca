# api/v1/schemas/catalog.py
from datetime import datetime
from pydantic import BaseModel, Field, StrictBool, StrictStr
from typing import List, Union


class RefreshIn(BaseModel):
    refresh: Union[StrictBool, StrictStr]


class RefreshOut(BaseModel):
    message: str
    product_count: int
    sources_ok: int
    sources_failed: List[str] = Field(default_factory=list)
    published: bool
    finished_at: datetime
