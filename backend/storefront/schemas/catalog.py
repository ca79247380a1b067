"""
storefront/schemas/catalog.py - Trusted catalog records and decoded cart references.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class LegacyId:
    """Göç öncesi pozitif tamsayı ürün ID'si."""
    value: int


@dataclass(frozen=True)
class ProductUuid:
    value: str


CartReference = Union[LegacyId, ProductUuid]


class ProductRecord(BaseModel):
    id: str = Field(..., description="Ürün UUID'si")
    legacy_id: Optional[int] = Field(None, gt=0, description="Eski sayısal ürün ID'si")
    name: str
    price: Decimal = Field(..., gt=0)
