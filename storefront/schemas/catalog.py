from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class Money(BaseModel):
    model_config = ConfigDict(frozen=True)

    cent_amount: int
    currency_code: str
    amount: Decimal


class LocalizedString(BaseModel):
    en_US: str = ""

    @classmethod
    def from_platform(cls, value: Optional[Dict[str, str]]) -> "LocalizedString":
        """Pick the en-US entry out of a platform LocalizedString."""
        return cls(en_US=(value or {}).get("en-US") or "")


class CategoryRef(BaseModel):
    id: str
    name: LocalizedString = LocalizedString()


class ProductVariant(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    sku: Optional[str] = None
    # raw platform entries; a price's "value" is either a platform money
    # dict or a Money once formatted
    prices: List[Dict[str, Any]] = []
    images: List[Dict[str, Any]] = []
    attributes: List[Dict[str, Any]] = []


class Product(BaseModel):
    id: str
    key: Optional[str] = None
    version: int
    name: LocalizedString
    slug: LocalizedString
    description: LocalizedString
    meta_title: LocalizedString
    meta_description: LocalizedString
    categories: List[CategoryRef] = []
    master_variant: ProductVariant
    variants: List[ProductVariant] = []
