from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

import structlog

from ..clients.commercetools import CommercetoolsClient
from ..errors import APIError, NotFoundError, UpstreamError
from ..schemas.catalog import CategoryRef, LocalizedString, Product, ProductVariant
from .money import to_money

logger = structlog.get_logger(__name__)


class CatalogService:
    """Reads product projections and denormalises their category refs."""

    def __init__(self, client: CommercetoolsClient):
        self._client = client

    async def fetch_product(self, product_id: str) -> Product:
        """
        Product with inline {id, name} categories and raw platform prices.
        A category that can't be loaded keeps its id with an empty name.
        """
        data = await self._client.get(f"/product-projections/{product_id}")
        if not data:
            raise NotFoundError(f"Product {product_id} not found")

        categories = await asyncio.gather(
            *(self._category_ref(ref) for ref in data.get("categories") or [])
        )

        return Product(
            id=data["id"],
            key=data.get("key"),
            version=data["version"],
            name=LocalizedString.from_platform(data.get("name")),
            slug=LocalizedString.from_platform(data.get("slug")),
            description=LocalizedString.from_platform(data.get("description")),
            meta_title=LocalizedString.from_platform(data.get("metaTitle")),
            meta_description=LocalizedString.from_platform(data.get("metaDescription")),
            categories=list(categories),
            master_variant=ProductVariant(**data["masterVariant"]),
            variants=[ProductVariant(**v) for v in data.get("variants") or []],
        )

    async def get_product(self, product_id: str) -> Product:
        try:
            product = await self.fetch_product(product_id)
        except NotFoundError:
            raise NotFoundError(f"Product {product_id} not found")
        except APIError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("catalog.product_failed", product_id=product_id, error=str(exc))
            raise UpstreamError("Failed to fetch product") from exc
        return format_prices(product)

    async def resolve_category_key(self, key: str) -> Optional[str]:
        res = await self._client.get("/categories", params={"where": f'key="{key}"', "limit": 1})
        results = (res or {}).get("results") or []
        if results:
            return results[0]["id"]
        return None

    async def _category_ref(self, ref: Dict[str, Any]) -> CategoryRef:
        try:
            cat = await self._client.get(f"/categories/{ref['id']}")
            return CategoryRef(id=cat["id"], name=LocalizedString.from_platform(cat.get("name")))
        except (APIError, KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("catalog.category_unresolved", category_id=ref.get("id"), error=str(exc))
            return CategoryRef(id=ref.get("id", ""), name=LocalizedString())


def _display_variant(variant: ProductVariant) -> ProductVariant:
    prices = [{**p, "value": to_money(p.get("value"))} for p in variant.prices]
    return variant.model_copy(update={"prices": prices})


def format_prices(product: Product) -> Product:
    """Copy of the product with display money on every variant price."""
    return product.model_copy(
        update={
            "master_variant": _display_variant(product.master_variant),
            "variants": [_display_variant(v) for v in product.variants],
        }
    )


def first_price(product: Product):
    """Platform money of the master variant's first price, if any."""
    prices = product.master_variant.prices
    if not prices:
        return None
    return prices[0].get("value")
