from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

import structlog

from ..clients.commercetools import CommercetoolsClient
from ..errors import APIError, UpstreamError
from ..schemas.catalog import Product
from .catalog import CatalogService, first_price, format_prices
from .money import to_money

logger = structlog.get_logger(__name__)

DEFAULT_LIMIT = 20
DEFAULT_OFFSET = 0


class ProductSearchService:
    """
    Product listing on top of the platform's search endpoint.

    Category filter and name sort run on the platform. The text filter is
    re-applied locally and price sort is local only, so both act on the
    single page the platform returned.
    """

    def __init__(self, client: CommercetoolsClient, catalog: CatalogService):
        self._client = client
        self._catalog = catalog

    async def search_products(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        search: Optional[str] = None,
        category_key: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> Dict[str, Any]:
        limit = limit or DEFAULT_LIMIT
        offset = offset or DEFAULT_OFFSET

        try:
            params: Dict[str, Any] = {"limit": limit, "offset": offset}

            if category_key:
                category_id = await self._catalog.resolve_category_key(category_key)
                if not category_id:
                    return {"total": 0, "offset": offset, "limit": limit, "results": []}
                params["filter"] = f'categories.id:"{category_id}"'

            if search:
                params["text.en-US"] = search

            if sort_by == "NAME":
                direction = "desc" if sort_order == "DESC" else "asc"
                params["sort"] = f"name.en-US {direction}"

            res = await self._client.get("/product-projections/search", params=params)
            hits = (res or {}).get("results") or []

            products = await asyncio.gather(
                *(self._catalog.fetch_product(hit["id"]) for hit in hits)
            )
            products = [format_prices(p) for p in products]
        except APIError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("products.search_failed", error=str(exc))
            raise UpstreamError("Failed to fetch products") from exc

        if search:
            products = filter_by_search(products, search)

        if sort_by == "PRICE":
            products = sort_by_price(products, sort_order)

        return {
            "total": len(products),
            "offset": offset,
            "limit": limit,
            "results": products[:limit],
        }


def filter_by_search(products: List[Product], term: str) -> List[Product]:
    needle = term.lower()
    return [
        p for p in products
        if needle in p.name.en_US.lower() or needle in p.description.en_US.lower()
    ]


def sort_by_price(products: List[Product], sort_order: Optional[str] = None) -> List[Product]:
    return sorted(
        products,
        key=lambda p: to_money(first_price(p)).amount,
        reverse=sort_order == "DESC",
    )
