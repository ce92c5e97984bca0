from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Sequence

import structlog

from ..clients.commercetools import SHOPPING_LIST_SCOPES, CommercetoolsClient
from ..errors import APIError, NotFoundError, UpstreamError
from ..schemas.orders import Cart, CartItem
from .catalog import CatalogService, first_price
from .money import DEFAULT_CURRENCY, from_cents, to_money, zero_money

logger = structlog.get_logger(__name__)

EMPTY_CART_ID = "empty"
CART_LIST_NAME = "My Cart"


def empty_cart() -> Cart:
    return Cart(id=EMPTY_CART_ID, items=[], total_amount=zero_money())


def build_cart(list_id: Optional[str], items: List[CartItem]) -> Cart:
    """Total = sum(price * quantity), in the first item's currency."""
    if not items:
        return empty_cart()

    total_cents = sum(item.price.cent_amount * item.quantity for item in items)
    currency = items[0].price.currency_code or DEFAULT_CURRENCY
    return Cart(id=list_id or EMPTY_CART_ID, items=items, total_amount=from_cents(total_cents, currency))


class CartService:
    """
    The cart is a commercetools shopping list: the one keyed by
    ``cart_key`` when set, otherwise whichever list the platform returns
    first.
    """

    def __init__(
        self,
        client: CommercetoolsClient,
        catalog: CatalogService,
        cart_key: Optional[str] = None,
    ):
        self._client = client
        self._catalog = catalog
        self._cart_key = cart_key

    # ---------- public ----------

    async def get_cart(self) -> Cart:
        try:
            shopping_list = await self.current_list()
            if not shopping_list or not shopping_list.get("lineItems"):
                return empty_cart()
            return await self._rebuild(shopping_list)
        except APIError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("cart.fetch_failed", error=str(exc))
            raise UpstreamError("Failed to fetch cart") from exc

    async def add_to_cart(self, product_id: str, quantity: int) -> Cart:
        try:
            product = await self._catalog.fetch_product(product_id)

            shopping_list = await self.current_list()
            if not shopping_list:
                shopping_list = await self._create_list()

            existing = _find_line_item(shopping_list, product_id)
            if existing:
                actions = [{
                    "action": "changeLineItemQuantity",
                    "lineItemId": existing["id"],
                    "quantity": existing["quantity"] + quantity,
                }]
            else:
                actions = [{
                    "action": "addLineItem",
                    "productId": product_id,
                    "variantId": product.master_variant.id,
                    "quantity": quantity,
                }]

            updated = await self._update_list(shopping_list, actions)
            return await self._rebuild(updated)
        except APIError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("cart.add_failed", product_id=product_id, error=str(exc))
            raise UpstreamError("Failed to add to cart") from exc

    async def remove_from_cart(self, product_id: str) -> Cart:
        try:
            shopping_list = await self.current_list()
            if not shopping_list:
                raise NotFoundError("Cart not found")

            existing = _find_line_item(shopping_list, product_id)
            if not existing:
                raise NotFoundError("Product not found in cart")

            updated = await self._update_list(
                shopping_list,
                [{"action": "removeLineItem", "lineItemId": existing["id"]}],
            )
            return await self._rebuild(updated)
        except APIError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("cart.remove_failed", product_id=product_id, error=str(exc))
            raise UpstreamError("Failed to remove from cart") from exc

    async def current_list(
        self, scopes: Sequence[str] = SHOPPING_LIST_SCOPES
    ) -> Optional[Dict[str, Any]]:
        """The shopping list backing the cart, or None."""
        params: Dict[str, Any] = {"limit": 1}
        if self._cart_key:
            params["where"] = f'key="{self._cart_key}"'
        res = await self._client.get("/shopping-lists", params=params, scopes=scopes)
        results = (res or {}).get("results") or []
        return results[0] if results else None

    # ---------- internals ----------

    async def _create_list(self) -> Dict[str, Any]:
        draft: Dict[str, Any] = {"name": {"en-US": CART_LIST_NAME}, "lineItems": []}
        if self._cart_key:
            draft["key"] = self._cart_key
        return await self._client.post("/shopping-lists", json=draft, scopes=SHOPPING_LIST_SCOPES)

    async def _update_list(self, shopping_list: Dict[str, Any], actions: List[Dict[str, Any]]) -> Dict[str, Any]:
        # the platform rejects a stale version; that error is not retried
        return await self._client.post(
            f"/shopping-lists/{shopping_list['id']}",
            json={"version": shopping_list["version"], "actions": actions},
            scopes=SHOPPING_LIST_SCOPES,
        )

    async def _rebuild(self, shopping_list: Dict[str, Any]) -> Cart:
        joined = await asyncio.gather(
            *(self._join_line_item(li) for li in shopping_list.get("lineItems") or [])
        )
        return build_cart(shopping_list["id"], [item for item in joined if item is not None])

    async def _join_line_item(self, line_item: Dict[str, Any]) -> Optional[CartItem]:
        try:
            product = await self._catalog.fetch_product(line_item["productId"])
            price = to_money(first_price(product))
            return CartItem(product=product, quantity=line_item["quantity"], price=price)
        except (APIError, KeyError, TypeError, ValueError) as exc:
            logger.warning("cart.item_dropped", product_id=line_item.get("productId"), error=str(exc))
            return None


def _find_line_item(shopping_list: Dict[str, Any], product_id: str) -> Optional[Dict[str, Any]]:
    return next(
        (li for li in shopping_list.get("lineItems") or [] if li.get("productId") == product_id),
        None,
    )
