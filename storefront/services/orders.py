from __future__ import annotations

import asyncio
import time
import uuid
from typing import Any, Dict, List, Optional

import structlog

from ..clients.commercetools import ORDER_SCOPES, CommercetoolsClient
from ..errors import (
    APIError,
    EmptyCartError,
    InvalidArgumentError,
    NotFoundError,
    OrderPlacementError,
    UpstreamError,
)
from ..schemas.orders import Address, CartItem, Order
from .cart import CartService
from .catalog import CatalogService, first_price
from .money import DEFAULT_CURRENCY, to_money

logger = structlog.get_logger(__name__)


def _order_number() -> str:
    # millisecond timestamp plus a random hex tail
    return f"ORD-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


def _order_path(id: Optional[str], order_number: Optional[str]) -> str:
    if not id and not order_number:
        raise InvalidArgumentError("Please provide either id or orderNumber")
    if id:
        return f"/orders/{id}"
    return f"/orders/order-number={order_number}"


def _address(raw: Optional[Dict[str, Any]]) -> Optional[Address]:
    return Address.model_validate(raw) if raw else None


class OrderService:
    def __init__(
        self,
        client: CommercetoolsClient,
        catalog: CatalogService,
        cart: CartService,
        currency: str = DEFAULT_CURRENCY,
        country: str = "US",
        list_limit: int = 200,
    ):
        self._client = client
        self._catalog = catalog
        self._cart = cart
        self._currency = currency
        self._country = country
        self._list_limit = list_limit

    # ---------- reads ----------

    async def list_orders(self) -> List[Order]:
        try:
            orders = await self._fetch_orders()
            return list(await asyncio.gather(
                *(self._to_order(o, order_number_default="N/A") for o in orders)
            ))
        except APIError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("orders.list_failed", error=str(exc))
            raise UpstreamError("Failed to fetch orders") from exc

    async def get_order(
        self, id: Optional[str] = None, order_number: Optional[str] = None
    ) -> Optional[Order]:
        """None when the platform has no such order."""
        path = _order_path(id, order_number)
        try:
            raw = await self._client.get(path, scopes=ORDER_SCOPES)
        except NotFoundError:
            logger.warning("orders.not_found", order=order_number or id)
            return None
        except APIError as exc:
            logger.error("orders.fetch_failed", order=order_number or id, error=exc.message)
            raise UpstreamError("Failed to fetch order details") from exc

        try:
            return await self._to_order(raw)
        except (APIError, KeyError, TypeError, ValueError) as exc:
            logger.error("orders.fetch_failed", order=order_number or id, error=str(exc))
            raise UpstreamError("Failed to fetch order details") from exc

    # ---------- place ----------

    async def place_order(
        self,
        shipping_address: Address,
        customer_email: str,
        billing_address: Optional[Address] = None,
    ) -> Order:
        """
        Turn the shopping list into a platform order:
          1. load the shopping list (must have line items)
          2. resolve variant ids and build the cart draft
          3. create the platform cart, then the order from it
          4. delete the shopping list
        Steps are not rolled back. A failure after the cart exists raises
        OrderPlacementError with the ids of whatever was already created.
        """
        billing_address = billing_address or shipping_address

        shopping_list = await self._cart.current_list(scopes=ORDER_SCOPES)
        if not shopping_list or not shopping_list.get("lineItems"):
            raise EmptyCartError()

        line_items = await self._prepare_line_items(shopping_list["lineItems"])

        cart = await self._client.post(
            "/carts",
            json={
                "currency": self._currency,
                "country": self._country,
                "lineItems": line_items,
                "shippingAddress": shipping_address.to_platform(),
                "billingAddress": billing_address.to_platform(),
                "customerEmail": customer_email or None,
            },
            scopes=ORDER_SCOPES,
        )
        logger.info("orders.cart_created", cart_id=cart["id"])

        try:
            raw = await self._client.post(
                "/orders",
                json={
                    "cart": {"id": cart["id"], "typeId": "cart"},
                    "version": cart["version"],
                    "orderNumber": _order_number(),
                },
                scopes=ORDER_SCOPES,
            )
        except APIError as exc:
            logger.error("orders.create_failed", cart_id=cart["id"], error=exc.message)
            raise OrderPlacementError(
                f"Failed to create order from cart {cart['id']}: {exc.message}",
                cart_id=cart["id"],
                upstream_status=getattr(exc, "upstream_status", None),
            ) from exc
        logger.info("orders.order_created", order_id=raw["id"], order_number=raw.get("orderNumber"))

        try:
            await self._client.delete(
                f"/shopping-lists/{shopping_list['id']}",
                params={"version": shopping_list["version"]},
                scopes=ORDER_SCOPES,
            )
        except APIError as exc:
            logger.error(
                "orders.cart_clear_failed",
                order_id=raw["id"],
                shopping_list_id=shopping_list["id"],
                error=exc.message,
            )
            raise OrderPlacementError(
                f"Order {raw.get('orderNumber')} placed but the cart could not be cleared: {exc.message}",
                cart_id=cart["id"],
                order_id=raw["id"],
                upstream_status=getattr(exc, "upstream_status", None),
            ) from exc

        try:
            order = await self._to_order(raw)
        except (APIError, KeyError, TypeError, ValueError) as exc:
            logger.error("orders.order_load_failed", order_id=raw["id"], error=str(exc))
            raise OrderPlacementError(
                f"Order {raw.get('orderNumber')} placed but could not be loaded: {exc}",
                cart_id=cart["id"],
                order_id=raw["id"],
                upstream_status=getattr(exc, "upstream_status", None),
            ) from exc
        return order.model_copy(update={
            "shipping_address": order.shipping_address or shipping_address,
            "billing_address": order.billing_address or billing_address,
            "customer_email": order.customer_email or customer_email,
        })

    # ---------- delete ----------

    async def remove_order(self, id: Optional[str] = None, order_number: Optional[str] = None) -> bool:
        raw = await self._client.get(_order_path(id, order_number), scopes=ORDER_SCOPES)
        await self._delete(raw)
        return True

    async def remove_all_orders(self) -> bool:
        orders = await self._fetch_orders()
        await asyncio.gather(*(self._delete(o) for o in orders))
        return True

    # ---------- internals ----------

    async def _fetch_orders(self) -> List[Dict[str, Any]]:
        res = await self._client.get(
            "/orders",
            params={"limit": self._list_limit, "sort": "createdAt desc"},
            scopes=ORDER_SCOPES,
        )
        return (res or {}).get("results") or []

    async def _delete(self, raw: Dict[str, Any]) -> None:
        await self._client.delete(
            f"/orders/{raw['id']}",
            params={"version": raw["version"]},
            scopes=ORDER_SCOPES,
        )

    async def _prepare_line_items(self, line_items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        products = await asyncio.gather(
            *(self._catalog.fetch_product(li["productId"]) for li in line_items)
        )
        return [
            {
                "productId": li["productId"],
                "variantId": product.master_variant.id,
                "quantity": li["quantity"],
            }
            for li, product in zip(line_items, products)
        ]

    async def _build_items(self, line_items: List[Dict[str, Any]]) -> List[CartItem]:
        async def _join(li: Dict[str, Any]) -> CartItem:
            product = await self._catalog.fetch_product(li["productId"])
            value = (li.get("price") or {}).get("value") or first_price(product)
            return CartItem(product=product, quantity=li["quantity"], price=to_money(value))

        return list(await asyncio.gather(*(_join(li) for li in line_items)))

    async def _to_order(self, raw: Dict[str, Any], order_number_default: Optional[str] = None) -> Order:
        items = await self._build_items(raw.get("lineItems") or [])
        return Order(
            id=raw["id"],
            order_number=raw.get("orderNumber") or order_number_default,
            created_at=raw["createdAt"],
            items=items,
            total_amount=to_money(raw.get("totalPrice")),
            shipping_address=_address(raw.get("shippingAddress")),
            billing_address=_address(raw.get("billingAddress")),
            customer_email=raw.get("customerEmail"),
        )
