from __future__ import annotations

from dataclasses import dataclass

from ..clients.commercetools import CommercetoolsClient
from ..settings import Settings
from .cart import CartService
from .catalog import CatalogService
from .orders import OrderService
from .products import ProductSearchService


@dataclass
class Services:
    """What the GraphQL resolvers get through their context."""

    catalog: CatalogService
    products: ProductSearchService
    cart: CartService
    orders: OrderService


def build_services(client: CommercetoolsClient, settings: Settings) -> Services:
    catalog = CatalogService(client)
    cart = CartService(client, catalog, cart_key=settings.cart_key)
    return Services(
        catalog=catalog,
        products=ProductSearchService(client, catalog),
        cart=cart,
        orders=OrderService(
            client,
            catalog,
            cart,
            currency=settings.default_currency,
            country=settings.default_country,
            list_limit=settings.order_list_limit,
        ),
    )
