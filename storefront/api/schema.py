from __future__ import annotations

import graphene

from ..schemas.orders import Address
from .types import (
    AddressInput,
    Cart,
    Order,
    Product,
    ProductConnection,
    SortField,
    SortOrder,
)


def _services(info):
    return info.context["services"]


def _enum_value(value):
    # graphene hands enum arguments over as enum members
    return getattr(value, "value", value)


def _address(value):
    return Address(**dict(value)) if value else None


class Query(graphene.ObjectType):
    health = graphene.String(required=True)
    cart = graphene.Field(Cart)
    product = graphene.Field(Product, id=graphene.ID(required=True))
    products = graphene.Field(
        ProductConnection,
        required=True,
        limit=graphene.Int(),
        offset=graphene.Int(),
        search=graphene.String(),
        category_key=graphene.String(),
        sort_by=SortField(),
        sort_order=SortOrder(),
    )
    orders = graphene.List(graphene.NonNull(Order), required=True)
    order = graphene.Field(Order, id=graphene.ID(), order_number=graphene.String())

    @staticmethod
    def resolve_health(root, info):
        return "OK"

    @staticmethod
    async def resolve_cart(root, info):
        return await _services(info).cart.get_cart()

    @staticmethod
    async def resolve_product(root, info, id):
        return await _services(info).catalog.get_product(id)

    @staticmethod
    async def resolve_products(root, info, limit=None, offset=None, search=None,
                               category_key=None, sort_by=None, sort_order=None):
        return await _services(info).products.search_products(
            limit=limit,
            offset=offset,
            search=search,
            category_key=category_key,
            sort_by=_enum_value(sort_by),
            sort_order=_enum_value(sort_order),
        )

    @staticmethod
    async def resolve_orders(root, info):
        return await _services(info).orders.list_orders()

    @staticmethod
    async def resolve_order(root, info, id=None, order_number=None):
        return await _services(info).orders.get_order(id=id, order_number=order_number)


class AddToCart(graphene.Mutation):
    class Arguments:
        product_id = graphene.ID(required=True)
        quantity = graphene.Int(required=True)

    Output = Cart

    @staticmethod
    async def mutate(root, info, product_id, quantity):
        return await _services(info).cart.add_to_cart(product_id, quantity)


class RemoveFromCart(graphene.Mutation):
    class Arguments:
        product_id = graphene.ID(required=True)

    Output = Cart

    @staticmethod
    async def mutate(root, info, product_id):
        return await _services(info).cart.remove_from_cart(product_id)


class PlaceOrder(graphene.Mutation):
    class Arguments:
        shipping_address = AddressInput(required=True)
        customer_email = graphene.String(required=True)
        billing_address = AddressInput()

    Output = Order

    @staticmethod
    async def mutate(root, info, shipping_address, customer_email, billing_address=None):
        return await _services(info).orders.place_order(
            shipping_address=_address(shipping_address),
            customer_email=customer_email,
            billing_address=_address(billing_address),
        )


class RemoveOrder(graphene.Mutation):
    class Arguments:
        id = graphene.ID()
        order_number = graphene.String()

    Output = graphene.Boolean

    @staticmethod
    async def mutate(root, info, id=None, order_number=None):
        return await _services(info).orders.remove_order(id=id, order_number=order_number)


class RemoveAllOrders(graphene.Mutation):
    Output = graphene.Boolean

    @staticmethod
    async def mutate(root, info):
        return await _services(info).orders.remove_all_orders()


class Mutation(graphene.ObjectType):
    add_to_cart = AddToCart.Field(required=True)
    remove_from_cart = RemoveFromCart.Field(required=True)
    place_order = PlaceOrder.Field(required=True)
    remove_order = RemoveOrder.Field(required=True)
    remove_all_orders = RemoveAllOrders.Field(required=True)


schema = graphene.Schema(query=Query, mutation=Mutation)
