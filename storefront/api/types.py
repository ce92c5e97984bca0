"""graphene object types for the storefront schema."""
from __future__ import annotations

import graphene

from ..services.money import to_money


class SortField(graphene.Enum):
    NAME = "NAME"
    PRICE = "PRICE"


class SortOrder(graphene.Enum):
    ASC = "ASC"
    DESC = "DESC"


class Money(graphene.ObjectType):
    currency_code = graphene.String(required=True)
    cent_amount = graphene.Int(required=True)
    amount = graphene.Float()


class LocalizedString(graphene.ObjectType):
    en_US = graphene.String(name="en_US")


class CategoryReference(graphene.ObjectType):
    id = graphene.ID(required=True)
    name = graphene.Field(LocalizedString)


class Price(graphene.ObjectType):
    value = graphene.Field(Money, required=True)

    @staticmethod
    def resolve_value(parent, info):
        # cart/order products carry raw platform money
        return to_money(parent.get("value"))


class Dimensions(graphene.ObjectType):
    w = graphene.Int(required=True)
    h = graphene.Int(required=True)


class Image(graphene.ObjectType):
    url = graphene.String(required=True)
    label = graphene.String()
    dimensions = graphene.Field(Dimensions, required=True)


class TextAttribute(graphene.ObjectType):
    text = graphene.String(required=True)


class ReferenceAttribute(graphene.ObjectType):
    type_id = graphene.String(required=True)
    id = graphene.ID(required=True)


class AttributeValue(graphene.Union):
    class Meta:
        types = (TextAttribute, ReferenceAttribute)


def attribute_value(value):
    """Map a raw attribute value onto the AttributeValue union."""
    if value is None:
        return None
    if isinstance(value, dict):
        if "typeId" in value and "id" in value:
            return ReferenceAttribute(type_id=value["typeId"], id=value["id"])
        if "en-US" in value:  # localized text
            return TextAttribute(text=value["en-US"])
        if "label" in value:  # enum
            label = value["label"]
            if isinstance(label, dict):
                label = label.get("en-US", "")
            return TextAttribute(text=str(label))
        if "key" in value:
            return TextAttribute(text=str(value["key"]))
        return None
    if isinstance(value, bool):
        return TextAttribute(text="true" if value else "false")
    return TextAttribute(text=str(value))


class Attribute(graphene.ObjectType):
    name = graphene.String(required=True)
    value = graphene.Field(AttributeValue)

    @staticmethod
    def resolve_value(parent, info):
        return attribute_value(parent.get("value"))


class ProductVariant(graphene.ObjectType):
    id = graphene.Int(required=True)
    sku = graphene.String()
    prices = graphene.List(graphene.NonNull(Price))
    images = graphene.List(graphene.NonNull(Image))
    attributes = graphene.List(graphene.NonNull(Attribute))


class Product(graphene.ObjectType):
    id = graphene.ID(required=True)
    key = graphene.String()
    version = graphene.Int(required=True)
    name = graphene.Field(LocalizedString)
    slug = graphene.Field(LocalizedString)
    description = graphene.Field(LocalizedString)
    meta_title = graphene.Field(LocalizedString)
    meta_description = graphene.Field(LocalizedString)
    categories = graphene.List(graphene.NonNull(CategoryReference))
    master_variant = graphene.Field(ProductVariant, required=True)
    variants = graphene.List(graphene.NonNull(ProductVariant))


class ProductConnection(graphene.ObjectType):
    total = graphene.Int(required=True)
    offset = graphene.Int(required=True)
    limit = graphene.Int(required=True)
    results = graphene.List(graphene.NonNull(Product), required=True)


class CartItem(graphene.ObjectType):
    product = graphene.Field(Product, required=True)
    quantity = graphene.Int(required=True)
    price = graphene.Field(Money, required=True)


class Cart(graphene.ObjectType):
    id = graphene.ID(required=True)
    items = graphene.List(graphene.NonNull(CartItem), required=True)
    total_amount = graphene.Field(Money, required=True)


class AddressInput(graphene.InputObjectType):
    """Address input for mutations"""

    first_name = graphene.String(required=True)
    last_name = graphene.String(required=True)
    street_name = graphene.String(required=True)
    street_number = graphene.String(required=True)
    postal_code = graphene.String(required=True)
    city = graphene.String(required=True)
    state = graphene.String()
    country = graphene.String(required=True)
    phone = graphene.String()


class AddressOutput(graphene.ObjectType):
    """Address output for orders"""

    first_name = graphene.String()
    last_name = graphene.String()
    street_name = graphene.String()
    street_number = graphene.String()
    postal_code = graphene.String()
    city = graphene.String()
    state = graphene.String()
    country = graphene.String()
    phone = graphene.String()


class Order(graphene.ObjectType):
    id = graphene.ID(required=True)
    order_number = graphene.String()
    created_at = graphene.String(required=True)
    items = graphene.List(graphene.NonNull(CartItem), required=True)
    total_amount = graphene.Field(Money, required=True)
    shipping_address = graphene.Field(AddressOutput)
    billing_address = graphene.Field(AddressOutput)
    customer_email = graphene.String()
