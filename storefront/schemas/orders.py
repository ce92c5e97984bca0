from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .catalog import Money, Product


class Address(BaseModel):
    # platform JSON is camelCase; python side stays snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    street_name: Optional[str] = None
    street_number: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None

    def to_platform(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class CartItem(BaseModel):
    product: Product
    quantity: int
    price: Money


class Cart(BaseModel):
    id: str
    items: List[CartItem]
    total_amount: Money


class Order(BaseModel):
    id: str
    order_number: Optional[str] = None
    created_at: str
    items: List[CartItem]
    total_amount: Money
    shipping_address: Optional[Address] = None
    billing_address: Optional[Address] = None
    customer_email: Optional[str] = None
