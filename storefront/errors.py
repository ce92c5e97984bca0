"""Error taxonomy shared by the services and the GraphQL layer.

Every error carries a stable status code that ends up in the GraphQL
``extensions.code`` field.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class APIError(Exception):
    """Base class for errors that are safe to show to API clients."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def extensions(self) -> Dict[str, Any]:
        return {"code": self.status_code}


class NotFoundError(APIError):
    status_code = 404


class InvalidArgumentError(APIError):
    status_code = 400


class EmptyCartError(APIError):
    status_code = 400

    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class UpstreamError(APIError):
    """The platform call failed, or answered with something we can't use."""

    status_code = 500

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class OrderPlacementError(UpstreamError):
    """Place-order failed part way; nothing already created is rolled back."""

    def __init__(
        self,
        message: str,
        cart_id: Optional[str] = None,
        order_id: Optional[str] = None,
        upstream_status: Optional[int] = None,
    ):
        super().__init__(message, upstream_status=upstream_status)
        self.cart_id = cart_id
        self.order_id = order_id

    def extensions(self) -> Dict[str, Any]:
        ext = super().extensions()
        if self.cart_id:
            ext["cartId"] = self.cart_id
        if self.order_id:
            ext["orderId"] = self.order_id
        return ext
