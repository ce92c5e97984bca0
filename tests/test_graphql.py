"""End-to-end tests for POST /graphql against the fake platform."""
from __future__ import annotations

from unittest.mock import AsyncMock

ADDRESS = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "streetName": "Main St",
    "streetNumber": "1",
    "postalCode": "12345",
    "city": "Springfield",
    "country": "US",
}

CART_FIELDS = """
    id
    items { quantity price { centAmount currencyCode amount } product { id name { en_US } } }
    totalAmount { centAmount currencyCode amount }
"""


def _gql(client, query, variables=None):
    resp = client.post("/graphql", json={"query": query, "variables": variables or {}})
    assert resp.status_code == 200
    return resp.json()


# ---------- basics ----------

def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert "running" in resp.json()["message"]


def test_health(client):
    assert _gql(client, "{ health }") == {"data": {"health": "OK"}}


# ---------- products ----------

def test_product_query_shape(client):
    data = _gql(client, """
        query ($id: ID!) {
          product(id: $id) {
            id version name { en_US } metaTitle { en_US }
            categories { id name { en_US } }
            masterVariant {
              id sku
              prices { value { centAmount currencyCode amount } }
              images { url dimensions { w h } }
              attributes { name value { ... on TextAttribute { text } } }
            }
          }
        }
    """, {"id": "prod-a"})["data"]["product"]

    assert data["name"] == {"en_US": "Zelda"}
    assert data["metaTitle"] == {"en_US": ""}
    assert {"id": "cat-nintendo", "name": {"en_US": "Nintendo"}} in data["categories"]
    variant = data["masterVariant"]
    assert variant["prices"][0]["value"] == {"centAmount": 5999, "currencyCode": "USD", "amount": 59.99}
    assert variant["images"][0]["dimensions"] == {"w": 100, "h": 100}
    assert variant["attributes"][0] == {"name": "platform", "value": {"text": "switch"}}


def test_unknown_product_has_404_code(client):
    body = _gql(client, '{ product(id: "nope") { id } }')

    assert body["data"] == {"product": None}
    assert body["errors"][0]["message"] == "Product nope not found"
    assert body["errors"][0]["extensions"]["code"] == 404


def test_products_with_enums(client):
    body = _gql(client, """
        { products(sortBy: PRICE, sortOrder: DESC, limit: 10) {
            total offset limit results { id }
        } }
    """)
    page = body["data"]["products"]
    assert page["limit"] == 10
    assert page["offset"] == 0
    assert [p["id"] for p in page["results"]] == ["prod-a", "prod-b"]


# ---------- cart ----------

def test_cart_flow(client):
    empty = _gql(client, "{ cart { %s } }" % CART_FIELDS)["data"]["cart"]
    assert empty["id"] == "empty"
    assert empty["totalAmount"] == {"centAmount": 0, "currencyCode": "USD", "amount": 0.0}

    add = """mutation ($pid: ID!, $qty: Int!) { addToCart(productId: $pid, quantity: $qty) { %s } }""" % CART_FIELDS
    _gql(client, add, {"pid": "prod-a", "qty": 2})
    cart = _gql(client, add, {"pid": "prod-b", "qty": 1})["data"]["addToCart"]

    assert cart["totalAmount"] == {"centAmount": 16997, "currencyCode": "USD", "amount": 169.97}

    remove = """mutation ($pid: ID!) { removeFromCart(productId: $pid) { %s } }""" % CART_FIELDS
    cart = _gql(client, remove, {"pid": "prod-a"})["data"]["removeFromCart"]
    assert [i["product"]["id"] for i in cart["items"]] == ["prod-b"]


def test_remove_from_missing_cart_has_404_code(client):
    body = _gql(client, 'mutation { removeFromCart(productId: "prod-a") { id } }')

    assert body["errors"][0]["message"] == "Cart not found"
    assert body["errors"][0]["extensions"] == {"code": 404}


# ---------- orders ----------

PLACE = """
    mutation ($ship: AddressInput!, $email: String!) {
      placeOrder(shippingAddress: $ship, customerEmail: $email) {
        id orderNumber createdAt customerEmail
        totalAmount { centAmount }
        shippingAddress { firstName city }
        billingAddress { firstName city }
        items { quantity product { id } }
      }
    }
"""


def test_place_order_then_query(client, platform):
    platform.add_shopping_list([("prod-a", 2), ("prod-b", 1)])

    order = _gql(client, PLACE, {"ship": ADDRESS, "email": "ada@example.com"})["data"]["placeOrder"]
    assert order["totalAmount"]["centAmount"] == 16997
    assert order["billingAddress"] == {"firstName": "Ada", "city": "Springfield"}

    fetched = _gql(client, """
        query ($n: String) { order(orderNumber: $n) { id items { quantity } } }
    """, {"n": order["orderNumber"]})["data"]["order"]
    assert fetched["id"] == order["id"]

    orders = _gql(client, "{ orders { id orderNumber } }")["data"]["orders"]
    assert [o["id"] for o in orders] == [order["id"]]


def test_place_order_with_empty_cart_has_400_code(client):
    body = _gql(client, PLACE, {"ship": ADDRESS, "email": "ada@example.com"})

    assert body["data"] is None
    assert body["errors"][0]["message"] == "Cart is empty"
    assert body["errors"][0]["extensions"]["code"] == 400


def test_order_soft_miss_and_invalid_argument(client):
    missing = _gql(client, '{ order(id: "missing") { id } }')
    assert missing == {"data": {"order": None}}

    invalid = _gql(client, "{ order { id } }")
    assert invalid["errors"][0]["extensions"]["code"] == 400


def test_remove_orders(client, platform):
    platform.add_shopping_list([("prod-a", 1)])
    order = _gql(client, PLACE, {"ship": ADDRESS, "email": "ada@example.com"})["data"]["placeOrder"]

    removed = _gql(client, 'mutation ($id: ID) { removeOrder(id: $id) }', {"id": order["id"]})
    assert removed == {"data": {"removeOrder": True}}
    assert _gql(client, "mutation { removeAllOrders }") == {"data": {"removeAllOrders": True}}


# ---------- error hiding ----------

def test_unexpected_errors_are_hidden(client, services, monkeypatch):
    monkeypatch.setattr(services.cart, "get_cart", AsyncMock(side_effect=RuntimeError("secret detail")))

    body = _gql(client, "{ cart { id } }")

    assert body["errors"][0]["message"] == "Internal server error"
    assert body["errors"][0]["extensions"] == {"code": 500}
    assert "secret" not in str(body)
