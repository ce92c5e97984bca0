"""Shared fixtures: an in-memory platform so tests run without credentials."""
from __future__ import annotations

import os

# Set dummy env vars BEFORE any storefront imports
os.environ.setdefault("CT_PROJECT_KEY", "test-project")
os.environ.setdefault("CT_CLIENT_ID", "test-client")
os.environ.setdefault("CT_CLIENT_SECRET", "test-secret")
os.environ.setdefault("CT_API_URL", "https://api.test.commercetools.example")
os.environ.setdefault("CT_AUTH_URL", "https://auth.test.commercetools.example")
os.environ.setdefault("CT_SCOPES", "view_products:test-project view_categories:test-project")

import pytest

from storefront.services.cart import CartService
from storefront.services.catalog import CatalogService
from storefront.services.orders import OrderService
from storefront.services.products import ProductSearchService
from storefront.services.registry import Services
from tests.fakes import FakePlatform, make_category, make_product


# ---------- Platform ----------

@pytest.fixture()
def platform() -> FakePlatform:
    """Fake platform seeded with two games and their categories."""
    fake = FakePlatform()
    fake.add_category(make_category("cat-games", "games", "Games"))
    fake.add_category(make_category("cat-nintendo", "nintendo", "Nintendo"))
    fake.add_product(make_product(
        "prod-a", "Zelda", 5999,
        description="Open world adventure",
        categories=["cat-games", "cat-nintendo"],
    ))
    fake.add_product(make_product(
        "prod-b", "Mario Kart", 4999,
        description="Racing with friends",
        categories=["cat-games"],
        variant_id=7,
    ))
    return fake


# ---------- Services ----------

@pytest.fixture()
def catalog(platform) -> CatalogService:
    return CatalogService(platform)


@pytest.fixture()
def cart_service(platform, catalog) -> CartService:
    return CartService(platform, catalog)


@pytest.fixture()
def order_service(platform, catalog, cart_service) -> OrderService:
    return OrderService(platform, catalog, cart_service)


@pytest.fixture()
def services(platform, catalog, cart_service, order_service) -> Services:
    return Services(
        catalog=catalog,
        products=ProductSearchService(platform, catalog),
        cart=cart_service,
        orders=order_service,
    )


@pytest.fixture()
def client(services):
    """FastAPI TestClient (sync) wired to the fake platform."""
    from fastapi.testclient import TestClient
    from storefront.main import app
    from storefront.routes.graphql import get_services

    app.dependency_overrides[get_services] = lambda: services
    yield TestClient(app)
    app.dependency_overrides.clear()
