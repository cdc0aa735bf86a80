from decimal import Decimal

import pytest

from storefront.core.config import Settings
from storefront.database import cart_db, order_db, product_db, review_db
from storefront.database.carts import CartDatabase
from storefront.database.orders import OrderDatabase
from storefront.database.products import ProductDatabase
from storefront.database.reviews import ReviewDatabase
from storefront.models.order import PaymentMethod, ShippingAddress
from storefront.payments.gateway import payment_gateway
from storefront.security.auth import Caller, Role, issue_token
from storefront.services.checkout import CheckoutService
from storefront.services.reviews import ReviewService

TEST_PRODUCTS = [
    {"id": "prod-a", "name": "Product A", "price": "10", "category": "misc", "images": ["/a.jpg"], "stock": 2},
    {"id": "prod-b", "name": "Product B", "price": "5", "category": "misc", "images": ["/b.jpg"], "stock": 1},
    {"id": "prod-c", "name": "Product C", "price": "300", "category": "home", "images": [], "stock": 10},
]


@pytest.fixture
def products():
    return ProductDatabase(TEST_PRODUCTS)


@pytest.fixture
def carts(products):
    return CartDatabase(products)


@pytest.fixture
def orders():
    return OrderDatabase()


@pytest.fixture
def pricing():
    return Settings(
        currency="INR",
        tax_rate=Decimal("0.18"),
        free_shipping_threshold=Decimal("500"),
        shipping_flat_fee=Decimal("50"),
    )


@pytest.fixture
def checkout(products, carts, orders, pricing):
    return CheckoutService(products=products, carts=carts, orders=orders, settings=pricing)


@pytest.fixture
def reviews(products, orders):
    return ReviewService(products=products, orders=orders, reviews=ReviewDatabase())


@pytest.fixture
def address():
    return ShippingAddress(
        name="Asha Rao",
        street="12 MG Road",
        city="Bengaluru",
        state="KA",
        postal_code="560001",
    )


@pytest.fixture
def customer():
    return Caller(user_id="user-1")


@pytest.fixture
def other_customer():
    return Caller(user_id="user-2")


@pytest.fixture
def admin():
    return Caller(user_id="admin-1", role=Role.ADMIN)


@pytest.fixture
def place(checkout, carts, address):
    """Helper: fill a cart and place the order."""

    def _place(user_id="user-1", lines=(("prod-a", 1),), method=PaymentMethod.GATEWAY):
        for product_id, quantity in lines:
            carts.add_item(user_id, product_id, quantity)
        return checkout.place_order(user_id, address, method)

    return _place


# ----------------------------------------------------------------------
# API fixtures: the app works against the module-level stores
# ----------------------------------------------------------------------


@pytest.fixture
def app_stores():
    """Reset the shared stores and load the test catalogue"""
    product_db.reset()
    cart_db.reset()
    order_db.reset()
    review_db.reset()
    payment_gateway.reset()
    product_db.load(TEST_PRODUCTS)
    yield
    product_db.reset()
    cart_db.reset()
    order_db.reset()
    review_db.reset()
    payment_gateway.reset()


@pytest.fixture
def client(app_stores):
    from fastapi.testclient import TestClient

    from storefront.main import app

    return TestClient(app)


def auth_headers(user_id: str, role: Role = Role.USER) -> dict:
    return {"Authorization": f"Bearer {issue_token(user_id, role)}"}


@pytest.fixture
def user_headers():
    return auth_headers("user-1")


@pytest.fixture
def other_headers():
    return auth_headers("user-2")


@pytest.fixture
def admin_headers():
    return auth_headers("admin-1", Role.ADMIN)
