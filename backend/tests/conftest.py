"""
Pytest fixtures and configuration for Apparel Platform Backend tests

Repositories and connectors are mocked everywhere: no test needs a database,
Stripe or the identity provider.
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from apparel.core.auth import TokenUser, get_current_user, get_current_user_optional
from apparel.core.rate_limit import rate_limiter
from apparel.domain.cart import Cart, CartItem, SizeQuantity
from apparel.domain.catalog import ColorImage, Product, ProductColor, SizeVariant
from apparel.domain.design import Design, ElementDesign
from apparel.domain.order import Order, OrderItem, OrderItemSize, ShippingDetails
from apparel.main import app


@pytest.fixture
def customer():
    return TokenUser(id="user_customer", email="jane@example.com", name="Jane Doe", role="customer")


@pytest.fixture
def admin():
    return TokenUser(id="user_admin", email="admin@example.com", name="Admin", role="admin")


@pytest.fixture
def shipper():
    return TokenUser(id="user_shipper", email="ship@example.com", name="Sam", role="shipper")


@pytest.fixture
def designer():
    return TokenUser(id="user_designer", email="design@example.com", name="Dee", role="designer")


@pytest.fixture
def sample_color():
    """Black color with S/M/L; L carries a 20000 surcharge"""
    return ProductColor(
        id=10,
        shirt_id=1,
        color_name="Black",
        color_value="#000000",
        images=[
            ColorImage(id=100, shirt_color_id=10, url="https://cdn.example.com/black-front.png",
                       view_side="front", is_primary=True),
        ],
        sizes=[
            SizeVariant(id=1000, shirt_color_id=10, size="S", additional_price=Decimal("0"), quantity=5),
            SizeVariant(id=1001, shirt_color_id=10, size="M", additional_price=Decimal("0"), quantity=0),
            SizeVariant(id=1002, shirt_color_id=10, size="L", additional_price=Decimal("20000"), quantity=3),
        ],
    )


@pytest.fixture
def sample_product(sample_color):
    return Product(
        id=1,
        name="Classic Tee",
        description="Heavy cotton tee",
        base_price=Decimal("150000"),
        category_ids=[1],
        is_active=True,
        colors=[sample_color],
    )


@pytest.fixture
def sample_design(customer):
    return Design(
        id=50,
        user_id=customer.id,
        shirt_color_id=10,
        name="Team Logo",
        element_design={"front": ElementDesign(images_id=100, element_Json='{"objects": []}')},
        design_images={"front": "https://cdn.example.com/designs/50-front.png"},
    )


@pytest.fixture
def sample_cart(customer):
    return Cart(
        id=7,
        user_id=customer.id,
        items=[
            CartItem(id=71, cart_id=7, design_id=50, quantity_by_size=[
                SizeQuantity(size="S", quantity=2),
                SizeQuantity(size="L", quantity=1),
            ]),
            CartItem(id=72, cart_id=7, design_id=50, quantity_by_size=[
                SizeQuantity(size="M", quantity=1),
            ]),
        ],
    )


@pytest.fixture
def sample_order(customer):
    return Order(
        id=900,
        user_id=customer.id,
        stripe_payment_intent_id="pi_test_123",
        status="processing",
        items=[
            OrderItem(
                design_id=50,
                product_id=1,
                name="Classic Tee",
                color="Black",
                sizes=[OrderItemSize(size="S", quantity=2, price_per_unit=Decimal("150000"))],
                total_price=Decimal("300000"),
            )
        ],
        total_amount=Decimal("300000"),
        shipping_details=ShippingDetails(
            name="Jane Doe",
            address="1 Main St",
            city="Hanoi",
            postal_code="100000",
            country="VN",
            method="standard",
        ),
        created_at=datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc),
    )


@pytest.fixture
def client():
    """TestClient on the app; dependency overrides are cleared after each test"""
    rate_limiter.reset()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def login():
    """Authenticate every request of the test as the given user"""
    def _login(user: TokenUser):
        app.dependency_overrides[get_current_user] = lambda: user
        app.dependency_overrides[get_current_user_optional] = lambda: user
    return _login


@pytest.fixture
def override():
    """Replace a get_*_service dependency with a mock"""
    def _override(dependency, value):
        app.dependency_overrides[dependency] = lambda: value
        return value
    return _override
