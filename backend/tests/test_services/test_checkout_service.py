"""
Unit tests for cart pricing and checkout

Repositories and connectors are mocks; async service methods are driven
with asyncio.run.
"""
import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from apparel.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from apparel.domain.cart import SizeQuantity
from apparel.domain.payment import CheckoutRequest
from apparel.domain.user import IdentityUser
from apparel.services.cart_service import CartService, price_per_size
from apparel.services.payment_service import PaymentService, card_details


@pytest.fixture
def repositories(sample_cart, sample_design, sample_color, sample_product):
    carts = MagicMock()
    designs = MagicMock()
    products = MagicMock()
    carts.find_by_user.return_value = sample_cart
    designs.find_by_id.return_value = sample_design
    designs.find_by_ids.return_value = {sample_design.id: sample_design}
    products.find_color.return_value = sample_color
    products.find_colors_by_ids.return_value = {sample_color.id: sample_color}
    products.find_by_ids.return_value = {sample_product.id: sample_product}
    return carts, designs, products


@pytest.fixture
def stripe_connector():
    connector = MagicMock()
    connector.currency = "vnd"
    connector.list_cards.return_value = []
    connector.retrieve_customer.return_value = {"id": "cus_123"}
    connector.create_payment_intent.return_value = {
        "id": "pi_new", "client_secret": "pi_new_secret", "status": "requires_payment_method",
    }
    return connector


@pytest.fixture
def identity(customer):
    connector = MagicMock()
    connector.get_user = AsyncMock(return_value=IdentityUser(
        id=customer.id, email=customer.email, first_name="Jane", last_name="Doe",
        private_metadata={"stripe_cus_id": "cus_123"},
    ))
    connector.update_metadata = AsyncMock()
    return connector


@pytest.fixture
def payment_service(repositories, stripe_connector, identity):
    carts, designs, products = repositories
    orders = MagicMock()
    return PaymentService(
        stripe_connector=stripe_connector,
        identity_connector=identity,
        cart_repository=carts,
        order_repository=orders,
        design_repository=designs,
        product_repository=products,
    )


class TestCartPricing:

    def test_price_per_size_adds_surcharge(self, sample_color):
        assert price_per_size(Decimal("150000"), sample_color.find_size("L")) == Decimal("170000")
        assert price_per_size(Decimal("150000"), None) == Decimal("150000")

    def test_summary_totals(self, repositories, customer):
        service = CartService(*repositories)

        cart, summary = service.get_summary(customer.id)

        first = summary.items[0]
        assert [entry.price_per_size for entry in first.data] == [Decimal("150000"), Decimal("170000")]
        assert first.total == Decimal("470000")
        assert summary.subtotal == Decimal("620000")
        assert summary.total_quantity == 4
        assert first.preview_images == ["https://cdn.example.com/designs/50-front.png"]

    def test_summary_restricted_to_selection(self, repositories, customer):
        _, summary = CartService(*repositories).get_summary(customer.id, item_ids=[72])

        assert [item.id for item in summary.items] == [72]
        assert summary.subtotal == Decimal("150000")

    def test_items_with_deleted_design_are_skipped(self, repositories, customer):
        carts, designs, products = repositories
        designs.find_by_ids.return_value = {}

        _, summary = CartService(carts, designs, products).get_summary(customer.id)

        assert summary.items == []

    def test_add_item_rejects_unknown_size(self, repositories, customer):
        with pytest.raises(ValidationError) as exc_info:
            CartService(*repositories).add_item(customer.id, 50, [SizeQuantity(size="XXL", quantity=1)])

        assert "XXL" in exc_info.value.message

    def test_add_item_rejects_foreign_design(self, repositories):
        with pytest.raises(ForbiddenError):
            CartService(*repositories).add_item("user_other", 50, [SizeQuantity(size="S", quantity=1)])

    def test_remove_missing_item(self, repositories, customer):
        with pytest.raises(NotFoundError):
            CartService(*repositories).remove_item(customer.id, 4242)


class TestCheckout:

    def test_checkout_info(self, payment_service, stripe_connector, customer):
        stripe_connector.list_cards.return_value = [{"id": "pm_1", "card": {"brand": "visa", "last4": "4242"}}]

        info = asyncio.run(payment_service.checkout_info(customer.id))

        assert info["totalAmount"] == 620000.0
        assert info["totalQuantity"] == 4
        assert info["hasPaymentMethods"] is True
        assert info["defaultPaymentMethod"] is None
        assert info["items"][0]["data"][0]["pricePerSize"] == 150000.0

    def test_empty_cart_is_rejected(self, payment_service, repositories, customer):
        carts, _, _ = repositories
        carts.find_by_user.return_value = None

        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(payment_service.create_payment(customer.id, CheckoutRequest()))

        assert exc_info.value.message == "Cart is empty"

    def test_unknown_selection_is_rejected(self, payment_service, customer):
        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(payment_service.create_payment(customer.id, CheckoutRequest(item_ids=[4242])))

        assert exc_info.value.message == "No valid items selected for checkout"

    def test_creates_intent_with_checkout_metadata(self, payment_service, stripe_connector, customer):
        result = asyncio.run(payment_service.create_payment(customer.id, CheckoutRequest(item_ids=[71])))

        params = stripe_connector.create_payment_intent.call_args.kwargs
        assert params["amount"] == 470000
        assert params["customer"] == "cus_123"
        assert params["metadata"] == {"userId": customer.id, "cartId": "7", "itemIds": "71"}
        assert params["automatic_payment_methods"]["enabled"] is True
        assert result == {
            "clientSecret": "pi_new_secret",
            "paymentIntentId": "pi_new",
            "requiresAction": False,
            "status": "requires_payment_method",
        }

    def test_saved_card_confirms_immediately(self, payment_service, stripe_connector, customer):
        request = CheckoutRequest(payment_method_id="pm_card", save_payment_method=True)

        asyncio.run(payment_service.create_payment(customer.id, request))

        params = stripe_connector.create_payment_intent.call_args.kwargs
        assert params["payment_method"] == "pm_card"
        assert params["confirm"] is True
        assert params["return_url"].endswith("/orders")
        assert params["setup_future_usage"] == "on_session"
        assert "automatic_payment_methods" not in params

    def test_confirm_rejects_other_users_intent(self, payment_service, stripe_connector, customer):
        stripe_connector.retrieve_payment_intent.return_value = {
            "id": "pi_1", "status": "succeeded", "metadata": {"userId": "user_other"},
        }

        with pytest.raises(ForbiddenError):
            payment_service.confirm_payment(customer.id, "pi_1")

    def test_confirm_requires_succeeded_intent(self, payment_service, stripe_connector, customer):
        stripe_connector.retrieve_payment_intent.return_value = {
            "id": "pi_1", "status": "processing", "metadata": {"userId": customer.id},
        }

        with pytest.raises(ValidationError) as exc_info:
            payment_service.confirm_payment(customer.id, "pi_1")

        assert exc_info.value.payload["success"] is False
        assert exc_info.value.payload["status"] == "processing"


class TestRecordPaidOrder:

    def intent(self, customer):
        return {
            "id": "pi_paid",
            "amount": 470000,
            "currency": "vnd",
            "status": "succeeded",
            "metadata": {"userId": customer.id, "cartId": "7", "itemIds": "71"},
            "payment_method": {"id": "pm_1", "card": {"brand": "visa", "last4": "4242",
                                                      "exp_month": 12, "exp_year": 2030}},
        }

    def test_creates_order_and_clears_purchased_items(self, payment_service, repositories, sample_order, customer):
        carts, _, _ = repositories
        payment_service.orders.find_by_payment_intent.return_value = None
        payment_service.orders.create.return_value = (sample_order, True)

        order, created = payment_service.record_paid_order(self.intent(customer))

        assert created is True
        kwargs = payment_service.orders.create.call_args.kwargs
        assert kwargs["status"] == "processing"
        assert kwargs["total_amount"] == Decimal("470000")
        assert kwargs["payment_method_details"]["last4"] == "4242"
        item = kwargs["items"][0]
        assert item.total_price == Decimal("470000")
        assert item.image_url == "https://cdn.example.com/designs/50-front.png"
        carts.remove_items.assert_called_once_with(7, [71])

    def test_existing_order_is_returned_untouched(self, payment_service, repositories, sample_order, customer):
        carts, _, _ = repositories
        payment_service.orders.find_by_payment_intent.return_value = sample_order

        order, created = payment_service.record_paid_order(self.intent(customer))

        assert created is False
        assert order is sample_order
        payment_service.orders.create.assert_not_called()
        carts.remove_items.assert_not_called()

    def test_resolves_card_from_payment_method_id(self, payment_service, stripe_connector, sample_order, customer):
        intent = self.intent(customer)
        intent["payment_method"] = "pm_card_visa"
        stripe_connector.retrieve_payment_method.return_value = {
            "id": "pm_card_visa", "card": {"brand": "visa", "last4": "4242", "exp_month": 12, "exp_year": 2030},
        }
        payment_service.orders.find_by_payment_intent.return_value = None
        payment_service.orders.create.return_value = (sample_order, True)

        payment_service.record_paid_order(intent)

        stripe_connector.retrieve_payment_method.assert_called_once_with("pm_card_visa")
        assert payment_service.orders.create.call_args.kwargs["payment_method_details"] == {
            "brand": "visa", "last4": "4242", "exp_month": 12, "exp_year": 2030,
        }

    def test_missing_payment_method_still_records_order(self, payment_service, stripe_connector, sample_order, customer):
        intent = self.intent(customer)
        intent["payment_method"] = "pm_gone"
        stripe_connector.retrieve_payment_method.side_effect = NotFoundError("No such payment_method")
        payment_service.orders.find_by_payment_intent.return_value = None
        payment_service.orders.create.return_value = (sample_order, True)

        order, created = payment_service.record_paid_order(intent)

        assert created is True
        assert payment_service.orders.create.call_args.kwargs["payment_method_details"] is None

    def test_card_details(self):
        assert card_details("pm_only_id") is None
        assert card_details({"card": {"brand": "visa", "last4": "1111"}})["brand"] == "visa"
