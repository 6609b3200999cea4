"""
Unit tests for WebhookService event handling
"""
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from apparel.core.exceptions import ValidationError
from apparel.services.webhook_service import WebhookService


@pytest.fixture
def stripe_connector():
    connector = MagicMock()
    connector.currency = "vnd"
    return connector


@pytest.fixture
def orders():
    return MagicMock()


@pytest.fixture
def payments():
    return MagicMock()


@pytest.fixture
def service(stripe_connector, orders, payments):
    return WebhookService(stripe_connector=stripe_connector, order_repository=orders, payment_service=payments)


def event(event_type, obj):
    return {"id": "evt_1", "type": event_type, "data": {"object": obj}}


class TestProcess:

    def test_unhandled_event_is_acknowledged(self, service, stripe_connector):
        stripe_connector.construct_event.return_value = event("customer.created", {"id": "cus_1"})

        assert service.process(b"{}", "t=1,v1=sig") == {"received": True, "handled": False}

    def test_bad_signature_propagates(self, service, stripe_connector):
        stripe_connector.construct_event.side_effect = ValidationError("Webhook Error: bad signature")

        with pytest.raises(ValidationError):
            service.process(b"{}", "t=1,v1=bad")

    def test_dispatches_to_handler(self, service, stripe_connector, orders):
        stripe_connector.construct_event.return_value = event("payment_intent.canceled", {"id": "pi_1"})

        result = service.process(b"{}", "t=1,v1=sig")

        assert result["handled"] is True
        orders.update_by_payment_intent.assert_called_once_with("pi_1", {"status": "canceled"}, expected_status=["pending"])


class TestPaymentEvents:

    def test_succeeded_records_order(self, service, payments, sample_order):
        payments.record_paid_order.return_value = (sample_order, True)
        intent = {"id": "pi_test_123", "metadata": {"userId": "user_customer", "itemIds": "71"}}

        order = service.handle_payment_succeeded(intent)

        assert order is sample_order
        payments.record_paid_order.assert_called_once_with(intent)

    def test_succeeded_moves_pending_order_to_processing(self, service, payments, orders, sample_order):
        sample_order.status = "pending"
        payments.record_paid_order.return_value = (sample_order, False)

        service.handle_payment_succeeded({"id": "pi_test_123", "metadata": {"userId": "u", "itemIds": "1"}})

        orders.update.assert_called_once_with(sample_order.id, {"status": "processing"}, expected_status=["pending"])

    def test_succeeded_without_metadata_is_skipped(self, service, payments):
        assert service.handle_payment_succeeded({"id": "pi_x", "metadata": {}}) is None
        payments.record_paid_order.assert_not_called()

    def test_failed_payment_cancels_pending_order(self, service, orders):
        service.handle_payment_failed({"id": "pi_1", "last_payment_error": {"message": "Card declined"}})

        orders.update_by_payment_intent.assert_called_once_with(
            "pi_1",
            {"status": "canceled", "payment_failure_reason": "Card declined"},
            expected_status=["pending"]
        )


class TestRefunds:

    def test_full_refund_cancels_order(self, service, orders):
        service.handle_charge_refunded({
            "payment_intent": "pi_1", "currency": "vnd", "amount": 300000,
            "amount_refunded": 300000, "refunded": True,
        })

        payment_intent_id, fields = orders.update_by_payment_intent.call_args[0]
        assert payment_intent_id == "pi_1"
        assert fields["status"] == "canceled"
        assert fields["refund_amount"] == Decimal("300000")
        assert fields["partially_refunded"] is False
        assert fields["refunded_at"] is not None

    def test_partial_refund_keeps_status(self, service, orders):
        service.handle_charge_refunded({
            "payment_intent": "pi_1", "currency": "usd", "amount": 5000,
            "amount_refunded": 1250, "refunded": False,
        })

        fields = orders.update_by_payment_intent.call_args[0][1]
        assert fields == {"refund_amount": Decimal("12.50"), "partially_refunded": True}

    def test_charge_without_intent_is_ignored(self, service, orders):
        assert service.handle_charge_refunded({"id": "ch_1"}) is None
        orders.update_by_payment_intent.assert_not_called()
