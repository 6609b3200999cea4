"""
Unit tests for TransactionService filtering and paging over Stripe charges
"""
from datetime import date
from unittest.mock import MagicMock

import pytest

from apparel.core.exceptions import NotFoundError, ValidationError
from apparel.services.transaction_service import TransactionService


def charge(charge_id, amount, created, **fields):
    data = {
        "id": charge_id,
        "amount": amount,
        "currency": "usd",
        "status": "succeeded",
        "captured": True,
        "refunded": False,
        "disputed": False,
        "created": created,
        "payment_intent": f"pi_{charge_id}",
        "customer": "cus_a",
        "billing_details": {"name": "Jane Doe", "email": "jane@example.com"},
    }
    data.update(fields)
    return data


@pytest.fixture
def stripe_connector():
    connector = MagicMock()
    connector.currency = "usd"
    connector.list_charges.return_value = {
        "data": [
            charge("ch_3", 5000, 1700000300),
            charge("ch_2", 1500, 1700000200, refunded=True, amount_refunded=1500),
            charge("ch_1", 900, 1700000100, status="failed", captured=False),
        ],
        "has_more": False,
    }
    return connector


@pytest.fixture
def orders(sample_order):
    repository = MagicMock()
    repository.find_by_payment_intents.return_value = {"pi_ch_3": sample_order}
    return repository


@pytest.fixture
def service(stripe_connector, orders):
    return TransactionService(stripe_connector=stripe_connector, order_repository=orders)


class TestListTransactions:

    def test_enriches_with_customer_and_order(self, service):
        result = service.list_transactions()

        first = result["transactions"][0]
        assert [t["id"] for t in result["transactions"]] == ["ch_3", "ch_2", "ch_1"]
        assert first["amount"] == 50.0
        assert first["customer"] == {"id": "cus_a", "name": "Jane Doe", "email": "jane@example.com"}
        assert first["order"]["id"] == 900
        assert result["transactions"][1]["order"] is None
        assert result["has_more"] is False
        assert result["next_cursor"] is None

    @pytest.mark.parametrize("status,expected", [
        ("succeeded", ["ch_3"]),
        ("refunded", ["ch_2"]),
        ("failed", ["ch_1"]),
        ("uncaptured", ["ch_1"]),
        ("disputed", []),
    ])
    def test_status_filter(self, service, status, expected):
        result = service.list_transactions(status=status)

        assert [t["id"] for t in result["transactions"]] == expected

    def test_unknown_status(self, service):
        with pytest.raises(ValidationError):
            service.list_transactions(status="lost")

    def test_amount_filter_uses_major_units(self, service):
        result = service.list_transactions(min_amount=10, max_amount=20)

        assert [t["id"] for t in result["transactions"]] == ["ch_2"]

    def test_date_range_is_passed_to_stripe(self, service, stripe_connector):
        service.list_transactions(start_date=date(2025, 3, 1), end_date=date(2025, 3, 1), starting_after="ch_9")

        kwargs = stripe_connector.list_charges.call_args.kwargs
        assert kwargs["created"]["gte"] == 1740787200
        assert kwargs["created"]["lte"] == 1740873599
        assert kwargs["starting_after"] == "ch_9"

    def test_next_cursor_when_more_pages(self, service, stripe_connector):
        stripe_connector.list_charges.return_value = {"data": [charge("ch_3", 5000, 1700000300)], "has_more": True}

        result = service.list_transactions(limit=1)

        assert result["has_more"] is True
        assert result["next_cursor"] == "ch_3"


class TestEmailFilter:

    def test_no_matching_customer(self, service, stripe_connector):
        stripe_connector.find_customers_by_email.return_value = []

        result = service.list_transactions(email="nobody@example.com")

        assert result == {"transactions": [], "has_more": False, "next_cursor": None}
        stripe_connector.list_charges.assert_not_called()

    def test_merges_customers_newest_first(self, service, stripe_connector):
        stripe_connector.find_customers_by_email.return_value = [{"id": "cus_a"}, {"id": "cus_b"}]
        stripe_connector.list_charges.side_effect = [
            {"data": [charge("ch_a1", 1000, 1700000100)], "has_more": False},
            {"data": [charge("ch_b1", 2000, 1700000200, customer="cus_b")], "has_more": False},
        ]

        result = service.list_transactions(email="jane@example.com")

        assert [t["id"] for t in result["transactions"]] == ["ch_b1", "ch_a1"]
        customers = [call.kwargs["customer"] for call in stripe_connector.list_charges.call_args_list]
        assert customers == ["cus_a", "cus_b"]

    def test_cursor_pages_every_customer_by_creation_time(self, service, stripe_connector):
        stripe_connector.find_customers_by_email.return_value = [{"id": "cus_a"}, {"id": "cus_b"}]
        stripe_connector.retrieve_charge.return_value = charge("ch_b1", 2000, 1700000200, customer="cus_b")
        stripe_connector.list_charges.return_value = {"data": [], "has_more": False}

        service.list_transactions(email="jane@example.com", starting_after="ch_b1")

        stripe_connector.retrieve_charge.assert_called_once_with("ch_b1")
        for call in stripe_connector.list_charges.call_args_list:
            assert "starting_after" not in call.kwargs
            assert call.kwargs["created"] == {"lt": 1700000200}

    def test_merged_page_is_cut_to_limit(self, service, stripe_connector):
        stripe_connector.find_customers_by_email.return_value = [{"id": "cus_a"}, {"id": "cus_b"}]
        stripe_connector.list_charges.side_effect = [
            {"data": [charge("ch_a2", 1000, 1700000400), charge("ch_a1", 1000, 1700000100)], "has_more": False},
            {"data": [charge("ch_b1", 2000, 1700000200, customer="cus_b")], "has_more": False},
        ]

        result = service.list_transactions(email="jane@example.com", limit=2)

        assert [t["id"] for t in result["transactions"]] == ["ch_a2", "ch_b1"]
        assert result["has_more"] is True
        assert result["next_cursor"] == "ch_b1"


class TestGetTransaction:

    def test_unknown_charge(self, service, stripe_connector):
        stripe_connector.retrieve_charge.side_effect = NotFoundError("No such charge: ch_x")

        with pytest.raises(NotFoundError):
            service.get_transaction("ch_x")

    def test_detail_with_refunds_and_order(self, service, stripe_connector, orders, sample_order):
        stripe_connector.retrieve_charge.return_value = charge(
            "ch_2", 1500, 1700000200, refunded=True,
            payment_intent={"id": "pi_test_123", "status": "succeeded", "metadata": {"userId": "user_customer"}},
        )
        stripe_connector.list_refunds.return_value = [{"id": "re_1", "amount": 1500, "status": "succeeded"}]
        orders.find_by_payment_intent.return_value = sample_order

        transaction = service.get_transaction("ch_2")

        assert transaction["payment_intent"]["id"] == "pi_test_123"
        assert transaction["refunds"][0]["amount"] == 15.0
        assert transaction["dispute"] is None
        assert transaction["order"]["id"] == 900
        orders.find_by_payment_intent.assert_called_once_with("pi_test_123")
