"""
Unit tests for the request quote aggregate: status transitions and
versioned admin responses
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from apparel.domain.request_quote import (
    AdminResponse,
    AdminResponseCreate,
    RequestQuote,
    RequestQuoteCreate,
    can_transition,
    quote_status_for,
)

NOW = datetime(2025, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_quote(**overrides):
    data = dict(
        id=1,
        first_name="Jane",
        last_name="Doe",
        email="jane@example.com",
        phone="0900000000",
        street_address="1 Main St",
        suburb_city="Hanoi",
        country="VN",
        state="HN",
        postcode="100000",
        type="custom",
        custom_request={"custom_need": "Fifty embroidered polos"},
    )
    data.update(overrides)
    return RequestQuote(**data)


def make_response(status="quoted", total="500000", **overrides):
    data = dict(
        version=1,
        status=status,
        price_breakdown={"total_price": Decimal(total)} if total else None,
        responded_by="user_admin",
        responded_at=NOW,
    )
    data.update(overrides)
    return AdminResponse(**data)


class TestTransitions:

    @pytest.mark.parametrize("current,target", [
        ("pending", "reviewing"),
        ("pending", "quoted"),
        ("reviewing", "rejected"),
        ("quoted", "quoted"),
        ("quoted", "approved"),
        ("approved", "completed"),
    ])
    def test_allowed(self, current, target):
        assert can_transition(current, target)

    @pytest.mark.parametrize("current,target", [
        ("pending", "approved"),
        ("approved", "quoted"),
        ("rejected", "reviewing"),
        ("completed", "pending"),
    ])
    def test_forbidden(self, current, target):
        assert not can_transition(current, target)

    def test_revised_response_means_quoted(self):
        assert quote_status_for("revised") == "quoted"
        assert quote_status_for("rejected") == "rejected"


class TestAdminResponses:

    def test_first_response_is_version_one(self):
        quote = make_quote()

        quote.add_admin_response(make_response())

        assert quote.current_version == 1
        assert quote.total_revisions == 0
        assert quote.status == "quoted"
        assert quote.quoted_price == Decimal("500000")
        assert quote.quoted_at == NOW

    def test_versions_increase_with_one_current(self):
        quote = make_quote()

        quote.add_admin_response(make_response())
        quote.add_admin_response(make_response(status="revised", total="450000", version=9))
        quote.add_admin_response(make_response(status="revised", total="420000"))

        assert [response.version for response in quote.response_history()] == [1, 2, 3]
        assert [response.is_current_version for response in quote.admin_responses] == [False, False, True]
        assert quote.current_response().version == 3
        assert quote.total_revisions == 2
        assert quote.quoted_price == Decimal("420000")

    def test_rejection_mirrors_reason(self):
        quote = make_quote()

        quote.add_admin_response(make_response(status="rejected", total=None, rejection_reason="Out of stock"))

        assert quote.status == "rejected"
        assert quote.rejected_at == NOW
        assert quote.rejection_reason == "Out of stock"
        assert quote.quoted_price is None

    def test_quoted_price_wins_over_breakdown(self):
        response = make_response(quoted_price=Decimal("1"), total="2")
        assert response.effective_price == Decimal("1")

    def test_response_dict_names_responder(self):
        quote = make_quote()
        quote.add_admin_response(make_response())

        data = quote.to_dict()["admin_responses"][0]

        assert data["respondedBy"] == "user_admin"
        assert data["respondedAt"] == NOW.isoformat()
        assert "responded_by" in quote.admin_responses[0].model_dump()


class TestWriteSchemas:

    def test_quoted_response_needs_total(self):
        with pytest.raises(ValidationError):
            AdminResponseCreate(status="quoted", price_breakdown={"setup_fee": 10})

    def test_reviewing_response_without_price(self):
        assert AdminResponseCreate(status="reviewing").price_breakdown is None

    def test_product_request_needs_details(self):
        with pytest.raises(ValidationError):
            RequestQuoteCreate(
                first_name="Jane", last_name="Doe", email="jane@example.com", phone="1",
                street_address="1 Main St", suburb_city="Hanoi", country="VN", state="HN",
                postcode="100000", agree_terms=True, type="product",
            )

    def test_terms_must_be_agreed(self):
        with pytest.raises(ValidationError):
            RequestQuoteCreate(
                first_name="Jane", last_name="Doe", email="jane@example.com", phone="1",
                street_address="1 Main St", suburb_city="Hanoi", country="VN", state="HN",
                postcode="100000", agree_terms=False, type="custom",
                custom_request={"custom_need": "Fifty polos"},
            )
