"""
Transaction Service

Admin view over Stripe charges. Stripe filters by date and customer; status
and amount filters are applied here because the charges API does not support
them.
"""
import logging
from datetime import date, datetime, time, timezone
from typing import Callable, Dict, List, Optional

from apparel.connectors.stripe_connector import StripeConnector, from_minor_units, to_minor_units
from apparel.core.exceptions import ValidationError
from apparel.repositories.order_repository import OrderRepository

logger = logging.getLogger(__name__)


STATUS_FILTERS: Dict[str, Callable] = {
    "succeeded": lambda charge: charge.get("status") == "succeeded" and not charge.get("refunded"),
    "refunded": lambda charge: bool(charge.get("refunded")),
    "disputed": lambda charge: bool(charge.get("disputed")),
    "failed": lambda charge: charge.get("status") == "failed",
    "uncaptured": lambda charge: not charge.get("captured"),
}


def _timestamp(value) -> Optional[str]:
    if not value:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc).isoformat()


def _customer_summary(customer, charge) -> dict:
    billing = charge.get("billing_details") or {}
    if customer and not isinstance(customer, str):
        return {
            "id": customer.get("id"),
            "name": customer.get("name") or billing.get("name"),
            "email": customer.get("email") or billing.get("email"),
        }
    return {"id": customer, "name": billing.get("name"), "email": billing.get("email")}


def _intent_id(charge) -> Optional[str]:
    intent = charge.get("payment_intent")
    if intent and not isinstance(intent, str):
        return intent.get("id")
    return intent


class TransactionService:

    def __init__(self, stripe_connector: StripeConnector = None, order_repository: OrderRepository = None):
        self.stripe = stripe_connector or StripeConnector()
        self.orders = order_repository or OrderRepository()

    def _format_charge(self, charge, order=None) -> dict:
        currency = charge.get("currency") or self.stripe.currency
        details = (charge.get("payment_method_details") or {}).get("card") or {}
        return {
            "id": charge["id"],
            "amount": float(from_minor_units(charge.get("amount", 0), currency)),
            "amount_refunded": float(from_minor_units(charge.get("amount_refunded") or 0, currency)),
            "currency": currency,
            "status": charge.get("status"),
            "captured": bool(charge.get("captured")),
            "refunded": bool(charge.get("refunded")),
            "disputed": bool(charge.get("disputed")),
            "description": charge.get("description"),
            "receipt_url": charge.get("receipt_url"),
            "failure_message": charge.get("failure_message"),
            "created": _timestamp(charge.get("created")),
            "payment_intent_id": _intent_id(charge),
            "card": {"brand": details.get("brand"), "last4": details.get("last4")} if details else None,
            "customer": _customer_summary(charge.get("customer"), charge),
            "order": {"id": order.id, "status": order.status, "user_id": order.user_id} if order else None,
        }

    def list_transactions(
        self,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        min_amount: Optional[float] = None,
        max_amount: Optional[float] = None,
        email: Optional[str] = None,
        limit: int = 25,
        starting_after: Optional[str] = None
    ) -> dict:
        """
        List charges, newest first, enriched with customer and order

        Returns:
            {"transactions": [...], "has_more": bool, "next_cursor": charge id or None}
        """
        if status and status not in STATUS_FILTERS:
            raise ValidationError(f"Invalid status filter: {status}")

        created = {}
        if start_date:
            created["gte"] = int(datetime.combine(start_date, time.min, tzinfo=timezone.utc).timestamp())
        if end_date:
            created["lte"] = int(datetime.combine(end_date, time.max, tzinfo=timezone.utc).timestamp())

        if email:
            customers = self.stripe.find_customers_by_email(email)
            if not customers:
                return {"transactions": [], "has_more": False, "next_cursor": None}
            # Charge cursors are per customer; merged pages continue from the cursor charge's creation time
            window = dict(created)
            if starting_after:
                window["lt"] = self.stripe.retrieve_charge(starting_after)["created"]
            charges, has_more = [], False
            for customer in customers:
                result = self.stripe.list_charges(limit=limit, created=window or None, customer=customer["id"])
                charges.extend(result["data"])
                has_more = has_more or bool(result.get("has_more"))
            charges.sort(key=lambda charge: charge.get("created") or 0, reverse=True)
            has_more = has_more or len(charges) > limit
            charges = charges[:limit]
        else:
            result = self.stripe.list_charges(limit=limit, starting_after=starting_after, created=created or None)
            charges = list(result["data"])
            has_more = bool(result.get("has_more"))

        next_cursor = charges[-1]["id"] if charges and has_more else None

        if status:
            charges = [charge for charge in charges if STATUS_FILTERS[status](charge)]
        currency = self.stripe.currency
        if min_amount is not None:
            charges = [c for c in charges if c.get("amount", 0) >= to_minor_units(min_amount, c.get("currency") or currency)]
        if max_amount is not None:
            charges = [c for c in charges if c.get("amount", 0) <= to_minor_units(max_amount, c.get("currency") or currency)]

        orders = self.orders.find_by_payment_intents([_intent_id(c) for c in charges if _intent_id(c)])
        transactions = [self._format_charge(charge, orders.get(_intent_id(charge))) for charge in charges[:limit]]

        return {"transactions": transactions, "has_more": has_more, "next_cursor": next_cursor}

    def get_transaction(self, charge_id: str) -> dict:
        """
        One charge with its payment intent, dispute, refunds and linked order

        Raises:
            NotFoundError: unknown charge id (raised by the connector)
        """
        charge = self.stripe.retrieve_charge(charge_id)
        payment_intent_id = _intent_id(charge)
        order = self.orders.find_by_payment_intent(payment_intent_id) if payment_intent_id else None
        currency = charge.get("currency") or self.stripe.currency

        transaction = self._format_charge(charge, order)

        intent = charge.get("payment_intent")
        transaction["payment_intent"] = {
            "id": intent.get("id"),
            "status": intent.get("status"),
            "metadata": dict(intent.get("metadata") or {}),
        } if intent and not isinstance(intent, str) else None

        dispute = charge.get("dispute")
        transaction["dispute"] = {
            "id": dispute.get("id"),
            "status": dispute.get("status"),
            "reason": dispute.get("reason"),
            "amount": float(from_minor_units(dispute.get("amount", 0), currency)),
        } if dispute and not isinstance(dispute, str) else None

        transaction["refunds"] = [
            {
                "id": refund["id"],
                "amount": float(from_minor_units(refund.get("amount", 0), currency)),
                "status": refund.get("status"),
                "reason": refund.get("reason"),
                "created": _timestamp(refund.get("created")),
            }
            for refund in self.stripe.list_refunds(charge["id"])
        ]
        return transaction
