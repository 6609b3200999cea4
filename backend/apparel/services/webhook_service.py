"""
Webhook Service

Applies Stripe events to orders. Every handler is safe to replay: order
creation is idempotent per payment intent and status moves are conditional
on the current status.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from apparel.connectors.stripe_connector import StripeConnector, from_minor_units
from apparel.domain.order import Order
from apparel.repositories.order_repository import OrderRepository
from apparel.services.payment_service import PaymentService

logger = logging.getLogger(__name__)


class WebhookService:

    def __init__(
        self,
        stripe_connector: StripeConnector = None,
        order_repository: OrderRepository = None,
        payment_service: PaymentService = None
    ):
        self.stripe = stripe_connector or StripeConnector()
        self.orders = order_repository or OrderRepository()
        self.payments = payment_service or PaymentService(
            stripe_connector=self.stripe,
            order_repository=self.orders
        )
        self.handlers = {
            "payment_intent.succeeded": self.handle_payment_succeeded,
            "payment_intent.payment_failed": self.handle_payment_failed,
            "payment_intent.canceled": self.handle_payment_canceled,
            "charge.refunded": self.handle_charge_refunded,
        }

    def process(self, payload: bytes, signature: Optional[str]) -> dict:
        """
        Verify and dispatch one webhook delivery

        Raises:
            ValidationError: signature missing or invalid
        """
        event = self.stripe.construct_event(payload, signature)
        event_type = event["type"]
        handler = self.handlers.get(event_type)

        if handler is None:
            logger.info(f"Ignoring Stripe event {event['id']} of type {event_type}")
            return {"received": True, "handled": False}

        logger.info(f"Handling Stripe event {event['id']} ({event_type})")
        handler(event["data"]["object"])
        return {"received": True, "handled": True}

    def handle_payment_succeeded(self, intent) -> Optional[Order]:
        metadata = intent.get("metadata") or {}
        if not metadata.get("userId") or not metadata.get("itemIds"):
            logger.warning(f"Payment intent {intent['id']} has no checkout metadata, skipping")
            return None

        order, created = self.payments.record_paid_order(intent)
        if not created and order.status == "pending":
            order = self.orders.update(order.id, {"status": "processing"}, expected_status=["pending"]) or order
        return order

    def handle_payment_failed(self, intent) -> Optional[Order]:
        error = intent.get("last_payment_error") or {}
        reason = error.get("message") or "Payment failed"
        order = self.orders.update_by_payment_intent(
            intent["id"],
            {"status": "canceled", "payment_failure_reason": reason},
            expected_status=["pending"]
        )
        if order:
            logger.info(f"Order {order.id} canceled after failed payment: {reason}")
        return order

    def handle_payment_canceled(self, intent) -> Optional[Order]:
        order = self.orders.update_by_payment_intent(
            intent["id"],
            {"status": "canceled"},
            expected_status=["pending"]
        )
        if order:
            logger.info(f"Order {order.id} canceled with its payment intent")
        return order

    def handle_charge_refunded(self, charge) -> Optional[Order]:
        payment_intent_id = charge.get("payment_intent")
        if not payment_intent_id:
            return None

        currency = charge.get("currency") or self.stripe.currency
        refund_amount = from_minor_units(charge.get("amount_refunded") or 0, currency)
        fully_refunded = bool(charge.get("refunded")) or charge.get("amount_refunded", 0) >= charge.get("amount", 0)

        if fully_refunded:
            fields = {
                "status": "canceled",
                "refund_amount": refund_amount,
                "refunded_at": datetime.now(timezone.utc),
                "partially_refunded": False,
            }
        else:
            fields = {"refund_amount": refund_amount, "partially_refunded": True}

        order = self.orders.update_by_payment_intent(payment_intent_id, fields)
        if order:
            kind = "fully" if fully_refunded else "partially"
            logger.info(f"Order {order.id} {kind} refunded: {refund_amount} {currency}")
        return order
