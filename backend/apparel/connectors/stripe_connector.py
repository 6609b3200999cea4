"""
Stripe Connector
Wraps the Stripe SDK calls used by checkout, saved cards, webhooks and the
admin transactions view.

Stripe objects are dict subclasses; callers read them with item access so
plain dicts work the same way in tests.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

import stripe

from apparel.core.config import settings
from apparel.core.exceptions import NotFoundError, PaymentProviderError, ValidationError

logger = logging.getLogger(__name__)

# Currencies Stripe expects in major units (no cents)
ZERO_DECIMAL_CURRENCIES = {
    "bif", "clp", "djf", "gnf", "jpy", "kmf", "krw", "mga",
    "pyg", "rwf", "ugx", "vnd", "vuv", "xaf", "xof", "xpf",
}


def to_minor_units(amount, currency: str) -> int:
    """Convert a major-unit amount to the integer Stripe expects, rounding half up"""
    amount = Decimal(str(amount))
    if currency.lower() not in ZERO_DECIMAL_CURRENCIES:
        amount = amount * 100
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int, currency: str) -> Decimal:
    if currency.lower() in ZERO_DECIMAL_CURRENCIES:
        return Decimal(amount)
    return (Decimal(amount) / 100).quantize(Decimal("0.01"))


class StripeConnector:
    """
    Connector for the Stripe API

    Every SDK error is translated: missing resources become NotFoundError,
    card errors become ValidationError, anything else PaymentProviderError.
    """

    def __init__(self, api_key: str = None, webhook_secret: str = None, currency: str = None):
        self.api_key = api_key or settings.STRIPE_SECRET_KEY
        self.webhook_secret = webhook_secret or settings.STRIPE_WEBHOOK_SECRET
        self.currency = (currency or settings.STRIPE_CURRENCY).lower()
        stripe.api_key = self.api_key

    def _call(self, description: str, fn, *args, **kwargs):
        if not self.api_key:
            raise PaymentProviderError("Stripe is not configured. Set STRIPE_SECRET_KEY")
        try:
            return fn(*args, **kwargs)
        except stripe.CardError as e:
            logger.warning(f"Card error while {description}: {e.user_message}")
            raise ValidationError(e.user_message or "Card was declined")
        except stripe.InvalidRequestError as e:
            if getattr(e, "code", None) == "resource_missing":
                raise NotFoundError(f"Not found while {description}")
            logger.error(f"Invalid Stripe request while {description}: {e}")
            raise PaymentProviderError(f"Error {description}: {e.user_message or str(e)}")
        except stripe.StripeError as e:
            logger.error(f"Stripe error while {description}: {e}")
            raise PaymentProviderError(f"Error {description}: {e.user_message or str(e)}")

    # ------------------------------------------------------------------
    # Payment intents
    # ------------------------------------------------------------------

    def create_payment_intent(self, **params) -> Any:
        params.setdefault("currency", self.currency)
        return self._call("creating payment intent", stripe.PaymentIntent.create, **params)

    def retrieve_payment_intent(self, payment_intent_id: str, expand: Optional[List[str]] = None) -> Any:
        return self._call(
            "retrieving payment intent",
            stripe.PaymentIntent.retrieve,
            payment_intent_id,
            expand=expand or []
        )

    # ------------------------------------------------------------------
    # Customers and payment methods
    # ------------------------------------------------------------------

    def retrieve_customer(self, customer_id: str) -> Any:
        return self._call("retrieving customer", stripe.Customer.retrieve, customer_id)

    def create_customer(self, email: Optional[str], name: Optional[str], user_id: str) -> Any:
        logger.info(f"Creating Stripe customer for user {user_id}")
        return self._call(
            "creating customer",
            stripe.Customer.create,
            email=email,
            name=name or None,
            metadata={"userId": user_id}
        )

    def find_customers_by_email(self, email: str, limit: int = 10) -> List[Any]:
        result = self._call("searching customers", stripe.Customer.list, email=email, limit=limit)
        return list(result["data"])

    def set_default_payment_method(self, customer_id: str, payment_method_id: str) -> Any:
        return self._call(
            "setting default payment method",
            stripe.Customer.modify,
            customer_id,
            invoice_settings={"default_payment_method": payment_method_id}
        )

    def list_cards(self, customer_id: str) -> List[Any]:
        result = self._call(
            "listing payment methods",
            stripe.PaymentMethod.list,
            customer=customer_id,
            type="card"
        )
        return list(result["data"])

    def retrieve_payment_method(self, payment_method_id: str) -> Any:
        return self._call("retrieving payment method", stripe.PaymentMethod.retrieve, payment_method_id)

    def attach_payment_method(self, payment_method_id: str, customer_id: str) -> Any:
        return self._call(
            "attaching payment method",
            stripe.PaymentMethod.attach,
            payment_method_id,
            customer=customer_id
        )

    def detach_payment_method(self, payment_method_id: str) -> Any:
        return self._call("detaching payment method", stripe.PaymentMethod.detach, payment_method_id)

    # ------------------------------------------------------------------
    # Charges and refunds
    # ------------------------------------------------------------------

    def list_charges(
        self,
        limit: int = 25,
        starting_after: Optional[str] = None,
        created: Optional[Dict[str, int]] = None,
        customer: Optional[str] = None
    ) -> Any:
        params: Dict[str, Any] = {"limit": limit, "expand": ["data.customer"]}
        if starting_after:
            params["starting_after"] = starting_after
        if created:
            params["created"] = created
        if customer:
            params["customer"] = customer
        return self._call("listing charges", stripe.Charge.list, **params)

    def retrieve_charge(self, charge_id: str) -> Any:
        return self._call(
            "retrieving charge",
            stripe.Charge.retrieve,
            charge_id,
            expand=["customer", "payment_intent", "dispute"]
        )

    def list_refunds(self, charge_id: str) -> List[Any]:
        result = self._call("listing refunds", stripe.Refund.list, charge=charge_id, limit=100)
        return list(result["data"])

    # ------------------------------------------------------------------
    # Webhooks
    # ------------------------------------------------------------------

    def construct_event(self, payload: bytes, signature: Optional[str]) -> Any:
        """
        Verify a webhook payload against its Stripe-Signature header

        Raises:
            ValidationError: signature missing or invalid
        """
        if not self.webhook_secret:
            raise PaymentProviderError("Stripe webhook secret is not configured")
        if not signature:
            raise ValidationError("Missing Stripe-Signature header")
        try:
            return stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise ValidationError(f"Webhook Error: {e}")
