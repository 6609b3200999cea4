"""
Payment Service

Checkout against the payment provider and the user's saved cards.

Checkout flow:
1. The client asks for a payment intent for (a selection of) its cart.
   The intent carries userId, cartId and itemIds in its metadata.
2. The client completes the payment with the provider.
3. Either the client confirms (POST with payment_intent) or the provider's
   payment_intent.succeeded webhook arrives first. Both record the order
   through record_paid_order(), which is idempotent per payment intent, and
   remove the purchased items from the cart.
"""
import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from apparel.connectors.identity_connector import IdentityConnector
from apparel.connectors.stripe_connector import StripeConnector, from_minor_units, to_minor_units
from apparel.core.config import settings
from apparel.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from apparel.core.pagination import split_csv_ints
from apparel.domain.cart import CartItem
from apparel.domain.order import Order, OrderItem, OrderItemSize
from apparel.domain.payment import CheckoutRequest
from apparel.domain.user import IdentityUser
from apparel.repositories.cart_repository import CartRepository
from apparel.repositories.design_repository import DesignRepository
from apparel.repositories.order_repository import OrderRepository
from apparel.repositories.product_repository import ProductRepository
from apparel.services.cart_service import CartService, price_per_size

logger = logging.getLogger(__name__)


def card_details(payment_method) -> Optional[dict]:
    """Brand, last4 and expiry of a card payment method, or None"""
    if not payment_method or isinstance(payment_method, str):
        return None
    card = payment_method.get("card") or {}
    if not card:
        return None
    return {
        "brand": card.get("brand"),
        "last4": card.get("last4"),
        "exp_month": card.get("exp_month"),
        "exp_year": card.get("exp_year"),
    }


def shipping_from_intent(intent) -> Optional[dict]:
    shipping = intent.get("shipping")
    if not shipping:
        return None
    address = shipping.get("address") or {}
    return {
        "name": shipping.get("name"),
        "phone": shipping.get("phone"),
        "address": " ".join(part for part in (address.get("line1"), address.get("line2")) if part) or None,
        "city": address.get("city"),
        "state": address.get("state"),
        "postal_code": address.get("postal_code"),
        "country": address.get("country"),
        "method": (intent.get("metadata") or {}).get("shippingMethod") or "standard",
    }


class PaymentService:

    def __init__(
        self,
        stripe_connector: StripeConnector = None,
        identity_connector: IdentityConnector = None,
        cart_repository: CartRepository = None,
        order_repository: OrderRepository = None,
        design_repository: DesignRepository = None,
        product_repository: ProductRepository = None
    ):
        self.stripe = stripe_connector or StripeConnector()
        self.identity = identity_connector or IdentityConnector()
        self.carts = cart_repository or CartRepository()
        self.orders = order_repository or OrderRepository()
        self.designs = design_repository or DesignRepository()
        self.products = product_repository or ProductRepository()
        self.cart_service = CartService(self.carts, self.designs, self.products)

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    async def get_or_create_customer(self, user: IdentityUser) -> str:
        """Stripe customer of the user, created and saved to metadata on first use"""
        customer_id = user.stripe_customer_id
        if customer_id:
            try:
                customer = self.stripe.retrieve_customer(customer_id)
                if not customer.get("deleted"):
                    return customer_id
            except NotFoundError:
                logger.warning(f"Stripe customer {customer_id} of user {user.id} no longer exists")

        customer = self.stripe.create_customer(email=user.email, name=user.name, user_id=user.id)
        await self.identity.update_metadata(user.id, private_metadata={"stripe_cus_id": customer["id"]})
        user.private_metadata["stripe_cus_id"] = customer["id"]
        return customer["id"]

    async def _require_customer(self, user_id: str) -> Tuple[IdentityUser, str]:
        user = await self.identity.get_user(user_id)
        if not user.stripe_customer_id:
            raise NotFoundError("No Stripe customer found")
        return user, user.stripe_customer_id

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    async def checkout_info(self, user_id: str, item_ids: Optional[List[int]] = None) -> dict:
        """Priced selection of cart items plus the user's saved-card state"""
        _, summary = self.cart_service.get_summary(user_id, item_ids)
        user = await self.identity.get_user(user_id)

        has_payment_methods = False
        default_payment_method = None
        if user.stripe_customer_id:
            cards = self.stripe.list_cards(user.stripe_customer_id)
            has_payment_methods = bool(cards)
            card_ids = {card["id"] for card in cards}
            if user.default_payment_method in card_ids:
                default_payment_method = user.default_payment_method

        return {
            "items": [item.to_dict() for item in summary.items],
            "totalAmount": float(summary.subtotal),
            "totalQuantity": summary.total_quantity,
            "currency": self.stripe.currency,
            "hasPaymentMethods": has_payment_methods,
            "defaultPaymentMethod": default_payment_method,
        }

    async def create_payment(self, user_id: str, request: CheckoutRequest) -> dict:
        """
        Create a payment intent for the selected cart items

        Raises:
            ValidationError: cart empty, nothing selected, or zero total
        """
        cart = self.carts.find_by_user(user_id)
        if not cart or not cart.items:
            raise ValidationError("Cart is empty")

        priced = self.cart_service.price_items(cart.select_items(request.item_ids))
        if not priced:
            raise ValidationError("No valid items selected for checkout")

        total = sum((item.total for item in priced), Decimal("0"))
        amount = to_minor_units(total, self.stripe.currency)
        if amount <= 0:
            raise ValidationError("Order total must be greater than zero")

        user = await self.identity.get_user(user_id)
        customer_id = await self.get_or_create_customer(user)

        params = {
            "amount": amount,
            "customer": customer_id,
            "metadata": {
                "userId": user_id,
                "cartId": str(cart.id),
                "itemIds": ",".join(str(item.id) for item in priced),
            },
        }

        payment_method = request.payment_method_id or user.default_payment_method
        if payment_method:
            params.update(
                payment_method=payment_method,
                confirm=True,
                off_session=False,
                return_url=request.return_url or f"{settings.APP_URL.rstrip('/')}/orders",
            )
        else:
            params["automatic_payment_methods"] = {"enabled": True, "allow_redirects": "always"}

        if request.save_payment_method and not user.default_payment_method:
            params["setup_future_usage"] = "on_session"

        intent = self.stripe.create_payment_intent(**params)
        logger.info(f"Payment intent {intent['id']} created for user {user_id}: {amount} {self.stripe.currency}")

        return {
            "clientSecret": intent["client_secret"],
            "paymentIntentId": intent["id"],
            "requiresAction": intent["status"] == "requires_action",
            "status": intent["status"],
        }

    def confirm_payment(self, user_id: str, payment_intent_id: str) -> Order:
        """
        Record the order for a payment the client completed

        Raises:
            ForbiddenError: the intent belongs to another user
            ValidationError: the payment has not succeeded
        """
        intent = self.stripe.retrieve_payment_intent(payment_intent_id, expand=["payment_method"])
        metadata = intent.get("metadata") or {}
        if metadata.get("userId") != user_id:
            raise ForbiddenError("This payment does not belong to you")

        if intent["status"] != "succeeded":
            raise ValidationError(
                "Payment has not been completed",
                payload={
                    "success": False,
                    "status": intent["status"],
                    "message": "Payment has not been completed",
                }
            )

        order, _ = self.record_paid_order(intent)
        return order

    def record_paid_order(self, intent) -> Tuple[Order, bool]:
        """
        Create the order for a succeeded payment intent, once

        Returns:
            Tuple of (order, created)
        """
        existing = self.orders.find_by_payment_intent(intent["id"])
        if existing:
            return existing, False

        metadata = intent.get("metadata") or {}
        user_id = metadata.get("userId")
        item_ids = split_csv_ints(metadata.get("itemIds"))

        cart = self.carts.find_by_user(user_id) if user_id else None
        cart_items = [item for item in cart.items if item.id in set(item_ids)] if cart else []

        order, created = self.orders.create(
            user_id=user_id,
            items=self.build_order_items(cart_items),
            total_amount=from_minor_units(intent["amount"], intent.get("currency") or self.stripe.currency),
            status="processing",
            stripe_payment_intent_id=intent["id"],
            payment_method="card",
            payment_method_details=self._intent_card_details(intent),
            shipping_details=shipping_from_intent(intent)
        )

        if created:
            logger.info(f"Order {order.id} created for payment intent {intent['id']}")
            if cart and cart_items:
                self.carts.remove_items(cart.id, [item.id for item in cart_items])

        return order, created

    def _intent_card_details(self, intent) -> Optional[dict]:
        """Card details of the intent; webhook payloads carry only the payment method id"""
        payment_method = intent.get("payment_method")
        if isinstance(payment_method, str):
            try:
                payment_method = self.stripe.retrieve_payment_method(payment_method)
            except NotFoundError:
                logger.warning(f"Payment method {payment_method} of intent {intent['id']} no longer exists")
                return None
        return card_details(payment_method)

    def build_order_items(self, cart_items: List[CartItem]) -> List[OrderItem]:
        """
        Snapshot cart items into order items

        Unit price is base + size surcharge, or the base price when the size
        variant has been removed since the item was added.
        """
        designs = self.designs.find_by_ids([item.design_id for item in cart_items])
        colors = self.products.find_colors_by_ids(sorted({d.shirt_color_id for d in designs.values()}))
        products = self.products.find_by_ids(sorted({c.shirt_id for c in colors.values()}))

        order_items = []
        for item in cart_items:
            design = designs.get(item.design_id)
            color = colors.get(design.shirt_color_id) if design else None
            product = products.get(color.shirt_id) if color else None
            if not (design and color and product):
                logger.warning(f"Cart item {item.id} could not be resolved when creating the order")
                continue

            sizes = [
                OrderItemSize(
                    size=entry.size,
                    quantity=entry.quantity,
                    price_per_unit=price_per_size(product.base_price, color.find_size(entry.size))
                )
                for entry in item.quantity_by_size
            ]
            image_url = None
            if design.preview_images:
                image_url = design.preview_images[0]
            elif color.primary_image:
                image_url = color.primary_image.url

            order_items.append(OrderItem(
                design_id=design.id,
                product_id=product.id,
                name=product.name,
                color=color.color_name,
                sizes=sizes,
                total_price=sum((entry.line_total for entry in sizes), Decimal("0")),
                image_url=image_url
            ))

        return order_items

    # ------------------------------------------------------------------
    # Saved cards
    # ------------------------------------------------------------------

    async def list_payment_methods(self, user_id: str) -> List[dict]:
        user, customer_id = await self._require_customer(user_id)
        cards = self.stripe.list_cards(customer_id)
        return [
            {
                "id": card["id"],
                **(card_details(card) or {}),
                "isDefault": card["id"] == user.default_payment_method,
            }
            for card in cards
        ]

    async def attach_payment_method(self, user_id: str, payment_method_id: str, set_as_default: bool = False) -> dict:
        user = await self.identity.get_user(user_id)
        customer_id = await self.get_or_create_customer(user)
        payment_method = self.stripe.attach_payment_method(payment_method_id, customer_id)

        is_default = False
        if set_as_default or not user.default_payment_method:
            await self._make_default(user_id, customer_id, payment_method_id)
            is_default = True

        return {"id": payment_method["id"], **(card_details(payment_method) or {}), "isDefault": is_default}

    async def set_default_payment_method(self, user_id: str, payment_method_id: str) -> None:
        _, customer_id = await self._require_customer(user_id)
        self._check_owned(customer_id, payment_method_id)
        await self._make_default(user_id, customer_id, payment_method_id)

    async def delete_payment_method(self, user_id: str, payment_method_id: str) -> None:
        user, customer_id = await self._require_customer(user_id)
        self._check_owned(customer_id, payment_method_id)
        self.stripe.detach_payment_method(payment_method_id)

        if user.default_payment_method == payment_method_id:
            await self.identity.update_metadata(user_id, private_metadata={"default_payment_method": None})
            logger.info(f"Cleared default payment method of user {user_id}")

    def _check_owned(self, customer_id: str, payment_method_id: str) -> None:
        payment_method = self.stripe.retrieve_payment_method(payment_method_id)
        if payment_method.get("customer") != customer_id:
            raise NotFoundError("Payment method not found")

    async def _make_default(self, user_id: str, customer_id: str, payment_method_id: str) -> None:
        self.stripe.set_default_payment_method(customer_id, payment_method_id)
        await self.identity.update_metadata(user_id, private_metadata={"default_payment_method": payment_method_id})
