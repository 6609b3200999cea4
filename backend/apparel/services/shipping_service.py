"""
Shipping Service

Shippers pick up orders that are ready to ship (status shipping, no shipper),
then move them along shipping -> shipped -> delivered. Admins can do
everything a shipper can.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from apparel.core.auth import TokenUser
from apparel.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from apparel.core.pagination import page_offset
from apparel.domain.order import SHIPPER_STATUSES, Order, ShippingDetails
from apparel.repositories.order_repository import OrderRepository

logger = logging.getLogger(__name__)

EXPRESS_DELIVERY_DAYS = 2
STANDARD_DELIVERY_DAYS = 5


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def format_address(details: Optional[ShippingDetails]) -> str:
    if not details:
        return ""
    parts = (details.address, details.city, details.state, details.postal_code, details.country)
    return ", ".join(part for part in parts if part)


def get_priority(order: Order, now: Optional[datetime] = None) -> str:
    """high for express or orders older than 3 days, medium past 1 day, else low"""
    if order.is_express:
        return "high"
    if not order.created_at:
        return "low"
    age = (now or datetime.now(timezone.utc)) - _aware(order.created_at)
    if age > timedelta(days=3):
        return "high"
    if age > timedelta(days=1):
        return "medium"
    return "low"


def tracking_number(order: Order) -> str:
    """TRK + last 6 digits of the creation time in epoch ms + last 4 chars of the order id"""
    created = _aware(order.created_at) if order.created_at else datetime.now(timezone.utc)
    epoch_ms = str(int(created.timestamp() * 1000))
    return f"TRK{epoch_ms[-6:]}{str(order.id)[-4:]}".upper()


def estimated_delivery(order: Order) -> Optional[str]:
    if not order.created_at:
        return None
    days = EXPRESS_DELIVERY_DAYS if order.is_express else STANDARD_DELIVERY_DAYS
    return (order.created_at + timedelta(days=days)).date().isoformat()


def shipment_view(order: Order) -> dict:
    data = order.to_dict()
    data.update(
        formatted_address=format_address(order.shipping_details),
        priority=get_priority(order),
        tracking_number=tracking_number(order),
        estimated_delivery=estimated_delivery(order),
    )
    return data


class ShippingService:

    def __init__(self, order_repository: OrderRepository = None):
        self.orders = order_repository or OrderRepository()

    def _get(self, order_id: int) -> Order:
        order = self.orders.find_by_id(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def list_available(self, page: int = 1, limit: int = 10) -> Tuple[List[Order], int]:
        return self.orders.find_all(status="shipping", unassigned=True, limit=limit, offset=page_offset(page, limit))

    def list_for_shipper(self, shipper_id: str, status: Optional[str] = None, page: int = 1, limit: int = 10) -> Tuple[List[Order], int]:
        statuses = [status] if status else list(SHIPPER_STATUSES)
        return self.orders.find_all(shipper_id=shipper_id, statuses=statuses, limit=limit, offset=page_offset(page, limit))

    def get_shipment(self, user: TokenUser, order_id: int) -> dict:
        order = self._get(order_id)
        if not user.is_admin and order.shipper_id not in (None, user.id):
            raise ForbiddenError("This order is assigned to another shipper")
        return shipment_view(order)

    def update_status(self, user: TokenUser, order_id: int, status: str, notes: Optional[str] = None) -> Order:
        order = self._get(order_id)
        if not user.is_admin and order.shipper_id != user.id:
            raise ForbiddenError("Only the assigned shipper can update this order")

        fields = {"status": status}
        if notes is not None:
            fields["notes"] = notes
        updated = self.orders.update(order_id, fields)
        logger.info(f"Shipper {user.id} moved order {order_id} from {order.status} to {status}")
        return updated

    def assign(self, user: TokenUser, order_id: int) -> Order:
        order = self._get(order_id)
        if order.shipper_id and order.shipper_id != user.id:
            raise ValidationError("Order is already assigned to another shipper")
        if order.status != "shipping":
            raise ValidationError("Only orders ready for shipping can be assigned")

        updated = self.orders.update(order_id, {"shipper_id": user.id}, expected_status=["shipping"])
        if not updated:
            raise ValidationError("Only orders ready for shipping can be assigned")
        logger.info(f"Order {order_id} assigned to shipper {user.id}")
        return updated

    def unassign(self, user: TokenUser, order_id: int) -> Order:
        order = self._get(order_id)
        if order.shipper_id != user.id:
            raise ForbiddenError("You are not assigned to this order")
        if order.status != "shipping":
            raise ValidationError("Orders can only be unassigned while shipping")
        return self.orders.update(order_id, {"shipper_id": None})

    def upload_shipping_image(self, user: TokenUser, order_id: int, image_url: str) -> Order:
        """Store proof of shipment; an order still in shipping becomes shipped"""
        order = self._get(order_id)
        if order.shipper_id != user.id:
            raise ForbiddenError("You are not assigned to this order")
        if order.status not in ("shipping", "shipped"):
            raise ValidationError("Shipping images can only be added to orders being shipped")

        fields = {"shipping_image": image_url}
        if order.status == "shipping":
            fields["status"] = "shipped"
        return self.orders.update(order_id, fields)
