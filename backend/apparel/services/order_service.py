"""
Order Service - customer and admin order views
"""
import logging
from typing import List, Optional, Tuple

from apparel.core.exceptions import NotFoundError
from apparel.core.pagination import page_offset
from apparel.domain.order import Order
from apparel.repositories.order_repository import OrderRepository

logger = logging.getLogger(__name__)


class OrderService:

    def __init__(self, order_repository: OrderRepository = None):
        self.orders = order_repository or OrderRepository()

    def list_for_user(self, user_id: str, status: Optional[str] = None, page: int = 1, limit: int = 10) -> Tuple[List[Order], int]:
        return self.orders.find_all(user_id=user_id, status=status, limit=limit, offset=page_offset(page, limit))

    def get_for_user(self, user_id: str, order_id: int) -> Order:
        """Another user's order is reported as missing"""
        order = self.orders.find_by_id(order_id)
        if not order or order.user_id != user_id:
            raise NotFoundError("Order not found")
        return order

    def list_all(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 10
    ) -> Tuple[List[Order], int]:
        return self.orders.find_all(status=status, search=search, limit=limit, offset=page_offset(page, limit))

    def get(self, order_id: int) -> Order:
        order = self.orders.find_by_id(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def update_status(self, order_id: int, status: str, notes: Optional[str] = None) -> Order:
        fields = {"status": status}
        if notes is not None:
            fields["notes"] = notes
        order = self.orders.update(order_id, fields)
        if not order:
            raise NotFoundError("Order not found")
        logger.info(f"Order {order_id} moved to {status}")
        return order
