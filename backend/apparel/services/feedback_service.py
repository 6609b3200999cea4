"""
Feedback Service - ratings customers leave on their orders
"""
from typing import List

from apparel.core.exceptions import ForbiddenError, NotFoundError
from apparel.domain.feedback import Feedback, FeedbackCreate
from apparel.repositories.feedback_repository import FeedbackRepository
from apparel.repositories.order_repository import OrderRepository


class FeedbackService:

    def __init__(self, feedback_repository: FeedbackRepository = None, order_repository: OrderRepository = None):
        self.feedback = feedback_repository or FeedbackRepository()
        self.orders = order_repository or OrderRepository()

    def create(self, user_id: str, payload: FeedbackCreate) -> Feedback:
        order = self.orders.find_by_id(payload.order_id)
        if not order:
            raise NotFoundError("Order not found")
        if order.user_id != user_id:
            raise ForbiddenError("You can only review your own orders")
        return self.feedback.create(order.id, user_id, payload.rating, payload.comment)

    def list_for_product(self, product_id: int) -> List[Feedback]:
        return self.feedback.find_by_product(product_id)
