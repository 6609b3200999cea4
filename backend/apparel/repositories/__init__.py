"""
Repository Layer - Data Access

This layer handles all database queries and returns domain models.
Repositories abstract away SQL details from business logic.
"""
from apparel.repositories.cart_repository import CartRepository
from apparel.repositories.category_repository import CategoryRepository
from apparel.repositories.design_repository import DesignRepository
from apparel.repositories.design_template_repository import DesignTemplateRepository
from apparel.repositories.feedback_repository import FeedbackRepository
from apparel.repositories.order_repository import OrderRepository
from apparel.repositories.product_repository import ProductRepository
from apparel.repositories.request_quote_repository import RequestQuoteRepository

__all__ = [
    'CartRepository',
    'CategoryRepository',
    'DesignRepository',
    'DesignTemplateRepository',
    'FeedbackRepository',
    'OrderRepository',
    'ProductRepository',
    'RequestQuoteRepository',
]
