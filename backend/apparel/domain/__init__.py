"""
Domain Layer - Business Entities

This layer contains Pydantic models representing business entities.
These models enforce type safety and validation across the application.
"""
from apparel.domain.catalog import Category, Product, ProductColor, ColorImage, SizeVariant
from apparel.domain.cart import Cart, CartItem, CartSummary, PricedCartItem
from apparel.domain.design import Design
from apparel.domain.design_template import DesignTemplate
from apparel.domain.feedback import Feedback
from apparel.domain.order import Order, OrderItem
from apparel.domain.request_quote import RequestQuote, AdminResponse

__all__ = [
    'Category', 'Product', 'ProductColor', 'ColorImage', 'SizeVariant',
    'Cart', 'CartItem', 'CartSummary', 'PricedCartItem',
    'Design',
    'DesignTemplate',
    'Feedback',
    'Order', 'OrderItem',
    'RequestQuote', 'AdminResponse',
]
