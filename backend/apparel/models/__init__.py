"""
Database table definitions
"""
from .catalog import Category, Product, ProductColor, ColorImage, SizeVariant
from .commerce import Design, Cart, CartItem, Order, Feedback
from .quotes import RequestQuote, DesignTemplate

__all__ = [
    "Category",
    "Product",
    "ProductColor",
    "ColorImage",
    "SizeVariant",
    "Design",
    "Cart",
    "CartItem",
    "Order",
    "Feedback",
    "RequestQuote",
    "DesignTemplate",
]
