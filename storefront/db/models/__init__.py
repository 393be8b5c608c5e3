"""
Модели базы данных.

Импортирует все модели для корректной работы SQLAlchemy.
"""

from .attribute import Attribute
from .base import Base
from .category import Category
from .order import Order, OrderItem
from .product import Product, PRODUCT_STATUSES
from .product_attribute import ProductAttribute
from .product_category import ProductCategory
from .seller import Seller
from .user import User

__all__ = [
    "Base",
    "Attribute",
    "Category",
    "Product",
    "PRODUCT_STATUSES",
    "ProductAttribute",
    "ProductCategory",
    "Seller",
    "Order",
    "OrderItem",
    "User",
]
