from app.models.user import User, UserRole
from app.models.category import Category
from app.models.product import Product
from app.models.cart import ShoppingCart, CartItem
from app.models.order import Order, OrderItem, OrderStatus, ORDER_STATUS_TRANSITIONS
from app.models.review import ProductReview

__all__ = [
    "User",
    "UserRole",
    "Category",
    "Product",
    "ShoppingCart",
    "CartItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "ORDER_STATUS_TRANSITIONS",
    "ProductReview",
]
