from app.services.cart_service import CartService
from app.services.catalog_service import CatalogService
from app.services.order_service import OrderService
from app.services.user_service import UserService

__all__ = ["CartService", "CatalogService", "OrderService", "UserService"]
