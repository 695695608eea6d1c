from app.stores.catalog import CatalogStore
from app.stores.cart import CartStore
from app.stores.orders import OrderStore
from app.stores.users import UserStore

__all__ = ["CatalogStore", "CartStore", "OrderStore", "UserStore"]
