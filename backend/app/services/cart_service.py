"""
CartService - cart mutation workflow

Every mutation re-reads the cart and returns a fresh CartView, so totals are
always computed from current product prices.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    CartItemNotFoundError,
    CartNotFoundError,
    InsufficientStockError,
    InvalidQuantityError,
    ProductUnavailableError,
)
from app.core.utils import utcnow
from app.models.cart import ShoppingCart, CartItem
from app.models.product import Product
from app.schemas.cart import CartView
from app.schemas.mappers import cart_to_view
from app.stores.cart import CartStore
from app.stores.catalog import CatalogStore

logger = logging.getLogger(__name__)


class CartService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.carts = CartStore(db)
        self.catalog = CatalogStore(db)

    async def _get_or_create(self, user_id: int) -> ShoppingCart:
        cart = await self.carts.get_with_lines_by_user(user_id)
        if cart is None:
            cart = ShoppingCart(user_id=user_id, items=[])
            await self.carts.add(cart)
            logger.debug(f"Created cart {cart.id} for user {user_id}")
        return cart

    async def _view(self, user_id: int) -> CartView:
        return cart_to_view(await self._get_or_create(user_id))

    async def _available_product(self, product_id: int, quantity: int) -> Product:
        """Lock the product row and check it can supply `quantity` units."""
        product = await self.catalog.get_for_update(product_id)
        if product is None or not product.is_active:
            raise ProductUnavailableError(product_id)
        if product.stock_quantity < quantity:
            raise InsufficientStockError(
                product.id,
                product_name=product.name,
                requested_qty=quantity,
                available_qty=product.stock_quantity,
                message=f"Not enough stock available for {product.name} "
                        f"(requested: {quantity}, available: {product.stock_quantity}).",
            )
        return product

    async def get_cart(self, user_id: int) -> CartView:
        """Load the user's cart, creating an empty one on first access."""
        return await self._view(user_id)

    async def add_item(self, user_id: int, product_id: int, quantity: int = 1) -> CartView:
        """
        Add `quantity` units of a product. The added quantity must be in
        stock; an existing line for the same product is increased by it.
        Placement re-checks the whole line under a row lock.
        """
        if quantity < 1:
            raise InvalidQuantityError(
                "Quantity must be at least 1.",
                details={"product_id": product_id, "quantity": quantity},
            )

        cart = await self.carts.get_with_lines_by_user(user_id)
        line = await self.carts.get_line(cart.id, product_id) if cart is not None else None
        new_quantity = quantity + (line.quantity if line is not None else 0)

        await self._available_product(product_id, quantity)

        if cart is None:
            cart = await self._get_or_create(user_id)

        if line is not None:
            line.quantity = new_quantity
            line.updated_at = utcnow()
            await self.carts.update(line)
        else:
            await self.carts.add(CartItem(cart_id=cart.id, product_id=product_id, quantity=quantity))

        cart.touch()
        await self.carts.update(cart)

        logger.info(f"Cart {cart.id}: product {product_id} quantity now {new_quantity}")
        return await self._view(user_id)

    async def update_item_quantity(self, user_id: int, product_id: int, quantity: int) -> CartView:
        """Set a line's quantity. Zero or less removes the line."""
        if quantity <= 0:
            return await self.remove_item(user_id, product_id)

        await self._available_product(product_id, quantity)

        cart = await self.carts.get_with_lines_by_user(user_id)
        if cart is None:
            raise CartNotFoundError(user_id)

        line = await self.carts.get_line(cart.id, product_id)
        if line is None:
            raise CartItemNotFoundError(product_id)

        line.quantity = quantity
        line.updated_at = utcnow()
        await self.carts.update(line)

        cart.touch()
        await self.carts.update(cart)

        return await self._view(user_id)

    async def remove_item(self, user_id: int, product_id: int) -> CartView:
        """Delete a line if present. Removing an absent product is not an error."""
        cart = await self._get_or_create(user_id)

        line = await self.carts.get_line(cart.id, product_id)
        if line is not None:
            await self.carts.delete(line)
            cart.touch()
            await self.carts.update(cart)
            logger.info(f"Cart {cart.id}: removed product {product_id}")

        return await self._view(user_id)

    async def clear_cart(self, user_id: int) -> None:
        cart = await self.carts.get_with_lines_by_user(user_id)
        if cart is None:
            return

        removed = await self.carts.delete_lines(cart.id)
        self.db.expire(cart, ["items"])
        cart.touch()
        await self.carts.update(cart)

        logger.info(f"Cart {cart.id} cleared ({removed} lines)")
