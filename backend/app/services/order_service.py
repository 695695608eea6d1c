"""
OrderService - order placement and status lifecycle

Placement is all-or-nothing inside the caller's transaction:

1. Read the cart and lock every product row (ascending id, so two
   placements touching the same products cannot deadlock).
2. Validate stock for every line before anything is written.
3. Insert the order with snapshotted lines.
4. Decrement stock with a conditional UPDATE per line; any zero-row result
   rolls the whole session back.
5. Clear the cart.
"""
import logging
from decimal import Decimal
from typing import List, Union

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    EmptyCartError,
    InsufficientStockError,
    InvalidStatusError,
    OrderNotFoundError,
    ProductNotFoundError,
)
from app.core.utils import to_money
from app.models.order import Order, OrderItem, OrderStatus
from app.stores.cart import CartStore
from app.stores.catalog import CatalogStore
from app.stores.orders import OrderStore

logger = logging.getLogger(__name__)


class OrderService:
    """Order placement, lookup and status transitions."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.catalog = CatalogStore(db)
        self.carts = CartStore(db)
        self.orders = OrderStore(db)

    async def place_order(self, user_id: int, shipping_address: str, billing_address: str) -> Order:
        """
        Turn the user's cart into a Pending order.

        Raises:
            EmptyCartError: no cart, or a cart without lines
            ProductNotFoundError: a line references a product that no longer exists
            InsufficientStockError: a product is inactive or short on stock, either
                at validation time or at the conditional decrement
        """
        cart = await self.carts.get_with_lines_by_user(user_id)
        if cart is None or not cart.items:
            raise EmptyCartError(details={"user_id": user_id})

        lines = sorted(cart.items, key=lambda line: line.product_id)

        order_items: List[OrderItem] = []
        total = Decimal("0.00")

        for line in lines:
            product = await self.catalog.get_for_update(line.product_id)
            if product is None:
                raise ProductNotFoundError(line.product_id)

            if not product.can_fulfil(line.quantity):
                raise InsufficientStockError(
                    product.id,
                    product_name=product.name,
                    requested_qty=line.quantity,
                    available_qty=product.stock_quantity if product.is_active else 0,
                )

            unit_price = to_money(product.price)
            order_items.append(OrderItem(
                product_id=product.id,
                product_name=product.name,
                quantity=line.quantity,
                unit_price=unit_price,
            ))
            total += unit_price * line.quantity

        order = Order(
            user_id=user_id,
            status=OrderStatus.PENDING,
            total_amount=to_money(total),
            shipping_address=shipping_address,
            billing_address=billing_address,
            items=order_items,
        )
        await self.orders.add(order)

        for item in order_items:
            if not await self.catalog.decrement_stock(item.product_id, item.quantity):
                error = InsufficientStockError(
                    item.product_id,
                    product_name=item.product_name,
                    requested_qty=item.quantity,
                    message=f"Product {item.product_name} is not available in the requested quantity.",
                )
                await self.db.rollback()
                logger.warning(
                    f"Order placement for user {user_id} rolled back: "
                    f"stock for product {error.details['product_id']} changed concurrently"
                )
                raise error

        removed = await self.carts.delete_lines(cart.id)
        self.db.expire(cart, ["items"])
        cart.touch()
        await self.carts.update(cart)

        logger.info(
            f"Order {order.id} placed: user={user_id} lines={len(order_items)} "
            f"total={order.total_amount} cart_lines_removed={removed}"
        )
        return order

    async def get_order(self, order_id: int) -> Order:
        order = await self.orders.get_with_lines(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    async def list_user_orders(self, user_id: int) -> List[Order]:
        return await self.orders.list_by_user(user_id)

    async def list_orders_by_status(
        self,
        status: Union[OrderStatus, str],
        page: int = 1,
        page_size: int = 10,
    ) -> List[Order]:
        return await self.orders.list_by_status(OrderStatus.parse(status), page, page_size)

    async def update_order_status(self, order_id: int, new_status: Union[OrderStatus, str]) -> Order:
        """
        Move an order along Pending -> Processing -> Shipped -> Delivered, or
        to Cancelled from any non-terminal state.
        """
        requested = OrderStatus.parse(new_status)

        order = await self.orders.get_with_lines(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)

        current = OrderStatus(order.status)
        if not current.can_transition_to(requested):
            raise InvalidStatusError(
                f"Order {order_id} cannot move from {current.value} to {requested.value}.",
                current_status=current.value,
                requested_status=requested.value,
            )

        order.status = requested
        await self.orders.update(order)

        logger.info(f"Order {order_id} status: {current.value} -> {requested.value}")
        return order
