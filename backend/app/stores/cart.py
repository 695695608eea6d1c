"""
Cart store - one cart per user and its lines
"""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.cart import ShoppingCart, CartItem


class CartStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_with_lines_by_user(self, user_id: int) -> Optional[ShoppingCart]:
        """Cart with its lines and each line's product, freshly read."""
        result = await self.db.execute(
            select(ShoppingCart)
            .where(ShoppingCart.user_id == user_id)
            .options(selectinload(ShoppingCart.items).selectinload(CartItem.product))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_line(self, cart_id: int, product_id: int) -> Optional[CartItem]:
        result = await self.db.execute(
            select(CartItem).where(
                CartItem.cart_id == cart_id,
                CartItem.product_id == product_id,
            )
        )
        return result.scalar_one_or_none()

    async def add(self, entity):
        self.db.add(entity)
        await self.db.flush()
        return entity

    async def update(self, entity):
        await self.db.flush()
        return entity

    async def delete(self, entity) -> None:
        await self.db.delete(entity)
        await self.db.flush()

    async def delete_lines(self, cart_id: int) -> int:
        """Delete every line of a cart. Returns the number removed."""
        result = await self.db.execute(select(CartItem).where(CartItem.cart_id == cart_id))
        lines = result.scalars().all()
        for line in lines:
            await self.db.delete(line)
        await self.db.flush()
        return len(lines)
