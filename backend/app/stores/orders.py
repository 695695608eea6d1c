"""
Order store
"""
from typing import Optional, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.utils import page_offset, utcnow
from app.models.order import Order, OrderStatus


class OrderStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, order: Order) -> Order:
        self.db.add(order)
        await self.db.flush()
        return order

    async def get_with_lines(self, order_id: int) -> Optional[Order]:
        result = await self.db.execute(
            select(Order)
            .where(Order.id == order_id)
            .options(selectinload(Order.items))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_by_user(self, user_id: int) -> List[Order]:
        """Newest first."""
        result = await self.db.execute(
            select(Order)
            .where(Order.user_id == user_id)
            .options(selectinload(Order.items))
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        return list(result.scalars().all())

    async def list_by_status(self, status: OrderStatus, page: int, page_size: int) -> List[Order]:
        result = await self.db.execute(
            select(Order)
            .where(Order.status == status)
            .options(selectinload(Order.items))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(page_offset(page, page_size))
            .limit(page_size)
        )
        return list(result.scalars().all())

    async def update(self, order: Order) -> Order:
        order.updated_at = utcnow()
        await self.db.flush()
        return order
