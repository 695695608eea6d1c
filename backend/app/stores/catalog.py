"""
Catalog store - products and categories

All stock decrements go through decrement_stock, a single conditional
UPDATE. Callers check its boolean result; zero rows means the product was
deactivated or sold out since it was read.
"""
import logging
from typing import Optional, List

from sqlalchemy import select, update, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.utils import utcnow, page_offset
from app.models.category import Category
from app.models.product import Product

logger = logging.getLogger(__name__)


class CatalogStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    async def get_by_id(self, product_id: int) -> Optional[Product]:
        return await self.db.get(Product, product_id, populate_existing=True)

    async def get_for_update(self, product_id: int) -> Optional[Product]:
        """Load a product holding its row lock until the transaction ends."""
        result = await self.db.execute(
            select(Product)
            .where(Product.id == product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _active_query(term: Optional[str] = None, category_id: Optional[int] = None):
        query = select(Product).where(Product.is_active.is_(True))
        if term:
            pattern = f"%{term.strip()}%"
            query = query.where(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
        if category_id is not None:
            query = query.where(Product.category_id == category_id)
        return query

    async def search_active(self, term: Optional[str], page: int, page_size: int) -> List[Product]:
        query = (
            self._active_query(term=term)
            .order_by(Product.name, Product.id)
            .offset(page_offset(page, page_size))
            .limit(page_size)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count_active(self, term: Optional[str] = None, category_id: Optional[int] = None) -> int:
        subquery = self._active_query(term=term, category_id=category_id).subquery()
        result = await self.db.execute(select(func.count()).select_from(subquery))
        return result.scalar() or 0

    async def list_by_category(self, category_id: int, page: int, page_size: int) -> List[Product]:
        query = (
            self._active_query(category_id=category_id)
            .order_by(Product.name, Product.id)
            .offset(page_offset(page, page_size))
            .limit(page_size)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def add(self, product: Product) -> Product:
        self.db.add(product)
        await self.db.flush()
        return product

    async def update(self, product: Product) -> Product:
        product.updated_at = utcnow()
        await self.db.flush()
        return product

    async def delete(self, product: Product) -> None:
        await self.db.delete(product)
        await self.db.flush()

    async def decrement_stock(self, product_id: int, quantity: int) -> bool:
        """
        Atomically take `quantity` units from an active product.

        Returns False (and changes nothing) if the product is inactive or has
        fewer than `quantity` units left.
        """
        result = await self.db.execute(
            update(Product)
            .where(
                Product.id == product_id,
                Product.is_active.is_(True),
                Product.stock_quantity >= quantity,
            )
            .values(
                stock_quantity=Product.stock_quantity - quantity,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        decremented = result.rowcount == 1
        if not decremented:
            logger.warning(f"Conditional stock decrement failed: product={product_id} qty={quantity}")
        return decremented

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def get_category(self, category_id: int) -> Optional[Category]:
        return await self.db.get(Category, category_id)

    async def list_categories(self) -> List[Category]:
        result = await self.db.execute(select(Category).order_by(Category.name, Category.id))
        return list(result.scalars().all())

    async def category_names(self, category_ids) -> dict:
        """Map of id -> name for the given category ids."""
        ids = {cid for cid in category_ids if cid is not None}
        if not ids:
            return {}
        result = await self.db.execute(select(Category.id, Category.name).where(Category.id.in_(ids)))
        return {row.id: row.name for row in result}

    async def add_category(self, category: Category) -> Category:
        self.db.add(category)
        await self.db.flush()
        return category

    async def update_category(self, category: Category) -> Category:
        category.updated_at = utcnow()
        await self.db.flush()
        return category
