"""
CatalogService - product search and manager/admin catalog maintenance
"""
import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import CategoryCycleError, CategoryNotFoundError, ProductNotFoundError
from app.models.category import Category
from app.models.product import Product
from app.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from app.schemas.mappers import category_to_response, product_to_response, search_result
from app.schemas.product import ProductCreate, ProductResponse, ProductSearchResult, ProductUpdate
from app.stores.catalog import CatalogStore

logger = logging.getLogger(__name__)


def _non_null_changes(data, detachable=()) -> dict:
    """Fields the client sent. Null is kept only where it clears a reference."""
    return {
        field: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None or field in detachable
    }


class CatalogService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.catalog = CatalogStore(db)

    @staticmethod
    def _page_size(page_size: Optional[int]) -> int:
        if not page_size or page_size < 1:
            return settings.DEFAULT_PAGE_SIZE
        return min(page_size, settings.MAX_PAGE_SIZE)

    # ============================================================
    # Products
    # ============================================================

    async def get_product(self, product_id: int) -> Product:
        product = await self.catalog.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    async def product_response(self, product: Product) -> ProductResponse:
        names = await self.catalog.category_names([product.category_id])
        return product_to_response(product, names.get(product.category_id))

    async def search_products(
        self,
        term: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> ProductSearchResult:
        """
        Active products only. A blank term lists everything by name; otherwise
        name and description are matched case-insensitively.
        """
        page = max(page, 1)
        page_size = self._page_size(page_size)
        term = (term or "").strip() or None

        products = await self.catalog.search_active(term, page, page_size)
        total = await self.catalog.count_active(term=term)
        names = await self.catalog.category_names(p.category_id for p in products)
        return search_result(products, total, page, page_size, names)

    async def list_products_by_category(
        self,
        category_id: int,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> ProductSearchResult:
        page = max(page, 1)
        page_size = self._page_size(page_size)

        products = await self.catalog.list_by_category(category_id, page, page_size)
        total = await self.catalog.count_active(category_id=category_id)
        names = await self.catalog.category_names([category_id])
        return search_result(products, total, page, page_size, names)

    async def _check_category(self, category_id: Optional[int]) -> None:
        if category_id is not None and await self.catalog.get_category(category_id) is None:
            raise CategoryNotFoundError(category_id)

    async def create_product(self, data: ProductCreate) -> Product:
        await self._check_category(data.category_id)
        product = Product(**data.model_dump())
        await self.catalog.add(product)
        logger.info(f"Product {product.id} created: {product.name}")
        return product

    async def update_product(self, product_id: int, data: ProductUpdate) -> Product:
        product = await self.get_product(product_id)
        changes = _non_null_changes(data, detachable=("category_id",))

        if "category_id" in changes:
            await self._check_category(changes["category_id"])

        for field, value in changes.items():
            setattr(product, field, value)

        await self.catalog.update(product)
        logger.info(f"Product {product_id} updated: {sorted(changes)}")
        return product

    async def delete_product(self, product_id: int) -> None:
        product = await self.get_product(product_id)
        await self.catalog.delete(product)
        logger.info(f"Product {product_id} deleted")

    async def is_product_in_stock(self, product_id: int, quantity: int = 1) -> bool:
        product = await self.catalog.get_by_id(product_id)
        return product is not None and product.can_fulfil(quantity)

    # ============================================================
    # Categories
    # ============================================================

    async def get_category(self, category_id: int) -> Category:
        category = await self.catalog.get_category(category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)
        return category

    async def category_response(self, category: Category) -> CategoryResponse:
        parent_name = None
        if category.parent_id is not None:
            parent = await self.catalog.get_category(category.parent_id)
            parent_name = parent.name if parent is not None else None
        return category_to_response(category, parent_name)

    async def list_categories(self) -> List[CategoryResponse]:
        categories = await self.catalog.list_categories()
        names = {c.id: c.name for c in categories}
        return [category_to_response(c, names.get(c.parent_id)) for c in categories]

    async def create_category(self, data: CategoryCreate) -> Category:
        await self._check_category(data.parent_id)
        category = Category(**data.model_dump())
        await self.catalog.add_category(category)
        logger.info(f"Category {category.id} created: {category.name}")
        return category

    async def update_category(self, category_id: int, data: CategoryUpdate) -> Category:
        category = await self.get_category(category_id)
        changes = _non_null_changes(data, detachable=("parent_id",))

        parent_id = changes.get("parent_id")
        if parent_id is not None:
            await self._check_category(parent_id)
            await self._check_no_cycle(category_id, parent_id)

        for field, value in changes.items():
            setattr(category, field, value)

        await self.catalog.update_category(category)
        logger.info(f"Category {category_id} updated: {sorted(changes)}")
        return category

    async def _check_no_cycle(self, category_id: int, parent_id: int) -> None:
        """Reject a parent that is the category itself or one of its descendants."""
        seen = set()
        current = parent_id
        while current is not None and current not in seen:
            if current == category_id:
                raise CategoryCycleError(category_id, parent_id)
            seen.add(current)
            ancestor = await self.catalog.get_category(current)
            current = ancestor.parent_id if ancestor is not None else None
