"""
Product routes

Reads are public; writes need the products permission (Manager, Admin) and
are audit logged.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.audit_log import log_admin_action, ACTION_PRODUCT_CREATE, ACTION_PRODUCT_UPDATE, ACTION_PRODUCT_DELETE
from app.core.config import settings
from app.core.database import get_db
from app.core.permissions import Permission, require_permission
from app.core.rate_limit import get_client_ip
from app.models.user import User
from app.schemas.product import ProductCreate, ProductUpdate, ProductResponse, ProductSearchResult
from app.services.catalog_service import CatalogService

router = APIRouter()


@router.get("", response_model=ProductSearchResult)
async def search_products(
    search: Optional[str] = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db)
):
    """Search active products by name/description; blank term lists all by name"""
    return await CatalogService(db).search_products(search, page, page_size)


@router.get("/category/{category_id}", response_model=ProductSearchResult)
async def list_products_by_category(
    category_id: int,
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db)
):
    return await CatalogService(db).list_products_by_category(category_id, page, page_size)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, db: AsyncSession = Depends(get_db)):
    """Get single product by ID"""
    service = CatalogService(db)
    product = await service.get_product(product_id)
    return await service.product_response(product)


@router.get("/{product_id}/in-stock")
async def check_stock(
    product_id: int,
    quantity: int = Query(1, ge=1),
    db: AsyncSession = Depends(get_db)
):
    in_stock = await CatalogService(db).is_product_in_stock(product_id, quantity)
    return {"product_id": product_id, "quantity": quantity, "in_stock": in_stock}


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    request: Request,
    product_data: ProductCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission(Permission.PRODUCTS_CREATE))
):
    service = CatalogService(db)
    product = await service.create_product(product_data)
    await db.commit()

    log_admin_action(
        action=ACTION_PRODUCT_CREATE,
        user_id=user.id,
        username=user.username,
        resource_type="product",
        resource_id=product.id,
        details={"name": product.name, "price": str(product.price)},
        ip_address=get_client_ip(request),
    )

    return await service.product_response(product)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    request: Request,
    product_id: int,
    update_data: ProductUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission(Permission.PRODUCTS_UPDATE))
):
    service = CatalogService(db)
    product = await service.update_product(product_id, update_data)
    await db.commit()

    log_admin_action(
        action=ACTION_PRODUCT_UPDATE,
        user_id=user.id,
        username=user.username,
        resource_type="product",
        resource_id=product_id,
        details={"fields_updated": list(update_data.model_dump(exclude_unset=True).keys())},
        ip_address=get_client_ip(request),
    )

    return await service.product_response(product)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    request: Request,
    product_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission(Permission.PRODUCTS_DELETE))
):
    await CatalogService(db).delete_product(product_id)
    await db.commit()

    log_admin_action(
        action=ACTION_PRODUCT_DELETE,
        user_id=user.id,
        username=user.username,
        resource_type="product",
        resource_id=product_id,
        ip_address=get_client_ip(request),
    )
