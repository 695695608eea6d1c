"""
Category routes
"""
from typing import List
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.audit_log import log_admin_action, ACTION_CATEGORY_CREATE, ACTION_CATEGORY_UPDATE
from app.core.database import get_db
from app.core.permissions import Permission, require_permission
from app.core.rate_limit import get_client_ip
from app.models.user import User
from app.schemas.category import CategoryCreate, CategoryUpdate, CategoryResponse
from app.services.catalog_service import CatalogService

router = APIRouter()


@router.get("", response_model=List[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db)):
    return await CatalogService(db).list_categories()


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: int, db: AsyncSession = Depends(get_db)):
    service = CatalogService(db)
    return await service.category_response(await service.get_category(category_id))


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    request: Request,
    data: CategoryCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission(Permission.CATEGORIES_ALL))
):
    service = CatalogService(db)
    category = await service.create_category(data)
    await db.commit()

    log_admin_action(
        action=ACTION_CATEGORY_CREATE,
        user_id=user.id,
        username=user.username,
        resource_type="category",
        resource_id=category.id,
        details={"name": category.name, "parent_id": category.parent_id},
        ip_address=get_client_ip(request),
    )

    return await service.category_response(category)


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    request: Request,
    category_id: int,
    data: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission(Permission.CATEGORIES_ALL))
):
    """Update a category; moving it under one of its own descendants is rejected"""
    service = CatalogService(db)
    category = await service.update_category(category_id, data)
    await db.commit()

    log_admin_action(
        action=ACTION_CATEGORY_UPDATE,
        user_id=user.id,
        username=user.username,
        resource_type="category",
        resource_id=category_id,
        details={"fields_updated": list(data.model_dump(exclude_unset=True).keys())},
        ip_address=get_client_ip(request),
    )

    return await service.category_response(category)
