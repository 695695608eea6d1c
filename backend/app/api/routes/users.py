"""
User management routes (Admin)
"""
from typing import List
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.audit_log import log_admin_action, ACTION_USER_CREATE, ACTION_USER_UPDATE, ACTION_USER_DELETE
from app.core.database import get_db
from app.core.permissions import Permission, require_permission
from app.core.rate_limit import get_client_ip
from app.models.user import User
from app.schemas.mappers import user_to_response
from app.schemas.user import AdminUserCreate, AdminUserUpdate, UserResponse
from app.services.user_service import UserService

router = APIRouter()


@router.get("", response_model=List[UserResponse])
async def list_users(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_permission(Permission.USERS_READ))
):
    return [user_to_response(u) for u in await UserService(db).list_users()]


@router.get("/role/{role}", response_model=List[UserResponse])
async def list_users_by_role(
    role: str,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_permission(Permission.USERS_READ))
):
    return [user_to_response(u) for u in await UserService(db).list_users_by_role(role)]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_permission(Permission.USERS_READ))
):
    return user_to_response(await UserService(db).get_user(user_id))


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: Request,
    data: AdminUserCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_permission(Permission.USERS_CREATE))
):
    """Create a user with any role"""
    user = await UserService(db).create_user(data)
    await db.commit()

    log_admin_action(
        action=ACTION_USER_CREATE,
        user_id=admin.id,
        username=admin.username,
        resource_type="user",
        resource_id=user.id,
        details={"username": user.username, "role": user.role.value},
        ip_address=get_client_ip(request),
    )

    return user_to_response(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    request: Request,
    user_id: int,
    data: AdminUserUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_permission(Permission.USERS_UPDATE))
):
    user = await UserService(db).update_user(user_id, data)
    await db.commit()

    log_admin_action(
        action=ACTION_USER_UPDATE,
        user_id=admin.id,
        username=admin.username,
        resource_type="user",
        resource_id=user_id,
        details={"fields_updated": list(data.model_dump(exclude_unset=True).keys())},
        ip_address=get_client_ip(request),
    )

    return user_to_response(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    request: Request,
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_permission(Permission.USERS_DELETE))
):
    await UserService(db).delete_user(user_id)
    await db.commit()

    log_admin_action(
        action=ACTION_USER_DELETE,
        user_id=admin.id,
        username=admin.username,
        resource_type="user",
        resource_id=user_id,
        ip_address=get_client_ip(request),
    )
