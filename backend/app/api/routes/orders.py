"""
Order routes

Placement is rate limited and runs as a single transaction; the commit here
is the only point at which the order, the stock decrements and the emptied
cart become visible.
"""
from typing import List
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.audit_log import log_admin_action, ACTION_ORDER_STATUS_UPDATE
from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import PermissionDeniedError
from app.core.permissions import Permission, require_permission, user_can
from app.core.rate_limit import get_client_ip, limiter
from app.models.order import Order
from app.models.user import User
from app.schemas.mappers import order_to_response
from app.schemas.order import CreateOrderRequest, OrderResponse, UpdateOrderStatusRequest
from app.api.deps import get_current_user
from app.services.order_service import OrderService
from app.stores.users import UserStore

router = APIRouter()


async def _responses(db: AsyncSession, orders: List[Order]) -> List[OrderResponse]:
    names = await UserStore(db).usernames(o.user_id for o in orders)
    return [order_to_response(o, names.get(o.user_id)) for o in orders]


@router.get("", response_model=List[OrderResponse])
async def list_orders(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.ORDERS_READ_OWN))
):
    """List the current user's orders, newest first"""
    orders = await OrderService(db).list_user_orders(current_user.id)
    return await _responses(db, orders)


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RATE_LIMIT_ORDERS)
async def create_order(
    request: Request,
    order_data: CreateOrderRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.ORDERS_CREATE))
):
    """Place an order from the current user's cart"""
    order = await OrderService(db).place_order(
        current_user.id,
        order_data.shipping_address,
        order_data.billing_address,
    )
    await db.commit()
    return order_to_response(order, current_user.username)


@router.get("/status/{order_status}", response_model=List[OrderResponse])
async def list_orders_by_status(
    order_status: str,
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.ORDERS_READ_ALL))
):
    orders = await OrderService(db).list_orders_by_status(order_status, page, page_size)
    return await _responses(db, orders)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get an order; visible to its owner and to staff"""
    order = await OrderService(db).get_order(order_id)

    if order.user_id != current_user.id and not user_can(current_user, Permission.ORDERS_READ_ALL):
        raise PermissionDeniedError(
            "You do not have access to this order",
            details={"order_id": order_id},
        )

    return (await _responses(db, [order]))[0]


@router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    request: Request,
    order_id: int,
    update: UpdateOrderStatusRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.ORDERS_UPDATE_STATUS))
):
    order = await OrderService(db).update_order_status(order_id, update.status)
    await db.commit()

    log_admin_action(
        action=ACTION_ORDER_STATUS_UPDATE,
        user_id=current_user.id,
        username=current_user.username,
        resource_type="order",
        resource_id=order_id,
        details={"status": order.status.value},
        ip_address=get_client_ip(request),
    )

    return (await _responses(db, [order]))[0]
