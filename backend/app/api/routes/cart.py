"""
Shopping cart routes

Every mutation returns the full, recomputed cart.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.permissions import Permission, require_permission
from app.models.user import User
from app.schemas.cart import AddCartItemRequest, CartView, UpdateCartItemRequest
from app.services.cart_service import CartService

router = APIRouter()

cart_user = require_permission(Permission.CART_ALL)


@router.get("", response_model=CartView)
async def get_cart(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(cart_user)
):
    """Get the current user's cart, creating it on first access"""
    cart = await CartService(db).get_cart(current_user.id)
    await db.commit()
    return cart


@router.post("/items", response_model=CartView)
async def add_to_cart(
    item: AddCartItemRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(cart_user)
):
    cart = await CartService(db).add_item(current_user.id, item.product_id, item.quantity)
    await db.commit()
    return cart


@router.put("/items/{product_id}", response_model=CartView)
async def update_cart_item(
    product_id: int,
    update: UpdateCartItemRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(cart_user)
):
    """Set a line's quantity; zero or less removes it"""
    cart = await CartService(db).update_item_quantity(current_user.id, product_id, update.quantity)
    await db.commit()
    return cart


@router.delete("/items/{product_id}", response_model=CartView)
async def remove_from_cart(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(cart_user)
):
    cart = await CartService(db).remove_item(current_user.id, product_id)
    await db.commit()
    return cart


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_cart(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(cart_user)
):
    await CartService(db).clear_cart(current_user.id)
    await db.commit()
