"""
Cart schemas

CartView is recomputed from the live product rows on every read; nothing
here is stored.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field


class CartItemView(BaseModel):
    id: int
    cart_id: int
    product_id: int
    product_name: str
    product_image_url: str
    unit_price: Decimal
    quantity: int
    total_price: Decimal


class CartView(BaseModel):
    id: int
    user_id: int
    items: List[CartItemView] = []
    total_amount: Decimal = Decimal("0.00")
    total_items: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AddCartItemRequest(BaseModel):
    product_id: int
    quantity: int = Field(1, ge=1, le=100)


class UpdateCartItemRequest(BaseModel):
    # zero or negative removes the line
    quantity: int = Field(..., le=100)
