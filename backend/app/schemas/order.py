"""
Order schemas
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field

from app.models.order import OrderStatus


class CreateOrderRequest(BaseModel):
    shipping_address: str = Field(..., min_length=1, max_length=1000)
    billing_address: str = Field(..., min_length=1, max_length=1000)


class UpdateOrderStatusRequest(BaseModel):
    status: OrderStatus


class OrderItemResponse(BaseModel):
    id: int
    order_id: int
    product_id: Optional[int]
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class OrderResponse(BaseModel):
    id: int
    user_id: Optional[int]
    user_name: Optional[str] = None
    status: OrderStatus
    total_amount: Decimal
    shipping_address: str
    billing_address: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItemResponse]
