"""
Order models

Order lines snapshot the product name and unit price at placement time and
are never updated afterwards. Only status and updated_at change on an order.
"""
import enum

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, Numeric, Index, CheckConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.core.utils import utcnow


class OrderStatus(str, enum.Enum):
    """Order lifecycle status"""
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"

    @classmethod
    def parse(cls, value) -> "OrderStatus":
        """Case-insensitive lookup by value or member name."""
        from app.core.exceptions import InvalidStatusError

        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if text in (member.value.lower(), member.name.lower()):
                return member
        raise InvalidStatusError(
            f"Unknown order status '{value}'. Valid: {', '.join(m.value for m in cls)}",
            requested_status=str(value),
        )

    @property
    def is_terminal(self) -> bool:
        return not ORDER_STATUS_TRANSITIONS[self]

    def can_transition_to(self, new_status: "OrderStatus") -> bool:
        return new_status in ORDER_STATUS_TRANSITIONS[self]


# Allowed next states; Delivered and Cancelled are terminal
ORDER_STATUS_TRANSITIONS = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    status = Column(
        SQLEnum(OrderStatus, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=OrderStatus.PENDING,
        index=True,
    )

    # Computed from the lines at placement, never accepted from the caller
    total_amount = Column(Numeric(12, 2), nullable=False)

    shipping_address = Column(Text, nullable=False)
    billing_address = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    items = relationship("OrderItem", cascade="all, delete-orphan", order_by="OrderItem.id")

    __table_args__ = (
        Index("ix_orders_status_created", "status", "created_at"),
        CheckConstraint("total_amount >= 0", name="check_total_non_negative"),
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)

    # Snapshot of product at time of order
    product_name = Column(String(200), nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    quantity = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="check_order_quantity_positive"),
    )

    @property
    def line_total(self):
        return self.unit_price * self.quantity
