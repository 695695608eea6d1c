"""
Entity -> response projections

Every response field is assigned explicitly so a renamed or added column
cannot silently leak into (or vanish from) the API.
"""
from typing import Optional, Iterable

from app.core.utils import to_money
from app.models import CartItem, Category, Order, OrderItem, Product, ShoppingCart, User
from app.schemas.cart import CartItemView, CartView
from app.schemas.category import CategoryResponse
from app.schemas.order import OrderItemResponse, OrderResponse
from app.schemas.product import ProductResponse, ProductSearchResult
from app.schemas.user import UserResponse


def product_to_response(product: Product, category_name: Optional[str] = None) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        name=product.name,
        description=product.description or "",
        price=to_money(product.price),
        stock_quantity=product.stock_quantity,
        category_id=product.category_id,
        category_name=category_name,
        image_url=product.image_url or "",
        is_active=product.is_active,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def search_result(
    products: Iterable[Product],
    total_count: int,
    page_number: int,
    page_size: int,
    category_names: Optional[dict] = None,
) -> ProductSearchResult:
    category_names = category_names or {}
    total_pages = (total_count + page_size - 1) // page_size if page_size else 0
    return ProductSearchResult(
        products=[product_to_response(p, category_names.get(p.category_id)) for p in products],
        total_count=total_count,
        page_number=page_number,
        page_size=page_size,
        total_pages=total_pages,
    )


def category_to_response(category: Category, parent_name: Optional[str] = None) -> CategoryResponse:
    return CategoryResponse(
        id=category.id,
        name=category.name,
        description=category.description or "",
        parent_id=category.parent_id,
        parent_name=parent_name,
    )


def cart_item_to_view(item: CartItem) -> CartItemView:
    """Price and name come from the product as it is now, not as it was when added."""
    product = item.product
    unit_price = to_money(product.price if product is not None else 0)
    return CartItemView(
        id=item.id,
        cart_id=item.cart_id,
        product_id=item.product_id,
        product_name=product.name if product is not None else "",
        product_image_url=(product.image_url or "") if product is not None else "",
        unit_price=unit_price,
        quantity=item.quantity,
        total_price=to_money(unit_price * item.quantity),
    )


def cart_to_view(cart: ShoppingCart) -> CartView:
    items = [cart_item_to_view(item) for item in cart.items]
    return CartView(
        id=cart.id,
        user_id=cart.user_id,
        items=items,
        total_amount=to_money(sum((i.total_price for i in items), to_money(0))),
        total_items=sum(i.quantity for i in items),
        created_at=cart.created_at,
        updated_at=cart.updated_at,
    )


def order_item_to_response(item: OrderItem) -> OrderItemResponse:
    unit_price = to_money(item.unit_price)
    return OrderItemResponse(
        id=item.id,
        order_id=item.order_id,
        product_id=item.product_id,
        product_name=item.product_name,
        quantity=item.quantity,
        unit_price=unit_price,
        total_price=to_money(unit_price * item.quantity),
    )


def order_to_response(order: Order, user_name: Optional[str] = None) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        user_id=order.user_id,
        user_name=user_name,
        status=order.status,
        total_amount=to_money(order.total_amount),
        shipping_address=order.shipping_address,
        billing_address=order.billing_address,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=[order_item_to_response(item) for item in order.items],
    )


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        first_name=user.first_name or "",
        last_name=user.last_name or "",
        role=user.role,
        is_active=user.is_active,
        created_at=user.created_at,
    )
