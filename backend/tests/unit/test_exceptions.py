"""
Business exceptions carry their HTTP status, code and details.
"""
import pytest

from app.core.exceptions import (
    AuthenticationError,
    CartItemNotFoundError,
    CategoryCycleError,
    DuplicateUserError,
    EmptyCartError,
    InsufficientStockError,
    InvalidQuantityError,
    PermissionDeniedError,
    ProductNotFoundError,
    ProductUnavailableError,
    StoreError,
)


@pytest.mark.parametrize("exc,status,code", [
    (ProductNotFoundError(1), 404, "PRODUCT_NOT_FOUND"),
    (CartItemNotFoundError(1), 404, "CART_ITEM_NOT_FOUND"),
    (EmptyCartError(), 400, "CART_EMPTY"),
    (InsufficientStockError(1), 400, "INSUFFICIENT_STOCK"),
    (ProductUnavailableError(1), 400, "PRODUCT_UNAVAILABLE"),
    (InvalidQuantityError("bad"), 400, "INVALID_QUANTITY"),
    (CategoryCycleError(1, 2), 400, "CATEGORY_CYCLE"),
    (DuplicateUserError("email"), 400, "USER_ALREADY_EXISTS"),
    (AuthenticationError(), 401, "AUTHENTICATION_FAILED"),
    (PermissionDeniedError(), 403, "PERMISSION_DENIED"),
])
def test_status_mapping(exc, status, code):
    assert isinstance(exc, StoreError)
    assert exc.status_code == status
    assert exc.code == code


def test_insufficient_stock_details():
    exc = InsufficientStockError(7, product_name="Widget", requested_qty=6, available_qty=5)

    assert exc.details == {
        "product_id": 7,
        "product_name": "Widget",
        "requested_qty": 6,
        "available_qty": 5,
    }
    assert "Widget" in exc.message


def test_insufficient_stock_custom_message():
    exc = InsufficientStockError(7, message="Sold out")
    assert exc.message == "Sold out"
    assert exc.details["product_id"] == 7


@pytest.mark.parametrize("field,message", [
    ("username", "Username already exists"),
    ("email", "Email already exists"),
])
def test_duplicate_user_message(field, message):
    assert DuplicateUserError(field).message == message


def test_to_dict():
    assert ProductNotFoundError(3).to_dict() == {
        "error_type": "ProductNotFoundError",
        "code": "PRODUCT_NOT_FOUND",
        "message": "Product with ID 3 not found.",
        "details": {"product_id": 3},
    }


def test_code_override():
    assert StoreError("x", code="CUSTOM").code == "CUSTOM"
