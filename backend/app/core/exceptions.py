"""
Online Store Exception Hierarchy

Structured business-rule exceptions raised by services and mapped to HTTP
status codes in one place (see app.main). All exceptions include code, message
and details for logging and client responses.

Exception Hierarchy:
    StoreError
    ├── NotFoundError                       -> 404
    │   ├── ProductNotFoundError
    │   ├── CategoryNotFoundError
    │   ├── OrderNotFoundError
    │   ├── CartNotFoundError
    │   ├── CartItemNotFoundError
    │   └── UserNotFoundError
    ├── BusinessRuleError                   -> 400
    │   ├── EmptyCartError
    │   ├── InsufficientStockError
    │   ├── ProductUnavailableError
    │   ├── InvalidStatusError
    │   ├── InvalidQuantityError
    │   ├── CategoryCycleError
    │   └── DuplicateUserError
    ├── AuthenticationError                 -> 401
    └── PermissionDeniedError               -> 403

None of these are retried; infrastructure errors propagate unchanged.
"""
from typing import Optional, Dict, Any


class StoreError(Exception):
    """
    Base exception for all online store business errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context for debugging/audit
    """

    default_code: str = "STORE_ERROR"
    status_code: int = 400

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


# =============================================================================
# NOT FOUND
# =============================================================================

class NotFoundError(StoreError):
    """A required entity does not exist."""
    default_code = "NOT_FOUND"
    status_code = 404


class ProductNotFoundError(NotFoundError):
    default_code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: Any, **kwargs):
        details = kwargs.pop("details", {})
        details["product_id"] = product_id
        super().__init__(f"Product with ID {product_id} not found.", details=details, **kwargs)


class CategoryNotFoundError(NotFoundError):
    default_code = "CATEGORY_NOT_FOUND"

    def __init__(self, category_id: Any, **kwargs):
        details = kwargs.pop("details", {})
        details["category_id"] = category_id
        super().__init__(f"Category with ID {category_id} not found.", details=details, **kwargs)


class OrderNotFoundError(NotFoundError):
    default_code = "ORDER_NOT_FOUND"

    def __init__(self, order_id: Any, **kwargs):
        details = kwargs.pop("details", {})
        details["order_id"] = order_id
        super().__init__(f"Order with ID {order_id} not found.", details=details, **kwargs)


class CartNotFoundError(NotFoundError):
    default_code = "CART_NOT_FOUND"

    def __init__(self, user_id: Any, **kwargs):
        details = kwargs.pop("details", {})
        details["user_id"] = user_id
        super().__init__("Shopping cart not found.", details=details, **kwargs)


class CartItemNotFoundError(NotFoundError):
    default_code = "CART_ITEM_NOT_FOUND"

    def __init__(self, product_id: Any, **kwargs):
        details = kwargs.pop("details", {})
        details["product_id"] = product_id
        super().__init__(f"Product {product_id} is not in the cart.", details=details, **kwargs)


class UserNotFoundError(NotFoundError):
    default_code = "USER_NOT_FOUND"

    def __init__(self, user_id: Any, **kwargs):
        details = kwargs.pop("details", {})
        details["user_id"] = user_id
        super().__init__(f"User with ID {user_id} not found.", details=details, **kwargs)


# =============================================================================
# BUSINESS RULES
# =============================================================================

class BusinessRuleError(StoreError):
    """Request is well-formed but violates a business rule."""
    default_code = "BUSINESS_RULE_VIOLATION"
    status_code = 400


class EmptyCartError(BusinessRuleError):
    default_code = "CART_EMPTY"

    def __init__(self, message: str = "Shopping cart is empty.", **kwargs):
        super().__init__(message, **kwargs)


class InsufficientStockError(BusinessRuleError):
    """Requested quantity exceeds available stock (or the product is inactive)."""
    default_code = "INSUFFICIENT_STOCK"

    def __init__(
        self,
        product_id: Any,
        product_name: Optional[str] = None,
        requested_qty: Optional[int] = None,
        available_qty: Optional[int] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details.update({
            "product_id": product_id,
            "product_name": product_name,
            "requested_qty": requested_qty,
            "available_qty": available_qty,
        })
        label = product_name or str(product_id)
        message = kwargs.pop(
            "message",
            f"Product {label} is not available in the requested quantity "
            f"(requested: {requested_qty}, available: {available_qty}).",
        )
        super().__init__(message, details=details, **kwargs)


class ProductUnavailableError(BusinessRuleError):
    """Product is missing or inactive."""
    default_code = "PRODUCT_UNAVAILABLE"

    def __init__(self, product_id: Any, **kwargs):
        details = kwargs.pop("details", {})
        details["product_id"] = product_id
        super().__init__(
            f"Product {product_id} not found or not available.", details=details, **kwargs
        )


class InvalidStatusError(BusinessRuleError):
    """Unknown order status or illegal status transition."""
    default_code = "INVALID_ORDER_STATUS"

    def __init__(
        self,
        message: str,
        current_status: Optional[str] = None,
        requested_status: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details.update({
            "current_status": current_status,
            "requested_status": requested_status,
        })
        super().__init__(message, details=details, **kwargs)


class InvalidQuantityError(BusinessRuleError):
    default_code = "INVALID_QUANTITY"


class CategoryCycleError(BusinessRuleError):
    default_code = "CATEGORY_CYCLE"

    def __init__(self, category_id: Any, parent_id: Any, **kwargs):
        details = kwargs.pop("details", {})
        details.update({"category_id": category_id, "parent_id": parent_id})
        super().__init__(
            f"Category {parent_id} cannot be the parent of category {category_id}: "
            f"it would create a cycle.",
            details=details,
            **kwargs
        )


class DuplicateUserError(BusinessRuleError):
    default_code = "USER_ALREADY_EXISTS"

    def __init__(self, field: str, **kwargs):
        details = kwargs.pop("details", {})
        details["field"] = field
        super().__init__(f"{field.capitalize()} already exists", details=details, **kwargs)


# =============================================================================
# ACCESS
# =============================================================================

class AuthenticationError(StoreError):
    default_code = "AUTHENTICATION_FAILED"
    status_code = 401

    def __init__(self, message: str = "Invalid username or password", **kwargs):
        super().__init__(message, **kwargs)


class PermissionDeniedError(StoreError):
    default_code = "PERMISSION_DENIED"
    status_code = 403

    def __init__(self, message: str = "You do not have access to this resource", **kwargs):
        super().__init__(message, **kwargs)
