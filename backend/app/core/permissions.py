"""
Permission system for RBAC

Roles are a closed enumeration (UserRole). Each role maps to a fixed set of
permission strings; endpoints declare the permission they need, never a role
name.
"""
from typing import Dict, FrozenSet, Iterable, Set

from fastapi import Depends

from app.core.exceptions import PermissionDeniedError
from app.models.user import User, UserRole


class Permission:
    """
    Permission string format: "resource:action" or "resource:*" for all actions.

    Resources: users, orders, products, categories, cart
    """

    # User permissions
    USERS_READ = "users:read"
    USERS_CREATE = "users:create"
    USERS_UPDATE = "users:update"
    USERS_DELETE = "users:delete"
    USERS_ALL = "users:*"

    # Order permissions
    ORDERS_READ_OWN = "orders:read_own"
    ORDERS_READ_ALL = "orders:read_all"
    ORDERS_CREATE = "orders:create"
    ORDERS_UPDATE_STATUS = "orders:update_status"
    ORDERS_ALL = "orders:*"

    # Catalog permissions
    PRODUCTS_CREATE = "products:create"
    PRODUCTS_UPDATE = "products:update"
    PRODUCTS_DELETE = "products:delete"
    PRODUCTS_ALL = "products:*"
    CATEGORIES_ALL = "categories:*"

    # Cart (self-service)
    CART_ALL = "cart:*"

    # Admin superuser
    ADMIN_ALL = "*"


ROLE_PERMISSIONS: Dict[UserRole, FrozenSet[str]] = {
    UserRole.USER: frozenset({
        Permission.ORDERS_READ_OWN,
        Permission.ORDERS_CREATE,
        Permission.CART_ALL,
    }),
    UserRole.MANAGER: frozenset({
        Permission.ORDERS_ALL,
        Permission.PRODUCTS_ALL,
        Permission.CATEGORIES_ALL,
        Permission.CART_ALL,
    }),
    UserRole.ADMIN: frozenset({Permission.ADMIN_ALL}),
}


def has_permission(user_permissions: Iterable[str], required: str) -> bool:
    """
    Check if a permission set grants the required permission.

    Supports wildcards:
    - "*" grants all permissions
    - "resource:*" grants all actions on resource
    """
    user_permissions = set(user_permissions)

    if Permission.ADMIN_ALL in user_permissions:
        return True

    if required in user_permissions:
        return True

    if ":" in required:
        resource = required.split(":")[0]
        if f"{resource}:*" in user_permissions:
            return True

    return False


def get_user_permissions(user: User) -> Set[str]:
    """Permissions granted to a user through their role."""
    return set(ROLE_PERMISSIONS.get(UserRole(user.role), frozenset()))


def user_can(user: User, permission: str) -> bool:
    return has_permission(get_user_permissions(user), permission)


def require_permission(*permissions: str):
    """
    Dependency that requires specific permissions.

    Usage:
        @router.post("")
        async def create_product(
            user: User = Depends(require_permission(Permission.PRODUCTS_CREATE))
        ):
            ...
    """
    from app.api.deps import get_current_user

    async def permission_checker(current_user: User = Depends(get_current_user)) -> User:
        user_permissions = get_user_permissions(current_user)

        for required in permissions:
            if not has_permission(user_permissions, required):
                raise PermissionDeniedError(
                    f"Permission denied: {required}",
                    details={"required": required, "role": UserRole(current_user.role).value},
                )

        return current_user

    return permission_checker
