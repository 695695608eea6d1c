"""
Audit logging for manager/admin actions

Track catalog, order-status and user-management changes:
- Records who did what and when
- Logs to a dedicated structured logger ("audit")
"""
import logging
from datetime import datetime, timezone
from typing import Optional, Any

from app.core.config import settings

# Structured audit logger
audit_logger = logging.getLogger("audit")
audit_logger.setLevel(logging.INFO)

# Action categories
ACTION_PRODUCT_CREATE = "product.create"
ACTION_PRODUCT_UPDATE = "product.update"
ACTION_PRODUCT_DELETE = "product.delete"
ACTION_CATEGORY_CREATE = "category.create"
ACTION_CATEGORY_UPDATE = "category.update"
ACTION_ORDER_STATUS_UPDATE = "order.status_update"
ACTION_USER_CREATE = "user.create"
ACTION_USER_UPDATE = "user.update"
ACTION_USER_DELETE = "user.delete"

SENSITIVE_DETAIL_KEYS = ("password", "secret", "token", "key", "credential")


def log_admin_action(
    action: str,
    user_id: int,
    username: str,
    resource_type: str,
    resource_id: Optional[Any] = None,
    details: Optional[dict] = None,
    ip_address: Optional[str] = None,
    success: bool = True,
) -> dict:
    """
    Log a privileged action.

    Args:
        action: Action identifier (e.g., "product.create")
        user_id: ID of the manager/admin performing the action
        username: Username of the manager/admin
        resource_type: Type of resource affected (e.g., "product", "order")
        resource_id: ID of the affected resource (if applicable)
        details: Additional context about the action
        ip_address: IP address of the request
        success: Whether the action succeeded

    Returns:
        The structured log entry that was emitted.
    """
    log_entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "action": action,
        "actor_id": user_id,
        "actor_username": username,
        "resource_type": resource_type,
        "resource_id": str(resource_id) if resource_id is not None else None,
        "success": success,
        "ip_address": ip_address,
        "environment": settings.ENVIRONMENT,
    }

    if details:
        log_entry["details"] = {
            k: v for k, v in details.items()
            if k.lower() not in SENSITIVE_DETAIL_KEYS
        }

    if success:
        audit_logger.info(
            f"AUDIT: {action} by {username} on {resource_type}/{resource_id}",
            extra={"audit": log_entry}
        )
    else:
        audit_logger.warning(
            f"AUDIT FAILED: {action} by {username} on {resource_type}/{resource_id}",
            extra={"audit": log_entry}
        )

    return log_entry
