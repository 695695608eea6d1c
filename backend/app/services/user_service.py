"""
User Service

Registration, login and admin user management.
"""
import logging
from typing import List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AuthenticationError,
    BusinessRuleError,
    DuplicateUserError,
    UserNotFoundError,
)
from app.core.security import get_password_hash, verify_password
from app.models.user import User, UserRole
from app.schemas.user import AdminUserCreate, AdminUserUpdate
from app.stores.users import UserStore

logger = logging.getLogger(__name__)


def parse_role(value: Union[UserRole, str]) -> UserRole:
    """Accept "Admin", "admin" or "ADMIN"."""
    if isinstance(value, UserRole):
        return value
    text = str(value or "").strip().lower()
    for role in UserRole:
        if text in (role.value.lower(), role.name.lower()):
            return role
    raise BusinessRuleError(
        "Invalid role specified",
        code="INVALID_ROLE",
        details={"role": value, "valid": [r.value for r in UserRole]},
    )


class UserService:
    """
    Service for user management operations.

    Uniqueness of username and email is checked before every write so the
    caller gets a DuplicateUserError instead of an IntegrityError.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserStore(db)

    async def _ensure_unique(
        self,
        username: Optional[str],
        email: Optional[str],
        exclude_id: Optional[int] = None,
    ) -> None:
        if username is not None:
            existing = await self.users.get_by_username(username)
            if existing is not None and existing.id != exclude_id:
                raise DuplicateUserError("username")
        if email is not None:
            existing = await self.users.get_by_email(email)
            if existing is not None and existing.id != exclude_id:
                raise DuplicateUserError("email")

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        first_name: str = "",
        last_name: str = "",
    ) -> User:
        """Self-service sign-up; always creates a plain User."""
        await self._ensure_unique(username, email)

        user = User(
            username=username,
            email=email,
            hashed_password=get_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            role=UserRole.USER,
            is_active=True,
        )
        await self.users.add(user)
        logger.info(f"User registered: id={user.id} username={username}")
        return user

    async def authenticate(self, username: str, password: str) -> User:
        user = await self.users.get_by_username(username)
        if user is None or not verify_password(password, user.hashed_password):
            logger.info(f"Failed login for username={username}")
            raise AuthenticationError()
        if not user.is_active:
            raise AuthenticationError("Account is disabled")
        return user

    async def get_user(self, user_id: int) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def list_users(self) -> List[User]:
        return await self.users.list_all()

    async def list_users_by_role(self, role: Union[UserRole, str]) -> List[User]:
        return await self.users.list_by_role(parse_role(role))

    async def create_user(self, data: AdminUserCreate) -> User:
        await self._ensure_unique(data.username, data.email)

        user = User(
            username=data.username,
            email=data.email,
            hashed_password=get_password_hash(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            role=parse_role(data.role),
            is_active=True,
        )
        await self.users.add(user)
        logger.info(f"User created: id={user.id} role={user.role.value}")
        return user

    async def update_user(self, user_id: int, data: AdminUserUpdate) -> User:
        user = await self.get_user(user_id)
        changes = data.model_dump(exclude_unset=True)

        await self._ensure_unique(changes.get("username"), changes.get("email"), exclude_id=user_id)

        password = changes.pop("password", None)
        if password:
            user.hashed_password = get_password_hash(password)

        if changes.get("role") is not None:
            changes["role"] = parse_role(changes["role"])

        for field, value in changes.items():
            if value is not None:
                setattr(user, field, value)

        await self.users.update(user)
        logger.info(f"User {user_id} updated: {sorted(changes)}")
        return user

    async def delete_user(self, user_id: int) -> None:
        user = await self.get_user(user_id)
        await self.users.delete(user)
        logger.info(f"User {user_id} deleted")
