"""
User model

Roles are a closed enumeration validated once at the boundary.
"""
import enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum as SQLEnum

from app.core.database import Base
from app.core.utils import utcnow


class UserRole(str, enum.Enum):
    """Access level of an account"""
    USER = "User"
    MANAGER = "Manager"
    ADMIN = "Admin"


class User(Base):
    """
    User account model.

    A user owns at most one shopping cart (carts.user_id is unique) and any
    number of orders; both reference the user by id only.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False, default="")
    role = Column(
        SQLEnum(UserRole, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.USER,
    )
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"
