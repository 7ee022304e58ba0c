"""
RBAC tables - users, roles, permissions and the two join tables

A role with hotel_id NULL is global; otherwise it belongs to one hotel.
user_roles binds a user to a role *within* a hotel.
"""
from datetime import datetime, UTC

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey, Index,
    UniqueConstraint, text,
)

from hotel_booking.database import Base


def _utcnow() -> datetime:
    return datetime.now(UTC)


class UserStatus:
    ACTIVE = "active"
    INACTIVE = "inactive"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    phone = Column(String(20))
    status = Column(String(20), default=UserStatus.ACTIVE, nullable=False)
    # zero-or-one global role reference
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="SET NULL"), nullable=True)
    must_reset_password = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE


class Role(Base):
    __tablename__ = "roles"
    __table_args__ = (
        UniqueConstraint("name", "hotel_id", name="uq_roles_name_hotel_id"),
        # NULLs are distinct in unique constraints, so global names need their own index
        Index(
            "uq_roles_name_global", "name", unique=True,
            sqlite_where=text("hotel_id IS NULL"),
            postgresql_where=text("hotel_id IS NULL"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    hotel_id = Column(Integer, ForeignKey("hotels.id", ondelete="CASCADE"), nullable=True, index=True)
    description = Column(String(255), default="")
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    @property
    def is_global(self) -> bool:
        return self.hotel_id is None


class Permission(Base):
    """An (action, resource) capability; name is a display label."""
    __tablename__ = "permissions"
    __table_args__ = (
        UniqueConstraint("action", "resource", name="uq_permissions_action_resource"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    action = Column(String(50), nullable=False)
    resource = Column(String(50), nullable=False)
    description = Column(String(255), default="")
    created_at = Column(DateTime, default=_utcnow)


class RolePermission(Base):
    __tablename__ = "role_permissions"
    __table_args__ = (
        UniqueConstraint("role_id", "permission_id", name="uq_role_permission"),
    )

    id = Column(Integer, primary_key=True)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False, index=True)
    permission_id = Column(Integer, ForeignKey("permissions.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=_utcnow)


class UserRole(Base):
    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role_id", "hotel_id", name="uq_user_role_hotel"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False, index=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id", ondelete="CASCADE"), nullable=False, index=True)
