"""
RBAC seed data - default permission catalogue, global roles, first superadmin

Idempotent: existing rows are left untouched.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from hotel_booking.config import settings
from hotel_booking.models import User, Role, Permission, RolePermission
from hotel_booking.repositories import Repositories
from hotel_booking.security import permissions as perms
from hotel_booking.security.auth import get_password_hash

logger = logging.getLogger(__name__)


def _ensure_global_role(repos: Repositories, name: str, description: str, stats: dict) -> Role:
    role = repos.roles.get_by_name(name, None)
    if role is None:
        role = repos.roles.add(Role(name=name, hotel_id=None, description=description))
        stats["roles"] += 1
    return role


def seed_rbac_data(db: Session, superadmin_email: Optional[str] = None,
                   superadmin_password: Optional[str] = None) -> dict:
    """Seed permissions and global roles. Returns counts of created rows."""
    repos = Repositories.from_session(db)
    stats = {"permissions": 0, "roles": 0, "grants": 0, "users": 0}

    for action, resource in perms.DEFAULT_PERMISSIONS:
        if repos.permissions.get_by_action_resource(action, resource) is None:
            repos.permissions.add(Permission(
                name=perms.permission_label(action, resource),
                action=action,
                resource=resource,
                description=f"{action.capitalize()} {resource}",
            ))
            stats["permissions"] += 1

    superadmin = _ensure_global_role(
        repos, settings.SUPERADMIN_ROLE_NAME, "Unrestricted access to every hotel", stats
    )
    admin = _ensure_global_role(repos, perms.ADMIN_ROLE, "Creates and onboards hotels", stats)

    for action, resource in perms.ADMIN_PERMISSIONS:
        permission = repos.permissions.get_by_action_resource(action, resource)
        if permission and repos.role_permissions.find(admin.id, permission.id) is None:
            repos.role_permissions.add(RolePermission(role_id=admin.id, permission_id=permission.id))
            stats["grants"] += 1

    email = superadmin_email or settings.SUPERADMIN_EMAIL
    password = superadmin_password or settings.SUPERADMIN_PASSWORD
    if email and password and repos.users.get_by_email(email) is None:
        repos.users.add(User(
            name="Super Admin",
            email=email,
            password_hash=get_password_hash(password),
            role_id=superadmin.id,
            must_reset_password=True,
        ))
        stats["users"] += 1

    if any(stats.values()):
        db.commit()
        logger.info(f"RBAC seed data created: {stats}")
    return stats
