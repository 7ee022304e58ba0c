"""
RBAC Service - role management, permission management, user-role bindings

Join rows are never edited in place: grants and bindings are created or
removed, never updated.
"""
import logging
from typing import Iterable, List, Optional

from hotel_booking.exceptions import ConflictError, Forbidden, NotFound, ValidationError
from hotel_booking.models import User, Role, Permission, RolePermission, UserRole
from hotel_booking.repositories import (
    HotelRepository, PermissionRepository, RoleRepository,
    RolePermissionRepository, UserRepository, UserRoleRepository,
)
from hotel_booking.security import permissions as perms
from hotel_booking.security.authorization import AuthorizationEvaluator

logger = logging.getLogger(__name__)


def _scope(hotel_id: Optional[int]) -> str:
    return "global" if hotel_id is None else f"hotel {hotel_id}"


class RoleService:
    """Role management + role/permission grants"""

    def __init__(self, roles: RoleRepository, permissions: PermissionRepository,
                 role_permissions: RolePermissionRepository, hotels: HotelRepository,
                 evaluator: AuthorizationEvaluator):
        self.roles = roles
        self.permissions = permissions
        self.role_permissions = role_permissions
        self.hotels = hotels
        self.evaluator = evaluator

    def _is_builtin(self, role: Role) -> bool:
        return role.is_global and role.name == self.evaluator.superadmin_role_name

    def list_roles(self, actor: User, hotel_id: Optional[int] = None,
                   include_global: bool = True) -> List[Role]:
        self.evaluator.ensure_allowed(actor, hotel_id, perms.READ, perms.ROLE)
        return self.roles.list(hotel_id=hotel_id, include_global=include_global)

    def get_role(self, actor: User, role_id: int) -> Role:
        role = self.roles.require(role_id)
        self.evaluator.ensure_allowed(actor, role.hotel_id, perms.READ, perms.ROLE)
        return role

    def get_role_permissions(self, actor: User, role_id: int) -> List[Permission]:
        role = self.get_role(actor, role_id)
        return self.roles.list_permissions(role.id)

    def create_role(self, actor: User, name: str, hotel_id: Optional[int] = None,
                    description: str = "",
                    permission_ids: Optional[Iterable[int]] = None) -> Role:
        """Create a role, optionally granting permissions in the same transaction"""
        self.evaluator.ensure_allowed(actor, hotel_id, perms.CREATE, perms.ROLE)
        if hotel_id is not None:
            self.hotels.require(hotel_id)
        if self.roles.get_by_name(name, hotel_id):
            raise ConflictError(f"Role '{name}' already exists ({_scope(hotel_id)})")

        role = self.roles.add(Role(name=name, hotel_id=hotel_id, description=description or ""))
        for permission_id in permission_ids or []:
            self._grant(role, permission_id)

        logger.info(f"Created role {role.id} '{name}' ({_scope(hotel_id)}) by user {actor.id}")
        return role

    def update_role(self, actor: User, role_id: int, name: Optional[str] = None,
                    description: Optional[str] = None) -> Role:
        """Rename or re-describe a role; its hotel scope is fixed"""
        role = self.roles.require(role_id)
        self.evaluator.ensure_allowed(actor, role.hotel_id, perms.UPDATE, perms.ROLE)

        if name is not None and name != role.name:
            if self._is_builtin(role):
                raise ValidationError(f"Built-in role '{role.name}' cannot be renamed")
            if self.roles.get_by_name(name, role.hotel_id):
                raise ConflictError(f"Role '{name}' already exists ({_scope(role.hotel_id)})")
            role.name = name
        if description is not None:
            role.description = description

        self.roles.flush()
        return role

    def delete_role(self, actor: User, role_id: int) -> None:
        """Delete a role; its grants and user bindings go with it"""
        role = self.roles.require(role_id)
        self.evaluator.ensure_allowed(actor, role.hotel_id, perms.DELETE, perms.ROLE)
        if self._is_builtin(role):
            raise ValidationError(f"Built-in role '{role.name}' cannot be deleted")

        self.roles.delete(role)
        logger.info(f"Deleted role {role_id} by user {actor.id}")

    def grant_permission(self, actor: User, role_id: int, permission_id: int) -> bool:
        """Idempotent. Returns True when a new edge was created."""
        role = self.roles.require(role_id)
        self.evaluator.ensure_allowed(actor, role.hotel_id, perms.UPDATE, perms.ROLE)
        return self._grant(role, permission_id)

    def revoke_permission(self, actor: User, role_id: int, permission_id: int) -> bool:
        """No-op if the edge is absent. Returns True when an edge was removed."""
        role = self.roles.require(role_id)
        self.evaluator.ensure_allowed(actor, role.hotel_id, perms.UPDATE, perms.ROLE)
        removed = self.role_permissions.remove(role.id, permission_id) > 0
        if removed:
            logger.info(f"Revoked permission {permission_id} from role {role.id} by user {actor.id}")
        return removed

    def _grant(self, role: Role, permission_id: int) -> bool:
        self.permissions.require(permission_id)
        if self.role_permissions.find(role.id, permission_id):
            return False
        self.role_permissions.add(RolePermission(role_id=role.id, permission_id=permission_id))
        logger.info(f"Granted permission {permission_id} to role {role.id}")
        return True


class PermissionService:
    """Permission catalogue management (always global)"""

    def __init__(self, permissions: PermissionRepository, evaluator: AuthorizationEvaluator):
        self.permissions = permissions
        self.evaluator = evaluator

    def list_permissions(self, actor: User, resource: Optional[str] = None) -> List[Permission]:
        self.evaluator.ensure_allowed(actor, None, perms.READ, perms.PERMISSION)
        return self.permissions.list(resource)

    def get_permission(self, actor: User, permission_id: int) -> Permission:
        self.evaluator.ensure_allowed(actor, None, perms.READ, perms.PERMISSION)
        return self.permissions.require(permission_id)

    def get_permission_roles(self, actor: User, permission_id: int) -> List[Role]:
        permission = self.get_permission(actor, permission_id)
        return self.permissions.list_roles(permission.id)

    def create_permission(self, actor: User, action: str, resource: str,
                          name: Optional[str] = None, description: str = "") -> Permission:
        self.evaluator.ensure_allowed(actor, None, perms.CREATE, perms.PERMISSION)
        if self.permissions.get_by_action_resource(action, resource):
            raise ConflictError(f"Permission '{action}:{resource}' already exists")

        permission = self.permissions.add(Permission(
            name=name or perms.permission_label(action, resource),
            action=action,
            resource=resource,
            description=description or "",
        ))
        logger.info(f"Created permission {permission.id} {action}:{resource} by user {actor.id}")
        return permission

    def update_permission(self, actor: User, permission_id: int, **kwargs) -> Permission:
        self.evaluator.ensure_allowed(actor, None, perms.UPDATE, perms.PERMISSION)
        permission = self.permissions.require(permission_id)

        action = kwargs.get("action") or permission.action
        resource = kwargs.get("resource") or permission.resource
        if (action, resource) != (permission.action, permission.resource):
            existing = self.permissions.get_by_action_resource(action, resource)
            if existing and existing.id != permission.id:
                raise ConflictError(f"Permission '{action}:{resource}' already exists")

        for key in ("name", "action", "resource", "description"):
            value = kwargs.get(key)
            if value is not None:
                setattr(permission, key, value)

        self.permissions.flush()
        return permission

    def delete_permission(self, actor: User, permission_id: int) -> None:
        """Delete a permission; role grants of it go with it"""
        self.evaluator.ensure_allowed(actor, None, perms.DELETE, perms.PERMISSION)
        permission = self.permissions.require(permission_id)
        self.permissions.delete(permission)
        logger.info(f"Deleted permission {permission_id} by user {actor.id}")


class UserRoleService:
    """User <-> role <-> hotel bindings and the global role reference"""

    def __init__(self, user_roles: UserRoleRepository, users: UserRepository,
                 roles: RoleRepository, hotels: HotelRepository,
                 evaluator: AuthorizationEvaluator):
        self.user_roles = user_roles
        self.users = users
        self.roles = roles
        self.hotels = hotels
        self.evaluator = evaluator

    def list_user_roles(self, actor: User, user_id: int,
                        hotel_id: Optional[int] = None) -> List[UserRole]:
        self.users.require(user_id)
        if actor.id != user_id:
            self.evaluator.ensure_allowed(actor, hotel_id, perms.READ, perms.ROLE)
        return self.user_roles.list_for_user(user_id, hotel_id)

    def assign_user_role(self, actor: User, user_id: int, role_id: int, hotel_id: int) -> UserRole:
        """Bind a user to a role within a hotel. Idempotent.

        A hotel-scoped role may only be bound under its own hotel. A global role
        may be bound under any hotel; the binding then grants only inside that
        hotel, like every other user_roles row.
        """
        self.evaluator.ensure_allowed(actor, hotel_id, perms.ASSIGN, perms.ROLE)
        self.users.require(user_id)
        role = self.roles.require(role_id)
        self.hotels.require(hotel_id)

        if role.hotel_id is not None and role.hotel_id != hotel_id:
            raise ValidationError(
                f"Role {role.id} belongs to hotel {role.hotel_id} and cannot be assigned under hotel {hotel_id}"
            )

        existing = self.user_roles.find(user_id, role_id, hotel_id)
        if existing:
            return existing

        binding = self.user_roles.add(UserRole(user_id=user_id, role_id=role_id, hotel_id=hotel_id))
        logger.info(f"Assigned role {role_id} to user {user_id} in hotel {hotel_id} by user {actor.id}")
        return binding

    def remove_user_role(self, actor: User, user_id: int, role_id: int, hotel_id: int) -> bool:
        """Remove the exact binding; no-op if absent"""
        self.evaluator.ensure_allowed(actor, hotel_id, perms.ASSIGN, perms.ROLE)
        removed = self.user_roles.remove(user_id, role_id, hotel_id) > 0
        if removed:
            logger.info(f"Removed role {role_id} from user {user_id} in hotel {hotel_id} by user {actor.id}")
        return removed

    def set_global_role(self, actor: User, user_id: int, role_id: Optional[int]) -> User:
        """Set or clear the user's global role reference"""
        self.evaluator.ensure_allowed(actor, None, perms.ASSIGN, perms.ROLE)
        user = self.users.require(user_id)

        if role_id is not None:
            role = self.roles.require(role_id)
            if not role.is_global:
                raise ValidationError(
                    f"Role {role.id} is scoped to hotel {role.hotel_id}; bind it through a hotel instead"
                )
            if role.name == self.evaluator.superadmin_role_name and not self.evaluator.is_superadmin(actor):
                raise Forbidden()

        # demoting a superadmin is reserved to superadmins too
        if self.evaluator.is_superadmin(user) and not self.evaluator.is_superadmin(actor):
            raise Forbidden()

        user.role_id = role_id
        self.users.flush()
        logger.info(f"Set global role of user {user_id} to {role_id} by user {actor.id}")
        return user
