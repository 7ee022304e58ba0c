"""
Authorization evaluator - hotel-scoped RBAC

Decides whether a user may perform (action, resource), optionally inside a
hotel context:

1. A global role named ``superadmin`` allows everything.
2. Otherwise the candidate roles are the user's global role plus every role
   bound through ``user_roles`` under the context hotel.
3. Allow iff one of those exact role rows carries a permission with the
   same action and resource.

The permission graph is read fresh on every call.
"""
import logging
from typing import List, Optional

from hotel_booking.config import settings
from hotel_booking.exceptions import Forbidden
from hotel_booking.models import User, Role, Permission
from hotel_booking.repositories import (
    RoleRepository, RolePermissionRepository, UserRoleRepository, Repositories,
)

logger = logging.getLogger(__name__)


class AuthorizationEvaluator:
    """Allow/deny decisions over the role graph"""

    def __init__(
        self,
        roles: RoleRepository,
        user_roles: UserRoleRepository,
        role_permissions: RolePermissionRepository,
        superadmin_role_name: Optional[str] = None,
    ):
        self.roles = roles
        self.user_roles = user_roles
        self.role_permissions = role_permissions
        self.superadmin_role_name = superadmin_role_name or settings.SUPERADMIN_ROLE_NAME

    @classmethod
    def from_repositories(cls, repos: Repositories) -> "AuthorizationEvaluator":
        return cls(repos.roles, repos.user_roles, repos.role_permissions)

    def global_role(self, user: User) -> Optional[Role]:
        """The user's global role, ignoring a reference to a hotel-scoped row"""
        if user.role_id is None:
            return None
        role = self.roles.get(user.role_id)
        if role is None or not role.is_global:
            return None
        return role

    def is_superadmin(self, user: Optional[User]) -> bool:
        if user is None:
            return False
        role = self.global_role(user)
        return role is not None and role.name == self.superadmin_role_name

    def effective_roles(self, user: User, hotel_context: Optional[int]) -> List[Role]:
        roles: List[Role] = []
        role = self.global_role(user)
        if role is not None:
            roles.append(role)
        if hotel_context is not None:
            roles.extend(self.user_roles.roles_in_hotel(user.id, hotel_context))
        return roles

    def effective_permissions(self, user: User, hotel_context: Optional[int]) -> List[Permission]:
        role_ids = [r.id for r in self.effective_roles(user, hotel_context)]
        return self.role_permissions.permissions_for_roles(role_ids)

    def authorize(
        self,
        user: Optional[User],
        hotel_context: Optional[int],
        action: str,
        resource: str,
    ) -> bool:
        if user is None:
            return False

        if self.is_superadmin(user):
            logger.debug(f"allow user={user.id} {action}:{resource} hotel={hotel_context} (superadmin)")
            return True

        allowed = any(
            p.action == action and p.resource == resource
            for p in self.effective_permissions(user, hotel_context)
        )
        logger.debug(
            f"{'allow' if allowed else 'deny'} user={user.id} "
            f"{action}:{resource} hotel={hotel_context}"
        )
        return allowed

    def ensure_allowed(
        self,
        user: Optional[User],
        hotel_context: Optional[int],
        action: str,
        resource: str,
    ) -> None:
        """authorize() for callers that must stop on deny"""
        if not self.authorize(user, hotel_context, action, resource):
            raise Forbidden()
