"""
User service - registration, login, profile and user administration

User administration is global: it is authorized with no hotel context.
"""
import logging
from typing import Any, Dict, List

from hotel_booking.exceptions import (
    AuthenticationError, ConflictError, Forbidden, ValidationError,
)
from hotel_booking.models import User, UserStatus
from hotel_booking.repositories import HotelRepository, UserRepository
from hotel_booking.schemas import (
    ProfileUpdate, RegisterRequest, UserCreate, UserUpdate,
)
from hotel_booking.security import permissions as perms
from hotel_booking.security.auth import get_password_hash, verify_password
from hotel_booking.security.authorization import AuthorizationEvaluator

logger = logging.getLogger(__name__)

NULLABLE_FIELDS = {"phone"}


class UserService:

    def __init__(self, users: UserRepository, hotels: HotelRepository,
                 evaluator: AuthorizationEvaluator):
        self.users = users
        self.hotels = hotels
        self.evaluator = evaluator

    def _check_email_free(self, email: str, user_id: int = None) -> None:
        existing = self.users.get_by_email(email)
        if existing and existing.id != user_id:
            raise ConflictError(f"Email '{email}' is already in use")

    def _apply(self, user: User, values: Dict[str, Any]) -> User:
        if values.get("email") and values["email"] != user.email:
            self._check_email_free(values["email"], user.id)
        password = values.pop("password", None)
        if password:
            user.password_hash = get_password_hash(password)
        for key, value in values.items():
            if value is not None or key in NULLABLE_FIELDS:
                setattr(user, key, value)
        self.users.flush()
        return user

    # ============== Self service ==============

    def register(self, data: RegisterRequest) -> User:
        """Public sign-up. The new user holds no role until one is granted."""
        self._check_email_free(data.email)
        user = self.users.add(User(
            name=data.name,
            email=data.email,
            phone=data.phone,
            password_hash=get_password_hash(data.password),
            must_reset_password=False,
        ))
        logger.info(f"Registered user {user.id} ({user.email})")
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid credentials")
        if not user.is_active:
            raise AuthenticationError("Account is inactive")
        return user

    def reset_password(self, user: User, current_password: str, new_password: str) -> User:
        """Change the password and clear the pending-reset flag"""
        if not verify_password(current_password, user.password_hash):
            raise AuthenticationError("Invalid credentials")
        if current_password == new_password:
            raise ValidationError("New password must differ from the current one")
        user.password_hash = get_password_hash(new_password)
        user.must_reset_password = False
        self.users.flush()
        logger.info(f"User {user.id} reset their password")
        return user

    def get_profile(self, user: User) -> User:
        return self.users.require(user.id)

    def update_profile(self, user: User, data: ProfileUpdate) -> User:
        values = data.model_dump(exclude_unset=True)
        if not values:
            raise ValidationError("Nothing to update")
        return self._apply(user, values)

    # ============== Administration ==============

    def list_users(self, actor: User) -> List[User]:
        self.evaluator.ensure_allowed(actor, None, perms.READ, perms.USER)
        return self.users.list()

    def list_hotel_users(self, actor: User, hotel_id: int) -> List[User]:
        """Staff of one hotel; readable with a grant in that hotel only"""
        self.hotels.require(hotel_id)
        self.evaluator.ensure_allowed(actor, hotel_id, perms.READ, perms.USER)
        return self.users.list_by_hotel(hotel_id)

    def get_user(self, actor: User, user_id: int) -> User:
        user = self.users.require(user_id)
        if actor.id != user.id:
            self.evaluator.ensure_allowed(actor, None, perms.READ, perms.USER)
        return user

    def create_user(self, actor: User, data: UserCreate) -> User:
        """Admin-created users must reset their password on first login by default"""
        self.evaluator.ensure_allowed(actor, None, perms.CREATE, perms.USER)
        self._check_email_free(data.email)
        user = self.users.add(User(
            name=data.name,
            email=data.email,
            phone=data.phone,
            status=data.status,
            password_hash=get_password_hash(data.password),
            must_reset_password=data.must_reset_password,
        ))
        logger.info(f"Created user {user.id} ({user.email}) by user {actor.id}")
        return user

    def update_user(self, actor: User, user_id: int, data: UserUpdate) -> User:
        self.evaluator.ensure_allowed(actor, None, perms.UPDATE, perms.USER)
        user = self.users.require(user_id)
        if self.evaluator.is_superadmin(user) and not self.evaluator.is_superadmin(actor):
            raise Forbidden()
        values = data.model_dump(exclude_unset=True)
        if values.get("password"):
            # an administrator chose this password, so the owner must replace it
            values["must_reset_password"] = True
        return self._apply(user, values)

    def deactivate_user(self, actor: User, user_id: int) -> User:
        return self.update_user(actor, user_id, UserUpdate(status=UserStatus.INACTIVE))

    def delete_user(self, actor: User, user_id: int) -> None:
        """Role bindings are deleted with the user; hotel administrators cannot be deleted"""
        self.evaluator.ensure_allowed(actor, None, perms.DELETE, perms.USER)
        user = self.users.require(user_id)
        if user.id == actor.id:
            raise ValidationError("Users cannot delete themselves")
        if self.evaluator.is_superadmin(user) and not self.evaluator.is_superadmin(actor):
            raise Forbidden()
        administered = self.hotels.list_by_admin(user.id)
        if administered:
            raise ConflictError(
                f"User {user.id} administers {len(administered)} hotel(s); reassign them first"
            )
        self.users.delete(user)
        logger.info(f"Deleted user {user_id} by user {actor.id}")
