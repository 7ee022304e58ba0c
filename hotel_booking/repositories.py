"""
Repository handles - one per entity

Services receive these explicitly instead of reaching through ORM
relationships; every cross-entity read is a named query here.
"""
import logging
from dataclasses import dataclass
from typing import Generic, Iterable, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hotel_booking.exceptions import ConflictError, NotFound
from hotel_booking.models import (
    Hotel, Room, Booking, User, Role, Permission, RolePermission, UserRole,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class BaseRepository(Generic[ModelT]):
    model: Type[ModelT]
    label: str = "Entity"

    def __init__(self, db: Session):
        self.db = db

    def get(self, entity_id: int) -> Optional[ModelT]:
        return self.db.get(self.model, entity_id)

    def require(self, entity_id: int) -> ModelT:
        """get() or raise NotFound"""
        entity = self.get(entity_id)
        if entity is None:
            raise NotFound(f"{self.label} {entity_id} not found")
        return entity

    def add(self, entity: ModelT) -> ModelT:
        self.db.add(entity)
        self.flush()
        return entity

    def delete(self, entity: ModelT) -> None:
        self.db.delete(entity)
        self.flush()
        # rows changed by ON DELETE rules are not tracked by the session
        self.db.expire_all()

    def flush(self) -> None:
        """Flush pending changes; rolling back is left to the session owner"""
        try:
            self.db.flush()
        except IntegrityError as e:
            logger.warning(f"Integrity error on {self.label}: {e.orig}")
            raise ConflictError(f"{self.label} violates a uniqueness or reference constraint") from e


class HotelRepository(BaseRepository[Hotel]):
    model = Hotel
    label = "Hotel"

    def list(self) -> List[Hotel]:
        return self.db.query(Hotel).order_by(Hotel.id).all()

    def list_by_ids(self, hotel_ids: Iterable[int]) -> List[Hotel]:
        ids = set(hotel_ids)
        if not ids:
            return []
        return self.db.query(Hotel).filter(Hotel.id.in_(ids)).order_by(Hotel.id).all()

    def list_by_admin(self, user_id: int) -> List[Hotel]:
        return self.db.query(Hotel).filter(Hotel.admin_id == user_id).order_by(Hotel.id).all()

    def list_rooms(self, hotel_id: int) -> List[Room]:
        return self.db.query(Room).filter(Room.hotel_id == hotel_id).order_by(Room.room_number).all()

    def list_bookings(self, hotel_id: int, status: Optional[str] = None) -> List[Booking]:
        q = self.db.query(Booking).filter(Booking.hotel_id == hotel_id)
        if status:
            q = q.filter(Booking.status == status)
        return q.order_by(Booking.check_in).all()


class RoomRepository(BaseRepository[Room]):
    model = Room
    label = "Room"

    def get_by_number(self, hotel_id: Optional[int], room_number: str) -> Optional[Room]:
        return self.db.query(Room).filter(
            Room.hotel_id == hotel_id,
            Room.room_number == room_number,
        ).first()

    def list_orphaned(self) -> List[Room]:
        return self.db.query(Room).filter(Room.hotel_id.is_(None)).order_by(Room.id).all()


class BookingRepository(BaseRepository[Booking]):
    model = Booking
    label = "Booking"

    def list_by_room(self, room_id: int) -> List[Booking]:
        return self.db.query(Booking).filter(Booking.room_id == room_id).order_by(Booking.check_in).all()


class UserRepository(BaseRepository[User]):
    model = User
    label = "User"

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def list(self) -> List[User]:
        return self.db.query(User).order_by(User.id).all()

    def list_by_hotel(self, hotel_id: int) -> List[User]:
        """Users holding at least one role binding under this hotel"""
        return (
            self.db.query(User)
            .join(UserRole, UserRole.user_id == User.id)
            .filter(UserRole.hotel_id == hotel_id)
            .distinct()
            .order_by(User.id)
            .all()
        )


class RoleRepository(BaseRepository[Role]):
    model = Role
    label = "Role"

    def get_by_name(self, name: str, hotel_id: Optional[int]) -> Optional[Role]:
        q = self.db.query(Role).filter(Role.name == name)
        if hotel_id is None:
            q = q.filter(Role.hotel_id.is_(None))
        else:
            q = q.filter(Role.hotel_id == hotel_id)
        return q.first()

    def list(self, hotel_id: Optional[int] = None, include_global: bool = True) -> List[Role]:
        q = self.db.query(Role)
        if hotel_id is not None:
            if include_global:
                q = q.filter((Role.hotel_id == hotel_id) | Role.hotel_id.is_(None))
            else:
                q = q.filter(Role.hotel_id == hotel_id)
        elif not include_global:
            q = q.filter(Role.hotel_id.isnot(None))
        return q.order_by(Role.hotel_id, Role.name).all()

    def list_permissions(self, role_id: int) -> List[Permission]:
        return (
            self.db.query(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .filter(RolePermission.role_id == role_id)
            .order_by(Permission.resource, Permission.action)
            .all()
        )


class PermissionRepository(BaseRepository[Permission]):
    model = Permission
    label = "Permission"

    def get_by_action_resource(self, action: str, resource: str) -> Optional[Permission]:
        return self.db.query(Permission).filter(
            Permission.action == action,
            Permission.resource == resource,
        ).first()

    def list(self, resource: Optional[str] = None) -> List[Permission]:
        q = self.db.query(Permission)
        if resource:
            q = q.filter(Permission.resource == resource)
        return q.order_by(Permission.resource, Permission.action).all()

    def list_roles(self, permission_id: int) -> List[Role]:
        return (
            self.db.query(Role)
            .join(RolePermission, RolePermission.role_id == Role.id)
            .filter(RolePermission.permission_id == permission_id)
            .order_by(Role.id)
            .all()
        )


class RolePermissionRepository(BaseRepository[RolePermission]):
    model = RolePermission
    label = "Role permission"

    def find(self, role_id: int, permission_id: int) -> Optional[RolePermission]:
        return self.db.query(RolePermission).filter(
            RolePermission.role_id == role_id,
            RolePermission.permission_id == permission_id,
        ).first()

    def remove(self, role_id: int, permission_id: int) -> int:
        count = self.db.query(RolePermission).filter(
            RolePermission.role_id == role_id,
            RolePermission.permission_id == permission_id,
        ).delete(synchronize_session=False)
        self.flush()
        return count

    def permissions_for_roles(self, role_ids: Iterable[int]) -> List[Permission]:
        ids = set(role_ids)
        if not ids:
            return []
        return (
            self.db.query(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .filter(RolePermission.role_id.in_(ids))
            .distinct()
            .all()
        )


class UserRoleRepository(BaseRepository[UserRole]):
    model = UserRole
    label = "User role"

    def find(self, user_id: int, role_id: int, hotel_id: int) -> Optional[UserRole]:
        return self.db.query(UserRole).filter(
            UserRole.user_id == user_id,
            UserRole.role_id == role_id,
            UserRole.hotel_id == hotel_id,
        ).first()

    def remove(self, user_id: int, role_id: int, hotel_id: int) -> int:
        count = self.db.query(UserRole).filter(
            UserRole.user_id == user_id,
            UserRole.role_id == role_id,
            UserRole.hotel_id == hotel_id,
        ).delete(synchronize_session=False)
        self.flush()
        return count

    def list_for_user(self, user_id: int, hotel_id: Optional[int] = None) -> List[UserRole]:
        q = self.db.query(UserRole).filter(UserRole.user_id == user_id)
        if hotel_id is not None:
            q = q.filter(UserRole.hotel_id == hotel_id)
        return q.order_by(UserRole.hotel_id, UserRole.role_id).all()

    def roles_in_hotel(self, user_id: int, hotel_id: int) -> List[Role]:
        """Exact role rows bound to the user under this hotel"""
        return (
            self.db.query(Role)
            .join(UserRole, UserRole.role_id == Role.id)
            .filter(UserRole.user_id == user_id, UserRole.hotel_id == hotel_id)
            .all()
        )

    def hotel_ids_for_user(self, user_id: int) -> List[int]:
        rows = self.db.query(UserRole.hotel_id).filter(UserRole.user_id == user_id).distinct().all()
        return [row[0] for row in rows]


@dataclass
class Repositories:
    """All repository handles bound to one session"""
    db: Session
    hotels: HotelRepository
    rooms: RoomRepository
    bookings: BookingRepository
    users: UserRepository
    roles: RoleRepository
    permissions: PermissionRepository
    role_permissions: RolePermissionRepository
    user_roles: UserRoleRepository

    @classmethod
    def from_session(cls, db: Session) -> "Repositories":
        return cls(
            db=db,
            hotels=HotelRepository(db),
            rooms=RoomRepository(db),
            bookings=BookingRepository(db),
            users=UserRepository(db),
            roles=RoleRepository(db),
            permissions=PermissionRepository(db),
            role_permissions=RolePermissionRepository(db),
            user_roles=UserRoleRepository(db),
        )
