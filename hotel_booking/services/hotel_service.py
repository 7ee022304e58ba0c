"""
Hotel service - hotel CRUD, authorized in the hotel's own context
"""
import logging
from typing import List, Union

from hotel_booking.models import Hotel, Room, User
from hotel_booking.repositories import HotelRepository, UserRepository, UserRoleRepository
from hotel_booking.schemas import HotelBase, HotelCreate, HotelUpdate
from hotel_booking.security import permissions as perms
from hotel_booking.security.authorization import AuthorizationEvaluator

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {"name"}


class HotelService:

    def __init__(self, hotels: HotelRepository, users: UserRepository,
                 user_roles: UserRoleRepository, evaluator: AuthorizationEvaluator):
        self.hotels = hotels
        self.users = users
        self.user_roles = user_roles
        self.evaluator = evaluator

    def create_hotel(self, actor: User, data: HotelCreate) -> Hotel:
        """Create a hotel; the actor administers it unless admin_id says otherwise"""
        self.evaluator.ensure_allowed(actor, None, perms.CREATE, perms.HOTEL)
        values = data.model_dump(exclude={"admin_id"})
        admin_id = data.admin_id or actor.id
        self.users.require(admin_id)

        hotel = self.hotels.add(Hotel(admin_id=admin_id, **values))
        logger.info(f"Created hotel {hotel.id} '{hotel.name}' by user {actor.id}")
        return hotel

    def get_hotel(self, actor: User, hotel_id: int) -> Hotel:
        hotel = self.hotels.require(hotel_id)
        self.evaluator.ensure_allowed(actor, hotel.id, perms.READ, perms.HOTEL)
        return hotel

    def list_hotels(self, actor: User) -> List[Hotel]:
        """All hotels for a global reader, otherwise the readable hotels the actor is tied to"""
        if self.evaluator.authorize(actor, None, perms.READ, perms.HOTEL):
            return self.hotels.list()

        candidate_ids = {h.id for h in self.hotels.list_by_admin(actor.id)}
        candidate_ids.update(self.user_roles.hotel_ids_for_user(actor.id))
        return [
            h for h in self.hotels.list_by_ids(candidate_ids)
            if self.evaluator.authorize(actor, h.id, perms.READ, perms.HOTEL)
        ]

    def update_hotel(self, actor: User, hotel_id: int,
                     data: Union[HotelBase, HotelUpdate], partial: bool = True) -> Hotel:
        """PATCH when partial, PUT (all fields replaced) otherwise"""
        hotel = self.hotels.require(hotel_id)
        self.evaluator.ensure_allowed(actor, hotel.id, perms.UPDATE, perms.HOTEL)

        for key, value in data.model_dump(exclude_unset=partial).items():
            if value is None and key in REQUIRED_FIELDS:
                continue
            setattr(hotel, key, value)
        self.hotels.flush()
        return hotel

    def delete_hotel(self, actor: User, hotel_id: int) -> None:
        """Rooms are orphaned, bookings and hotel roles are deleted"""
        hotel = self.hotels.require(hotel_id)
        self.evaluator.ensure_allowed(actor, hotel.id, perms.DELETE, perms.HOTEL)
        self.hotels.delete(hotel)
        logger.info(f"Deleted hotel {hotel_id} by user {actor.id}")

    def list_rooms(self, actor: User, hotel_id: int) -> List[Room]:
        hotel = self.hotels.require(hotel_id)
        self.evaluator.ensure_allowed(actor, hotel.id, perms.READ, perms.ROOM)
        return self.hotels.list_rooms(hotel.id)
