"""
Room service - rooms are authorized in the context of the hotel they belong to.
An orphaned room (hotel deleted) is only reachable through global grants.
"""
import logging
from typing import Any, Dict, List, Optional

from hotel_booking.exceptions import ConflictError
from hotel_booking.models import Room, User
from hotel_booking.repositories import HotelRepository, RoomRepository
from hotel_booking.schemas import RoomCreate, RoomReplace, RoomUpdate
from hotel_booking.security import permissions as perms
from hotel_booking.security.authorization import AuthorizationEvaluator

logger = logging.getLogger(__name__)

NULLABLE_FIELDS = {"hotel_id", "type", "capacity", "description"}


class RoomService:

    def __init__(self, rooms: RoomRepository, hotels: HotelRepository,
                 evaluator: AuthorizationEvaluator):
        self.rooms = rooms
        self.hotels = hotels
        self.evaluator = evaluator

    def _check_number_free(self, hotel_id: Optional[int], room_number: str,
                           room_id: Optional[int] = None) -> None:
        if hotel_id is None:
            return
        existing = self.rooms.get_by_number(hotel_id, room_number)
        if existing and existing.id != room_id:
            raise ConflictError(f"Room number '{room_number}' already exists for hotel {hotel_id}")

    def create_room(self, actor: User, data: RoomCreate) -> Room:
        self.hotels.require(data.hotel_id)
        self.evaluator.ensure_allowed(actor, data.hotel_id, perms.CREATE, perms.ROOM)
        self._check_number_free(data.hotel_id, data.room_number)

        room = self.rooms.add(Room(**data.model_dump()))
        logger.info(f"Created room {room.id} ({room.room_number}) in hotel {room.hotel_id} by user {actor.id}")
        return room

    def get_room(self, actor: User, room_id: int) -> Room:
        room = self.rooms.require(room_id)
        self.evaluator.ensure_allowed(actor, room.hotel_id, perms.READ, perms.ROOM)
        return room

    def list_rooms(self, actor: User, hotel_id: int) -> List[Room]:
        self.hotels.require(hotel_id)
        self.evaluator.ensure_allowed(actor, hotel_id, perms.READ, perms.ROOM)
        return self.hotels.list_rooms(hotel_id)

    def update_room(self, actor: User, room_id: int, data: RoomReplace) -> Room:
        room = self.rooms.require(room_id)
        return self._apply(actor, room, data.model_dump())

    def patch_room(self, actor: User, room_id: int, data: RoomUpdate) -> Room:
        room = self.rooms.require(room_id)
        values = {
            k: v for k, v in data.model_dump(exclude_unset=True).items()
            if v is not None or k in NULLABLE_FIELDS
        }
        return self._apply(actor, room, values)

    def set_availability(self, actor: User, room_id: int, is_available: bool) -> Room:
        room = self.rooms.require(room_id)
        return self._apply(actor, room, {"is_available": is_available})

    def _apply(self, actor: User, room: Room, values: Dict[str, Any]) -> Room:
        self.evaluator.ensure_allowed(actor, room.hotel_id, perms.UPDATE, perms.ROOM)

        target_hotel = values.get("hotel_id", room.hotel_id)
        if target_hotel != room.hotel_id:
            # moving a room needs the grant on both sides
            if target_hotel is not None:
                self.hotels.require(target_hotel)
            self.evaluator.ensure_allowed(actor, target_hotel, perms.UPDATE, perms.ROOM)

        target_number = values.get("room_number") or room.room_number
        if target_hotel != room.hotel_id or target_number != room.room_number:
            self._check_number_free(target_hotel, target_number, room.id)

        for key, value in values.items():
            setattr(room, key, value)
        self.rooms.flush()
        return room

    def delete_room(self, actor: User, room_id: int) -> None:
        """Bookings of the room are deleted with it"""
        room = self.rooms.require(room_id)
        self.evaluator.ensure_allowed(actor, room.hotel_id, perms.DELETE, perms.ROOM)
        self.rooms.delete(room)
        logger.info(f"Deleted room {room_id} by user {actor.id}")
