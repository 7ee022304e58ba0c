"""
Booking service - bookings are authorized in the context of their hotel

Status is an open string; only "cancelled" has meaning here (cancel_booking).
"""
import logging
from typing import Any, Dict, List, Optional

from hotel_booking.exceptions import ValidationError
from hotel_booking.models import Booking, User
from hotel_booking.repositories import BookingRepository, HotelRepository, RoomRepository
from hotel_booking.schemas import BookingCreate, BookingReplace, BookingUpdate
from hotel_booking.security import permissions as perms
from hotel_booking.security.authorization import AuthorizationEvaluator

logger = logging.getLogger(__name__)

CANCELLED = "cancelled"
NULLABLE_FIELDS = {"guest_phone"}


class BookingService:

    def __init__(self, bookings: BookingRepository, rooms: RoomRepository,
                 hotels: HotelRepository, evaluator: AuthorizationEvaluator):
        self.bookings = bookings
        self.rooms = rooms
        self.hotels = hotels
        self.evaluator = evaluator

    def _validate(self, values: Dict[str, Any]) -> None:
        """Room must belong to the booking's hotel; stay must be a forward range"""
        room = self.rooms.require(values["room_id"])
        if room.hotel_id != values["hotel_id"]:
            raise ValidationError(
                f"Room {room.id} does not belong to hotel {values['hotel_id']}"
            )
        if values["check_out"] <= values["check_in"]:
            raise ValidationError("check_out must be after check_in")

    def create_booking(self, actor: User, data: BookingCreate) -> Booking:
        self.hotels.require(data.hotel_id)
        self.evaluator.ensure_allowed(actor, data.hotel_id, perms.CREATE, perms.BOOKING)

        values = data.model_dump()
        self._validate(values)
        booking = self.bookings.add(Booking(**values))
        logger.info(f"Created booking {booking.id} for room {booking.room_id} by user {actor.id}")
        return booking

    def get_booking(self, actor: User, booking_id: int) -> Booking:
        booking = self.bookings.require(booking_id)
        self.evaluator.ensure_allowed(actor, booking.hotel_id, perms.READ, perms.BOOKING)
        return booking

    def list_bookings(self, actor: User, hotel_id: int, status: Optional[str] = None) -> List[Booking]:
        self.hotels.require(hotel_id)
        self.evaluator.ensure_allowed(actor, hotel_id, perms.READ, perms.BOOKING)
        return self.hotels.list_bookings(hotel_id, status)

    def update_booking(self, actor: User, booking_id: int, data: BookingReplace) -> Booking:
        booking = self.bookings.require(booking_id)
        return self._apply(actor, booking, data.model_dump())

    def patch_booking(self, actor: User, booking_id: int, data: BookingUpdate) -> Booking:
        booking = self.bookings.require(booking_id)
        values = {
            k: v for k, v in data.model_dump(exclude_unset=True).items()
            if v is not None or k in NULLABLE_FIELDS
        }
        return self._apply(actor, booking, values)

    def cancel_booking(self, actor: User, booking_id: int) -> Booking:
        booking = self.bookings.require(booking_id)
        return self._apply(actor, booking, {"status": CANCELLED})

    def _apply(self, actor: User, booking: Booking, values: Dict[str, Any]) -> Booking:
        self.evaluator.ensure_allowed(actor, booking.hotel_id, perms.UPDATE, perms.BOOKING)

        target_hotel = values.get("hotel_id", booking.hotel_id)
        if target_hotel != booking.hotel_id:
            self.hotels.require(target_hotel)
            self.evaluator.ensure_allowed(actor, target_hotel, perms.UPDATE, perms.BOOKING)

        merged = {
            "hotel_id": target_hotel,
            "room_id": values.get("room_id", booking.room_id),
            "check_in": values.get("check_in", booking.check_in),
            "check_out": values.get("check_out", booking.check_out),
        }
        self._validate(merged)

        for key, value in values.items():
            setattr(booking, key, value)
        self.bookings.flush()
        return booking

    def delete_booking(self, actor: User, booking_id: int) -> None:
        booking = self.bookings.require(booking_id)
        self.evaluator.ensure_allowed(actor, booking.hotel_id, perms.DELETE, perms.BOOKING)
        self.bookings.delete(booking)
        logger.info(f"Deleted booking {booking_id} by user {actor.id}")
