"""
Revenue and occupancy reports over confirmed bookings
"""
import logging
from collections import OrderedDict
from datetime import datetime, UTC
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from hotel_booking.models import Booking, Hotel, Room, User
from hotel_booking.repositories import HotelRepository
from hotel_booking.security import permissions as perms
from hotel_booking.security.authorization import AuthorizationEvaluator

logger = logging.getLogger(__name__)

CONFIRMED = "confirmed"


class ReportService:

    def __init__(self, db: Session, hotels: HotelRepository, evaluator: AuthorizationEvaluator):
        self.db = db
        self.hotels = hotels
        self.evaluator = evaluator

    def revenue_by_hotel(self, actor: User, hotel_id: Optional[int] = None,
                         start: Optional[datetime] = None,
                         end: Optional[datetime] = None) -> List[Dict]:
        """Bookings, guests and revenue per hotel; all hotels needs a global grant"""
        if hotel_id is not None:
            self.hotels.require(hotel_id)
        self.evaluator.ensure_allowed(actor, hotel_id, perms.READ, perms.REPORT)

        q = (
            self.db.query(
                Booking.hotel_id,
                Hotel.name,
                func.count(Booking.id),
                func.coalesce(func.sum(Booking.guests), 0),
                func.coalesce(func.sum(Booking.total_amount), 0),
            )
            .join(Hotel, Hotel.id == Booking.hotel_id)
            .filter(Booking.status == CONFIRMED)
        )
        if hotel_id is not None:
            q = q.filter(Booking.hotel_id == hotel_id)
        if start is not None:
            q = q.filter(Booking.check_in >= start)
        if end is not None:
            q = q.filter(Booking.check_out <= end)

        rows = q.group_by(Booking.hotel_id, Hotel.name).order_by(Booking.hotel_id).all()
        return [
            {
                "hotel_id": row[0],
                "hotel_name": row[1],
                "total_bookings": row[2],
                "total_guests": int(row[3]),
                "total_revenue": Decimal(str(row[4])),
            }
            for row in rows
        ]

    def monthly_revenue(self, actor: User, hotel_id: int) -> List[Dict]:
        """Revenue trend keyed by check-in month (YYYY-MM)"""
        self.hotels.require(hotel_id)
        self.evaluator.ensure_allowed(actor, hotel_id, perms.READ, perms.REPORT)

        bookings = self.hotels.list_bookings(hotel_id, CONFIRMED)
        months: "OrderedDict[str, Dict]" = OrderedDict()
        for booking in bookings:
            key = booking.check_in.strftime("%Y-%m")
            bucket = months.setdefault(key, {"month": key, "bookings": 0, "revenue": Decimal("0")})
            bucket["bookings"] += 1
            bucket["revenue"] += Decimal(str(booking.total_amount))
        return list(months.values())

    def occupancy(self, actor: User, hotel_id: int, at: Optional[datetime] = None) -> Dict:
        """Rooms holding a confirmed stay at `at` (default now) against all rooms of the hotel"""
        self.hotels.require(hotel_id)
        self.evaluator.ensure_allowed(actor, hotel_id, perms.READ, perms.REPORT)
        at = at or datetime.now(UTC).replace(tzinfo=None)

        total_rooms = self.db.query(func.count(Room.id)).filter(Room.hotel_id == hotel_id).scalar()
        occupied_rooms = (
            self.db.query(func.count(func.distinct(Booking.room_id)))
            .filter(
                Booking.hotel_id == hotel_id,
                Booking.status == CONFIRMED,
                Booking.check_in <= at,
                Booking.check_out >= at,
            )
            .scalar()
        )
        rate = round(occupied_rooms / total_rooms * 100, 2) if total_rooms else 0.0
        return {
            "hotel_id": hotel_id,
            "total_rooms": total_rooms,
            "occupied_rooms": occupied_rooms,
            "occupancy_rate": rate,
        }
