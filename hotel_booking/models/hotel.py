"""
Hotel inventory tables - hotels, rooms, bookings

Cascade rules live on the foreign keys:
- rooms.hotel_id     ON DELETE SET NULL (rooms are orphaned, not deleted)
- bookings.hotel_id  ON DELETE CASCADE
- bookings.room_id   ON DELETE CASCADE
"""
from datetime import datetime, UTC

from sqlalchemy import (
    Column, Integer, String, Text, Numeric, Boolean, DateTime, ForeignKey,
    UniqueConstraint,
)

from hotel_booking.database import Base


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Hotel(Base):
    """A tenant. Scopes rooms, bookings and hotel-level roles."""
    __tablename__ = "hotels"

    id = Column(Integer, primary_key=True, index=True)
    # use_alter breaks the hotels -> users -> roles -> hotels cycle for DDL ordering
    admin_id = Column(
        Integer,
        ForeignKey("users.id", use_alter=True, name="fk_hotels_admin_id_users"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    address = Column(String(255))
    description = Column(Text)
    city = Column(String(100))
    state = Column(String(100))
    country = Column(String(100))
    zip = Column(String(20))
    phone = Column(String(30))
    email = Column(String(100))
    star_rating = Column(Integer)
    created_at = Column(DateTime, default=_utcnow)


class Room(Base):
    __tablename__ = "rooms"
    __table_args__ = (
        UniqueConstraint("hotel_id", "room_number", name="uq_rooms_hotel_room_number"),
    )

    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id", ondelete="SET NULL"), nullable=True, index=True)
    room_number = Column(String(50), nullable=False)
    type = Column(String(50))
    price = Column(Numeric(10, 2), nullable=False)
    capacity = Column(Integer)
    description = Column(Text)
    is_available = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id", ondelete="CASCADE"), nullable=False, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    guest_name = Column(String(255), nullable=False)
    guest_email = Column(String(255), nullable=False)
    guest_phone = Column(String(30))
    check_in = Column(DateTime, nullable=False)
    check_out = Column(DateTime, nullable=False)
    guests = Column(Integer, default=1, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(50), default="pending", nullable=False)  # open string, no state machine
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)
