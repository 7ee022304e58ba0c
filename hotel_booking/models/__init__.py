"""
ORM models
"""
from hotel_booking.models.hotel import Hotel, Room, Booking
from hotel_booking.models.rbac import (
    User, UserStatus, Role, Permission, RolePermission, UserRole,
)

__all__ = [
    "Hotel", "Room", "Booking",
    "User", "UserStatus", "Role", "Permission", "RolePermission", "UserRole",
]
