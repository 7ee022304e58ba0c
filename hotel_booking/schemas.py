"""
Pydantic schemas
Request/response validation for the API
"""
from datetime import datetime, UTC
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, EmailStr, field_validator, model_validator


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive UTC; convert aware input to match"""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(UTC).replace(tzinfo=None)
    return value


# ============== Auth / User Schemas ==============

class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: Optional[str] = Field(None, max_length=20)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ResetPasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)


class UserCreate(RegisterRequest):
    status: str = Field(default="active", pattern="^(active|inactive)$")
    must_reset_password: bool = True


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    status: Optional[str] = Field(None, pattern="^(active|inactive)$")
    password: Optional[str] = Field(None, min_length=6)


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    password: Optional[str] = Field(None, min_length=6)


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    status: str
    role_id: Optional[int] = None
    must_reset_password: bool
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class GlobalRoleUpdate(BaseModel):
    role_id: Optional[int] = None


class UserRoleAssign(BaseModel):
    role_id: int
    hotel_id: int


class UserRoleResponse(BaseModel):
    id: int
    user_id: int
    role_id: int
    hotel_id: int
    model_config = ConfigDict(from_attributes=True)


# ============== Hotel Schemas ==============

class HotelBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    zip: Optional[str] = Field(None, max_length=20)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=100)
    star_rating: Optional[int] = Field(None, ge=1, le=5)


class HotelCreate(HotelBase):
    admin_id: Optional[int] = None


class HotelUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    address: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    zip: Optional[str] = Field(None, max_length=20)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=100)
    star_rating: Optional[int] = Field(None, ge=1, le=5)


class HotelResponse(HotelBase):
    id: int
    admin_id: int
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


# ============== Room Schemas ==============

class RoomBase(BaseModel):
    room_number: str = Field(..., min_length=1, max_length=50)
    type: Optional[str] = Field(None, max_length=50)
    price: Decimal = Field(..., ge=0)
    capacity: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
    is_available: bool = True


class RoomCreate(RoomBase):
    hotel_id: int


class RoomReplace(RoomBase):
    """PUT body: every field, hotel_id may be null to detach the room"""
    hotel_id: Optional[int] = None


class RoomUpdate(BaseModel):
    hotel_id: Optional[int] = None
    room_number: Optional[str] = Field(None, min_length=1, max_length=50)
    type: Optional[str] = Field(None, max_length=50)
    price: Optional[Decimal] = Field(None, ge=0)
    capacity: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
    is_available: Optional[bool] = None


class RoomResponse(RoomBase):
    id: int
    hotel_id: Optional[int] = None
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


# ============== Booking Schemas ==============

class BookingBase(BaseModel):
    hotel_id: int
    room_id: int
    guest_name: str = Field(..., min_length=1, max_length=255)
    guest_email: EmailStr
    guest_phone: Optional[str] = Field(None, max_length=30)
    check_in: datetime
    check_out: datetime
    guests: int = Field(default=1, ge=1)
    total_amount: Decimal = Field(..., ge=0)
    status: str = Field(default="pending", min_length=1, max_length=50)

    @field_validator("check_in", "check_out")
    @classmethod
    def normalize_dates(cls, value):
        return to_naive_utc(value)

    @model_validator(mode="after")
    def check_dates(self):
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class BookingCreate(BookingBase):
    pass


class BookingReplace(BookingBase):
    pass


class BookingUpdate(BaseModel):
    room_id: Optional[int] = None
    guest_name: Optional[str] = Field(None, min_length=1, max_length=255)
    guest_email: Optional[EmailStr] = None
    guest_phone: Optional[str] = Field(None, max_length=30)
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    guests: Optional[int] = Field(None, ge=1)
    total_amount: Optional[Decimal] = Field(None, ge=0)
    status: Optional[str] = Field(None, min_length=1, max_length=50)

    @field_validator("check_in", "check_out")
    @classmethod
    def normalize_dates(cls, value):
        return to_naive_utc(value)


class BookingResponse(BaseModel):
    id: int
    hotel_id: int
    room_id: int
    guest_name: str
    guest_email: str
    guest_phone: Optional[str] = None
    check_in: datetime
    check_out: datetime
    guests: int
    total_amount: Decimal
    status: str
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


# ============== RBAC Schemas ==============

class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    hotel_id: Optional[int] = None
    description: str = Field(default="", max_length=255)
    permission_ids: List[int] = []


class RoleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=255)


class PermissionCreate(BaseModel):
    action: str = Field(..., min_length=1, max_length=50)
    resource: str = Field(..., min_length=1, max_length=50)
    name: Optional[str] = Field(None, max_length=100)
    description: str = Field(default="", max_length=255)


class PermissionUpdate(BaseModel):
    action: Optional[str] = Field(None, min_length=1, max_length=50)
    resource: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=255)


class PermissionResponse(BaseModel):
    id: int
    name: str
    action: str
    resource: str
    description: Optional[str] = ""
    model_config = ConfigDict(from_attributes=True)


class RoleResponse(BaseModel):
    id: int
    name: str
    hotel_id: Optional[int] = None
    description: Optional[str] = ""
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class RoleDetailResponse(RoleResponse):
    permissions: List[PermissionResponse] = []


class AuthorizeResponse(BaseModel):
    action: str
    resource: str
    hotel_id: Optional[int] = None
    allowed: bool


# ============== Report Schemas ==============

class HotelRevenue(BaseModel):
    hotel_id: int
    hotel_name: str
    total_bookings: int
    total_guests: int
    total_revenue: Decimal


class MonthlyRevenue(BaseModel):
    month: str
    bookings: int
    revenue: Decimal


class Occupancy(BaseModel):
    hotel_id: int
    total_rooms: int
    occupied_rooms: int
    occupancy_rate: float
