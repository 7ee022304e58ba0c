"""
Hotel routes
"""
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hotel_booking.database import get_db
from hotel_booking.dependencies import get_booking_service, get_hotel_service, get_user_service
from hotel_booking.models import User
from hotel_booking.schemas import (
    BookingResponse, HotelBase, HotelCreate, HotelResponse, HotelUpdate, RoomResponse,
    UserResponse,
)
from hotel_booking.security.auth import get_current_user
from hotel_booking.services.booking_service import BookingService
from hotel_booking.services.hotel_service import HotelService
from hotel_booking.services.user_service import UserService

router = APIRouter(prefix="/hotels", tags=["Hotels"])


@router.get("", response_model=List[HotelResponse])
def list_hotels(
    current_user: User = Depends(get_current_user),
    service: HotelService = Depends(get_hotel_service),
):
    return [HotelResponse.model_validate(h) for h in service.list_hotels(current_user)]


@router.post("", response_model=HotelResponse, status_code=201)
def create_hotel(
    data: HotelCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: HotelService = Depends(get_hotel_service),
):
    hotel = service.create_hotel(current_user, data)
    db.commit()
    return HotelResponse.model_validate(hotel)


@router.get("/{hotel_id}", response_model=HotelResponse)
def get_hotel(
    hotel_id: int,
    current_user: User = Depends(get_current_user),
    service: HotelService = Depends(get_hotel_service),
):
    return HotelResponse.model_validate(service.get_hotel(current_user, hotel_id))


@router.put("/{hotel_id}", response_model=HotelResponse)
def replace_hotel(
    hotel_id: int,
    data: HotelBase,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: HotelService = Depends(get_hotel_service),
):
    hotel = service.update_hotel(current_user, hotel_id, data, partial=False)
    db.commit()
    return HotelResponse.model_validate(hotel)


@router.patch("/{hotel_id}", response_model=HotelResponse)
def update_hotel(
    hotel_id: int,
    data: HotelUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: HotelService = Depends(get_hotel_service),
):
    hotel = service.update_hotel(current_user, hotel_id, data, partial=True)
    db.commit()
    return HotelResponse.model_validate(hotel)


@router.delete("/{hotel_id}", status_code=204)
def delete_hotel(
    hotel_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: HotelService = Depends(get_hotel_service),
):
    service.delete_hotel(current_user, hotel_id)
    db.commit()


@router.get("/{hotel_id}/rooms", response_model=List[RoomResponse])
def list_hotel_rooms(
    hotel_id: int,
    current_user: User = Depends(get_current_user),
    service: HotelService = Depends(get_hotel_service),
):
    return [RoomResponse.model_validate(r) for r in service.list_rooms(current_user, hotel_id)]


@router.get("/{hotel_id}/bookings", response_model=List[BookingResponse])
def list_hotel_bookings(
    hotel_id: int,
    status: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    bookings = service.list_bookings(current_user, hotel_id, status)
    return [BookingResponse.model_validate(b) for b in bookings]


@router.get("/{hotel_id}/users", response_model=List[UserResponse])
def list_hotel_users(
    hotel_id: int,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    users = service.list_hotel_users(current_user, hotel_id)
    return [UserResponse.model_validate(u) for u in users]
