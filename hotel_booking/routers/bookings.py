"""
Booking routes - listing lives under /hotels/{hotel_id}/bookings
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hotel_booking.database import get_db
from hotel_booking.dependencies import get_booking_service
from hotel_booking.models import User
from hotel_booking.schemas import BookingCreate, BookingReplace, BookingResponse, BookingUpdate
from hotel_booking.security.auth import get_current_user
from hotel_booking.services.booking_service import BookingService

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("", response_model=BookingResponse, status_code=201)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.create_booking(current_user, data)
    db.commit()
    return BookingResponse.model_validate(booking)


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return BookingResponse.model_validate(service.get_booking(current_user, booking_id))


@router.put("/{booking_id}", response_model=BookingResponse)
def replace_booking(
    booking_id: int,
    data: BookingReplace,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.update_booking(current_user, booking_id, data)
    db.commit()
    return BookingResponse.model_validate(booking)


@router.patch("/{booking_id}", response_model=BookingResponse)
def update_booking(
    booking_id: int,
    data: BookingUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.patch_booking(current_user, booking_id, data)
    db.commit()
    return BookingResponse.model_validate(booking)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.cancel_booking(current_user, booking_id)
    db.commit()
    return BookingResponse.model_validate(booking)


@router.delete("/{booking_id}", status_code=204)
def delete_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    service.delete_booking(current_user, booking_id)
    db.commit()
