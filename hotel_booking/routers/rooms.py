"""
Room routes - listing lives under /hotels/{hotel_id}/rooms
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hotel_booking.database import get_db
from hotel_booking.dependencies import get_room_service
from hotel_booking.models import User
from hotel_booking.schemas import RoomCreate, RoomReplace, RoomResponse, RoomUpdate
from hotel_booking.security.auth import get_current_user
from hotel_booking.services.room_service import RoomService

router = APIRouter(prefix="/rooms", tags=["Rooms"])


@router.post("", response_model=RoomResponse, status_code=201)
def create_room(
    data: RoomCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: RoomService = Depends(get_room_service),
):
    room = service.create_room(current_user, data)
    db.commit()
    return RoomResponse.model_validate(room)


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(
    room_id: int,
    current_user: User = Depends(get_current_user),
    service: RoomService = Depends(get_room_service),
):
    return RoomResponse.model_validate(service.get_room(current_user, room_id))


@router.put("/{room_id}", response_model=RoomResponse)
def replace_room(
    room_id: int,
    data: RoomReplace,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: RoomService = Depends(get_room_service),
):
    room = service.update_room(current_user, room_id, data)
    db.commit()
    return RoomResponse.model_validate(room)


@router.patch("/{room_id}", response_model=RoomResponse)
def update_room(
    room_id: int,
    data: RoomUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: RoomService = Depends(get_room_service),
):
    room = service.patch_room(current_user, room_id, data)
    db.commit()
    return RoomResponse.model_validate(room)


@router.delete("/{room_id}", status_code=204)
def delete_room(
    room_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: RoomService = Depends(get_room_service),
):
    service.delete_room(current_user, room_id)
    db.commit()
