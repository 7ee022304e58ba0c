"""
User routes - own profile, user administration, role bindings
"""
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hotel_booking.database import get_db
from hotel_booking.dependencies import get_user_role_service, get_user_service
from hotel_booking.models import User
from hotel_booking.schemas import (
    GlobalRoleUpdate, ProfileUpdate, UserCreate, UserResponse,
    UserRoleAssign, UserRoleResponse, UserUpdate,
)
from hotel_booking.security.auth import get_current_user
from hotel_booking.services.rbac_service import UserRoleService
from hotel_booking.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


# ============== Profile ==============

@router.get("/profile", response_model=UserResponse)
def get_profile(
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return UserResponse.model_validate(service.get_profile(current_user))


@router.put("/profile", response_model=UserResponse)
def update_profile(
    data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    user = service.update_profile(current_user, data)
    db.commit()
    return UserResponse.model_validate(user)


# ============== Administration ==============

@router.get("", response_model=List[UserResponse])
def list_users(
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return [UserResponse.model_validate(u) for u in service.list_users(current_user)]


@router.post("", response_model=UserResponse, status_code=201)
def create_user(
    data: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    user = service.create_user(current_user, data)
    db.commit()
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return UserResponse.model_validate(service.get_user(current_user, user_id))


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    user = service.update_user(current_user, user_id, data)
    db.commit()
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=204)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    service.delete_user(current_user, user_id)
    db.commit()


# ============== Roles ==============

@router.put("/{user_id}/global-role", response_model=UserResponse)
def set_global_role(
    user_id: int,
    data: GlobalRoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: UserRoleService = Depends(get_user_role_service),
):
    user = service.set_global_role(current_user, user_id, data.role_id)
    db.commit()
    return UserResponse.model_validate(user)


@router.get("/{user_id}/roles", response_model=List[UserRoleResponse])
def list_user_roles(
    user_id: int,
    hotel_id: Optional[int] = None,
    current_user: User = Depends(get_current_user),
    service: UserRoleService = Depends(get_user_role_service),
):
    bindings = service.list_user_roles(current_user, user_id, hotel_id)
    return [UserRoleResponse.model_validate(b) for b in bindings]


@router.post("/{user_id}/roles", response_model=UserRoleResponse, status_code=201)
def assign_user_role(
    user_id: int,
    data: UserRoleAssign,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: UserRoleService = Depends(get_user_role_service),
):
    binding = service.assign_user_role(current_user, user_id, data.role_id, data.hotel_id)
    db.commit()
    return UserRoleResponse.model_validate(binding)


@router.delete("/{user_id}/roles", status_code=204)
def remove_user_role(
    user_id: int,
    role_id: int,
    hotel_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: UserRoleService = Depends(get_user_role_service),
):
    service.remove_user_role(current_user, user_id, role_id, hotel_id)
    db.commit()
