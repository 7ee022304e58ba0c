"""
Authentication routes - register, login, password reset, current user
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hotel_booking.database import get_db
from hotel_booking.dependencies import get_evaluator, get_user_service
from hotel_booking.models import User
from hotel_booking.schemas import (
    AuthorizeResponse, LoginRequest, RegisterRequest, ResetPasswordRequest,
    TokenResponse, UserResponse,
)
from hotel_booking.security.auth import create_access_token, get_current_user
from hotel_booking.security.authorization import AuthorizationEvaluator
from hotel_booking.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Auth"])


def _token_response(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(user.id, user.email),
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=TokenResponse, status_code=201)
def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
    service: UserService = Depends(get_user_service),
):
    user = service.register(data)
    db.commit()
    return _token_response(user)


@router.post("/login", response_model=TokenResponse)
def login(
    data: LoginRequest,
    service: UserService = Depends(get_user_service),
):
    """Check must_reset_password on the returned user before letting them in"""
    user = service.authenticate(data.email, data.password)
    return _token_response(user)


@router.post("/reset-password", response_model=UserResponse)
def reset_password(
    data: ResetPasswordRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    user = service.reset_password(current_user, data.current_password, data.new_password)
    db.commit()
    return UserResponse.model_validate(user)


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return UserResponse.model_validate(current_user)


@router.get("/authorize", response_model=AuthorizeResponse)
def authorize(
    action: str = Query(..., min_length=1),
    resource: str = Query(..., min_length=1),
    hotel_id: Optional[int] = None,
    current_user: User = Depends(get_current_user),
    evaluator: AuthorizationEvaluator = Depends(get_evaluator),
):
    """The caller's own decision for (action, resource) in a hotel"""
    allowed = evaluator.authorize(current_user, hotel_id, action, resource)
    return AuthorizeResponse(action=action, resource=resource, hotel_id=hotel_id, allowed=allowed)
