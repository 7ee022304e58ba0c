"""
FastAPI dependency wiring

Each request gets repositories bound to its session, one evaluator built
from them, and services built from both.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from hotel_booking.database import get_db
from hotel_booking.repositories import Repositories
from hotel_booking.security.authorization import AuthorizationEvaluator
from hotel_booking.services.booking_service import BookingService
from hotel_booking.services.hotel_service import HotelService
from hotel_booking.services.rbac_service import RoleService, PermissionService, UserRoleService
from hotel_booking.services.report_service import ReportService
from hotel_booking.services.room_service import RoomService
from hotel_booking.services.user_service import UserService


def get_repositories(db: Session = Depends(get_db)) -> Repositories:
    return Repositories.from_session(db)


def get_evaluator(repos: Repositories = Depends(get_repositories)) -> AuthorizationEvaluator:
    return AuthorizationEvaluator.from_repositories(repos)


def get_hotel_service(repos: Repositories = Depends(get_repositories),
                      evaluator: AuthorizationEvaluator = Depends(get_evaluator)) -> HotelService:
    return HotelService(repos.hotels, repos.users, repos.user_roles, evaluator)


def get_room_service(repos: Repositories = Depends(get_repositories),
                     evaluator: AuthorizationEvaluator = Depends(get_evaluator)) -> RoomService:
    return RoomService(repos.rooms, repos.hotels, evaluator)


def get_booking_service(repos: Repositories = Depends(get_repositories),
                        evaluator: AuthorizationEvaluator = Depends(get_evaluator)) -> BookingService:
    return BookingService(repos.bookings, repos.rooms, repos.hotels, evaluator)


def get_user_service(repos: Repositories = Depends(get_repositories),
                     evaluator: AuthorizationEvaluator = Depends(get_evaluator)) -> UserService:
    return UserService(repos.users, repos.hotels, evaluator)


def get_role_service(repos: Repositories = Depends(get_repositories),
                     evaluator: AuthorizationEvaluator = Depends(get_evaluator)) -> RoleService:
    return RoleService(repos.roles, repos.permissions, repos.role_permissions, repos.hotels, evaluator)


def get_permission_service(repos: Repositories = Depends(get_repositories),
                           evaluator: AuthorizationEvaluator = Depends(get_evaluator)) -> PermissionService:
    return PermissionService(repos.permissions, evaluator)


def get_user_role_service(repos: Repositories = Depends(get_repositories),
                          evaluator: AuthorizationEvaluator = Depends(get_evaluator)) -> UserRoleService:
    return UserRoleService(repos.user_roles, repos.users, repos.roles, repos.hotels, evaluator)


def get_report_service(repos: Repositories = Depends(get_repositories),
                       evaluator: AuthorizationEvaluator = Depends(get_evaluator)) -> ReportService:
    return ReportService(repos.db, repos.hotels, evaluator)
