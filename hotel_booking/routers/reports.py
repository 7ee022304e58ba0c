"""
Report routes - revenue and occupancy over confirmed bookings
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends

from hotel_booking.dependencies import get_report_service
from hotel_booking.models import User
from hotel_booking.schemas import HotelRevenue, MonthlyRevenue, Occupancy, to_naive_utc
from hotel_booking.security.auth import get_current_user
from hotel_booking.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/revenue", response_model=List[HotelRevenue])
def revenue_by_hotel(
    hotel_id: Optional[int] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    """Per-hotel totals; omit hotel_id for every hotel (global grant required)"""
    return service.revenue_by_hotel(current_user, hotel_id, to_naive_utc(start), to_naive_utc(end))


@router.get("/revenue/monthly", response_model=List[MonthlyRevenue])
def monthly_revenue(
    hotel_id: int,
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    return service.monthly_revenue(current_user, hotel_id)


@router.get("/occupancy", response_model=Occupancy)
def occupancy(
    hotel_id: int,
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    """Share of the hotel's rooms with a confirmed guest in house right now"""
    return service.occupancy(current_user, hotel_id)
