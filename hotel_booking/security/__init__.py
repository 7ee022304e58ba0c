"""
Authentication and authorization
"""
from hotel_booking.security.authorization import AuthorizationEvaluator

__all__ = ["AuthorizationEvaluator"]
