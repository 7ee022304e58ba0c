"""
Hotel Booking SaaS API
Multi-tenant hotels, rooms and bookings guarded by hotel-scoped RBAC
"""
__version__ = "0.1.0"
