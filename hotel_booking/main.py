"""
Hotel Booking API - application entry point
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hotel_booking import __version__
from hotel_booking.config import settings
from hotel_booking.database import SessionLocal, init_db
from hotel_booking.exceptions import HotelBookingError
from hotel_booking.logging_config import configure_logging
from hotel_booking.routers import auth, bookings, hotels, permissions, reports, roles, rooms, users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and seed the RBAC catalogue on startup"""
    configure_logging()
    init_db()

    if settings.SEED_ON_STARTUP:
        from hotel_booking.services.rbac_seed import seed_rbac_data
        seed_db = SessionLocal()
        try:
            seed_rbac_data(seed_db)
        finally:
            seed_db.close()

    logger.info(f"{settings.APP_NAME} {__version__} started")
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Multi-tenant hotel booking API with hotel-scoped RBAC",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(HotelBookingError)
async def hotel_booking_error_handler(request: Request, exc: HotelBookingError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.error_code},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error": "internal_error"},
    )


for module in (auth, users, hotels, rooms, bookings, roles, permissions, reports):
    app.include_router(module.router, prefix="/api")


@app.get("/")
def root():
    return {"name": settings.APP_NAME, "version": __version__}


@app.get("/health")
def health_check():
    return {"status": "healthy"}
