"""
Application settings
Read from environment variables and an optional .env file
"""
from typing import List, Optional
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    APP_NAME: str = "Hotel Booking SaaS API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./hotel_booking.db"

    # JWT
    SECRET_KEY: str = "hotel-booking-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # RBAC
    SUPERADMIN_ROLE_NAME: str = "superadmin"
    SEED_ON_STARTUP: bool = True
    # first superadmin account, created by the seed when both are set
    SUPERADMIN_EMAIL: Optional[str] = None
    SUPERADMIN_PASSWORD: Optional[str] = None

    CORS_ORIGINS: List[str] = ["*"]

    model_config = ConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


settings = Settings()
