"""
Database configuration - SQLAlchemy persistence layer
Foreign keys carry the cascade rules, so SQLite connections enable them explicitly
"""
import logging
import sqlite3

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

from hotel_booking.config import settings

logger = logging.getLogger(__name__)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """ON DELETE CASCADE / SET NULL are ignored by SQLite unless this pragma is on"""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args(settings.DATABASE_URL),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependency injection: one session per request"""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind: Engine = None) -> None:
    """Create all tables"""
    from hotel_booking import models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database schema ready")
