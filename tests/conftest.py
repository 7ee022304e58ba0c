"""
Pytest configuration and shared fixtures
"""
import os

# the app lifespan runs against settings.DATABASE_URL; keep it off disk
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SEED_ON_STARTUP", "false")

from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hotel_booking.database import Base, get_db
from hotel_booking.dependencies import (
    get_booking_service, get_hotel_service, get_permission_service, get_report_service,
    get_role_service, get_room_service, get_user_role_service, get_user_service,
)
from hotel_booking.main import app
from hotel_booking.models import (
    Booking, Hotel, Permission, Role, RolePermission, Room, User, UserRole,
)
from hotel_booking.repositories import Repositories
from hotel_booking.security.auth import create_access_token, get_password_hash
from hotel_booking.security.authorization import AuthorizationEvaluator
from hotel_booking.services.rbac_seed import seed_rbac_data

PASSWORD = "secret123"


@pytest.fixture(scope="function")
def db_engine():
    """In-memory database, one per test"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(db_session):
    def override_get_db():
        try:
            yield db_session
        except Exception:
            db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def seeded(db_session):
    """Default permission catalogue plus the superadmin and admin roles"""
    return seed_rbac_data(db_session)


# ============== Repositories / services ==============

@pytest.fixture
def repos(db_session):
    return Repositories.from_session(db_session)


@pytest.fixture
def evaluator(repos):
    return AuthorizationEvaluator.from_repositories(repos)


@pytest.fixture
def hotel_service(repos, evaluator):
    return get_hotel_service(repos, evaluator)


@pytest.fixture
def room_service(repos, evaluator):
    return get_room_service(repos, evaluator)


@pytest.fixture
def booking_service(repos, evaluator):
    return get_booking_service(repos, evaluator)


@pytest.fixture
def user_service(repos, evaluator):
    return get_user_service(repos, evaluator)


@pytest.fixture
def role_service(repos, evaluator):
    return get_role_service(repos, evaluator)


@pytest.fixture
def permission_service(repos, evaluator):
    return get_permission_service(repos, evaluator)


@pytest.fixture
def user_role_service(repos, evaluator):
    return get_user_role_service(repos, evaluator)


@pytest.fixture
def report_service(repos, evaluator):
    return get_report_service(repos, evaluator)


# ============== Entity factories ==============

@pytest.fixture
def make_user(db_session):
    def _make(email: str, name: str = "Test User", role: Role = None, status: str = "active") -> User:
        user = User(
            name=name,
            email=email,
            password_hash=get_password_hash(PASSWORD),
            role_id=role.id if role else None,
            status=status,
            must_reset_password=False,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make


@pytest.fixture
def make_hotel(db_session):
    def _make(admin: User, name: str = "Seaside Inn") -> Hotel:
        hotel = Hotel(name=name, admin_id=admin.id, city="Lisbon", star_rating=4)
        db_session.add(hotel)
        db_session.commit()
        db_session.refresh(hotel)
        return hotel
    return _make


@pytest.fixture
def make_room(db_session):
    def _make(hotel: Hotel, room_number: str = "101", price: str = "120.00") -> Room:
        room = Room(hotel_id=hotel.id, room_number=room_number, type="double",
                    price=Decimal(price), capacity=2)
        db_session.add(room)
        db_session.commit()
        db_session.refresh(room)
        return room
    return _make


@pytest.fixture
def make_booking(db_session):
    def _make(room: Room, status: str = "confirmed", amount: str = "300.00",
              check_in: datetime = datetime(2024, 3, 1, 14), check_out: datetime = datetime(2024, 3, 4, 11),
              guests: int = 2) -> Booking:
        booking = Booking(
            hotel_id=room.hotel_id, room_id=room.id,
            guest_name="Ana Guest", guest_email="ana@example.com",
            check_in=check_in, check_out=check_out,
            guests=guests, total_amount=Decimal(amount), status=status,
        )
        db_session.add(booking)
        db_session.commit()
        db_session.refresh(booking)
        return booking
    return _make


@pytest.fixture
def make_role(db_session):
    def _make(name: str, hotel: Hotel = None) -> Role:
        role = Role(name=name, hotel_id=hotel.id if hotel else None)
        db_session.add(role)
        db_session.commit()
        db_session.refresh(role)
        return role
    return _make


@pytest.fixture
def grant(db_session, seeded):
    """Grant a seeded (action, resource) permission to a role"""
    def _grant(role: Role, action: str, resource: str) -> Permission:
        permission = db_session.query(Permission).filter(
            Permission.action == action, Permission.resource == resource,
        ).one()
        db_session.add(RolePermission(role_id=role.id, permission_id=permission.id))
        db_session.commit()
        return permission
    return _grant


@pytest.fixture
def bind(db_session):
    """Bind a user to a role within a hotel"""
    def _bind(user: User, role: Role, hotel: Hotel) -> UserRole:
        binding = UserRole(user_id=user.id, role_id=role.id, hotel_id=hotel.id)
        db_session.add(binding)
        db_session.commit()
        return binding
    return _bind


# ============== Users and tokens ==============

@pytest.fixture
def superadmin_role(db_session, seeded):
    return db_session.query(Role).filter(Role.name == "superadmin", Role.hotel_id.is_(None)).one()


@pytest.fixture
def admin_role(db_session, seeded):
    return db_session.query(Role).filter(Role.name == "admin", Role.hotel_id.is_(None)).one()


@pytest.fixture
def superadmin(make_user, superadmin_role):
    return make_user("root@example.com", name="Root", role=superadmin_role)


@pytest.fixture
def nobody(make_user, seeded):
    """Authenticated user holding no role at all"""
    return make_user("nobody@example.com", name="Nobody")


@pytest.fixture
def hotel(make_hotel, superadmin):
    return make_hotel(superadmin, name="Hotel Five")


@pytest.fixture
def other_hotel(make_hotel, superadmin):
    return make_hotel(superadmin, name="Hotel Six")


def auth_headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}


@pytest.fixture
def superadmin_headers(superadmin):
    return auth_headers_for(superadmin)


@pytest.fixture
def nobody_headers(nobody):
    return auth_headers_for(nobody)


@pytest.fixture
def headers_for():
    return auth_headers_for
