"""
CRUD service tests - hotels, rooms, bookings, users, reports
"""
from datetime import datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError as SchemaValidationError

from hotel_booking.exceptions import (
    AuthenticationError, ConflictError, Forbidden, NotFound, ValidationError,
)
from hotel_booking.models import Booking, Room
from hotel_booking.schemas import (
    BookingCreate, BookingUpdate, HotelBase, HotelCreate, HotelUpdate, ProfileUpdate,
    RegisterRequest, RoomCreate, RoomReplace, RoomUpdate, UserCreate, UserUpdate,
)
from hotel_booking.security.auth import verify_password

PASSWORD = "secret123"  # password make_user gives every user


@pytest.fixture
def staff(make_user, make_role, grant, bind):
    """User bound to a fresh hotel role carrying the given (action, resource) grants"""
    def _staff(hotel, *pairs, email="staff@example.com", user=None):
        role = make_role(f"staff_{email}", hotel)
        for action, resource in pairs:
            grant(role, action, resource)
        user = user or make_user(email)
        bind(user, role, hotel)
        return user
    return _staff


def booking_payload(room, **overrides):
    values = dict(
        hotel_id=room.hotel_id,
        room_id=room.id,
        guest_name="Ana Guest",
        guest_email="ana@example.com",
        check_in=datetime(2024, 5, 1, 14),
        check_out=datetime(2024, 5, 3, 11),
        guests=2,
        total_amount=Decimal("240.00"),
    )
    values.update(overrides)
    return values


# ============== Hotels ==============

class TestHotelService:

    def test_create_defaults_admin_to_actor(self, hotel_service, make_user, admin_role):
        owner = make_user("owner@example.com", role=admin_role)
        hotel = hotel_service.create_hotel(owner, HotelCreate(name="Harbour View", star_rating=3))
        assert hotel.admin_id == owner.id
        assert hotel.star_rating == 3

    def test_create_for_another_admin(self, hotel_service, superadmin, make_user):
        manager = make_user("manager@example.com")
        hotel = hotel_service.create_hotel(superadmin, HotelCreate(name="Harbour View", admin_id=manager.id))
        assert hotel.admin_id == manager.id

    def test_create_with_unknown_admin(self, hotel_service, superadmin):
        with pytest.raises(NotFound):
            hotel_service.create_hotel(superadmin, HotelCreate(name="Harbour View", admin_id=9999))

    def test_create_needs_grant(self, hotel_service, nobody):
        with pytest.raises(Forbidden):
            hotel_service.create_hotel(nobody, HotelCreate(name="Harbour View"))

    def test_star_rating_range(self):
        with pytest.raises(SchemaValidationError):
            HotelCreate(name="Harbour View", star_rating=6)

    def test_list_hotels_for_superadmin(self, hotel_service, superadmin, hotel, other_hotel):
        assert [h.id for h in hotel_service.list_hotels(superadmin)] == [hotel.id, other_hotel.id]

    def test_list_hotels_for_hotel_staff(self, hotel_service, staff, hotel, other_hotel):
        reader = staff(hotel, ("read", "hotel"))
        assert [h.id for h in hotel_service.list_hotels(reader)] == [hotel.id]

    def test_list_hotels_without_read_grant(self, hotel_service, staff, nobody, hotel):
        clerk = staff(hotel, ("create", "booking"))
        assert hotel_service.list_hotels(clerk) == []
        assert hotel_service.list_hotels(nobody) == []

    def test_get_hotel_other_tenant(self, hotel_service, staff, hotel, other_hotel):
        reader = staff(hotel, ("read", "hotel"))
        assert hotel_service.get_hotel(reader, hotel.id).id == hotel.id
        with pytest.raises(Forbidden):
            hotel_service.get_hotel(reader, other_hotel.id)

    def test_get_missing_hotel(self, hotel_service, superadmin):
        with pytest.raises(NotFound):
            hotel_service.get_hotel(superadmin, 9999)

    def test_patch_keeps_other_fields(self, hotel_service, staff, hotel):
        editor = staff(hotel, ("update", "hotel"))
        updated = hotel_service.update_hotel(editor, hotel.id, HotelUpdate(name="Hotel Five Deluxe"))
        assert updated.name == "Hotel Five Deluxe"
        assert updated.city == "Lisbon"

    def test_patch_null_name_is_ignored(self, hotel_service, superadmin, hotel):
        updated = hotel_service.update_hotel(superadmin, hotel.id, HotelUpdate(name=None, city="Porto"))
        assert updated.name == "Hotel Five"
        assert updated.city == "Porto"

    def test_patch_null_clears_optional_field(self, hotel_service, superadmin, hotel):
        updated = hotel_service.update_hotel(superadmin, hotel.id, HotelUpdate(star_rating=None))
        assert updated.star_rating is None

    def test_put_replaces_all_fields(self, hotel_service, superadmin, hotel):
        updated = hotel_service.update_hotel(superadmin, hotel.id, HotelBase(name="Renamed"), partial=False)
        assert updated.name == "Renamed"
        assert updated.city is None
        assert updated.star_rating is None

    def test_delete_orphans_rooms(self, db_session, hotel_service, superadmin, hotel, make_room, make_booking):
        room = make_room(hotel)
        booking = make_booking(room)
        room_id, booking_id = room.id, booking.id

        hotel_service.delete_hotel(superadmin, hotel.id)
        db_session.commit()

        assert db_session.get(Room, room_id).hotel_id is None
        assert db_session.get(Booking, booking_id) is None

    def test_delete_needs_grant_in_hotel(self, hotel_service, staff, hotel):
        editor = staff(hotel, ("update", "hotel"))
        with pytest.raises(Forbidden):
            hotel_service.delete_hotel(editor, hotel.id)

    def test_list_rooms(self, hotel_service, staff, hotel, make_room):
        make_room(hotel, "102")
        make_room(hotel, "101")
        reader = staff(hotel, ("read", "room"))
        assert [r.room_number for r in hotel_service.list_rooms(reader, hotel.id)] == ["101", "102"]


# ============== Rooms ==============

class TestRoomService:

    def test_create_room(self, room_service, staff, hotel):
        creator = staff(hotel, ("create", "room"))
        room = room_service.create_room(
            creator, RoomCreate(hotel_id=hotel.id, room_number="201", price=Decimal("99.50"), capacity=2),
        )
        assert room.hotel_id == hotel.id
        assert room.is_available is True

    def test_duplicate_room_number(self, room_service, superadmin, hotel, make_room):
        make_room(hotel, "201")
        with pytest.raises(ConflictError):
            room_service.create_room(superadmin, RoomCreate(hotel_id=hotel.id, room_number="201", price=10))

    def test_same_number_in_other_hotel(self, room_service, superadmin, hotel, other_hotel, make_room):
        make_room(hotel, "201")
        room = room_service.create_room(superadmin, RoomCreate(hotel_id=other_hotel.id, room_number="201", price=10))
        assert room.hotel_id == other_hotel.id

    def test_create_in_other_hotel_forbidden(self, room_service, staff, hotel, other_hotel):
        creator = staff(hotel, ("create", "room"))
        with pytest.raises(Forbidden):
            room_service.create_room(creator, RoomCreate(hotel_id=other_hotel.id, room_number="1", price=10))

    def test_negative_price_rejected(self):
        with pytest.raises(SchemaValidationError):
            RoomCreate(hotel_id=1, room_number="1", price=Decimal("-1"))

    def test_put_replaces_fields(self, room_service, superadmin, hotel, make_room):
        room = make_room(hotel)
        updated = room_service.update_room(
            superadmin, room.id, RoomReplace(hotel_id=hotel.id, room_number="101", price=Decimal("150")),
        )
        assert updated.price == Decimal("150")
        assert updated.type is None
        assert updated.capacity is None

    def test_patch_ignores_null_for_required_fields(self, room_service, superadmin, hotel, make_room):
        room = make_room(hotel)
        updated = room_service.patch_room(superadmin, room.id, RoomUpdate(price=None, description=None))
        assert updated.price == Decimal("120.00")
        assert updated.description is None

    def test_set_availability(self, room_service, staff, hotel, make_room):
        room = make_room(hotel)
        editor = staff(hotel, ("update", "room"))
        assert room_service.set_availability(editor, room.id, False).is_available is False

    def test_move_needs_grant_in_both_hotels(self, room_service, staff, make_user, hotel, other_hotel, make_room):
        room = make_room(hotel)
        editor = staff(hotel, ("update", "room"))
        with pytest.raises(Forbidden):
            room_service.patch_room(editor, room.id, RoomUpdate(hotel_id=other_hotel.id))

        staff(other_hotel, ("update", "room"), email="editor2@example.com", user=editor)
        moved = room_service.patch_room(editor, room.id, RoomUpdate(hotel_id=other_hotel.id))
        assert moved.hotel_id == other_hotel.id

    def test_move_onto_taken_number(self, room_service, superadmin, hotel, other_hotel, make_room):
        room = make_room(hotel, "101")
        make_room(other_hotel, "101")
        with pytest.raises(ConflictError):
            room_service.patch_room(superadmin, room.id, RoomUpdate(hotel_id=other_hotel.id))

    def test_orphaned_room_needs_global_grant(self, db_session, room_service, hotel_service, staff,
                                              superadmin, hotel, make_room):
        room = make_room(hotel)
        reader = staff(hotel, ("read", "room"))
        hotel_service.delete_hotel(superadmin, hotel.id)
        db_session.commit()

        with pytest.raises(Forbidden):
            room_service.get_room(reader, room.id)
        assert room_service.get_room(superadmin, room.id).hotel_id is None

    def test_delete_room_deletes_bookings(self, db_session, room_service, superadmin, hotel, make_room, make_booking):
        room = make_room(hotel)
        booking_id = make_booking(room).id
        room_service.delete_room(superadmin, room.id)
        db_session.commit()
        assert db_session.get(Booking, booking_id) is None


# ============== Bookings ==============

class TestBookingService:

    def test_create_booking(self, booking_service, staff, hotel, make_room):
        room = make_room(hotel)
        clerk = staff(hotel, ("create", "booking"))
        booking = booking_service.create_booking(clerk, BookingCreate(**booking_payload(room)))
        assert booking.status == "pending"
        assert booking.guests == 2

    def test_room_from_other_hotel(self, booking_service, superadmin, hotel, other_hotel, make_room):
        room = make_room(other_hotel)
        with pytest.raises(ValidationError):
            booking_service.create_booking(superadmin, BookingCreate(**booking_payload(room, hotel_id=hotel.id)))

    def test_missing_room(self, booking_service, superadmin, hotel, make_room):
        room = make_room(hotel)
        with pytest.raises(NotFound):
            booking_service.create_booking(superadmin, BookingCreate(**booking_payload(room, room_id=9999)))

    def test_schema_rejects_backwards_stay(self, hotel, make_room):
        room = make_room(hotel)
        with pytest.raises(SchemaValidationError):
            BookingCreate(**booking_payload(room, check_out=datetime(2024, 4, 30)))

    def test_schema_rejects_zero_guests(self, hotel, make_room):
        room = make_room(hotel)
        with pytest.raises(SchemaValidationError):
            BookingCreate(**booking_payload(room, guests=0))

    def test_patch_backwards_stay(self, booking_service, superadmin, hotel, make_room, make_booking):
        booking = make_booking(make_room(hotel))
        with pytest.raises(ValidationError):
            booking_service.patch_booking(superadmin, booking.id, BookingUpdate(check_out=datetime(2024, 2, 1)))

    def test_patch_status(self, booking_service, staff, hotel, make_room, make_booking):
        booking = make_booking(make_room(hotel), status="pending")
        editor = staff(hotel, ("update", "booking"))
        updated = booking_service.patch_booking(editor, booking.id, BookingUpdate(status="confirmed"))
        assert updated.status == "confirmed"

    def test_cancel(self, booking_service, staff, hotel, make_room, make_booking):
        booking = make_booking(make_room(hotel))
        editor = staff(hotel, ("update", "booking"))
        assert booking_service.cancel_booking(editor, booking.id).status == "cancelled"

    def test_list_with_status_filter(self, booking_service, staff, hotel, make_room, make_booking):
        room = make_room(hotel)
        make_booking(room, status="confirmed")
        make_booking(room, status="pending")
        reader = staff(hotel, ("read", "booking"))

        assert len(booking_service.list_bookings(reader, hotel.id)) == 2
        assert [b.status for b in booking_service.list_bookings(reader, hotel.id, "pending")] == ["pending"]

    def test_manager_scenario(self, booking_service, staff, hotel, other_hotel, make_room, make_booking):
        room = make_room(hotel)
        other_room = make_room(other_hotel)
        manager = staff(hotel, ("create", "booking"), email="manager@example.com")

        booking = booking_service.create_booking(manager, BookingCreate(**booking_payload(room)))
        with pytest.raises(Forbidden):
            booking_service.delete_booking(manager, booking.id)
        with pytest.raises(Forbidden):
            booking_service.create_booking(manager, BookingCreate(**booking_payload(other_room)))


# ============== Users ==============

class TestUserService:

    def test_register_has_no_role(self, user_service, evaluator, seeded, hotel):
        user = user_service.register(RegisterRequest(name="Guest", email="guest@example.com", password="pa55word"))
        assert user.role_id is None
        assert user.must_reset_password is False
        assert evaluator.authorize(user, hotel.id, "read", "hotel") is False

    def test_register_duplicate_email(self, user_service, nobody):
        with pytest.raises(ConflictError):
            user_service.register(RegisterRequest(name="Dup", email=nobody.email, password="pa55word"))

    def test_authenticate(self, user_service, nobody):
        assert user_service.authenticate(nobody.email, PASSWORD).id == nobody.id
        with pytest.raises(AuthenticationError):
            user_service.authenticate(nobody.email, "wrong-password")
        with pytest.raises(AuthenticationError):
            user_service.authenticate("missing@example.com", PASSWORD)

    def test_inactive_user_cannot_log_in(self, user_service, make_user):
        user = make_user("gone@example.com", status="inactive")
        with pytest.raises(AuthenticationError):
            user_service.authenticate(user.email, PASSWORD)

    def test_reset_password(self, user_service, nobody):
        nobody.must_reset_password = True
        user = user_service.reset_password(nobody, PASSWORD, "brand-new-pass")
        assert user.must_reset_password is False
        assert verify_password("brand-new-pass", user.password_hash)

    def test_reset_password_checks_current(self, user_service, nobody):
        with pytest.raises(AuthenticationError):
            user_service.reset_password(nobody, "not-it", "brand-new-pass")
        with pytest.raises(ValidationError):
            user_service.reset_password(nobody, PASSWORD, PASSWORD)

    def test_update_profile(self, user_service, nobody):
        user = user_service.update_profile(nobody, ProfileUpdate(name="Somebody", phone="555-0100"))
        assert (user.name, user.phone) == ("Somebody", "555-0100")
        with pytest.raises(ValidationError):
            user_service.update_profile(nobody, ProfileUpdate())

    def test_profile_null_phone_clears_it(self, user_service, nobody):
        user_service.update_profile(nobody, ProfileUpdate(phone="555-0100"))
        user = user_service.update_profile(nobody, ProfileUpdate(phone=None, name=None))
        assert user.phone is None
        assert user.name == "Nobody"

    def test_admin_can_clear_phone(self, user_service, superadmin, nobody):
        user_service.update_profile(nobody, ProfileUpdate(phone="555-0100"))
        user = user_service.update_user(superadmin, nobody.id, UserUpdate(phone=None))
        assert user.phone is None

    def test_update_profile_email_taken(self, user_service, nobody, superadmin):
        with pytest.raises(ConflictError):
            user_service.update_profile(nobody, ProfileUpdate(email=superadmin.email))

    def test_create_user_must_reset(self, user_service, superadmin):
        user = user_service.create_user(
            superadmin, UserCreate(name="Clerk", email="clerk@example.com", password="pa55word"),
        )
        assert user.must_reset_password is True

    def test_admin_password_change_forces_reset(self, user_service, superadmin, nobody):
        user = user_service.update_user(superadmin, nobody.id, UserUpdate(password="chosen-by-admin"))
        assert user.must_reset_password is True

    def test_list_users_needs_global_grant(self, user_service, staff, hotel, nobody):
        hotel_reader = staff(hotel, ("read", "user"))
        with pytest.raises(Forbidden):
            user_service.list_users(hotel_reader)

    def test_list_hotel_users(self, user_service, staff, superadmin, nobody, hotel, other_hotel):
        clerk = staff(hotel, ("create", "booking"), email="clerk@example.com")
        staff(other_hotel, ("create", "booking"), email="elsewhere@example.com")
        # two bindings in one hotel still list the user once
        staff(hotel, ("read", "room"), email="clerk2@example.com", user=clerk)

        assert [u.id for u in user_service.list_hotel_users(superadmin, hotel.id)] == [clerk.id]

    def test_list_hotel_users_needs_grant_in_that_hotel(self, user_service, staff, hotel, other_hotel):
        reader = staff(hotel, ("read", "user"))
        assert [u.id for u in user_service.list_hotel_users(reader, hotel.id)] == [reader.id]
        with pytest.raises(Forbidden):
            user_service.list_hotel_users(reader, other_hotel.id)
        with pytest.raises(NotFound):
            user_service.list_hotel_users(reader, 9999)

    def test_get_self_without_grant(self, user_service, nobody, superadmin):
        assert user_service.get_user(nobody, nobody.id).id == nobody.id
        with pytest.raises(Forbidden):
            user_service.get_user(nobody, superadmin.id)

    def test_only_superadmin_edits_superadmin(self, user_service, make_user, make_role, grant, superadmin):
        role = make_role("user_admin")
        grant(role, "update", "user")
        user_admin = make_user("useradmin@example.com", role=role)
        with pytest.raises(Forbidden):
            user_service.update_user(user_admin, superadmin.id, UserUpdate(name="Demoted"))

    def test_deactivate(self, user_service, superadmin, nobody):
        assert user_service.deactivate_user(superadmin, nobody.id).is_active is False

    def test_delete_self(self, user_service, superadmin):
        with pytest.raises(ValidationError):
            user_service.delete_user(superadmin, superadmin.id)

    def test_delete_hotel_admin(self, user_service, superadmin, make_user, make_hotel):
        owner = make_user("owner@example.com")
        make_hotel(owner)
        with pytest.raises(ConflictError):
            user_service.delete_user(superadmin, owner.id)

    def test_delete_user(self, db_session, user_service, superadmin, nobody):
        user_id = nobody.id
        user_service.delete_user(superadmin, user_id)
        db_session.commit()
        assert user_service.users.get(user_id) is None


# ============== Reports ==============

class TestReportService:

    @pytest.fixture
    def bookings(self, hotel, other_hotel, make_room, make_booking):
        room = make_room(hotel)
        make_booking(room, amount="300.00", guests=2, check_in=datetime(2024, 3, 1), check_out=datetime(2024, 3, 4))
        make_booking(room, amount="200.00", guests=1, check_in=datetime(2024, 4, 10), check_out=datetime(2024, 4, 12))
        make_booking(room, amount="999.00", status="pending")
        make_booking(make_room(other_hotel), amount="50.00", guests=3)

    def test_revenue_all_hotels(self, report_service, superadmin, hotel, other_hotel, bookings):
        rows = report_service.revenue_by_hotel(superadmin)
        assert [r["hotel_id"] for r in rows] == [hotel.id, other_hotel.id]
        first = rows[0]
        assert first["hotel_name"] == "Hotel Five"
        assert first["total_bookings"] == 2
        assert first["total_guests"] == 3
        assert first["total_revenue"] == Decimal("500")

    def test_revenue_date_window(self, report_service, superadmin, hotel, bookings):
        rows = report_service.revenue_by_hotel(
            superadmin, hotel.id, start=datetime(2024, 4, 1), end=datetime(2024, 5, 1),
        )
        assert len(rows) == 1
        assert rows[0]["total_revenue"] == Decimal("200")

    def test_hotel_reporter_sees_own_hotel_only(self, report_service, staff, hotel, other_hotel, bookings):
        reporter = staff(hotel, ("read", "report"))
        assert len(report_service.revenue_by_hotel(reporter, hotel.id)) == 1
        with pytest.raises(Forbidden):
            report_service.revenue_by_hotel(reporter)
        with pytest.raises(Forbidden):
            report_service.revenue_by_hotel(reporter, other_hotel.id)

    def test_monthly_revenue(self, report_service, superadmin, hotel, bookings):
        months = report_service.monthly_revenue(superadmin, hotel.id)
        assert [m["month"] for m in months] == ["2024-03", "2024-04"]
        assert [m["revenue"] for m in months] == [Decimal("300"), Decimal("200")]

    def test_occupancy(self, report_service, staff, hotel, make_room, make_booking):
        first = make_room(hotel, "101")
        second = make_room(hotel, "102")
        make_room(hotel, "103")
        make_room(hotel, "104")
        make_booking(first)
        # a second confirmed stay in the same room still counts the room once
        make_booking(first, check_in=datetime(2024, 3, 2), check_out=datetime(2024, 3, 3))
        make_booking(second, status="pending")
        reporter = staff(hotel, ("read", "report"))

        result = report_service.occupancy(reporter, hotel.id, at=datetime(2024, 3, 2, 12))
        assert result == {"hotel_id": hotel.id, "total_rooms": 4, "occupied_rooms": 1, "occupancy_rate": 25.0}

        after = report_service.occupancy(reporter, hotel.id, at=datetime(2024, 6, 1))
        assert after["occupied_rooms"] == 0
        assert after["occupancy_rate"] == 0.0

    def test_occupancy_without_rooms(self, report_service, superadmin, other_hotel):
        result = report_service.occupancy(superadmin, other_hotel.id)
        assert result["total_rooms"] == 0
        assert result["occupancy_rate"] == 0

    def test_occupancy_needs_grant_in_hotel(self, report_service, staff, hotel, other_hotel):
        reporter = staff(hotel, ("read", "report"))
        with pytest.raises(Forbidden):
            report_service.occupancy(reporter, other_hotel.id)
