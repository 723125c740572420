"""Entity invariants that must hold at construction time."""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from londonpark.errors import SessionInvalid
from londonpark.models.booking import Booking, BookingState, SeatType
from londonpark.models.event import Event
from londonpark.models.session import Role, Session
from londonpark.models.user import User


class TestUser:
    def test_user_has_no_password_field(self):
        with pytest.raises(ValidationError):
            User(id=1, name="Alice", email="alice@example.com", password="secret")

    def test_user_id_must_be_positive(self):
        with pytest.raises(ValidationError):
            User(id=0, name="Nobody", email="n@example.com")


class TestEvent:
    def test_event_accepts_zero_price(self):
        assert Event(id=1, price=Decimal("0")).price == Decimal("0")

    def test_event_rejects_negative_price(self):
        with pytest.raises(ValidationError):
            Event(id=1, price=Decimal("-1"))

    def test_display_price(self):
        assert Event(id=1, price=Decimal("12.5")).display_price == "12.50"
        assert Event(id=1).display_price == "-"

    def test_event_is_frozen(self):
        event = Event(id=1, name="Gala")
        with pytest.raises(ValidationError):
            event.name = "Other"


class TestBooking:
    def test_defaults(self):
        booking = Booking(id=1, user_id=2, event_id=3, quantity=1)
        assert booking.seat_type is SeatType.without_table
        assert booking.state is BookingState.confirmed
        assert not booking.is_tentative

    def test_quantity_must_be_positive(self):
        with pytest.raises(ValidationError):
            Booking(id=1, quantity=0)

    def test_confirmed_booking_requires_id(self):
        with pytest.raises(ValidationError):
            Booking(user_id=2, event_id=3, quantity=1)

    def test_tentative_booking_requires_local_id(self):
        with pytest.raises(ValidationError):
            Booking(user_id=2, event_id=3, quantity=1, state=BookingState.tentative)

    def test_tentative_booking_without_server_id(self):
        booking = Booking(user_id=2, event_id=3, quantity=1, state=BookingState.tentative, local_id="abc")
        assert booking.is_tentative
        assert booking.id is None
        assert booking.signature == (2, 3, 1, SeatType.without_table)


class TestSession:
    def test_require_matching_role(self):
        Session(role=Role.admin, credential="t").require(Role.admin)

    def test_wrong_role_redirects_to_required_login(self):
        session = Session(role=Role.admin, credential="t")
        with pytest.raises(SessionInvalid) as exc_info:
            session.require(Role.user)
        assert exc_info.value.redirect_to == "/login"

    def test_expired_session(self):
        past = datetime.now(timezone.utc) - timedelta(minutes=1)
        session = Session(role=Role.admin, credential="t", expires_at=past)
        assert session.is_expired()
        with pytest.raises(SessionInvalid) as exc_info:
            session.require(Role.admin)
        assert exc_info.value.redirect_to == "/admin/login"

    def test_naive_expiry_rejected(self):
        with pytest.raises(ValidationError):
            Session(role=Role.user, credential="t", expires_at=datetime(2030, 1, 1))

    def test_empty_credential_rejected(self):
        with pytest.raises(ValidationError):
            Session(role=Role.user, credential="")

    def test_auth_headers(self):
        assert Session(role=Role.user, credential="abc").auth_headers() == {"Authorization": "Bearer abc"}
