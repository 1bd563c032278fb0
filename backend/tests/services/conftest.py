"""
Service fixtures - every service shares the test session, a frozen clock
and an event list instead of the global bus
"""
import pytest
from datetime import datetime

from hotelpms.models.ontology import BookingSource
from hotelpms.models.schemas import BookingCreate
from hotelpms.services import (
    BillingService, BookingService, EmployeeService, GuestService, PosService, RoomService,
)


@pytest.fixture
def operator(front_desk):
    return front_desk


@pytest.fixture
def room_service(db_session, published_events, clock):
    return RoomService(db_session, event_publisher=published_events.append, clock=clock)


@pytest.fixture
def guest_service(db_session, published_events, clock):
    return GuestService(db_session, event_publisher=published_events.append, clock=clock)


@pytest.fixture
def billing_service(db_session, published_events, clock):
    return BillingService(db_session, event_publisher=published_events.append, clock=clock)


@pytest.fixture
def booking_service(db_session, published_events, clock):
    return BookingService(db_session, event_publisher=published_events.append, clock=clock)


@pytest.fixture
def employee_service(db_session):
    return EmployeeService(db_session)


@pytest.fixture
def pos_service(db_session, published_events, clock):
    return PosService(db_session, event_publisher=published_events.append, clock=clock)


@pytest.fixture
def booking_data(sample_room, sample_guest):
    """Two nights from today 14:00 to the day after tomorrow 11:00"""
    return BookingCreate(
        guest_id=sample_guest.id,
        room_id=sample_room.id,
        check_in=datetime(2024, 1, 1, 14, 0),
        check_out=datetime(2024, 1, 3, 11, 0),
        source=BookingSource.WALK_IN,
    )


@pytest.fixture
def confirmed_booking(booking_service, booking_data, operator, published_events):
    booking = booking_service.create_booking(booking_data, operator.id)
    published_events.clear()
    return booking
