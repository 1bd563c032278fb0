"""
Transient (session-less) rooms and bookings for engine tests
"""
import pytest
from datetime import datetime
from decimal import Decimal

from hotelpms.domain import booking as booking_engine
from hotelpms.models.ontology import (
    BedType, BookingSource, Currency, Guest, GuestTier, Room, RoomStatus, RoomType,
)

NOW = datetime(2024, 1, 1, 14, 0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def room():
    return Room(
        id=1,
        room_number="101",
        room_type=RoomType.STANDARD,
        floor=1,
        capacity_adults=2,
        capacity_children=0,
        max_occupancy=2,
        bed_type=BedType.DOUBLE,
        bed_count=1,
        base_rate=Decimal("1000.00"),
        tax_rate=Decimal("12"),
        currency=Currency.INR,
        status=RoomStatus.AVAILABLE,
        is_active=True,
        maintenance_required=False,
    )


@pytest.fixture
def booking(room, now):
    """Confirmed two-night booking arriving today: 2000 + 240 tax"""
    return booking_engine.open_booking(
        booking_number="BKTEST0001",
        guest_id=7,
        room=room,
        check_in=datetime(2024, 1, 1, 14, 0),
        check_out=datetime(2024, 1, 3, 11, 0),
        source=BookingSource.WALK_IN,
        actor_id=1,
        now=now,
    )


@pytest.fixture
def guest():
    return Guest(
        id=7,
        first_name="Asha",
        last_name="Rao",
        email="asha.rao@example.com",
        phone="+919800000001",
        loyalty_points=0,
        tier=GuestTier.BRONZE,
        total_bookings=0,
        total_revenue=Decimal("0"),
        average_stay_duration=Decimal("0"),
    )
