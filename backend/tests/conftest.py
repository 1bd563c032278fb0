"""
Pytest configuration and shared fixtures
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from hotelpms.database import Base, get_db
from hotelpms.engine.event_bus import event_bus
from hotelpms.models import ontology  # noqa: F401
from hotelpms.models.ontology import (
    BedType, Currency, Employee, EmployeeRole, Guest, GuestTier, Room, RoomStatus, RoomType,
)
from hotelpms.security.auth import create_access_token, get_password_hash
from hotelpms.main import app


class FrozenClock:
    """Injectable clock for services; call it to read the time"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(scope="function")
def db_engine():
    """In-memory database engine"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(db_session):
    """Test client bound to the test session"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    event_bus.clear_history()


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 1, 1, 14, 0))


@pytest.fixture
def published_events():
    """Collects events instead of publishing them on the global bus"""
    return []


# ============== Employees / auth ==============

def _employee(db, username: str, role: EmployeeRole, name: str) -> Employee:
    employee = Employee(
        username=username,
        password_hash=get_password_hash("123456"),
        name=name,
        role=role,
        is_active=True
    )
    db.add(employee)
    db.commit()
    db.refresh(employee)
    return employee


@pytest.fixture
def admin(db_session):
    return _employee(db_session, "admin", EmployeeRole.ADMIN, "Administrator")


@pytest.fixture
def manager(db_session):
    return _employee(db_session, "manager", EmployeeRole.MANAGER, "Duty Manager")


@pytest.fixture
def front_desk(db_session):
    return _employee(db_session, "front1", EmployeeRole.FRONT_DESK, "Front Desk")


@pytest.fixture
def housekeeper(db_session):
    return _employee(db_session, "housekeeper1", EmployeeRole.HOUSEKEEPING, "Housekeeping")


@pytest.fixture
def restaurant_staff(db_session):
    return _employee(db_session, "waiter1", EmployeeRole.RESTAURANT, "Restaurant")


def _headers(employee: Employee) -> dict:
    return {"Authorization": f"Bearer {create_access_token(employee.id, employee.role)}"}


@pytest.fixture
def admin_auth_headers(admin):
    return _headers(admin)


@pytest.fixture
def manager_auth_headers(manager):
    return _headers(manager)


@pytest.fixture
def front_desk_auth_headers(front_desk):
    return _headers(front_desk)


@pytest.fixture
def housekeeper_auth_headers(housekeeper):
    return _headers(housekeeper)


@pytest.fixture
def restaurant_auth_headers(restaurant_staff):
    return _headers(restaurant_staff)


# ============== Entities ==============

def _make_room(db, room_number: str = "101", **overrides) -> Room:
    values = dict(
        room_number=room_number,
        room_type=RoomType.STANDARD,
        floor=int(room_number[0]),
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
    )
    values.update(overrides)
    room = Room(**values)
    db.add(room)
    db.commit()
    db.refresh(room)
    return room


def _make_guest(db, email: str = "asha.rao@example.com", **overrides) -> Guest:
    values = dict(
        first_name="Asha",
        last_name="Rao",
        email=email,
        phone="+919800000001",
        loyalty_points=0,
        tier=GuestTier.BRONZE,
        total_bookings=0,
        is_blacklisted=False,
    )
    values.update(overrides)
    guest = Guest(**values)
    db.add(guest)
    db.commit()
    db.refresh(guest)
    return guest


@pytest.fixture
def sample_room(db_session):
    """Standard room 101 at 1000/night, 12% tax"""
    return _make_room(db_session)


@pytest.fixture
def sample_room_102(db_session):
    return _make_room(db_session, "102")


@pytest.fixture
def sample_guest(db_session):
    return _make_guest(db_session)


@pytest.fixture
def room_factory(db_session):
    def factory(room_number: str = "101", **overrides) -> Room:
        return _make_room(db_session, room_number, **overrides)
    return factory


@pytest.fixture
def guest_factory(db_session):
    def factory(email: str = "asha.rao@example.com", **overrides) -> Guest:
        return _make_guest(db_session, email, **overrides)
    return factory
