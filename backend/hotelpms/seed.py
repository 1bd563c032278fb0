"""
Seed data - default staff accounts, a starter room inventory and a POS menu

Run once against a fresh database:

    python -m hotelpms.seed

Default accounts (password 123456 for all):
  admin         Administrator
  manager       Duty Manager
  front1        Front Desk
  housekeeper1  Housekeeping
"""
from decimal import Decimal
import logging

from sqlalchemy.orm import Session

from hotelpms.config import settings
from hotelpms.database import SessionLocal, init_db
from hotelpms.models.ontology import (
    BedType, Currency, Employee, EmployeeRole, LineItemCategory, PosItem, PosUnit, Room, RoomStatus,
    RoomType,
)
from hotelpms.security.auth import get_password_hash

logger = logging.getLogger(__name__)

DEFAULT_PASSWORD = "123456"

EMPLOYEES = [
    {"username": "admin", "name": "Administrator", "role": EmployeeRole.ADMIN},
    {"username": "manager", "name": "Duty Manager", "role": EmployeeRole.MANAGER},
    {"username": "front1", "name": "Front Desk", "role": EmployeeRole.FRONT_DESK},
    {"username": "housekeeper1", "name": "Housekeeping", "role": EmployeeRole.HOUSEKEEPING},
]

# (floor, room type, bed type, max occupancy, base rate)
ROOM_LAYOUT = [
    (1, RoomType.STANDARD, BedType.DOUBLE, 2, Decimal("2500")),
    (2, RoomType.DELUXE, BedType.QUEEN, 3, Decimal("4000")),
    (3, RoomType.SUITE, BedType.KING, 4, Decimal("7500")),
]
ROOMS_PER_FLOOR = 4

# (name, category, price, tax rate, unit)
POS_MENU = [
    ("Masala Tea", LineItemCategory.BEVERAGE, Decimal("80"), Decimal("5"), PosUnit.PIECE),
    ("Club Sandwich", LineItemCategory.FOOD, Decimal("350"), Decimal("5"), PosUnit.PIECE),
    ("Draught Beer", LineItemCategory.ALCOHOL, Decimal("400"), Decimal("18"), PosUnit.PIECE),
    ("Laundry", LineItemCategory.LAUNDRY, Decimal("120"), Decimal("18"), PosUnit.KG),
    ("Swedish Massage", LineItemCategory.SPA, Decimal("2500"), Decimal("18"), PosUnit.HOUR),
]


def init_employees(db: Session) -> int:
    """Create missing default employees; returns how many were added"""
    created = 0
    for spec in EMPLOYEES:
        if db.query(Employee).filter(Employee.username == spec["username"]).first():
            continue
        db.add(Employee(
            username=spec["username"],
            name=spec["name"],
            role=spec["role"],
            password_hash=get_password_hash(DEFAULT_PASSWORD),
            is_active=True,
        ))
        created += 1
    db.commit()
    return created


def init_rooms(db: Session, tax_rate: Decimal = None) -> int:
    """Create missing rooms 101.., 201.., 301..; returns how many were added"""
    tax_rate = settings.DEFAULT_TAX_RATE if tax_rate is None else tax_rate
    created = 0
    for floor, room_type, bed_type, max_occupancy, base_rate in ROOM_LAYOUT:
        for index in range(1, ROOMS_PER_FLOOR + 1):
            room_number = f"{floor}{index:02d}"
            if db.query(Room).filter(Room.room_number == room_number).first():
                continue
            db.add(Room(
                room_number=room_number,
                room_type=room_type,
                floor=floor,
                capacity_adults=max_occupancy,
                capacity_children=0,
                max_occupancy=max_occupancy,
                bed_type=bed_type,
                bed_count=1,
                base_rate=base_rate,
                tax_rate=tax_rate,
                currency=Currency.INR,
                status=RoomStatus.AVAILABLE,
                is_active=True,
            ))
            created += 1
    db.commit()
    return created


def init_pos_items(db: Session) -> int:
    """Create missing POS menu items, owned by the admin account; returns how many were added"""
    admin = db.query(Employee).filter(Employee.username == "admin").first()
    if admin is None:
        return 0
    created = 0
    for name, category, price, tax_rate, unit in POS_MENU:
        if db.query(PosItem).filter(PosItem.name == name).first():
            continue
        db.add(PosItem(
            name=name,
            category=category,
            price=price,
            tax_rate=tax_rate,
            unit=unit,
            currency=Currency.INR,
            is_available=True,
            is_active=True,
            total_sold=0,
            total_revenue=0,
            created_by=admin.id,
        ))
        created += 1
    db.commit()
    return created


def main():
    logging.basicConfig(level=logging.INFO)
    init_db()
    db = SessionLocal()
    try:
        employees = init_employees(db)
        rooms = init_rooms(db)
        items = init_pos_items(db)
        logger.info(f"Seed complete: {employees} employees, {rooms} rooms, {items} POS items")
        logger.info(f"Default accounts use password {DEFAULT_PASSWORD}: "
                    + ", ".join(spec["username"] for spec in EMPLOYEES))
    finally:
        db.close()


if __name__ == "__main__":
    main()
