"""
Persistent objects (ORM models)
Rooms, guests, bookings, invoices, staff accounts and the POS catalogue.

Derived fields (booking pricing, invoice summary and payment status, guest
statistics) are written only by hotelpms.domain; services persist them.
Aggregates carry a ``version`` column for optimistic concurrency control.
"""
from datetime import datetime
from enum import Enum
from sqlalchemy import (
    Column, Integer, String, DateTime,
    ForeignKey, Text, Enum as SQLEnum, Boolean, Numeric
)
from sqlalchemy.orm import relationship
from hotelpms.database import Base


# ============== Enumerations ==============

class RoomStatus(str, Enum):
    """Room status"""
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    DIRTY = "dirty"
    CLEAN = "clean"
    MAINTENANCE = "maintenance"
    OUT_OF_ORDER = "out_of_order"


class RoomType(str, Enum):
    """Room category"""
    STANDARD = "standard"
    DELUXE = "deluxe"
    SUITE = "suite"
    PRESIDENTIAL = "presidential"
    FAMILY = "family"
    ACCESSIBLE = "accessible"


class BedType(str, Enum):
    """Bed configuration"""
    SINGLE = "single"
    DOUBLE = "double"
    QUEEN = "queen"
    KING = "king"
    TWIN = "twin"
    SOFA_BED = "sofa_bed"


class BookingStatus(str, Enum):
    """Booking lifecycle status"""
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class BookingSource(str, Enum):
    """Booking channel"""
    WALK_IN = "walk_in"
    PHONE = "phone"
    EMAIL = "email"
    WEBSITE = "website"
    OTA = "ota"
    AGENT = "agent"
    CORPORATE = "corporate"


class CommissionType(str, Enum):
    """OTA commission type"""
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class PaymentMethod(str, Enum):
    """Payment method"""
    CASH = "cash"
    CARD = "card"
    UPI = "upi"
    BANK_TRANSFER = "bank_transfer"
    CHEQUE = "cheque"
    ONLINE = "online"


class Currency(str, Enum):
    """Supported currencies (no FX conversion)"""
    INR = "INR"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"


class InvoiceStatus(str, Enum):
    """Folio status"""
    DRAFT = "draft"
    PENDING = "pending"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class LineItemCategory(str, Enum):
    """Line item category"""
    ROOM = "room"
    FOOD = "food"
    BEVERAGE = "beverage"
    ALCOHOL = "alcohol"
    LAUNDRY = "laundry"
    TELEPHONE = "telephone"
    INTERNET = "internet"
    SPA = "spa"
    OTHER = "other"


class PosUnit(str, Enum):
    """Selling unit of a POS item"""
    PIECE = "piece"
    KG = "kg"
    GRAM = "gram"
    LITER = "liter"
    ML = "ml"
    HOUR = "hour"
    SERVICE = "service"


class GuestTier(str, Enum):
    """Loyalty tier"""
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"


class EmployeeRole(str, Enum):
    """Staff role"""
    ADMIN = "admin"
    MANAGER = "manager"
    FRONT_DESK = "front_desk"
    HOUSEKEEPING = "housekeeping"
    RESTAURANT = "restaurant"


# ============== Objects ==============

class Room(Base):
    """
    Room - long-lived shared entity, never hard-deleted, only deactivated
    """
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    room_number = Column(String(10), unique=True, nullable=False)
    room_type = Column(SQLEnum(RoomType), nullable=False, default=RoomType.STANDARD)
    floor = Column(Integer, nullable=False)
    capacity_adults = Column(Integer, nullable=False, default=2)
    capacity_children = Column(Integer, default=0)
    max_occupancy = Column(Integer, nullable=False, default=2)
    bed_type = Column(SQLEnum(BedType), nullable=False, default=BedType.DOUBLE)
    bed_count = Column(Integer, nullable=False, default=1)
    base_rate = Column(Numeric(12, 2), nullable=False)
    tax_rate = Column(Numeric(5, 2), nullable=False, default=12)
    currency = Column(SQLEnum(Currency), default=Currency.INR)

    status = Column(SQLEnum(RoomStatus), nullable=False, default=RoomStatus.AVAILABLE)
    status_updated_at = Column(DateTime, default=datetime.utcnow)
    status_updated_by = Column(Integer, ForeignKey("employees.id"))

    # Housekeeping record
    last_cleaned = Column(DateTime)
    cleaned_by = Column(Integer, ForeignKey("employees.id"))
    cleaning_notes = Column(Text)
    maintenance_required = Column(Boolean, default=False)
    maintenance_notes = Column(Text)
    last_maintenance = Column(DateTime)

    is_active = Column(Boolean, default=True)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    bookings = relationship("Booking", back_populates="room")

    __mapper_args__ = {"version_id_col": version}


class Guest(Base):
    """
    Guest - statistics and loyalty are changed only at stay completion
    """
    __tablename__ = "guests"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(100), unique=True, nullable=False, index=True)
    phone = Column(String(20), nullable=False)
    nationality = Column(String(50))
    id_type = Column(String(20))
    id_number = Column(String(50))
    preferences = Column(Text)
    company_name = Column(String(100))
    is_vip = Column(Boolean, default=False)

    # Loyalty
    loyalty_number = Column(String(30))
    loyalty_points = Column(Integer, nullable=False, default=0)
    tier = Column(SQLEnum(GuestTier), nullable=False, default=GuestTier.BRONZE)

    # Statistics
    total_bookings = Column(Integer, nullable=False, default=0)
    total_revenue = Column(Numeric(12, 2), nullable=False, default=0)
    average_stay_duration = Column(Numeric(8, 2), nullable=False, default=0)
    last_stay_date = Column(DateTime)

    is_blacklisted = Column(Boolean, default=False)
    blacklist_reason = Column(Text)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    bookings = relationship("Booking", back_populates="guest")

    __mapper_args__ = {"version_id_col": version}

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Booking(Base):
    """
    Booking - reservation aggregate root
    Pricing is computed at creation; status changes only through hotelpms.domain.booking.
    """
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    booking_number = Column(String(30), unique=True, nullable=False, index=True)
    guest_id = Column(Integer, ForeignKey("guests.id"), nullable=False)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False)

    # Dates
    check_in = Column(DateTime, nullable=False)
    check_out = Column(DateTime, nullable=False)
    actual_check_in = Column(DateTime)
    actual_check_out = Column(DateTime)
    late_check_out = Column(Boolean, default=False)

    # Occupancy
    adults = Column(Integer, nullable=False, default=1)
    children = Column(Integer, default=0)
    infants = Column(Integer, default=0)

    # Pricing
    room_rate = Column(Numeric(12, 2), nullable=False)
    total_nights = Column(Integer, nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)
    taxes = Column(Numeric(12, 2), default=0)
    discounts = Column(Numeric(12, 2), default=0)
    total_amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(SQLEnum(Currency), default=Currency.INR)

    # Source / OTA
    source = Column(SQLEnum(BookingSource), nullable=False)
    ota_name = Column(String(50))
    ota_booking_id = Column(String(50))
    ota_commission = Column(Numeric(12, 2), default=0)
    ota_commission_type = Column(SQLEnum(CommissionType), default=CommissionType.PERCENTAGE)

    # Status
    status = Column(SQLEnum(BookingStatus), nullable=False, default=BookingStatus.CONFIRMED)
    status_updated_at = Column(DateTime, default=datetime.utcnow)
    status_updated_by = Column(Integer, ForeignKey("employees.id"))

    # Cancellation record
    is_cancelled = Column(Boolean, default=False)
    cancelled_at = Column(DateTime)
    cancelled_by = Column(Integer, ForeignKey("employees.id"))
    cancellation_reason = Column(Text)
    refund_amount = Column(Numeric(12, 2), default=0)
    cancellation_fee = Column(Numeric(12, 2), default=0)

    special_requests = Column(Text)
    created_by = Column(Integer, ForeignKey("employees.id"), nullable=False)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    guest = relationship("Guest", back_populates="bookings")
    room = relationship("Room", back_populates="bookings")
    payments = relationship(
        "BookingPayment", back_populates="booking",
        order_by="BookingPayment.id", cascade="all, delete-orphan"
    )
    invoice = relationship("Invoice", back_populates="booking", uselist=False)

    __mapper_args__ = {"version_id_col": version}


class BookingPayment(Base):
    """
    Advance payment recorded against a booking
    """
    __tablename__ = "booking_payments"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    method = Column(SQLEnum(PaymentMethod), nullable=False)
    reference = Column(String(100))
    received_by = Column(Integer, ForeignKey("employees.id"))
    received_at = Column(DateTime, default=datetime.utcnow)
    notes = Column(Text)

    booking = relationship("Booking", back_populates="payments")


class Invoice(Base):
    """
    Invoice (folio) - exclusive to one booking
    summary and payment status columns are derived by hotelpms.domain.invoice.
    """
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String(30), unique=True, nullable=False, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), unique=True, nullable=False)
    guest_id = Column(Integer, ForeignKey("guests.id"), nullable=False)
    invoice_date = Column(DateTime, nullable=False, default=datetime.utcnow)
    due_date = Column(DateTime, nullable=False)

    # Summary (derived)
    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    total_tax = Column(Numeric(12, 2), nullable=False, default=0)
    discounts = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    currency = Column(SQLEnum(Currency), default=Currency.INR)

    # Payment status (derived)
    total_paid = Column(Numeric(12, 2), nullable=False, default=0)
    outstanding_balance = Column(Numeric(12, 2), nullable=False, default=0)
    last_payment_date = Column(DateTime)

    status = Column(SQLEnum(InvoiceStatus), nullable=False, default=InvoiceStatus.DRAFT)
    notes = Column(Text)
    created_by = Column(Integer, ForeignKey("employees.id"), nullable=False)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    booking = relationship("Booking", back_populates="invoice")
    guest = relationship("Guest")
    line_items = relationship(
        "InvoiceLineItem", back_populates="invoice",
        order_by="InvoiceLineItem.id", cascade="all, delete-orphan"
    )
    payments = relationship(
        "InvoicePayment", back_populates="invoice",
        order_by="InvoicePayment.id", cascade="all, delete-orphan"
    )

    __mapper_args__ = {"version_id_col": version}


class InvoiceLineItem(Base):
    """
    One billable charge on an invoice
    """
    __tablename__ = "invoice_line_items"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False)
    category = Column(SQLEnum(LineItemCategory), nullable=False)
    description = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    tax_rate = Column(Numeric(5, 2), nullable=False, default=0)
    subtotal = Column(Numeric(12, 2), nullable=False)
    tax_amount = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False)
    date = Column(DateTime, default=datetime.utcnow)
    added_by = Column(Integer, ForeignKey("employees.id"))
    notes = Column(Text)

    invoice = relationship("Invoice", back_populates="line_items")


class InvoicePayment(Base):
    """
    Payment received against an invoice
    """
    __tablename__ = "invoice_payments"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    method = Column(SQLEnum(PaymentMethod), nullable=False)
    reference = Column(String(100))
    received_by = Column(Integer, ForeignKey("employees.id"))
    received_at = Column(DateTime, default=datetime.utcnow)
    notes = Column(Text)

    invoice = relationship("Invoice", back_populates="payments")


class Employee(Base):
    """
    Staff account
    """
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(100), nullable=False)
    phone = Column(String(20))
    role = Column(SQLEnum(EmployeeRole), nullable=False, default=EmployeeRole.FRONT_DESK)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class PosItem(Base):
    """
    Point-of-sale catalogue item (restaurant, bar, spa, laundry...)
    Charged to a guest folio as an invoice line item.
    """
    __tablename__ = "pos_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    description = Column(String(500))
    category = Column(SQLEnum(LineItemCategory), nullable=False, index=True)
    subcategory = Column(String(50))
    price = Column(Numeric(12, 2), nullable=False)
    currency = Column(SQLEnum(Currency), default=Currency.INR)
    tax_rate = Column(Numeric(5, 2), nullable=False, default=5)
    unit = Column(SQLEnum(PosUnit), nullable=False, default=PosUnit.PIECE)
    is_available = Column(Boolean, default=True)

    # Sales statistics
    total_sold = Column(Integer, nullable=False, default=0)
    total_revenue = Column(Numeric(12, 2), nullable=False, default=0)
    last_sold = Column(DateTime)

    is_active = Column(Boolean, default=True)
    created_by = Column(Integer, ForeignKey("employees.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
