"""
Domain events
Published by the services after a successful commit.
"""
from enum import Enum
from dataclasses import dataclass, field, asdict
from datetime import datetime
from decimal import Decimal
from typing import Optional, Dict, Any


class EventType(str, Enum):
    """Event types"""
    # Room
    ROOM_STATUS_CHANGED = "room.status_changed"

    # Booking
    BOOKING_CREATED = "booking.created"
    BOOKING_CHECKED_IN = "booking.checked_in"
    BOOKING_CHECKED_OUT = "booking.checked_out"
    BOOKING_CANCELLED = "booking.cancelled"
    BOOKING_NO_SHOW = "booking.no_show"

    # Invoice
    INVOICE_CREATED = "invoice.created"
    PAYMENT_RECEIVED = "invoice.payment_received"
    INVOICE_CANCELLED = "invoice.cancelled"
    POS_ITEM_CHARGED = "invoice.pos_item_charged"

    # Guest
    GUEST_TIER_CHANGED = "guest.tier_changed"


@dataclass
class BaseEventData:
    """Event payload base"""
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        for key, value in result.items():
            if isinstance(value, datetime):
                result[key] = value.isoformat()
            elif isinstance(value, Decimal):
                result[key] = str(value)
        return result


@dataclass
class RoomStatusChangedData(BaseEventData):
    room_id: int = 0
    room_number: str = ""
    old_status: str = ""
    new_status: str = ""
    changed_by: Optional[int] = None
    reason: str = ""


@dataclass
class BookingEventData(BaseEventData):
    """Payload shared by booking lifecycle events"""
    booking_id: int = 0
    booking_number: str = ""
    guest_id: int = 0
    room_id: int = 0
    room_number: str = ""
    status: str = ""
    total_amount: Decimal = Decimal("0")
    operator_id: Optional[int] = None


@dataclass
class BookingCheckedOutData(BookingEventData):
    invoice_id: Optional[int] = None
    revenue: Decimal = Decimal("0")
    nights: int = 0
    loyalty_points: int = 0


@dataclass
class BookingCancelledData(BookingEventData):
    reason: str = ""
    refund_amount: Decimal = Decimal("0")
    cancellation_fee: Decimal = Decimal("0")


@dataclass
class InvoiceEventData(BaseEventData):
    invoice_id: int = 0
    invoice_number: str = ""
    booking_id: int = 0
    status: str = ""
    total_amount: Decimal = Decimal("0")
    outstanding_balance: Decimal = Decimal("0")
    operator_id: Optional[int] = None


@dataclass
class PaymentReceivedData(InvoiceEventData):
    amount: Decimal = Decimal("0")
    method: str = ""


@dataclass
class PosItemChargedData(InvoiceEventData):
    item_id: int = 0
    item_name: str = ""
    category: str = ""
    quantity: int = 0
    amount: Decimal = Decimal("0")


@dataclass
class GuestTierChangedData(BaseEventData):
    guest_id: int = 0
    old_tier: str = ""
    new_tier: str = ""
    loyalty_points: int = 0
