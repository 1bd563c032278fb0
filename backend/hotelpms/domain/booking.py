"""
hotelpms/domain/booking.py

Booking lifecycle machine.

    confirmed -> checked_in -> checked_out
    confirmed -> cancelled
    confirmed -> no_show

``checked_out``, ``cancelled`` and ``no_show`` are terminal. Every function
here mutates the in-memory booking (and room) only; persisting the result
is the caller's job.

Overlapping bookings for the same room and dates are not detected here.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Dict, Optional, Union
import logging

from hotelpms.domain import room as room_machine
from hotelpms.domain.errors import InvalidAmount, InvalidDateRange, InvalidTransition, NotAvailable
from hotelpms.domain.money import ZERO, Numeric, sum_money, tax_on, to_money
from hotelpms.engine.state_machine import StateMachine, StateMachineConfig, StateTransition
from hotelpms.models.ontology import (
    Booking, BookingPayment, BookingSource, BookingStatus, CommissionType, Currency, PaymentMethod,
    Room, RoomStatus,
)

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]

ONE_DAY = timedelta(days=1)


# ============== State machine ==============

def _arrival_reached(context: Dict[str, Any]) -> bool:
    return context["now"] >= context["check_in"]


BOOKING_MACHINE = StateMachineConfig(
    name="Booking",
    states=[s.value for s in BookingStatus],
    transitions=[
        StateTransition(
            from_state=BookingStatus.CONFIRMED.value,
            to_state=BookingStatus.CHECKED_IN.value,
            trigger="check_in",
            condition=_arrival_reached,
        ),
        StateTransition(
            from_state=BookingStatus.CHECKED_IN.value,
            to_state=BookingStatus.CHECKED_OUT.value,
            trigger="check_out",
        ),
        StateTransition(
            from_state=BookingStatus.CONFIRMED.value,
            to_state=BookingStatus.CANCELLED.value,
            trigger="cancel",
            condition=lambda ctx: not ctx.get("is_cancelled", False),
        ),
        StateTransition(
            from_state=BookingStatus.CONFIRMED.value,
            to_state=BookingStatus.NO_SHOW.value,
            trigger="mark_no_show",
        ),
    ],
    initial_state=BookingStatus.CONFIRMED.value,
)


def to_local_naive(value: datetime) -> datetime:
    """Offset-qualified times become naive server-local wall-clock times"""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return to_local_naive(value)
    return datetime.combine(value, time.min)


def _status(booking: Booking) -> BookingStatus:
    return BookingStatus(booking.status) if booking.status is not None else BookingStatus.CONFIRMED


def _machine(booking: Booking) -> StateMachine:
    return StateMachine(BOOKING_MACHINE, _status(booking).value)


def _context(booking: Booking, now: Optional[datetime] = None) -> Dict[str, Any]:
    context = {"is_cancelled": bool(booking.is_cancelled)}
    if now is not None:
        context["now"] = _as_datetime(now)
        context["check_in"] = _as_datetime(booking.check_in)
    return context


def _fire(booking: Booking, target: BookingStatus, trigger: str, actor_id: Optional[int], now: datetime) -> None:
    machine = _machine(booking)
    if not machine.transition_to(target.value, trigger, _context(booking, now), timestamp=now):
        raise InvalidTransition(
            f"Booking {booking.booking_number} cannot {trigger.replace('_', ' ')} "
            f"from status {_status(booking).value}"
        )
    booking.status = target
    booking.status_updated_at = now
    booking.status_updated_by = actor_id


# ============== Dates ==============

def calculate_total_nights(check_in: DateLike, check_out: DateLike) -> int:
    """
    Nights between two dates, partial days rounded up

    Raises:
        InvalidDateRange: if check_out is not after check_in
    """
    start, end = _as_datetime(check_in), _as_datetime(check_out)
    if end <= start:
        raise InvalidDateRange(f"Check-out {end.isoformat()} must be after check-in {start.isoformat()}")
    days, remainder = divmod(end - start, ONE_DAY)
    return days + (1 if remainder else 0)


# ============== Transitions ==============

def can_check_in(booking: Booking, now: datetime) -> bool:
    """Confirmed and the check-in date has arrived; late arrival is always allowed"""
    return _machine(booking).can_transition_to(
        BookingStatus.CHECKED_IN.value, "check_in", _context(booking, now)
    )


def check_in(booking: Booking, room: Room, now: datetime, actor_id: Optional[int]) -> None:
    """
    Check the guest in and mark the room occupied

    Raises:
        InvalidTransition: unless ``can_check_in``
    """
    _fire(booking, BookingStatus.CHECKED_IN, "check_in", actor_id, now)
    booking.actual_check_in = now
    room_machine.set_status(room, RoomStatus.OCCUPIED, actor_id, now)
    logger.info(f"Booking {booking.booking_number} checked in to room {room.room_number}")


def can_check_out(booking: Booking) -> bool:
    return _status(booking) == BookingStatus.CHECKED_IN


def check_out(booking: Booking, room: Room, now: datetime, actor_id: Optional[int]) -> None:
    """
    Check the guest out and hand the room to housekeeping (dirty)

    The caller records the completed stay in the guest ledger afterwards.

    Raises:
        InvalidTransition: unless ``can_check_out``
    """
    _fire(booking, BookingStatus.CHECKED_OUT, "check_out", actor_id, now)
    booking.actual_check_out = now
    booking.late_check_out = _as_datetime(now) > _as_datetime(booking.check_out)
    room_machine.set_status(room, RoomStatus.DIRTY, actor_id, now)
    logger.info(f"Booking {booking.booking_number} checked out of room {room.room_number}")


def can_cancel(booking: Booking) -> bool:
    return _machine(booking).can_transition_to(
        BookingStatus.CANCELLED.value, "cancel", _context(booking)
    )


def cancel(
    booking: Booking,
    now: datetime,
    actor_id: Optional[int],
    reason: Optional[str],
    refund_amount: Numeric = ZERO,
    fee: Numeric = ZERO,
) -> None:
    """
    Cancel a confirmed booking

    Raises:
        InvalidTransition: unless ``can_cancel``
        InvalidAmount: on a negative refund or fee
    """
    if not can_cancel(booking):
        raise InvalidTransition(
            f"Booking {booking.booking_number} cannot be cancelled from status {_status(booking).value}"
        )
    refund, cancellation_fee = to_money(refund_amount), to_money(fee)
    if refund < 0 or cancellation_fee < 0:
        raise InvalidAmount("Refund amount and cancellation fee cannot be negative")
    _fire(booking, BookingStatus.CANCELLED, "cancel", actor_id, now)
    booking.is_cancelled = True
    booking.cancelled_at = now
    booking.cancelled_by = actor_id
    booking.cancellation_reason = reason
    booking.refund_amount = refund
    booking.cancellation_fee = cancellation_fee
    logger.info(f"Booking {booking.booking_number} cancelled: {reason}")


def mark_no_show(booking: Booking, now: datetime, actor_id: Optional[int]) -> None:
    """Guest never arrived"""
    _fire(booking, BookingStatus.NO_SHOW, "mark_no_show", actor_id, now)
    logger.info(f"Booking {booking.booking_number} marked as no-show")


# ============== Payments ==============

def total_paid(booking: Booking) -> Decimal:
    return sum_money(p.amount for p in booking.payments)


def outstanding_balance(booking: Booking) -> Decimal:
    """Total amount minus payments; negative means overpaid"""
    return to_money(to_money(booking.total_amount) - total_paid(booking))


def add_payment(
    booking: Booking,
    amount: Numeric,
    method: Union[PaymentMethod, str],
    received_by: Optional[int],
    now: datetime,
    reference: Optional[str] = None,
    notes: Optional[str] = None,
) -> BookingPayment:
    """Record an advance payment; overpayment is allowed"""
    value = to_money(amount)
    if value <= 0:
        raise InvalidAmount(f"Payment amount must be positive: {amount}")
    payment = BookingPayment(
        amount=value,
        method=PaymentMethod(method),
        reference=reference,
        received_by=received_by,
        received_at=now,
        notes=notes,
    )
    booking.payments.append(payment)
    logger.info(f"Booking {booking.booking_number} payment received: {value}")
    return payment


# ============== Pricing / creation ==============

@dataclass(frozen=True)
class BookingQuote:
    """Price of a stay"""

    room_rate: Decimal
    total_nights: int
    subtotal: Decimal
    taxes: Decimal
    discounts: Decimal
    total_amount: Decimal


def quote_booking(room: Room, check_in: DateLike, check_out: DateLike, discounts: Numeric = ZERO) -> BookingQuote:
    """
    Price a stay at the room's base rate and tax rate

    Raises:
        InvalidDateRange: if check_out is not after check_in
        InvalidAmount: for a negative discount or one larger than the gross amount
    """
    nights = calculate_total_nights(check_in, check_out)
    rate = to_money(room.base_rate)
    subtotal = to_money(rate * nights)
    taxes = tax_on(subtotal, room.tax_rate if room.tax_rate is not None else ZERO)
    discount = to_money(discounts)
    if discount < 0 or discount > subtotal + taxes:
        raise InvalidAmount(f"Discount must be between 0 and {subtotal + taxes}: {discounts}")
    return BookingQuote(
        room_rate=rate,
        total_nights=nights,
        subtotal=subtotal,
        taxes=taxes,
        discounts=discount,
        total_amount=to_money(subtotal + taxes - discount),
    )


def open_booking(
    booking_number: str,
    guest_id: int,
    room: Room,
    check_in: DateLike,
    check_out: DateLike,
    source: Union[BookingSource, str],
    actor_id: int,
    now: datetime,
    adults: int = 1,
    children: int = 0,
    infants: int = 0,
    discounts: Numeric = ZERO,
    currency: Optional[Union[Currency, str]] = None,
    special_requests: Optional[str] = None,
    ota_name: Optional[str] = None,
    ota_booking_id: Optional[str] = None,
    ota_commission: Optional[Numeric] = None,
    ota_commission_type: Optional[Union[CommissionType, str]] = None,
) -> Booking:
    """
    Build a confirmed booking for an available room

    Raises:
        InvalidAmount: on invalid occupancy, discount or OTA commission
        InvalidDateRange: if check_out is not after check_in
        NotAvailable: if the room is not available or not active
    """
    if adults is None or adults < 1:
        raise InvalidAmount("At least 1 adult required")
    if (children or 0) < 0 or (infants or 0) < 0:
        raise InvalidAmount("Children and infants counts cannot be negative")
    guests = adults + (children or 0)
    if room.max_occupancy is not None and guests > room.max_occupancy:
        raise InvalidAmount(f"Room {room.room_number} holds at most {room.max_occupancy} guests")

    commission = to_money(ota_commission) if ota_commission is not None else ZERO
    commission_type = CommissionType(ota_commission_type or CommissionType.PERCENTAGE)
    if commission < 0:
        raise InvalidAmount(f"OTA commission cannot be negative: {ota_commission}")
    if commission_type == CommissionType.PERCENTAGE and commission > 100:
        raise InvalidAmount(f"OTA commission percentage cannot exceed 100: {ota_commission}")

    quote = quote_booking(room, check_in, check_out, discounts)

    if not room_machine.is_available(room):
        raise NotAvailable(f"Room {room.room_number} is not available for booking")

    booking = Booking(
        booking_number=booking_number,
        guest_id=guest_id,
        room_id=room.id,
        room=room,
        check_in=_as_datetime(check_in),
        check_out=_as_datetime(check_out),
        adults=adults,
        children=children or 0,
        infants=infants or 0,
        room_rate=quote.room_rate,
        total_nights=quote.total_nights,
        subtotal=quote.subtotal,
        taxes=quote.taxes,
        discounts=quote.discounts,
        total_amount=quote.total_amount,
        currency=Currency(currency or room.currency or Currency.INR),
        source=BookingSource(source),
        ota_name=ota_name,
        ota_booking_id=ota_booking_id,
        ota_commission=commission,
        ota_commission_type=commission_type,
        status=BookingStatus.CONFIRMED,
        status_updated_at=now,
        status_updated_by=actor_id,
        is_cancelled=False,
        special_requests=special_requests,
        created_by=actor_id,
    )
    logger.info(f"Booking {booking_number} opened for room {room.room_number}: {quote.total_amount}")
    return booking


__all__ = [
    "BOOKING_MACHINE",
    "BookingQuote",
    "to_local_naive",
    "calculate_total_nights",
    "can_check_in",
    "check_in",
    "can_check_out",
    "check_out",
    "can_cancel",
    "cancel",
    "mark_no_show",
    "total_paid",
    "outstanding_balance",
    "add_payment",
    "quote_booking",
    "open_booking",
]
