"""
Booking service - reservation lifecycle

Cross-entity operations (check-in, check-out, cancel) commit booking, room,
invoice and guest changes in one transaction and publish their events
only after the commit.
"""
from datetime import date, datetime, time, timedelta
from typing import Callable, List, Optional
import logging

from sqlalchemy.orm import Session

from hotelpms.config import settings
from hotelpms.database import transaction
from hotelpms.domain import booking as booking_engine
from hotelpms.domain import guest as guest_ledger
from hotelpms.domain import invoice as invoice_engine
from hotelpms.domain.errors import InvalidTransition
from hotelpms.domain.identifiers import generate_booking_number
from hotelpms.domain.money import ZERO, to_money
from hotelpms.engine.event_bus import Event, event_bus
from hotelpms.models.events import (
    EventType, BookingEventData, BookingCheckedOutData, BookingCancelledData,
)
from hotelpms.models.ontology import (
    Booking, BookingStatus, GuestTier, InvoiceStatus,
)
from hotelpms.models.schemas import BookingCancel, BookingCreate, PaymentCreate, PaymentResponse
from hotelpms.services.billing_service import BillingService
from hotelpms.services.errors import NotFoundError
from hotelpms.services.guest_service import GuestService
from hotelpms.services.room_service import RoomService

logger = logging.getLogger(__name__)


class BookingService:
    """Booking service"""

    def __init__(
        self,
        db: Session,
        event_publisher: Callable[[Event], None] = None,
        clock: Callable[[], datetime] = None,
    ):
        self.db = db
        self._publish_event = event_publisher or event_bus.publish
        self._now = clock or datetime.now
        self.rooms = RoomService(db, self._publish_event, self._now)
        self.guests = GuestService(db, self._publish_event, self._now)
        self.billing = BillingService(db, self._publish_event, self._now)

    # ============== Queries ==============

    def get_booking(self, booking_id: int) -> Optional[Booking]:
        return self.db.query(Booking).filter(Booking.id == booking_id).first()

    def get_booking_by_number(self, booking_number: str) -> Optional[Booking]:
        return self.db.query(Booking).filter(Booking.booking_number == booking_number).first()

    def require_booking(self, booking_id: int) -> Booking:
        booking = self.get_booking(booking_id)
        if not booking:
            raise NotFoundError("Booking", booking_id)
        return booking

    def get_bookings(
        self,
        status: Optional[BookingStatus] = None,
        guest_id: Optional[int] = None,
        room_id: Optional[int] = None,
        check_in_date: Optional[date] = None,
        limit: int = 100,
    ) -> List[Booking]:
        query = self.db.query(Booking)
        if status:
            query = query.filter(Booking.status == status)
        if guest_id:
            query = query.filter(Booking.guest_id == guest_id)
        if room_id:
            query = query.filter(Booking.room_id == room_id)
        if check_in_date:
            start, end = self._day_bounds(check_in_date)
            query = query.filter(Booking.check_in >= start, Booking.check_in < end)
        return query.order_by(Booking.check_in, Booking.id).limit(limit).all()

    def get_today_arrivals(self) -> List[Booking]:
        """Confirmed bookings due to check in today"""
        start, end = self._day_bounds(self._now().date())
        return self.db.query(Booking).filter(
            Booking.status == BookingStatus.CONFIRMED,
            Booking.check_in >= start,
            Booking.check_in < end,
        ).order_by(Booking.check_in).all()

    def get_today_departures(self) -> List[Booking]:
        """In-house bookings due to check out today"""
        start, end = self._day_bounds(self._now().date())
        return self.db.query(Booking).filter(
            Booking.status == BookingStatus.CHECKED_IN,
            Booking.check_out >= start,
            Booking.check_out < end,
        ).order_by(Booking.check_out).all()

    @staticmethod
    def _day_bounds(day: date):
        start = datetime.combine(day, time.min)
        return start, start + timedelta(days=1)

    def get_booking_detail(self, booking: Booking) -> dict:
        """Booking fields plus the derived payment figures"""
        return {
            "id": booking.id,
            "booking_number": booking.booking_number,
            "guest_id": booking.guest_id,
            "room_id": booking.room_id,
            "room_number": booking.room.room_number if booking.room else None,
            "guest_name": booking.guest.full_name if booking.guest else None,
            "check_in": booking.check_in,
            "check_out": booking.check_out,
            "actual_check_in": booking.actual_check_in,
            "actual_check_out": booking.actual_check_out,
            "late_check_out": bool(booking.late_check_out),
            "adults": booking.adults,
            "children": booking.children or 0,
            "infants": booking.infants or 0,
            "room_rate": booking.room_rate,
            "total_nights": booking.total_nights,
            "subtotal": booking.subtotal,
            "taxes": booking.taxes or ZERO,
            "discounts": booking.discounts or ZERO,
            "total_amount": booking.total_amount,
            "currency": booking.currency,
            "source": booking.source,
            "ota_name": booking.ota_name,
            "ota_booking_id": booking.ota_booking_id,
            "ota_commission": booking.ota_commission,
            "ota_commission_type": booking.ota_commission_type,
            "status": booking.status,
            "status_updated_at": booking.status_updated_at,
            "status_updated_by": booking.status_updated_by,
            "is_cancelled": bool(booking.is_cancelled),
            "cancelled_at": booking.cancelled_at,
            "cancellation_reason": booking.cancellation_reason,
            "refund_amount": booking.refund_amount,
            "cancellation_fee": booking.cancellation_fee,
            "special_requests": booking.special_requests,
            "payments": [PaymentResponse.model_validate(p) for p in booking.payments],
            "total_paid": booking_engine.total_paid(booking),
            "outstanding_balance": booking_engine.outstanding_balance(booking),
            "invoice_id": booking.invoice.id if booking.invoice else None,
        }

    # ============== Creation ==============

    def create_booking(self, data: BookingCreate, operator_id: int) -> Booking:
        """
        Reserve an available room for a guest

        Raises:
            NotFoundError: unknown guest or room
            ValueError: blacklisted guest
            NotAvailable: room not available or inactive
        """
        guest = self.guests.require_guest(data.guest_id)
        if guest.is_blacklisted:
            raise ValueError(f"Guest {guest.full_name} is blacklisted")
        room = self.rooms.require_room(data.room_id)

        now = self._now()
        with transaction(self.db):
            booking = booking_engine.open_booking(
                booking_number=generate_booking_number(now),
                guest_id=guest.id,
                room=room,
                check_in=data.check_in,
                check_out=data.check_out,
                source=data.source,
                actor_id=operator_id,
                now=now,
                adults=data.adults,
                children=data.children,
                infants=data.infants,
                discounts=data.discounts,
                currency=data.currency,
                special_requests=data.special_requests,
                ota_name=data.ota_name,
                ota_booking_id=data.ota_booking_id,
                ota_commission=data.ota_commission,
                ota_commission_type=data.ota_commission_type,
            )
            self.db.add(booking)
        self.db.refresh(booking)

        self._publish_booking_event(EventType.BOOKING_CREATED, booking, operator_id)
        return booking

    # ============== Lifecycle ==============

    def check_in(self, booking_id: int, operator_id: int) -> Booking:
        """
        Check the guest in

        Business linkage:
        1. booking confirmed -> checked_in
        2. room -> occupied
        3. invoice opened with the room charge and advance payments,
           unless one was already created for the booking
        """
        booking = self.require_booking(booking_id)
        room = booking.room
        previous_room_status = room.status
        now = self._now()

        with transaction(self.db):
            booking_engine.check_in(booking, room, now, operator_id)
            invoice = booking.invoice
            invoice_opened = invoice is None
            if invoice_opened:
                invoice = self.billing.open_folio(booking, operator_id, now)
        self.db.refresh(booking)

        self.rooms.publish_status_change(room, previous_room_status, operator_id, now, "check_in")
        self._publish_booking_event(EventType.BOOKING_CHECKED_IN, booking, operator_id)
        if invoice_opened:
            self.billing.publish_invoice_created(invoice, operator_id)
        return booking

    def check_out(self, booking_id: int, operator_id: int) -> Booking:
        """
        Check the guest out

        Business linkage:
        1. booking checked_in -> checked_out
        2. room -> dirty
        3. invoice summary recomputed
        4. guest ledger: stay recorded, loyalty points earned on realized
           revenue (invoice total paid, or booking total paid without one)

        An outstanding balance does not block check-out.
        """
        booking = self.require_booking(booking_id)
        room = booking.room
        guest = booking.guest
        previous_room_status = room.status
        old_tier = GuestTier(guest.tier) if guest.tier is not None else GuestTier.BRONZE
        now = self._now()

        with transaction(self.db):
            booking_engine.check_out(booking, room, now, operator_id)
            invoice = booking.invoice
            if invoice is not None:
                invoice_engine.recompute_summary(invoice)
                revenue = to_money(invoice.total_paid)
            else:
                revenue = booking_engine.total_paid(booking)
            nights = booking_engine.calculate_total_nights(booking.check_in, booking.check_out)
            guest_ledger.record_completed_stay(guest, revenue, nights, now)
            points = guest_ledger.points_for_revenue(revenue, settings.LOYALTY_SPEND_PER_POINT)
            new_tier = guest_ledger.add_loyalty_points(guest, points)
        self.db.refresh(booking)

        self.rooms.publish_status_change(room, previous_room_status, operator_id, now, "check_out")
        self._publish_event(Event(
            event_type=EventType.BOOKING_CHECKED_OUT,
            timestamp=now,
            data=BookingCheckedOutData(
                **self._booking_event_fields(booking, operator_id),
                invoice_id=invoice.id if invoice is not None else None,
                revenue=revenue,
                nights=nights,
                loyalty_points=points,
            ).to_dict(),
            source="booking_service",
        ))
        if new_tier is not None:
            self.guests.publish_tier_change(guest, old_tier, new_tier)
        logger.info(
            f"Booking {booking.booking_number} settled at check-out: revenue={revenue}, points={points}"
        )
        return booking

    def cancel(self, booking_id: int, data: BookingCancel, operator_id: int) -> Booking:
        """
        Cancel a confirmed booking

        Without an explicit refund amount, everything paid on the booking
        beyond the cancellation fee is refunded. An open invoice for the
        booking is cancelled with it.
        """
        booking = self.require_booking(booking_id)
        fee = to_money(data.cancellation_fee)
        if data.refund_amount is not None:
            refund = to_money(data.refund_amount)
        else:
            refund = max(booking_engine.total_paid(booking) - fee, ZERO)
        now = self._now()

        with transaction(self.db):
            booking_engine.cancel(booking, now, operator_id, data.reason, refund, fee)
            invoice = booking.invoice
            invoice_cancelled = (
                invoice is not None
                and invoice.status not in (InvoiceStatus.CANCELLED, InvoiceStatus.PAID)
            )
            if invoice_cancelled:
                invoice_engine.cancel_invoice(invoice)
        self.db.refresh(booking)

        self._publish_event(Event(
            event_type=EventType.BOOKING_CANCELLED,
            timestamp=now,
            data=BookingCancelledData(
                **self._booking_event_fields(booking, operator_id),
                reason=data.reason,
                refund_amount=refund,
                cancellation_fee=fee,
            ).to_dict(),
            source="booking_service",
        ))
        if invoice_cancelled:
            self._publish_event(Event(
                event_type=EventType.INVOICE_CANCELLED,
                timestamp=now,
                data=self.billing.invoice_event_data(invoice, operator_id),
                source="billing_service",
            ))
        return booking

    def mark_no_show(self, booking_id: int, operator_id: int) -> Booking:
        booking = self.require_booking(booking_id)
        with transaction(self.db):
            booking_engine.mark_no_show(booking, self._now(), operator_id)
        self.db.refresh(booking)
        self._publish_booking_event(EventType.BOOKING_NO_SHOW, booking, operator_id)
        return booking

    # ============== Payments ==============

    def add_payment(self, booking_id: int, data: PaymentCreate, operator_id: int) -> Booking:
        """
        Advance payment on a booking

        Once the booking has an invoice, payments are taken on the invoice.
        """
        booking = self.require_booking(booking_id)
        if booking.invoice is not None:
            raise InvalidTransition(
                f"Booking {booking.booking_number} is billed on invoice "
                f"{booking.invoice.invoice_number}; record the payment there"
            )
        if BookingStatus(booking.status) in (BookingStatus.CANCELLED, BookingStatus.NO_SHOW):
            raise InvalidTransition(
                f"Booking {booking.booking_number} is {BookingStatus(booking.status).value}"
            )

        with transaction(self.db):
            booking_engine.add_payment(
                booking,
                data.amount,
                data.method,
                operator_id,
                data.received_at or self._now(),
                reference=data.reference,
                notes=data.notes,
            )
        self.db.refresh(booking)
        return booking

    # ============== Events ==============

    def _booking_event_fields(self, booking: Booking, operator_id: Optional[int]) -> dict:
        return {
            "booking_id": booking.id,
            "booking_number": booking.booking_number,
            "guest_id": booking.guest_id,
            "room_id": booking.room_id,
            "room_number": booking.room.room_number if booking.room else "",
            "status": BookingStatus(booking.status).value,
            "total_amount": to_money(booking.total_amount),
            "operator_id": operator_id,
        }

    def _publish_booking_event(self, event_type: EventType, booking: Booking, operator_id: Optional[int]) -> None:
        self._publish_event(Event(
            event_type=event_type,
            timestamp=self._now(),
            data=BookingEventData(**self._booking_event_fields(booking, operator_id)).to_dict(),
            source="booking_service",
        ))
