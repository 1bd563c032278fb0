"""
Tests for hotelpms.services.booking_service
Covers: create, check-in (invoice opened), check-out (guest ledger),
        cancel (refund default, invoice cancelled), no-show, advance payments,
        arrivals / departures, rollback and optimistic locking
"""
import pytest
from datetime import datetime
from decimal import Decimal
from sqlalchemy import text
from sqlalchemy.orm.exc import StaleDataError

from hotelpms.domain.errors import InvalidDateRange, InvalidTransition, NotAvailable
from hotelpms.models.events import EventType
from hotelpms.models.ontology import (
    BookingStatus, GuestTier, InvoiceStatus, LineItemCategory,
    PaymentMethod, RoomStatus,
)
from hotelpms.models.schemas import BookingCancel, InvoiceCreate, PaymentCreate
from hotelpms.services.errors import NotFoundError


def _pay(amount, method=PaymentMethod.CARD):
    return PaymentCreate(amount=Decimal(amount), method=method)


class TestCreateBooking:
    def test_confirmed_with_price(self, booking_service, booking_data, operator, published_events):
        booking = booking_service.create_booking(booking_data, operator.id)
        assert booking.booking_number.startswith("BK")
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.total_nights == 2
        assert booking.total_amount == Decimal("2240.00")
        assert booking.created_by == operator.id
        assert [e.event_type for e in published_events] == [EventType.BOOKING_CREATED]

    def test_room_must_be_available(self, booking_service, booking_data, operator, room_factory):
        dirty = room_factory("102", status=RoomStatus.DIRTY)
        with pytest.raises(NotAvailable):
            booking_service.create_booking(booking_data.model_copy(update={"room_id": dirty.id}), operator.id)

    def test_invalid_dates(self, booking_service, booking_data, operator):
        data = booking_data.model_copy(update={"check_out": booking_data.check_in})
        with pytest.raises(InvalidDateRange):
            booking_service.create_booking(data, operator.id)
        assert booking_service.get_bookings() == []

    def test_unknown_guest(self, booking_service, booking_data, operator):
        with pytest.raises(NotFoundError):
            booking_service.create_booking(booking_data.model_copy(update={"guest_id": 999}), operator.id)

    def test_blacklisted_guest(self, booking_service, booking_data, operator, db_session, sample_guest):
        sample_guest.is_blacklisted = True
        db_session.commit()
        with pytest.raises(ValueError, match="blacklisted"):
            booking_service.create_booking(booking_data, operator.id)

    def test_overlapping_bookings_not_detected(self, booking_service, booking_data, operator):
        """The room stays available until check-in, so a second booking is accepted"""
        booking_service.create_booking(booking_data, operator.id)
        second = booking_service.create_booking(booking_data, operator.id)
        assert second.status == BookingStatus.CONFIRMED


class TestCheckIn:
    def test_opens_invoice_with_room_charge(self, booking_service, confirmed_booking, operator, published_events):
        booking = booking_service.check_in(confirmed_booking.id, operator.id)
        assert booking.status == BookingStatus.CHECKED_IN
        assert booking.room.status == RoomStatus.OCCUPIED

        invoice = booking.invoice
        assert invoice is not None
        assert invoice.status == InvoiceStatus.PENDING
        assert len(invoice.line_items) == 1
        item = invoice.line_items[0]
        assert item.category == LineItemCategory.ROOM
        assert item.quantity == 2
        assert item.unit_price == Decimal("1000.00")
        assert item.total == Decimal("2240.00")
        assert invoice.total_amount == booking.total_amount

        assert [e.event_type for e in published_events] == [
            EventType.ROOM_STATUS_CHANGED,
            EventType.BOOKING_CHECKED_IN,
            EventType.INVOICE_CREATED,
        ]

    def test_advance_payments_carried_to_invoice(self, booking_service, confirmed_booking, operator):
        booking_service.add_payment(confirmed_booking.id, _pay("1000", PaymentMethod.UPI), operator.id)
        booking = booking_service.check_in(confirmed_booking.id, operator.id)
        invoice = booking.invoice
        assert invoice.total_paid == Decimal("1000.00")
        assert invoice.outstanding_balance == Decimal("1240.00")
        assert invoice.status == InvoiceStatus.PARTIALLY_PAID
        assert invoice.payments[0].method == PaymentMethod.UPI

    def test_booking_discount_carried_to_invoice(self, booking_service, booking_data, operator):
        booking = booking_service.create_booking(
            booking_data.model_copy(update={"discounts": Decimal("240")}), operator.id
        )
        booking = booking_service.check_in(booking.id, operator.id)
        assert booking.invoice.total_amount == Decimal("2000.00")

    def test_before_arrival_rolls_back(self, booking_service, booking_data, operator, clock, db_session):
        data = booking_data.model_copy(update={
            "check_in": datetime(2024, 1, 5, 14, 0),
            "check_out": datetime(2024, 1, 6, 11, 0),
        })
        booking = booking_service.create_booking(data, operator.id)
        with pytest.raises(InvalidTransition):
            booking_service.check_in(booking.id, operator.id)

        db_session.expire_all()
        booking = booking_service.get_booking(booking.id)
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.room.status == RoomStatus.AVAILABLE
        assert booking.invoice is None

    def test_second_check_in_rejected(self, booking_service, confirmed_booking, operator):
        booking_service.check_in(confirmed_booking.id, operator.id)
        with pytest.raises(InvalidTransition):
            booking_service.check_in(confirmed_booking.id, operator.id)

    def test_stale_version_detected(self, booking_service, confirmed_booking, operator, db_session):
        """Another writer bumped the row after we loaded it"""
        assert confirmed_booking.version == 1
        db_session.execute(
            text("UPDATE bookings SET version = version + 1 WHERE id = :id"),
            {"id": confirmed_booking.id},
        )
        with pytest.raises(StaleDataError):
            booking_service.check_in(confirmed_booking.id, operator.id)


class TestCheckOut:
    def test_full_stay(self, booking_service, confirmed_booking, operator, clock, published_events):
        booking = booking_service.check_in(confirmed_booking.id, operator.id)
        booking_service.billing.add_payment(booking.invoice.id, _pay("2240"), operator.id)

        clock.advance(days=1, hours=20)
        published_events.clear()
        booking = booking_service.check_out(confirmed_booking.id, operator.id)

        assert booking.status == BookingStatus.CHECKED_OUT
        assert booking.actual_check_out == clock.now
        assert booking.late_check_out is False
        assert booking.room.status == RoomStatus.DIRTY
        assert booking.invoice.status == InvoiceStatus.PAID

        guest = booking.guest
        assert guest.total_bookings == 1
        assert guest.total_revenue == Decimal("2240.00")
        assert guest.average_stay_duration == Decimal("2.00")
        assert guest.last_stay_date == clock.now
        assert guest.loyalty_points == 224

        checked_out = [e for e in published_events if e.event_type == EventType.BOOKING_CHECKED_OUT]
        assert len(checked_out) == 1
        assert checked_out[0].data["revenue"] == "2240.00"
        assert checked_out[0].data["loyalty_points"] == 224

    def test_outstanding_balance_does_not_block(self, booking_service, confirmed_booking, operator):
        booking_service.check_in(confirmed_booking.id, operator.id)
        booking = booking_service.check_out(confirmed_booking.id, operator.id)
        assert booking.status == BookingStatus.CHECKED_OUT
        assert booking.invoice.outstanding_balance == Decimal("2240.00")
        assert booking.guest.total_revenue == Decimal("0.00")
        assert booking.guest.loyalty_points == 0

    def test_tier_upgrade_on_big_spend(
        self, booking_service, booking_data, operator, room_factory, published_events
    ):
        suite = room_factory("301", base_rate=Decimal("25000"), tax_rate=Decimal("0"), max_occupancy=4)
        booking = booking_service.create_booking(booking_data.model_copy(update={"room_id": suite.id}), operator.id)
        booking = booking_service.check_in(booking.id, operator.id)
        booking_service.billing.add_payment(booking.invoice.id, _pay("50000"), operator.id)
        booking = booking_service.check_out(booking.id, operator.id)

        assert booking.guest.loyalty_points == 5000
        assert booking.guest.tier == GuestTier.GOLD
        assert published_events[-1].event_type == EventType.GUEST_TIER_CHANGED

    def test_check_out_requires_check_in(self, booking_service, confirmed_booking, operator):
        with pytest.raises(InvalidTransition):
            booking_service.check_out(confirmed_booking.id, operator.id)


class TestCancel:
    def test_default_refund_is_paid_minus_fee(self, booking_service, confirmed_booking, operator, published_events):
        booking_service.add_payment(confirmed_booking.id, _pay("1000"), operator.id)
        booking = booking_service.cancel(
            confirmed_booking.id,
            BookingCancel(reason="Flight cancelled", cancellation_fee=Decimal("300")),
            operator.id,
        )
        assert booking.status == BookingStatus.CANCELLED
        assert booking.is_cancelled is True
        assert booking.refund_amount == Decimal("700.00")
        assert booking.cancellation_fee == Decimal("300.00")
        assert published_events[-1].event_type == EventType.BOOKING_CANCELLED
        assert published_events[-1].data["reason"] == "Flight cancelled"

    def test_refund_never_negative(self, booking_service, confirmed_booking, operator):
        booking = booking_service.cancel(
            confirmed_booking.id,
            BookingCancel(reason="No deposit", cancellation_fee=Decimal("500")),
            operator.id,
        )
        assert booking.refund_amount == Decimal("0.00")

    def test_explicit_refund(self, booking_service, confirmed_booking, operator):
        booking = booking_service.cancel(
            confirmed_booking.id,
            BookingCancel(reason="Goodwill", refund_amount=Decimal("50")),
            operator.id,
        )
        assert booking.refund_amount == Decimal("50.00")

    def test_open_invoice_cancelled_too(self, booking_service, billing_service, confirmed_booking, operator):
        invoice = billing_service.create_invoice(InvoiceCreate(booking_id=confirmed_booking.id), operator.id)
        booking_service.cancel(confirmed_booking.id, BookingCancel(reason="x"), operator.id)
        assert billing_service.get_invoice(invoice.id).status == InvoiceStatus.CANCELLED

    def test_cannot_cancel_checked_in(self, booking_service, confirmed_booking, operator):
        booking_service.check_in(confirmed_booking.id, operator.id)
        with pytest.raises(InvalidTransition):
            booking_service.cancel(confirmed_booking.id, BookingCancel(reason="x"), operator.id)

    def test_cannot_cancel_twice(self, booking_service, confirmed_booking, operator):
        booking_service.cancel(confirmed_booking.id, BookingCancel(reason="x"), operator.id)
        with pytest.raises(InvalidTransition):
            booking_service.cancel(confirmed_booking.id, BookingCancel(reason="y"), operator.id)


class TestNoShowAndPayments:
    def test_no_show(self, booking_service, confirmed_booking, operator, published_events):
        booking = booking_service.mark_no_show(confirmed_booking.id, operator.id)
        assert booking.status == BookingStatus.NO_SHOW
        assert published_events[-1].event_type == EventType.BOOKING_NO_SHOW

    def test_advance_payment(self, booking_service, confirmed_booking, operator, clock):
        booking = booking_service.add_payment(confirmed_booking.id, _pay("500", PaymentMethod.CASH), operator.id)
        detail = booking_service.get_booking_detail(booking)
        assert detail["total_paid"] == Decimal("500.00")
        assert detail["outstanding_balance"] == Decimal("1740.00")
        assert booking.payments[0].received_at == clock.now
        assert booking.payments[0].received_by == operator.id

    def test_payment_after_invoice_goes_to_invoice(self, booking_service, confirmed_booking, operator):
        booking_service.check_in(confirmed_booking.id, operator.id)
        with pytest.raises(InvalidTransition):
            booking_service.add_payment(confirmed_booking.id, _pay("100"), operator.id)

    def test_payment_on_cancelled_booking(self, booking_service, confirmed_booking, operator):
        booking_service.cancel(confirmed_booking.id, BookingCancel(reason="x"), operator.id)
        with pytest.raises(InvalidTransition):
            booking_service.add_payment(confirmed_booking.id, _pay("100"), operator.id)


class TestFrontDeskLists:
    def test_today_arrivals_and_departures(self, booking_service, booking_data, operator, clock, room_factory):
        arriving = booking_service.create_booking(booking_data, operator.id)
        other_room = room_factory("102")
        future = booking_service.create_booking(booking_data.model_copy(update={
            "room_id": other_room.id,
            "check_in": datetime(2024, 1, 2, 14, 0),
        }), operator.id)

        assert [b.id for b in booking_service.get_today_arrivals()] == [arriving.id]
        assert booking_service.get_today_departures() == []

        booking_service.check_in(arriving.id, operator.id)
        clock.advance(days=2)
        assert [b.id for b in booking_service.get_today_departures()] == [arriving.id]
        assert future.id not in [b.id for b in booking_service.get_today_arrivals()]

    def test_list_filters(self, booking_service, confirmed_booking, sample_guest):
        assert booking_service.get_bookings(status=BookingStatus.CONFIRMED)[0].id == confirmed_booking.id
        assert booking_service.get_bookings(guest_id=sample_guest.id)[0].id == confirmed_booking.id
        assert booking_service.get_bookings(status=BookingStatus.CANCELLED) == []
        assert len(booking_service.get_bookings(check_in_date=datetime(2024, 1, 1).date())) == 1
