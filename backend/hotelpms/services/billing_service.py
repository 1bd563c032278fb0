"""
Billing service - invoices (folios), line items and payments
The summary columns are only ever written by hotelpms.domain.invoice.
"""
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, List, Optional
import logging

from sqlalchemy.orm import Session

from hotelpms.config import settings
from hotelpms.database import transaction
from hotelpms.domain import invoice as invoice_engine
from hotelpms.domain.errors import InvalidTransition
from hotelpms.domain.identifiers import generate_invoice_number
from hotelpms.engine.event_bus import Event, event_bus
from hotelpms.models.events import EventType, InvoiceEventData, PaymentReceivedData
from hotelpms.models.ontology import (
    Booking, BookingStatus, Invoice, InvoiceLineItem, InvoicePayment, InvoiceStatus,
    LineItemCategory, PaymentMethod,
)
from hotelpms.models.schemas import (
    InvoiceCreate, LineItemCreate, LineItemResponse, PaymentCreate, PaymentResponse,
)
from hotelpms.services.errors import NotFoundError

logger = logging.getLogger(__name__)


class BillingService:
    """Billing service"""

    def __init__(
        self,
        db: Session,
        event_publisher: Callable[[Event], None] = None,
        clock: Callable[[], datetime] = None,
    ):
        self.db = db
        self._publish_event = event_publisher or event_bus.publish
        self._now = clock or datetime.now

    # ============== Queries ==============

    def get_invoice(self, invoice_id: int) -> Optional[Invoice]:
        return self.db.query(Invoice).filter(Invoice.id == invoice_id).first()

    def get_invoice_by_booking(self, booking_id: int) -> Optional[Invoice]:
        return self.db.query(Invoice).filter(Invoice.booking_id == booking_id).first()

    def require_invoice(self, invoice_id: int) -> Invoice:
        invoice = self.get_invoice(invoice_id)
        if not invoice:
            raise NotFoundError("Invoice", invoice_id)
        return invoice

    def get_overdue_invoices(self, now: Optional[datetime] = None) -> List[Invoice]:
        """Past due and not settled; overdue is derived, never stored"""
        now = now or self._now()
        candidates = self.db.query(Invoice).filter(
            Invoice.due_date < now,
            Invoice.status.notin_([InvoiceStatus.PAID, InvoiceStatus.CANCELLED]),
        ).order_by(Invoice.due_date).all()
        return [invoice for invoice in candidates if invoice_engine.is_overdue(invoice, now)]

    def get_invoice_detail(self, invoice: Invoice) -> dict:
        now = self._now()
        return {
            "id": invoice.id,
            "invoice_number": invoice.invoice_number,
            "booking_id": invoice.booking_id,
            "guest_id": invoice.guest_id,
            "invoice_date": invoice.invoice_date,
            "due_date": invoice.due_date,
            "line_items": [LineItemResponse.model_validate(item) for item in invoice.line_items],
            "payments": [PaymentResponse.model_validate(p) for p in invoice.payments],
            "subtotal": invoice.subtotal,
            "total_tax": invoice.total_tax,
            "discounts": invoice.discounts,
            "total_amount": invoice.total_amount,
            "currency": invoice.currency,
            "total_paid": invoice.total_paid,
            "outstanding_balance": invoice.outstanding_balance,
            "last_payment_date": invoice.last_payment_date,
            "status": invoice.status,
            "is_overdue": invoice_engine.is_overdue(invoice, now),
            "is_fully_paid": invoice_engine.is_fully_paid(invoice),
            "notes": invoice.notes,
        }

    # ============== Folio creation ==============

    def _next_invoice_number(self, now: datetime) -> str:
        candidate = now
        number = generate_invoice_number(candidate)
        while self.db.query(Invoice.id).filter(Invoice.invoice_number == number).first():
            candidate += timedelta(milliseconds=1)
            number = generate_invoice_number(candidate)
        return number

    def open_folio(
        self,
        booking: Booking,
        operator_id: int,
        now: datetime,
        due_days: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> Invoice:
        """
        Build the invoice for a booking inside the caller's transaction

        The folio starts with the room charge for the booked nights, the
        booking discount, and every advance payment taken on the booking.

        Raises:
            InvalidTransition: if the booking already has an invoice or is
                cancelled / a no-show
        """
        if booking.invoice is not None or self.get_invoice_by_booking(booking.id):
            raise InvalidTransition(f"Booking {booking.booking_number} already has an invoice")
        if BookingStatus(booking.status) in (BookingStatus.CANCELLED, BookingStatus.NO_SHOW):
            raise InvalidTransition(
                f"Cannot invoice booking {booking.booking_number} in status {BookingStatus(booking.status).value}"
            )

        invoice = invoice_engine.open_invoice(
            booking,
            self._next_invoice_number(now),
            now,
            settings.INVOICE_DUE_DAYS if due_days is None else due_days,
            operator_id,
        )
        invoice.notes = notes

        room = booking.room
        invoice_engine.add_line_item(invoice, InvoiceLineItem(
            category=LineItemCategory.ROOM,
            description=f"Room {room.room_number} - {booking.total_nights} night(s)",
            quantity=booking.total_nights,
            unit_price=booking.room_rate,
            tax_rate=room.tax_rate,
            added_by=operator_id,
        ), now)

        if booking.discounts:
            invoice_engine.apply_discount(invoice, booking.discounts)

        for advance in booking.payments:
            invoice_engine.add_payment(invoice, InvoicePayment(
                amount=advance.amount,
                method=advance.method,
                reference=advance.reference,
                received_by=advance.received_by,
                received_at=advance.received_at,
                notes=f"Advance payment on booking {booking.booking_number}",
            ), now)

        self.db.add(invoice)
        return invoice

    def create_invoice(self, data: InvoiceCreate, operator_id: int) -> Invoice:
        booking = self.db.query(Booking).filter(Booking.id == data.booking_id).first()
        if not booking:
            raise NotFoundError("Booking", data.booking_id)

        now = self._now()
        with transaction(self.db):
            invoice = self.open_folio(booking, operator_id, now, data.due_days, data.notes)
        self.db.refresh(invoice)
        self.publish_invoice_created(invoice, operator_id)
        return invoice

    # ============== Mutations ==============

    def add_line_item(self, invoice_id: int, data: LineItemCreate, operator_id: int) -> Invoice:
        invoice = self.require_invoice(invoice_id)
        item = InvoiceLineItem(**data.model_dump(), added_by=operator_id)
        with transaction(self.db):
            invoice_engine.add_line_item(invoice, item, self._now())
        self.db.refresh(invoice)
        return invoice

    def add_payment(self, invoice_id: int, data: PaymentCreate, operator_id: int) -> Invoice:
        invoice = self.require_invoice(invoice_id)
        payment = InvoicePayment(
            amount=data.amount,
            method=PaymentMethod(data.method),
            reference=data.reference,
            received_by=operator_id,
            received_at=data.received_at,
            notes=data.notes,
        )
        with transaction(self.db):
            summary = invoice_engine.add_payment(invoice, payment, self._now())
        self.db.refresh(invoice)

        self._publish_event(Event(
            event_type=EventType.PAYMENT_RECEIVED,
            timestamp=self._now(),
            data=PaymentReceivedData(
                invoice_id=invoice.id,
                invoice_number=invoice.invoice_number,
                booking_id=invoice.booking_id,
                status=summary.status.value,
                total_amount=summary.total_amount,
                outstanding_balance=summary.outstanding_balance,
                operator_id=operator_id,
                amount=payment.amount,
                method=payment.method.value,
            ).to_dict(),
            source="billing_service",
        ))
        return invoice

    def apply_discount(self, invoice_id: int, amount: Decimal) -> Invoice:
        invoice = self.require_invoice(invoice_id)
        with transaction(self.db):
            invoice_engine.apply_discount(invoice, amount)
        self.db.refresh(invoice)
        return invoice

    def cancel_invoice(self, invoice_id: int, operator_id: int) -> Invoice:
        invoice = self.require_invoice(invoice_id)
        with transaction(self.db):
            invoice_engine.cancel_invoice(invoice)
        self.db.refresh(invoice)
        self._publish_event(Event(
            event_type=EventType.INVOICE_CANCELLED,
            timestamp=self._now(),
            data=self.invoice_event_data(invoice, operator_id),
            source="billing_service",
        ))
        return invoice

    # ============== Events ==============

    def invoice_event_data(self, invoice: Invoice, operator_id: Optional[int]) -> dict:
        return InvoiceEventData(
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            booking_id=invoice.booking_id,
            status=InvoiceStatus(invoice.status).value,
            total_amount=invoice.total_amount,
            outstanding_balance=invoice.outstanding_balance,
            operator_id=operator_id,
        ).to_dict()

    def publish_invoice_created(self, invoice: Invoice, operator_id: Optional[int]) -> None:
        self._publish_event(Event(
            event_type=EventType.INVOICE_CREATED,
            timestamp=self._now(),
            data=self.invoice_event_data(invoice, operator_id),
            source="billing_service",
        ))
