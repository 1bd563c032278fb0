"""
hotelpms/domain/invoice.py

Invoice settlement engine.

The summary (subtotal, total tax, discounts, total) and the payment status
(total paid, outstanding balance, status) are never set by callers. They
are produced by ``compute_summary`` from the line items, payments and
discount, and written back by ``recompute_summary`` after every mutation.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterable, Optional, Union
import logging

from hotelpms.domain.errors import InvalidAmount, InvalidTransition
from hotelpms.domain.money import ZERO, Numeric, line_item_totals, sum_money, to_money
from hotelpms.models.ontology import (
    Booking, Currency, Invoice, InvoiceLineItem, InvoicePayment, InvoiceStatus,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvoiceSummary:
    """Everything derived from line items, payments and discount"""

    subtotal: Decimal
    total_tax: Decimal
    discounts: Decimal
    total_amount: Decimal
    total_paid: Decimal
    outstanding_balance: Decimal
    status: InvoiceStatus


def derive_status(total_paid: Decimal, total_amount: Decimal) -> InvoiceStatus:
    if total_paid == 0:
        return InvoiceStatus.PENDING
    if total_paid >= total_amount:
        return InvoiceStatus.PAID
    return InvoiceStatus.PARTIALLY_PAID


def compute_summary(
    line_items: Iterable[InvoiceLineItem],
    payments: Iterable[InvoicePayment],
    discounts: Numeric = ZERO,
) -> InvoiceSummary:
    """Pure derivation of the invoice summary and payment status"""
    items = list(line_items)
    subtotal = sum_money(item.subtotal for item in items)
    total_tax = sum_money(item.tax_amount for item in items)
    discount = to_money(discounts)
    total_amount = to_money(subtotal + total_tax - discount)
    total_paid = sum_money(p.amount for p in payments)
    return InvoiceSummary(
        subtotal=subtotal,
        total_tax=total_tax,
        discounts=discount,
        total_amount=total_amount,
        total_paid=total_paid,
        outstanding_balance=to_money(total_amount - total_paid),
        status=derive_status(total_paid, total_amount),
    )


def recompute_summary(invoice: Invoice) -> InvoiceSummary:
    """
    Write the derived summary onto the invoice

    Idempotent. A cancelled invoice keeps its cancelled status.
    """
    summary = compute_summary(invoice.line_items, invoice.payments, invoice.discounts)
    invoice.subtotal = summary.subtotal
    invoice.total_tax = summary.total_tax
    invoice.discounts = summary.discounts
    invoice.total_amount = summary.total_amount
    invoice.total_paid = summary.total_paid
    invoice.outstanding_balance = summary.outstanding_balance
    if invoice.status != InvoiceStatus.CANCELLED:
        invoice.status = summary.status
    return summary


def _ensure_open(invoice: Invoice) -> None:
    if invoice.status == InvoiceStatus.CANCELLED:
        raise InvalidTransition(f"Invoice {invoice.invoice_number} is cancelled")


# ============== Creation ==============

def open_invoice(
    booking: Booking,
    invoice_number: str,
    now: datetime,
    due_days: int,
    created_by: int,
    currency: Optional[Union[Currency, str]] = None,
) -> Invoice:
    """New draft folio for a booking"""
    invoice = Invoice(
        invoice_number=invoice_number,
        booking=booking,
        booking_id=booking.id,
        guest_id=booking.guest_id,
        invoice_date=now,
        due_date=now + timedelta(days=due_days),
        subtotal=ZERO,
        total_tax=ZERO,
        discounts=ZERO,
        total_amount=ZERO,
        total_paid=ZERO,
        outstanding_balance=ZERO,
        currency=Currency(currency or booking.currency or Currency.INR),
        status=InvoiceStatus.DRAFT,
        created_by=created_by,
    )
    logger.info(f"Invoice {invoice_number} opened for booking {booking.booking_number}")
    return invoice


# ============== Mutations ==============

def add_line_item(invoice: Invoice, item: InvoiceLineItem, now: Optional[datetime] = None) -> InvoiceSummary:
    """
    Price a line item, append it and recompute

    Raises:
        InvalidAmount: on quantity < 1, negative price or tax rate
        InvalidTransition: if the invoice is cancelled
    """
    _ensure_open(invoice)
    tax_rate = item.tax_rate if item.tax_rate is not None else ZERO
    totals = line_item_totals(item.quantity, item.unit_price, tax_rate)
    item.unit_price = to_money(item.unit_price)
    item.tax_rate = Decimal(str(tax_rate))
    item.subtotal = totals.subtotal
    item.tax_amount = totals.tax_amount
    item.total = totals.total
    if item.date is None:
        item.date = now or datetime.now()
    invoice.line_items.append(item)
    logger.info(f"Invoice {invoice.invoice_number} line item {item.description}: {totals.total}")
    return recompute_summary(invoice)


def add_payment(invoice: Invoice, payment: InvoicePayment, now: Optional[datetime] = None) -> InvoiceSummary:
    """
    Append a payment and recompute; overpayment is allowed

    Raises:
        InvalidAmount: for a non-positive amount
        InvalidTransition: if the invoice is cancelled
    """
    _ensure_open(invoice)
    amount = to_money(payment.amount)
    if amount <= 0:
        raise InvalidAmount(f"Payment amount must be positive: {payment.amount}")
    payment.amount = amount
    if payment.received_at is None:
        payment.received_at = now or datetime.now()
    invoice.payments.append(payment)
    summary = recompute_summary(invoice)
    invoice.last_payment_date = payment.received_at
    logger.info(
        f"Invoice {invoice.invoice_number} payment {amount} via {payment.method}, "
        f"outstanding {summary.outstanding_balance}"
    )
    return summary


def apply_discount(invoice: Invoice, amount: Numeric) -> InvoiceSummary:
    """
    Replace the invoice-level discount and recompute

    Raises:
        InvalidAmount: for a negative discount or one larger than the
            charges (subtotal plus tax) on the invoice
        InvalidTransition: if the invoice is cancelled
    """
    _ensure_open(invoice)
    discount = to_money(amount)
    gross = to_money(sum_money(item.subtotal for item in invoice.line_items)
                     + sum_money(item.tax_amount for item in invoice.line_items))
    if discount < 0 or discount > gross:
        raise InvalidAmount(f"Discount must be between 0 and {gross}: {amount}")
    invoice.discounts = discount
    return recompute_summary(invoice)


def cancel_invoice(invoice: Invoice) -> None:
    """Cancellation is the only status set directly"""
    if invoice.status in (InvoiceStatus.CANCELLED, InvoiceStatus.PAID):
        raise InvalidTransition(
            f"Invoice {invoice.invoice_number} cannot be cancelled from status {invoice.status.value}"
        )
    invoice.status = InvoiceStatus.CANCELLED
    logger.info(f"Invoice {invoice.invoice_number} cancelled")


# ============== Queries ==============

def is_overdue(invoice: Invoice, now: datetime) -> bool:
    return now > invoice.due_date and invoice.status != InvoiceStatus.PAID


def is_fully_paid(invoice: Invoice) -> bool:
    return to_money(invoice.outstanding_balance) <= 0


__all__ = [
    "InvoiceSummary",
    "derive_status",
    "compute_summary",
    "recompute_summary",
    "open_invoice",
    "add_line_item",
    "add_payment",
    "apply_discount",
    "cancel_invoice",
    "is_overdue",
    "is_fully_paid",
]
