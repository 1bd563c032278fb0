"""
hotelpms/domain/pos.py

Point-of-sale charges. A catalogue item is turned into an invoice line
item priced at the item's price and tax rate; the invoice engine does the
arithmetic and the summary recompute.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
import logging

from hotelpms.domain import invoice as invoice_engine
from hotelpms.domain.errors import InvalidAmount, NotAvailable
from hotelpms.domain.money import ZERO, line_item_totals, to_money
from hotelpms.models.ontology import Invoice, InvoiceLineItem, LineItemCategory, PosItem

logger = logging.getLogger(__name__)


def validate_item(category: LineItemCategory, price, tax_rate) -> None:
    """
    Raises:
        InvalidAmount: for the room category or a negative price / tax rate
    """
    if LineItemCategory(category) == LineItemCategory.ROOM:
        raise InvalidAmount("Room charges are posted at check-in, not through the POS")
    if to_money(price) < 0:
        raise InvalidAmount(f"Price cannot be negative: {price}")
    if tax_rate is not None and Decimal(str(tax_rate)) < 0:
        raise InvalidAmount(f"Tax rate cannot be negative: {tax_rate}")


def total_price(item: PosItem) -> Decimal:
    """Unit price including tax"""
    return line_item_totals(1, item.price, item.tax_rate if item.tax_rate is not None else ZERO).total


def is_sellable(item: PosItem) -> bool:
    return item.is_active is not False and item.is_available is not False


def charge_to_folio(
    invoice: Invoice,
    item: PosItem,
    quantity: int,
    actor_id: Optional[int],
    now: datetime,
    notes: Optional[str] = None,
) -> InvoiceLineItem:
    """
    Post ``quantity`` of a catalogue item onto an invoice and record the sale

    Raises:
        NotAvailable: if the item is inactive or not available
        InvalidAmount: on quantity < 1
        InvalidTransition: if the invoice is cancelled
    """
    if not is_sellable(item):
        raise NotAvailable(f"POS item {item.name} is not available")

    line = InvoiceLineItem(
        category=item.category,
        description=item.name if quantity == 1 else f"{item.name} x{quantity}",
        quantity=quantity,
        unit_price=item.price,
        tax_rate=item.tax_rate if item.tax_rate is not None else ZERO,
        added_by=actor_id,
        notes=notes,
    )
    invoice_engine.add_line_item(invoice, line, now)
    record_sale(item, quantity, line.total, now)
    logger.info(f"POS item {item.name} x{quantity} charged to invoice {invoice.invoice_number}")
    return line


def record_sale(item: PosItem, quantity: int, revenue, now: datetime) -> None:
    item.total_sold = (item.total_sold or 0) + quantity
    item.total_revenue = to_money((item.total_revenue or 0) + to_money(revenue))
    item.last_sold = now


__all__ = [
    "validate_item",
    "total_price",
    "is_sellable",
    "charge_to_folio",
    "record_sale",
]
