"""
POS service - catalogue of chargeable items and folio charges
A charge becomes an invoice line item through hotelpms.domain.pos, which
prices it with the invoice engine.
"""
from datetime import datetime
from typing import Callable, List, Optional
import logging

from sqlalchemy.orm import Session

from hotelpms.config import settings
from hotelpms.database import transaction
from hotelpms.domain import pos as pos_engine
from hotelpms.engine.event_bus import Event, event_bus
from hotelpms.models.events import EventType, PosItemChargedData
from hotelpms.models.ontology import Currency, Invoice, InvoiceStatus, LineItemCategory, PosItem
from hotelpms.models.schemas import PosCharge, PosItemCreate, PosItemUpdate
from hotelpms.services.billing_service import BillingService
from hotelpms.services.errors import NotFoundError

logger = logging.getLogger(__name__)


class PosService:
    """POS service"""

    def __init__(
        self,
        db: Session,
        event_publisher: Callable[[Event], None] = None,
        clock: Callable[[], datetime] = None,
    ):
        self.db = db
        self._publish_event = event_publisher or event_bus.publish
        self._now = clock or datetime.now
        self.billing = BillingService(db, event_publisher=self._publish_event, clock=self._now)

    # ============== Queries ==============

    def get_items(
        self,
        category: Optional[LineItemCategory] = None,
        is_active: Optional[bool] = True,
        is_available: Optional[bool] = None,
    ) -> List[PosItem]:
        query = self.db.query(PosItem)
        if category:
            query = query.filter(PosItem.category == category)
        if is_active is not None:
            query = query.filter(PosItem.is_active == is_active)
        if is_available is not None:
            query = query.filter(PosItem.is_available == is_available)
        return query.order_by(PosItem.category, PosItem.name).all()

    def get_item(self, item_id: int) -> Optional[PosItem]:
        return self.db.query(PosItem).filter(PosItem.id == item_id).first()

    def require_item(self, item_id: int) -> PosItem:
        item = self.get_item(item_id)
        if not item:
            raise NotFoundError("POS item", item_id)
        return item

    def get_item_detail(self, item: PosItem) -> dict:
        return {
            "id": item.id,
            "name": item.name,
            "description": item.description,
            "category": item.category,
            "subcategory": item.subcategory,
            "price": item.price,
            "tax_rate": item.tax_rate,
            "total_price": pos_engine.total_price(item),
            "currency": item.currency,
            "unit": item.unit,
            "is_available": bool(item.is_available),
            "is_active": bool(item.is_active),
            "total_sold": item.total_sold or 0,
            "total_revenue": item.total_revenue,
            "last_sold": item.last_sold,
        }

    # ============== Catalogue ==============

    def create_item(self, data: PosItemCreate, operator_id: int) -> PosItem:
        """
        Raises:
            InvalidAmount: room category, negative price or tax rate
        """
        pos_engine.validate_item(data.category, data.price, data.tax_rate)
        values = data.model_dump()
        if values.get("currency") is None:
            values["currency"] = Currency(settings.DEFAULT_CURRENCY)

        item = PosItem(**values, created_by=operator_id, is_active=True, is_available=True,
                       total_sold=0, total_revenue=0)
        with transaction(self.db):
            self.db.add(item)
        self.db.refresh(item)
        logger.info(f"POS item {item.name} created at {item.price}")
        return item

    def update_item(self, item_id: int, data: PosItemUpdate) -> PosItem:
        item = self.require_item(item_id)
        update_data = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        pos_engine.validate_item(
            item.category,
            update_data.get("price", item.price),
            update_data.get("tax_rate", item.tax_rate),
        )
        with transaction(self.db):
            for key, value in update_data.items():
                setattr(item, key, value)
        self.db.refresh(item)
        return item

    def deactivate_item(self, item_id: int) -> PosItem:
        """Items with sales history are kept; deactivation hides them from the menu"""
        item = self.require_item(item_id)
        with transaction(self.db):
            item.is_active = False
            item.is_available = False
        self.db.refresh(item)
        logger.info(f"POS item {item.name} deactivated")
        return item

    # ============== Charges ==============

    def charge_to_folio(self, data: PosCharge, operator_id: int) -> Invoice:
        """
        Post an item to a guest folio

        Raises:
            NotFoundError: unknown invoice or item
            NotAvailable: item inactive or unavailable
            InvalidTransition: the invoice is cancelled
        """
        invoice = self.billing.require_invoice(data.invoice_id)
        item = self.require_item(data.item_id)
        now = self._now()

        with transaction(self.db):
            line = pos_engine.charge_to_folio(invoice, item, data.quantity, operator_id, now, data.notes)
        self.db.refresh(invoice)

        self._publish_event(Event(
            event_type=EventType.POS_ITEM_CHARGED,
            timestamp=now,
            data=PosItemChargedData(
                invoice_id=invoice.id,
                invoice_number=invoice.invoice_number,
                booking_id=invoice.booking_id,
                status=InvoiceStatus(invoice.status).value,
                total_amount=invoice.total_amount,
                outstanding_balance=invoice.outstanding_balance,
                operator_id=operator_id,
                item_id=item.id,
                item_name=item.name,
                category=LineItemCategory(item.category).value,
                quantity=data.quantity,
                amount=line.total,
            ).to_dict(),
            source="pos_service",
        ))
        return invoice
