"""Tests for hotelpms.domain.pos"""
import pytest
from decimal import Decimal

from hotelpms.domain import invoice as invoice_engine
from hotelpms.domain import pos as pos_engine
from hotelpms.domain.errors import InvalidAmount, InvalidTransition, NotAvailable
from hotelpms.models.ontology import InvoiceStatus, LineItemCategory, PosItem, PosUnit


@pytest.fixture
def invoice(booking, now):
    return invoice_engine.open_invoice(booking, "INV202401TEST", now, due_days=7, created_by=1)


@pytest.fixture
def beer():
    return PosItem(
        id=3,
        name="Draught Beer",
        category=LineItemCategory.ALCOHOL,
        price=Decimal("400.00"),
        tax_rate=Decimal("18"),
        unit=PosUnit.PIECE,
        is_available=True,
        is_active=True,
        total_sold=0,
        total_revenue=Decimal("0"),
    )


class TestValidateItem:
    def test_room_category_rejected(self):
        with pytest.raises(InvalidAmount):
            pos_engine.validate_item(LineItemCategory.ROOM, Decimal("100"), Decimal("5"))

    def test_negative_price_rejected(self):
        with pytest.raises(InvalidAmount):
            pos_engine.validate_item(LineItemCategory.FOOD, Decimal("-1"), Decimal("5"))

    def test_negative_tax_rejected(self):
        with pytest.raises(InvalidAmount):
            pos_engine.validate_item(LineItemCategory.FOOD, Decimal("100"), Decimal("-5"))

    def test_free_item_allowed(self):
        pos_engine.validate_item("other", Decimal("0"), Decimal("0"))


def test_total_price_includes_tax(beer):
    assert pos_engine.total_price(beer) == Decimal("472.00")


class TestChargeToFolio:
    def test_line_uses_item_category_price_and_tax(self, invoice, beer, now):
        line = pos_engine.charge_to_folio(invoice, beer, 3, actor_id=5, now=now)

        assert invoice.line_items == [line]
        assert line.category == LineItemCategory.ALCOHOL
        assert line.description == "Draught Beer x3"
        assert line.unit_price == Decimal("400.00")
        assert line.tax_rate == Decimal("18")
        assert (line.subtotal, line.tax_amount, line.total) == (
            Decimal("1200.00"), Decimal("216.00"), Decimal("1416.00")
        )
        assert line.added_by == 5
        assert invoice.total_amount == Decimal("1416.00")
        assert invoice.status == InvoiceStatus.PENDING

    def test_sale_recorded_on_item(self, invoice, beer, now):
        pos_engine.charge_to_folio(invoice, beer, 2, actor_id=5, now=now)
        pos_engine.charge_to_folio(invoice, beer, 1, actor_id=5, now=now)

        assert beer.total_sold == 3
        assert beer.total_revenue == Decimal("1416.00")
        assert beer.last_sold == now
        assert invoice.line_items[1].description == "Draught Beer"

    def test_unavailable_item(self, invoice, beer, now):
        beer.is_available = False
        with pytest.raises(NotAvailable):
            pos_engine.charge_to_folio(invoice, beer, 1, actor_id=5, now=now)
        assert invoice.line_items == []

    def test_inactive_item(self, invoice, beer, now):
        beer.is_active = False
        with pytest.raises(NotAvailable):
            pos_engine.charge_to_folio(invoice, beer, 1, actor_id=5, now=now)

    def test_zero_quantity(self, invoice, beer, now):
        with pytest.raises(InvalidAmount):
            pos_engine.charge_to_folio(invoice, beer, 0, actor_id=5, now=now)
        assert beer.total_sold == 0

    def test_cancelled_invoice(self, invoice, beer, now):
        invoice_engine.cancel_invoice(invoice)
        with pytest.raises(InvalidTransition):
            pos_engine.charge_to_folio(invoice, beer, 1, actor_id=5, now=now)
        assert beer.total_sold == 0
