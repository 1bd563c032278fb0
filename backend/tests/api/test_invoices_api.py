"""
Invoice API tests
"""
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from hotelpms.models.ontology import Invoice


@pytest.fixture
def confirmed_booking(client, front_desk_auth_headers, sample_guest, sample_room):
    check_in = datetime.now().replace(microsecond=0) - timedelta(hours=1)
    response = client.post("/bookings", json={
        "guest_id": sample_guest.id,
        "room_id": sample_room.id,
        "check_in": check_in.isoformat(),
        "check_out": (check_in + timedelta(days=2)).isoformat(),
        "source": "phone",
    }, headers=front_desk_auth_headers)
    return response.json()


@pytest.fixture
def invoice(client, front_desk_auth_headers, confirmed_booking):
    response = client.post(
        "/invoices", json={"booking_id": confirmed_booking["id"]}, headers=front_desk_auth_headers
    )
    assert response.status_code == 201
    return response.json()


class TestCreateInvoice:
    def test_opened_with_room_charge(self, invoice, confirmed_booking):
        assert invoice["invoice_number"].startswith("INV")
        assert invoice["booking_id"] == confirmed_booking["id"]
        assert invoice["status"] == "pending"
        assert len(invoice["line_items"]) == 1
        assert invoice["line_items"][0]["category"] == "room"
        assert Decimal(invoice["subtotal"]) == Decimal("2000.00")
        assert Decimal(invoice["total_tax"]) == Decimal("240.00")
        assert Decimal(invoice["total_amount"]) == Decimal("2240.00")
        assert invoice["is_fully_paid"] is False
        assert invoice["is_overdue"] is False

    def test_one_invoice_per_booking(self, client, front_desk_auth_headers, invoice):
        response = client.post(
            "/invoices", json={"booking_id": invoice["booking_id"]}, headers=front_desk_auth_headers
        )
        assert response.status_code == 409

    def test_unknown_booking(self, client, front_desk_auth_headers):
        response = client.post("/invoices", json={"booking_id": 999}, headers=front_desk_auth_headers)
        assert response.status_code == 404

    def test_get_invoice(self, client, front_desk_auth_headers, invoice):
        response = client.get(f"/invoices/{invoice['id']}", headers=front_desk_auth_headers)
        assert response.json()["invoice_number"] == invoice["invoice_number"]
        assert client.get("/invoices/999", headers=front_desk_auth_headers).status_code == 404


class TestLineItems:
    def test_add_line_item(self, client, front_desk_auth_headers, invoice):
        response = client.post(f"/invoices/{invoice['id']}/line-items", json={
            "category": "beverage",
            "description": "Minibar",
            "quantity": 3,
            "unit_price": "150",
            "tax_rate": "18",
        }, headers=front_desk_auth_headers)
        assert response.status_code == 200
        data = response.json()
        item = data["line_items"][-1]
        assert Decimal(item["subtotal"]) == Decimal("450.00")
        assert Decimal(item["tax_amount"]) == Decimal("81.00")
        assert Decimal(item["total"]) == Decimal("531.00")
        assert Decimal(data["total_amount"]) == Decimal("2771.00")

    def test_zero_quantity_rejected(self, client, front_desk_auth_headers, invoice):
        response = client.post(f"/invoices/{invoice['id']}/line-items", json={
            "category": "laundry",
            "description": "Shirt",
            "quantity": 0,
            "unit_price": "50",
        }, headers=front_desk_auth_headers)
        assert response.status_code == 422


class TestPayments:
    def test_partial_then_full(self, client, front_desk_auth_headers, invoice):
        url = f"/invoices/{invoice['id']}/payments"
        data = client.post(url, json={"amount": "1000", "method": "cash"},
                           headers=front_desk_auth_headers).json()
        assert data["status"] == "partially_paid"
        assert Decimal(data["outstanding_balance"]) == Decimal("1240.00")

        data = client.post(url, json={"amount": "1240", "method": "card", "reference": "TXN42"},
                           headers=front_desk_auth_headers).json()
        assert data["status"] == "paid"
        assert data["is_fully_paid"] is True
        assert data["last_payment_date"] is not None
        assert [p["reference"] for p in data["payments"]] == [None, "TXN42"]

    def test_overpayment_accepted(self, client, front_desk_auth_headers, invoice):
        data = client.post(f"/invoices/{invoice['id']}/payments", json={"amount": "3000", "method": "upi"},
                           headers=front_desk_auth_headers).json()
        assert data["status"] == "paid"
        assert Decimal(data["outstanding_balance"]) == Decimal("-760.00")

    def test_non_positive_payment(self, client, front_desk_auth_headers, invoice):
        response = client.post(f"/invoices/{invoice['id']}/payments", json={"amount": "0", "method": "cash"},
                               headers=front_desk_auth_headers)
        assert response.status_code == 422


class TestManagerActions:
    def test_discount_above_charges_rejected(self, client, manager_auth_headers, invoice):
        response = client.post(f"/invoices/{invoice['id']}/discount", json={"amount": "5000"},
                               headers=manager_auth_headers)
        assert response.status_code == 400

        data = client.get(f"/invoices/{invoice['id']}", headers=manager_auth_headers).json()
        assert Decimal(data["total_amount"]) == Decimal("2240.00")

    def test_discount_requires_manager(self, client, front_desk_auth_headers, invoice):
        response = client.post(f"/invoices/{invoice['id']}/discount", json={"amount": "240"},
                               headers=front_desk_auth_headers)
        assert response.status_code == 403

    def test_discount(self, client, manager_auth_headers, invoice):
        response = client.post(f"/invoices/{invoice['id']}/discount", json={"amount": "240"},
                               headers=manager_auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["discounts"]) == Decimal("240.00")
        assert Decimal(data["total_amount"]) == Decimal("2000.00")

    def test_cancel_then_frozen(self, client, manager_auth_headers, front_desk_auth_headers, invoice):
        response = client.post(f"/invoices/{invoice['id']}/cancel", headers=manager_auth_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

        response = client.post(f"/invoices/{invoice['id']}/payments", json={"amount": "10", "method": "cash"},
                               headers=front_desk_auth_headers)
        assert response.status_code == 409

        response = client.post(f"/invoices/{invoice['id']}/cancel", headers=manager_auth_headers)
        assert response.status_code == 409


class TestOverdue:
    def test_overdue_listing(self, client, db_session, front_desk_auth_headers, invoice):
        assert client.get("/invoices/overdue", headers=front_desk_auth_headers).json() == []

        row = db_session.get(Invoice, invoice["id"])
        row.due_date = datetime.now() - timedelta(days=1)
        db_session.commit()

        data = client.get("/invoices/overdue", headers=front_desk_auth_headers).json()
        assert [i["id"] for i in data] == [invoice["id"]]
        assert data[0]["is_overdue"] is True

    def test_overdue_requires_billing_permission(self, client, housekeeper_auth_headers):
        response = client.get("/invoices/overdue", headers=housekeeper_auth_headers)
        assert response.status_code == 403
