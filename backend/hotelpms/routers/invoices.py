"""
Invoice routes - folio line items, payments and discounts
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from hotelpms.database import get_db
from hotelpms.models.ontology import Employee
from hotelpms.models.schemas import (
    InvoiceCreate, InvoiceResponse, LineItemCreate, PaymentCreate, DiscountApply
)
from hotelpms.routers.errors import service_errors
from hotelpms.security.auth import get_current_user, require_manager, require_permission
from hotelpms.security.permissions import MANAGE_BILLING
from hotelpms.services.billing_service import BillingService

router = APIRouter(prefix="/invoices", tags=["Invoices"])


def _response(service: BillingService, invoice) -> InvoiceResponse:
    return InvoiceResponse(**service.get_invoice_detail(invoice))


@router.get("/overdue", response_model=List[InvoiceResponse])
def list_overdue_invoices(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_BILLING))
):
    """Invoices past their due date and not fully paid"""
    service = BillingService(db)
    return [_response(service, invoice) for invoice in service.get_overdue_invoices()]


@router.get("/by-booking/{booking_id}", response_model=InvoiceResponse)
def get_invoice_by_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    service = BillingService(db)
    invoice = service.get_invoice_by_booking(booking_id)
    if not invoice:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    return _response(service, invoice)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    service = BillingService(db)
    invoice = service.get_invoice(invoice_id)
    if not invoice:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    return _response(service, invoice)


@router.post("", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
def create_invoice(
    data: InvoiceCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_BILLING))
):
    """Open the folio for a booking; one invoice per booking"""
    service = BillingService(db)
    with service_errors():
        invoice = service.create_invoice(data, current_user.id)
    return _response(service, invoice)


@router.post("/{invoice_id}/line-items", response_model=InvoiceResponse)
def add_line_item(
    invoice_id: int,
    data: LineItemCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_BILLING))
):
    service = BillingService(db)
    with service_errors():
        invoice = service.add_line_item(invoice_id, data, current_user.id)
    return _response(service, invoice)


@router.post("/{invoice_id}/payments", response_model=InvoiceResponse)
def add_payment(
    invoice_id: int,
    data: PaymentCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_BILLING))
):
    """Record a payment; overpayment is accepted"""
    service = BillingService(db)
    with service_errors():
        invoice = service.add_payment(invoice_id, data, current_user.id)
    return _response(service, invoice)


@router.post("/{invoice_id}/discount", response_model=InvoiceResponse)
def apply_discount(
    invoice_id: int,
    data: DiscountApply,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_manager)
):
    service = BillingService(db)
    with service_errors():
        invoice = service.apply_discount(invoice_id, data.amount)
    return _response(service, invoice)


@router.post("/{invoice_id}/cancel", response_model=InvoiceResponse)
def cancel_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_manager)
):
    service = BillingService(db)
    with service_errors():
        invoice = service.cancel_invoice(invoice_id, current_user.id)
    return _response(service, invoice)
