"""
Booking routes - reservation lifecycle
"""
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from hotelpms.database import get_db
from hotelpms.models.ontology import BookingStatus, Employee
from hotelpms.models.schemas import (
    BookingCreate, BookingResponse, BookingCancel, PaymentCreate
)
from hotelpms.routers.errors import service_errors
from hotelpms.security.auth import get_current_user, require_permission
from hotelpms.security.permissions import MANAGE_RESERVATIONS, MANAGE_BILLING
from hotelpms.services.booking_service import BookingService

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def _response(service: BookingService, booking) -> BookingResponse:
    return BookingResponse(**service.get_booking_detail(booking))


@router.get("", response_model=List[BookingResponse])
def list_bookings(
    status: Optional[BookingStatus] = None,
    guest_id: Optional[int] = None,
    room_id: Optional[int] = None,
    check_in_date: Optional[date] = None,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    service = BookingService(db)
    bookings = service.get_bookings(status, guest_id, room_id, check_in_date, limit)
    return [_response(service, b) for b in bookings]


@router.get("/today-arrivals", response_model=List[BookingResponse])
def get_today_arrivals(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    service = BookingService(db)
    return [_response(service, b) for b in service.get_today_arrivals()]


@router.get("/today-departures", response_model=List[BookingResponse])
def get_today_departures(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    service = BookingService(db)
    return [_response(service, b) for b in service.get_today_departures()]


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    service = BookingService(db)
    booking = service.get_booking(booking_id)
    if not booking:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return _response(service, booking)


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_RESERVATIONS))
):
    """Reserve an available room; the price is fixed at creation"""
    service = BookingService(db)
    with service_errors():
        booking = service.create_booking(data, current_user.id)
    return _response(service, booking)


@router.post("/{booking_id}/check-in", response_model=BookingResponse)
def check_in(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_RESERVATIONS))
):
    """
    Check in: room becomes occupied and the invoice is opened
    with the room charge
    """
    service = BookingService(db)
    with service_errors():
        booking = service.check_in(booking_id, current_user.id)
    return _response(service, booking)


@router.post("/{booking_id}/check-out", response_model=BookingResponse)
def check_out(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_RESERVATIONS))
):
    """
    Check out: room becomes dirty and the stay is recorded
    in the guest's loyalty ledger
    """
    service = BookingService(db)
    with service_errors():
        booking = service.check_out(booking_id, current_user.id)
    return _response(service, booking)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: int,
    data: BookingCancel,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_RESERVATIONS))
):
    service = BookingService(db)
    with service_errors():
        booking = service.cancel(booking_id, data, current_user.id)
    return _response(service, booking)


@router.post("/{booking_id}/no-show", response_model=BookingResponse)
def mark_no_show(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_RESERVATIONS))
):
    service = BookingService(db)
    with service_errors():
        booking = service.mark_no_show(booking_id, current_user.id)
    return _response(service, booking)


@router.post("/{booking_id}/payments", response_model=BookingResponse)
def add_booking_payment(
    booking_id: int,
    data: PaymentCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_permission(MANAGE_RESERVATIONS, MANAGE_BILLING))
):
    """Advance payment before check-in"""
    service = BookingService(db)
    with service_errors():
        booking = service.add_payment(booking_id, data, current_user.id)
    return _response(service, booking)
