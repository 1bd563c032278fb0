"""
Application services - persistence and event publication around the
settlement engine in hotelpms.domain
"""
from hotelpms.services.errors import NotFoundError
from hotelpms.services.room_service import RoomService
from hotelpms.services.guest_service import GuestService
from hotelpms.services.billing_service import BillingService
from hotelpms.services.booking_service import BookingService
from hotelpms.services.employee_service import EmployeeService
from hotelpms.services.pos_service import PosService

__all__ = [
    "NotFoundError",
    "RoomService",
    "GuestService",
    "BillingService",
    "BookingService",
    "EmployeeService",
    "PosService",
]
