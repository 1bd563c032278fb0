# ORM Models
from hotelpms.models.ontology import (
    Room, Guest, Booking, BookingPayment,
    Invoice, InvoiceLineItem, InvoicePayment, Employee, PosItem
)

__all__ = [
    'Room', 'Guest', 'Booking', 'BookingPayment',
    'Invoice', 'InvoiceLineItem', 'InvoicePayment', 'Employee', 'PosItem'
]
