"""
Settlement engine - pure transitions over in-memory rooms, bookings,
invoices and guests. Nothing in this package touches the database.
"""
from hotelpms.domain.errors import (
    SettlementError, InvalidTransition, InvalidAmount, InvalidDateRange, NotAvailable,
)
from hotelpms.domain import money, room, booking, invoice, guest, identifiers, pos

__all__ = [
    "SettlementError",
    "InvalidTransition",
    "InvalidAmount",
    "InvalidDateRange",
    "NotAvailable",
    "money",
    "room",
    "booking",
    "invoice",
    "guest",
    "identifiers",
    "pos",
]
