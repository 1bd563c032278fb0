"""
hotelpms/domain/errors.py

Settlement engine error kinds.

All errors are local validation failures raised synchronously by the
operation that detects them. They subclass ``ValueError`` so service and
router code can keep catching ``ValueError`` for 4xx responses.
"""


class SettlementError(ValueError):
    """Base class for engine validation failures."""

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidTransition(SettlementError):
    """A status change outside the allowed edge set."""

    status_code = 409


class InvalidAmount(SettlementError):
    """Non-positive quantity, negative price/tax/rate or similar."""

    status_code = 400


class InvalidDateRange(SettlementError):
    """Check-out on or before check-in."""

    status_code = 400


class NotAvailable(SettlementError):
    """Room not available or not active for a new booking."""

    status_code = 409


__all__ = [
    "SettlementError",
    "InvalidTransition",
    "InvalidAmount",
    "InvalidDateRange",
    "NotAvailable",
]
