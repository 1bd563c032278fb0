"""
hotelpms/domain/identifiers.py

Booking and invoice number formats.

    BK  + base-36 millisecond timestamp + 4 random base-36 characters
    INV + year + zero-padded month + base-36 millisecond timestamp
"""
from datetime import datetime, timezone
import secrets
import string

BASE36_ALPHABET = string.digits + string.ascii_uppercase


def to_base36(value: int) -> str:
    """Upper-case base-36 representation of a non-negative integer"""
    if value < 0:
        raise ValueError("base-36 encoding needs a non-negative integer")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def _epoch_millis(now: datetime) -> int:
    if now.tzinfo is None:
        now = now.astimezone()
    return int(now.astimezone(timezone.utc).timestamp() * 1000)


def generate_booking_number(now: datetime) -> str:
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(4))
    return f"BK{to_base36(_epoch_millis(now))}{suffix}"


def generate_invoice_number(now: datetime) -> str:
    return f"INV{now.year}{now.month:02d}{to_base36(_epoch_millis(now))}"


__all__ = ["to_base36", "generate_booking_number", "generate_invoice_number"]
