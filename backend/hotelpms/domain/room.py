"""
hotelpms/domain/room.py

Room status machine.

Any status may be set to any other; there is no guarded graph. Every change
still goes through ``set_status`` so side effects (audit fields, logging)
live in one place.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, Union
import logging

from hotelpms.domain.errors import InvalidTransition
from hotelpms.domain.money import room_total_rate
from hotelpms.models.ontology import Room, RoomStatus

logger = logging.getLogger(__name__)


def _coerce_status(value: Union[RoomStatus, str]) -> RoomStatus:
    try:
        return RoomStatus(value)
    except ValueError:
        raise InvalidTransition(f"Unknown room status: {value}")


def set_status(room: Room, new_status: Union[RoomStatus, str], actor_id: Optional[int], now: datetime) -> RoomStatus:
    """
    Single entry point for room status changes

    Args:
        room: room to update
        new_status: target status
        actor_id: employee making the change
        now: current time

    Returns:
        the previous status

    Raises:
        InvalidTransition: if ``new_status`` is not a known room status
    """
    target = _coerce_status(new_status)
    previous = room.status
    room.status = target
    room.status_updated_at = now
    room.status_updated_by = actor_id
    logger.info(f"Room {room.room_number} status {getattr(previous, 'value', previous)} -> {target.value}")
    return previous


def mark_cleaned(room: Room, housekeeper_id: Optional[int], notes: Optional[str], now: datetime) -> RoomStatus:
    """Record a housekeeping pass and set the room clean"""
    room.last_cleaned = now
    room.cleaned_by = housekeeper_id
    room.cleaning_notes = notes
    return set_status(room, RoomStatus.CLEAN, housekeeper_id, now)


def flag_maintenance(room: Room, notes: Optional[str], actor_id: Optional[int], now: datetime) -> RoomStatus:
    """Take the room out of sale for maintenance"""
    room.maintenance_required = True
    room.maintenance_notes = notes
    return set_status(room, RoomStatus.MAINTENANCE, actor_id, now)


def complete_maintenance(room: Room, actor_id: Optional[int], now: datetime) -> RoomStatus:
    """Close the maintenance record; the room needs cleaning before sale"""
    room.maintenance_required = False
    room.last_maintenance = now
    return set_status(room, RoomStatus.DIRTY, actor_id, now)


def deactivate(room: Room) -> None:
    """Rooms are never deleted, only deactivated"""
    room.is_active = False
    logger.info(f"Room {room.room_number} deactivated")


def is_available(room: Room) -> bool:
    """The only gate a reservation flow checks before attaching a booking"""
    return room.status == RoomStatus.AVAILABLE and bool(room.is_active)


def total_rate(room: Room) -> Decimal:
    """All-in nightly rate including tax"""
    tax_rate = room.tax_rate if room.tax_rate is not None else Decimal("0")
    return room_total_rate(room.base_rate, tax_rate)


__all__ = [
    "set_status",
    "mark_cleaned",
    "flag_maintenance",
    "complete_maintenance",
    "deactivate",
    "is_available",
    "total_rate",
]
