"""
Room service - persistence around the room status machine
Every status change goes through hotelpms.domain.room and publishes
ROOM_STATUS_CHANGED after the commit.
"""
from datetime import datetime
from typing import Callable, List, Optional
import logging

from sqlalchemy.orm import Session

from hotelpms.config import settings
from hotelpms.database import transaction
from hotelpms.domain import room as room_machine
from hotelpms.engine.event_bus import Event, event_bus
from hotelpms.models.events import EventType, RoomStatusChangedData
from hotelpms.models.ontology import Currency, Room, RoomStatus
from hotelpms.models.schemas import RoomCreate, RoomUpdate
from hotelpms.services.errors import NotFoundError

logger = logging.getLogger(__name__)


class RoomService:
    """Room service"""

    def __init__(
        self,
        db: Session,
        event_publisher: Callable[[Event], None] = None,
        clock: Callable[[], datetime] = None,
    ):
        self.db = db
        # Injectable for tests
        self._publish_event = event_publisher or event_bus.publish
        self._now = clock or datetime.now

    # ============== Queries ==============

    def get_rooms(
        self,
        status: Optional[RoomStatus] = None,
        floor: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> List[Room]:
        query = self.db.query(Room)
        if status:
            query = query.filter(Room.status == status)
        if floor is not None:
            query = query.filter(Room.floor == floor)
        if is_active is not None:
            query = query.filter(Room.is_active == is_active)
        return query.order_by(Room.room_number).all()

    def get_room(self, room_id: int) -> Optional[Room]:
        return self.db.query(Room).filter(Room.id == room_id).first()

    def get_room_by_number(self, room_number: str) -> Optional[Room]:
        return self.db.query(Room).filter(Room.room_number == room_number).first()

    def require_room(self, room_id: int) -> Room:
        room = self.get_room(room_id)
        if not room:
            raise NotFoundError("Room", room_id)
        return room

    def get_available_rooms(self) -> List[Room]:
        """Rooms a new booking may be attached to right now"""
        rooms = self.get_rooms(status=RoomStatus.AVAILABLE, is_active=True)
        return [room for room in rooms if room_machine.is_available(room)]

    def get_room_detail(self, room: Room) -> dict:
        """Room fields plus the derived all-in rate and availability"""
        return {
            "id": room.id,
            "room_number": room.room_number,
            "room_type": room.room_type,
            "floor": room.floor,
            "capacity_adults": room.capacity_adults,
            "capacity_children": room.capacity_children,
            "max_occupancy": room.max_occupancy,
            "bed_type": room.bed_type,
            "bed_count": room.bed_count,
            "base_rate": room.base_rate,
            "tax_rate": room.tax_rate,
            "total_rate": room_machine.total_rate(room),
            "currency": room.currency,
            "status": room.status,
            "status_updated_at": room.status_updated_at,
            "status_updated_by": room.status_updated_by,
            "last_cleaned": room.last_cleaned,
            "cleaned_by": room.cleaned_by,
            "cleaning_notes": room.cleaning_notes,
            "maintenance_required": bool(room.maintenance_required),
            "maintenance_notes": room.maintenance_notes,
            "last_maintenance": room.last_maintenance,
            "is_active": bool(room.is_active),
            "is_available": room_machine.is_available(room),
        }

    # ============== Commands ==============

    def create_room(self, data: RoomCreate, operator_id: Optional[int] = None) -> Room:
        if self.get_room_by_number(data.room_number):
            raise ValueError(f"Room number {data.room_number} already exists")

        values = data.model_dump()
        if values.get("tax_rate") is None:
            values["tax_rate"] = settings.DEFAULT_TAX_RATE
        if values.get("currency") is None:
            values["currency"] = Currency(settings.DEFAULT_CURRENCY)

        room = Room(
            **values,
            status=RoomStatus.AVAILABLE,
            status_updated_at=self._now(),
            status_updated_by=operator_id,
            is_active=True,
        )
        with transaction(self.db):
            self.db.add(room)
        self.db.refresh(room)
        logger.info(f"Room {room.room_number} created")
        return room

    def update_room(self, room_id: int, data: RoomUpdate) -> Room:
        """Descriptive fields only; status has its own operations"""
        room = self.require_room(room_id)
        with transaction(self.db):
            for key, value in data.model_dump(exclude_unset=True).items():
                setattr(room, key, value)
        self.db.refresh(room)
        return room

    def update_room_status(self, room_id: int, status: RoomStatus, operator_id: int) -> Room:
        room = self.require_room(room_id)
        now = self._now()
        with transaction(self.db):
            previous = room_machine.set_status(room, status, operator_id, now)
        self.publish_status_change(room, previous, operator_id, now, "manual")
        return room

    def mark_cleaned(self, room_id: int, operator_id: int, notes: Optional[str] = None) -> Room:
        room = self.require_room(room_id)
        now = self._now()
        with transaction(self.db):
            previous = room_machine.mark_cleaned(room, operator_id, notes, now)
        self.publish_status_change(room, previous, operator_id, now, "cleaned")
        return room

    def flag_maintenance(self, room_id: int, operator_id: int, notes: Optional[str] = None) -> Room:
        room = self.require_room(room_id)
        now = self._now()
        with transaction(self.db):
            previous = room_machine.flag_maintenance(room, notes, operator_id, now)
        self.publish_status_change(room, previous, operator_id, now, "maintenance")
        return room

    def complete_maintenance(self, room_id: int, operator_id: int) -> Room:
        room = self.require_room(room_id)
        now = self._now()
        with transaction(self.db):
            previous = room_machine.complete_maintenance(room, operator_id, now)
        self.publish_status_change(room, previous, operator_id, now, "maintenance_completed")
        return room

    def deactivate_room(self, room_id: int) -> Room:
        room = self.require_room(room_id)
        with transaction(self.db):
            room_machine.deactivate(room)
        return room

    # ============== Events ==============

    def publish_status_change(
        self,
        room: Room,
        previous: Optional[RoomStatus],
        operator_id: Optional[int],
        now: datetime,
        reason: str,
    ) -> None:
        self._publish_event(Event(
            event_type=EventType.ROOM_STATUS_CHANGED,
            timestamp=now,
            data=RoomStatusChangedData(
                room_id=room.id,
                room_number=room.room_number,
                old_status=RoomStatus(previous).value if previous is not None else "",
                new_status=RoomStatus(room.status).value,
                changed_by=operator_id,
                reason=reason,
            ).to_dict(),
            source="room_service",
        ))
