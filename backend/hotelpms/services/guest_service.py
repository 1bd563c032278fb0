"""
Guest service - profiles and the loyalty ledger
"""
from datetime import datetime
from typing import Callable, List, Optional
import logging

from sqlalchemy import desc, or_
from sqlalchemy.orm import Session

from hotelpms.database import transaction
from hotelpms.domain import guest as guest_ledger
from hotelpms.engine.event_bus import Event, event_bus
from hotelpms.models.events import EventType, GuestTierChangedData
from hotelpms.models.ontology import Guest, GuestTier
from hotelpms.models.schemas import GuestCreate, GuestUpdate
from hotelpms.services.errors import NotFoundError

logger = logging.getLogger(__name__)


class GuestService:
    """Guest service"""

    def __init__(
        self,
        db: Session,
        event_publisher: Callable[[Event], None] = None,
        clock: Callable[[], datetime] = None,
    ):
        self.db = db
        self._publish_event = event_publisher or event_bus.publish
        self._now = clock or datetime.now

    def get_guests(
        self,
        search: Optional[str] = None,
        tier: Optional[GuestTier] = None,
        is_blacklisted: Optional[bool] = None,
        limit: int = 100,
    ) -> List[Guest]:
        query = self.db.query(Guest)

        if search:
            search_pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Guest.first_name.like(search_pattern),
                    Guest.last_name.like(search_pattern),
                    Guest.email.like(search_pattern),
                    Guest.phone.like(search_pattern),
                )
            )

        if tier:
            query = query.filter(Guest.tier == tier)

        if is_blacklisted is not None:
            query = query.filter(Guest.is_blacklisted == is_blacklisted)

        return query.order_by(desc(Guest.created_at), desc(Guest.id)).limit(limit).all()

    def get_guest(self, guest_id: int) -> Optional[Guest]:
        return self.db.query(Guest).filter(Guest.id == guest_id).first()

    def get_guest_by_email(self, email: str) -> Optional[Guest]:
        return self.db.query(Guest).filter(Guest.email == email.lower()).first()

    def require_guest(self, guest_id: int) -> Guest:
        guest = self.get_guest(guest_id)
        if not guest:
            raise NotFoundError("Guest", guest_id)
        return guest

    def create_guest(self, data: GuestCreate) -> Guest:
        if self.get_guest_by_email(data.email):
            raise ValueError(f"A guest with email {data.email} already exists")

        guest = Guest(
            **data.model_dump(),
            loyalty_points=0,
            tier=GuestTier.BRONZE,
            total_bookings=0,
            is_blacklisted=False,
        )
        with transaction(self.db):
            self.db.add(guest)
        self.db.refresh(guest)
        logger.info(f"Guest {guest.id} created: {guest.full_name}")
        return guest

    def update_guest(self, guest_id: int, data: GuestUpdate) -> Guest:
        guest = self.require_guest(guest_id)
        with transaction(self.db):
            for key, value in data.model_dump(exclude_unset=True).items():
                setattr(guest, key, value)
        self.db.refresh(guest)
        return guest

    def add_loyalty_points(self, guest_id: int, points: int) -> Guest:
        """Manual loyalty credit; upgrades the tier when a threshold is crossed"""
        guest = self.require_guest(guest_id)
        old_tier = GuestTier(guest.tier) if guest.tier is not None else GuestTier.BRONZE
        with transaction(self.db):
            new_tier = guest_ledger.add_loyalty_points(guest, points)
        if new_tier is not None:
            self.publish_tier_change(guest, old_tier, new_tier)
        return guest

    def publish_tier_change(self, guest: Guest, old_tier: GuestTier, new_tier: GuestTier) -> None:
        self._publish_event(Event(
            event_type=EventType.GUEST_TIER_CHANGED,
            timestamp=self._now(),
            data=GuestTierChangedData(
                guest_id=guest.id,
                old_tier=old_tier.value,
                new_tier=new_tier.value,
                loyalty_points=guest.loyalty_points,
            ).to_dict(),
            source="guest_service",
        ))
