"""
Event handlers - audit trail for domain events
Handlers run after the publishing service has committed. A failing
handler is logged by the event bus and never reaches the caller.
"""
import logging

from hotelpms.engine.event_bus import Event, EventBus, event_bus
from hotelpms.models.events import EventType

logger = logging.getLogger(__name__)

audit_logger = logging.getLogger("hotelpms.audit")


class EventHandlers:
    """Event handler collection"""

    def __init__(self):
        self._registered = False

    def handle_audit(self, event: Event) -> None:
        """Every domain event goes to the audit log"""
        audit_logger.info(
            f"[{event.event_type}] source={event.source} id={event.event_id} data={event.data}"
        )

    def handle_payment_received(self, event: Event) -> None:
        data = event.data
        if data.get("status") == "paid":
            logger.info(f"Invoice {data.get('invoice_number')} settled in full")

    def handle_booking_checked_out(self, event: Event) -> None:
        data = event.data
        logger.info(
            f"Room {data.get('room_number')} released by booking {data.get('booking_number')}; "
            f"awaiting housekeeping"
        )

    def handle_guest_tier_changed(self, event: Event) -> None:
        data = event.data
        logger.info(
            f"Guest {data.get('guest_id')} promoted {data.get('old_tier')} -> {data.get('new_tier')}"
        )

    def _subscriptions(self):
        subscriptions = [(event_type.value, self.handle_audit) for event_type in EventType]
        subscriptions += [
            (EventType.PAYMENT_RECEIVED.value, self.handle_payment_received),
            (EventType.BOOKING_CHECKED_OUT.value, self.handle_booking_checked_out),
            (EventType.GUEST_TIER_CHANGED.value, self.handle_guest_tier_changed),
        ]
        return subscriptions

    def register_handlers(self, event_bus_instance: EventBus = None) -> None:
        if self._registered:
            return

        bus = event_bus_instance or event_bus
        for event_type, handler in self._subscriptions():
            bus.subscribe(event_type, handler)

        self._registered = True
        logger.info("Event handlers registered successfully")

    def unregister_handlers(self, event_bus_instance: EventBus = None) -> None:
        """Used by tests"""
        bus = event_bus_instance or event_bus
        for event_type, handler in self._subscriptions():
            bus.unsubscribe(event_type, handler)

        self._registered = False
        logger.info("Event handlers unregistered")


event_handlers = EventHandlers()


def register_event_handlers():
    """Called once at application startup"""
    event_handlers.register_handlers()
