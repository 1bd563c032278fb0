"""
Event bus - in-memory publish/subscribe
Decouples the settlement services from side channels such as the audit log.
"""
from typing import Callable, Dict, List, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime
from collections import deque
import logging
import threading
import uuid

logger = logging.getLogger(__name__)


def _event_key(event_type) -> str:
    """Enum members and their string values address the same subscribers"""
    return getattr(event_type, "value", event_type)


@dataclass
class Event:
    """Domain event envelope"""
    event_type: str
    timestamp: datetime
    data: Dict[str, Any]
    source: str  # publishing service
    event_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        self.event_type = _event_key(self.event_type)


class EventBus:
    """
    In-memory event bus (thread-safe singleton)

    Usage:
    1. event_bus.subscribe("booking.checked_out", handler)
    2. event_bus.publish(Event(...))
    3. event_bus.unsubscribe("booking.checked_out", handler)

    Events are published after the database commit; a failing handler is
    logged and never affects the publisher or other handlers.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._subscribers: Dict[str, List[Callable[[Event], None]]] = {}
        self._event_history: deque = deque(maxlen=100)
        self._subscriber_lock = threading.Lock()
        self._initialized = True
        logger.info("EventBus initialized")

    def subscribe(self, event_type: str, handler: Callable[[Event], None]) -> None:
        event_type = _event_key(event_type)
        with self._subscriber_lock:
            handlers = self._subscribers.setdefault(event_type, [])
            if handler not in handlers:
                handlers.append(handler)
                logger.info(f"Handler {handler.__name__} subscribed to {event_type}")

    def unsubscribe(self, event_type: str, handler: Callable[[Event], None]) -> None:
        event_type = _event_key(event_type)
        with self._subscriber_lock:
            if handler in self._subscribers.get(event_type, []):
                self._subscribers[event_type].remove(handler)
                logger.info(f"Handler {handler.__name__} unsubscribed from {event_type}")

    def publish(self, event: Event) -> None:
        """
        Publish synchronously to every subscriber

        Args:
            event: event to deliver
        """
        self._event_history.append(event)

        with self._subscriber_lock:
            handlers = list(self._subscribers.get(event.event_type, []))

        if handlers:
            logger.debug(f"Publishing {event.event_type} to {len(handlers)} handlers")

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"Event handler {handler.__name__} error for {event.event_type}: {e}",
                    exc_info=True
                )

    def get_history(self, event_type: Optional[str] = None, limit: int = 50) -> List[Event]:
        """
        Recent events, newest first

        Args:
            event_type: optional filter
            limit: maximum number returned
        """
        history = list(self._event_history)
        if event_type:
            event_type = _event_key(event_type)
            history = [e for e in history if e.event_type == event_type]
        return list(reversed(history))[:limit]

    def get_subscribers(self, event_type: Optional[str] = None) -> Dict[str, List[str]]:
        with self._subscriber_lock:
            if event_type:
                event_type = _event_key(event_type)
                return {event_type: [h.__name__ for h in self._subscribers.get(event_type, [])]}
            return {
                et: [h.__name__ for h in handlers]
                for et, handlers in self._subscribers.items()
            }

    def clear_subscribers(self) -> None:
        """Drop all subscriptions (tests)"""
        with self._subscriber_lock:
            self._subscribers.clear()
        logger.info("All subscribers cleared")

    def clear_history(self) -> None:
        self._event_history.clear()


# Global event bus
event_bus = EventBus()
