"""
Engine primitives shared by the domain and service layers
"""
from hotelpms.engine.state_machine import (
    StateTransition, StateMachineConfig, StateMachineSnapshot, StateMachine,
)
from hotelpms.engine.event_bus import Event, EventBus, event_bus

__all__ = [
    "StateTransition",
    "StateMachineConfig",
    "StateMachineSnapshot",
    "StateMachine",
    "Event",
    "EventBus",
    "event_bus",
]
