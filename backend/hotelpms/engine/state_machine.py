"""
hotelpms/engine/state_machine.py

State machine engine - declarative transition graphs with guarded triggers
"""
from typing import Dict, List, Any, Optional, Callable
from dataclasses import dataclass, field
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateTransition:
    """
    A single allowed edge of the graph

    Attributes:
        from_state: source state
        to_state: target state
        trigger: action name that fires the edge
        condition: optional guard evaluated against a context dict
    """

    from_state: str
    to_state: str
    trigger: str
    condition: Optional[Callable[[Dict[str, Any]], bool]] = None

    def is_allowed(self, context: Dict[str, Any]) -> bool:
        """Evaluate the guard"""
        if self.condition is None:
            return True
        return bool(self.condition(context))


@dataclass(frozen=True)
class StateMachineConfig:
    """
    Static description of a state machine

    Attributes:
        name: machine name, used in log lines
        states: every known state
        transitions: allowed edges
        initial_state: state for new instances
    """

    name: str
    states: List[str]
    transitions: List[StateTransition]
    initial_state: str

    def terminal_states(self) -> List[str]:
        """States with no outgoing edge"""
        sources = {t.from_state for t in self.transitions}
        return [s for s in self.states if s not in sources]


@dataclass
class StateMachineSnapshot:
    """
    One fired transition, kept for auditing

    Attributes:
        previous_state: state before firing
        current_state: state after firing
        trigger: trigger that fired
        timestamp: when it fired
    """

    previous_state: str
    current_state: str
    trigger: str
    timestamp: datetime


class StateMachine:
    """
    State machine instance bound to one entity's current state

    Example:
        >>> machine = StateMachine(BOOKING_MACHINE, "confirmed")
        >>> if machine.can_transition_to("checked_in", "check_in"):
        ...     machine.transition_to("checked_in", "check_in")
    """

    def __init__(self, config: StateMachineConfig, current_state: Optional[str] = None):
        self._config = config
        self._current_state = current_state if current_state is not None else config.initial_state
        self._history: List[StateMachineSnapshot] = []
        self._transition_map: Dict[str, Dict[str, StateTransition]] = {}

        # (from_state, trigger) -> transition
        for t in config.transitions:
            self._transition_map.setdefault(t.from_state, {})[t.trigger] = t

    @property
    def current_state(self) -> str:
        return self._current_state

    @property
    def config(self) -> StateMachineConfig:
        return self._config

    def allowed_triggers(self, context: Optional[Dict[str, Any]] = None) -> List[str]:
        """Triggers that may fire from the current state"""
        transitions = self._transition_map.get(self._current_state, {})
        return [trigger for trigger, t in transitions.items() if t.is_allowed(context or {})]

    def is_terminal(self) -> bool:
        return not self._transition_map.get(self._current_state)

    def can_transition_to(self, target_state: str, trigger: str, context: Optional[Dict[str, Any]] = None) -> bool:
        """
        Check whether ``trigger`` moves the machine to ``target_state``

        Args:
            target_state: desired state
            trigger: action name
            context: guard input

        Returns:
            True if the edge exists and its guard passes
        """
        if target_state not in self._config.states:
            return False

        transition = self._transition_map.get(self._current_state, {}).get(trigger)
        if transition is None or transition.to_state != target_state:
            return False

        return transition.is_allowed(context or {})

    def transition_to(
        self,
        target_state: str,
        trigger: str,
        context: Optional[Dict[str, Any]] = None,
        timestamp: Optional[datetime] = None,
    ) -> bool:
        """
        Fire a transition

        Returns:
            True on success, False when the edge is not allowed
        """
        if not self.can_transition_to(target_state, trigger, context):
            logger.warning(
                f"{self._config.name}: invalid transition "
                f"{self._current_state} -> {target_state} (trigger: {trigger})"
            )
            return False

        previous_state = self._current_state
        self._current_state = target_state
        self._history.append(StateMachineSnapshot(
            previous_state=previous_state,
            current_state=target_state,
            trigger=trigger,
            timestamp=timestamp or datetime.now(),
        ))

        logger.info(f"{self._config.name}: {previous_state} -> {target_state} (trigger: {trigger})")
        return True

    def get_history(self) -> List[StateMachineSnapshot]:
        """Fired transitions, oldest first"""
        return list(self._history)


__all__ = [
    "StateTransition",
    "StateMachineConfig",
    "StateMachineSnapshot",
    "StateMachine",
]
