"""
booking_core/engine/state_machine.py

State machine engine - transitions validated against an explicit table.
"""
from typing import Dict, List, Optional
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateTransition:
    """
    A single allowed edge of a state machine.

    Attributes:
        from_state: Source state
        to_state: Target state
        trigger: Name of the action that fires the transition
    """

    from_state: str
    to_state: str
    trigger: str


@dataclass
class StateMachineConfig:
    """
    State machine configuration.

    Attributes:
        name: Machine name, used in log lines
        states: All known states
        transitions: Allowed transitions
        initial_state: Initial state
    """

    name: str
    states: List[str]
    transitions: List[StateTransition]
    initial_state: str


class StateMachine:
    """
    State machine engine

    Example:
        >>> machine = StateMachine(
        ...     config=StateMachineConfig(
        ...         name="Booking",
        ...         states=["pending", "confirmed", "cancelled"],
        ...         transitions=[StateTransition("pending", "confirmed", "confirm")],
        ...         initial_state="pending",
        ...     )
        ... )
        >>> machine.transition_to("confirmed", "confirm")
        True
    """

    def __init__(self, config: StateMachineConfig, current_state: Optional[str] = None):
        self._config = config
        self._current_state = current_state if current_state is not None else config.initial_state
        if self._current_state not in config.states:
            raise ValueError(f"Unknown state '{self._current_state}' for {config.name}")
        self._transition_map: Dict[str, Dict[str, StateTransition]] = {}

        # (from_state, trigger) -> transition
        for t in config.transitions:
            self._transition_map.setdefault(t.from_state, {})[t.trigger] = t

    @property
    def current_state(self) -> str:
        return self._current_state

    def can_transition_to(self, target_state: str, trigger: str) -> bool:
        """
        Check whether the current state may move to target_state.

        Args:
            target_state: Target state
            trigger: Triggering action

        Returns:
            True if the table has the edge
        """
        if target_state not in self._config.states:
            return False

        transition = self._transition_map.get(self._current_state, {}).get(trigger)
        return transition is not None and transition.to_state == target_state

    def transition_to(self, target_state: str, trigger: str) -> bool:
        """
        Execute a transition.

        Returns:
            True if the transition happened, False if it was rejected
        """
        if not self.can_transition_to(target_state, trigger):
            logger.warning(
                f"Invalid {self._config.name} transition: "
                f"{self._current_state} -> {target_state} (trigger: {trigger})"
            )
            return False

        previous_state = self._current_state
        self._current_state = target_state
        logger.info(f"{self._config.name} transition: {previous_state} -> {target_state} (trigger: {trigger})")
        return True


__all__ = [
    "StateTransition",
    "StateMachineConfig",
    "StateMachine",
]
