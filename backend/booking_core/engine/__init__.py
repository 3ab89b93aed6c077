"""
booking_core/engine - generic engines

- state_machine: table-driven state transitions
"""

from booking_core.engine.state_machine import (
    StateTransition,
    StateMachineConfig,
    StateMachine,
)

__all__ = [
    "StateTransition",
    "StateMachineConfig",
    "StateMachine",
]
