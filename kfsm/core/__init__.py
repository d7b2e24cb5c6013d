"""
Core package: the machine, its states, the builders and the error hierarchy.

Architecture:
- MachineBuilder collects configuration and resolves the Machine <-> State reference
- Machine owns the (state, data) cell and runs the transition protocol
- State holds a read-only handler table bound to its machine
"""

# Import order matters to avoid circular dependencies
from .errors import (
    FSMError,
    InvalidInvocationError,
    MalformedTransitionError,
    SealedError,
    UnknownEventError,
    UnknownStateError,
)
from .types import Transition
from .states import State, StateBuilder
from .state_machine import Extensions, Machine
from .builder import MachineBuilder, create

__all__ = [
    "FSMError",
    "InvalidInvocationError",
    "UnknownEventError",
    "MalformedTransitionError",
    "UnknownStateError",
    "SealedError",
    "Transition",
    "State",
    "StateBuilder",
    "Extensions",
    "Machine",
    "MachineBuilder",
    "create",
]
