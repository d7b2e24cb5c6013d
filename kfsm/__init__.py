"""kfsm: small embeddable finite state machine engine

A machine is described through a builder: an initial (state, data) pair, the
states with their event handlers, and listeners for state changes. Events are
dispatched to the current state's handler, which returns the next
(state, data) pair.

Responsibilities:
    - Machine construction and sealing
    - Event dispatch and transition commit
    - State change notification
    - Deferred execution after a transition, on the same stack or later

Cross-cutting Concerns:
    Error Handling:
        - Every misuse raises a subclass of FSMError at the point of misuse
        - Errors are never swallowed by the engine

    Logging:
        - Standard library logging under the "kfsm" logger, DEBUG level only

    Thread Safety:
        - fire() runs under a per-machine reentrant lock
        - Deferred queues are safe to push to from any thread
"""

from kfsm.core.builder import MachineBuilder, create
from kfsm.core.errors import (
    FSMError,
    InvalidInvocationError,
    MalformedTransitionError,
    SealedError,
    UnknownEventError,
    UnknownStateError,
)
from kfsm.core.state_machine import Extensions, Machine
from kfsm.core.states import State, StateBuilder
from kfsm.core.types import Transition
from kfsm.runtime.scheduler import AsyncioScheduler, DefaultScheduler, ManualScheduler, Scheduler, ThreadScheduler

__version__ = "0.1.0"

__all__ = [
    # Entry point and builders
    "create",
    "MachineBuilder",
    "StateBuilder",
    # Built objects
    "Machine",
    "State",
    "Extensions",
    "Transition",
    # Errors
    "FSMError",
    "InvalidInvocationError",
    "UnknownEventError",
    "MalformedTransitionError",
    "UnknownStateError",
    "SealedError",
    # Schedulers
    "Scheduler",
    "DefaultScheduler",
    "AsyncioScheduler",
    "ThreadScheduler",
    "ManualScheduler",
]
