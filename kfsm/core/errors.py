# kfsm/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Any, Dict, Hashable, Optional


class FSMError(Exception):
    """
    Base exception class for errors raised by the finite state machine engine.

    All engine errors are programmer errors: they are raised synchronously at the
    point of misuse and are never caught or retried by the engine itself.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidInvocationError(FSMError):
    """
    Raised when fire() is called without an event name.
    """


class UnknownEventError(FSMError):
    """
    Raised when the current state has no handler for the fired event.
    """

    def __init__(self, message: str, event: Hashable, state: Hashable, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.event = event
        self.state = state


class MalformedTransitionError(FSMError):
    """
    Raised when a handler returns something other than a (state, data) pair.
    """

    def __init__(
        self,
        message: str,
        event: Hashable,
        state: Hashable,
        result: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.event = event
        self.state = state
        self.result = result


class UnknownStateError(FSMError):
    """
    Raised when the machine is asked to dispatch from (or, in strict mode, move to)
    a state that was never declared.
    """

    def __init__(self, message: str, state: Hashable, event: Hashable = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.state = state
        self.event = event


class SealedError(FSMError, AttributeError):
    """
    Raised on any attempt to change the structure of a built machine.
    """

    def __init__(self, message: str, member: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.member = member
