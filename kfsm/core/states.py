# kfsm/core/states.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Sequence

from kfsm.core.errors import InvalidInvocationError, UnknownEventError
from kfsm.core.types import EventID, Handler, StateID

if TYPE_CHECKING:
    from kfsm.core.state_machine import Machine


@dataclass(frozen=True, eq=False)
class State:
    """
    A built state: its name, a read-only table of event handlers, and the
    machine it belongs to. Handlers are always invoked with that machine as
    their first argument.
    """

    name: StateID
    handlers: Mapping[EventID, Handler]
    owner: "Machine" = field(repr=False)

    def fire(self, args: Sequence[Any], current_data: Any, kwargs: Optional[Dict[str, Any]] = None) -> Any:
        """
        Run the handler registered for args[0].

        :param args: Positional arguments given to Machine.fire, event name first.
        :param current_data: The machine's current data.
        :param kwargs: Keyword arguments given to Machine.fire.
        :return: Whatever the handler returned; the machine validates it.
        :raises InvalidInvocationError: If no event name was given.
        :raises UnknownEventError: If this state has no handler for the event.
        """
        if not args:
            raise InvalidInvocationError("fire() must be called with at least the event name")
        event = args[0]
        handler = self.handlers.get(event)
        if handler is None:
            raise UnknownEventError(f'The event "{event}" does not exist in state "{self.name}"', event, self.name)
        return handler(self.owner, current_data, *args[1:], **(kwargs or {}))

    def describe(self) -> Dict[str, Any]:
        """Name and handled event names, never the handler bodies."""
        return {"name": self.name, "handlers": list(self.handlers)}


class StateBuilder:
    """
    Collects event handlers for one state while the machine is being configured.
    """

    def __init__(self, name: StateID) -> None:
        self._name = name
        self._handlers: Dict[EventID, Handler] = {}

    @property
    def name(self) -> StateID:
        return self._name

    def on(self, event: EventID, handler: Handler) -> "StateBuilder":
        """
        Bind a handler to an event. Binding the same event twice keeps the last one.

        The handler is called as handler(machine, data, *args, **kwargs) and must
        return the next (state, data) pair.

        :param event: The event name.
        :param handler: The transition function.
        :return: This builder, for chaining.
        """
        self._handlers[event] = handler
        return self

    def build(self, machine: "Machine") -> State:
        """
        Freeze the collected handlers into a State owned by machine. The handler
        table is copied, so later calls to on() do not reach the built state.
        """
        return State(self._name, MappingProxyType(dict(self._handlers)), machine)
