# kfsm/core/state_machine.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import json
import logging
import threading
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Sequence, Tuple, Union

from kfsm.core.errors import InvalidInvocationError, MalformedTransitionError, SealedError, UnknownStateError
from kfsm.core.states import State
from kfsm.core.types import Callback, StateChangeListener, StateID
from kfsm.runtime.deferred import CallbackQueue
from kfsm.runtime.scheduler import DefaultScheduler, Scheduler

logger = logging.getLogger(__name__)


class Extensions:
    """
    Application-defined members registered on the builder and reachable from
    handlers as machine.ext.<name>.

    The set of names is fixed when the machine is built. Existing names may be
    rebound; adding or deleting a name raises SealedError.
    """

    __slots__ = ("_members",)

    def __init__(self, members: Optional[Mapping[str, Any]] = None) -> None:
        object.__setattr__(self, "_members", dict(members or {}))

    def __getattr__(self, name: str) -> Any:
        try:
            return self._members[name]
        except KeyError:
            raise AttributeError(f"No extension member named '{name}'") from None

    def __setattr__(self, name: str, value: Any) -> None:
        if name not in self._members:
            raise SealedError(f"Cannot add extension member '{name}' to a built machine", name)
        self._members[name] = value

    def __delattr__(self, name: str) -> None:
        raise SealedError(f"Cannot remove extension member '{name}' from a built machine", name)

    def __contains__(self, name: object) -> bool:
        return name in self._members

    def __iter__(self) -> Iterator[str]:
        return iter(self._members)

    def __len__(self) -> int:
        return len(self._members)

    def __repr__(self) -> str:
        return f"Extensions({sorted(self._members)!r})"


class Machine:
    """
    A built finite state machine.

    Holds the current (state, data) pair, the table of states, the state change
    listeners and the two deferred callback queues. Machines are produced by
    MachineBuilder.build() (or kfsm.create()) and are sealed afterwards: the only
    thing that changes is the (state, data) cell, and only fire() writes it.
    """

    __slots__ = (
        "_cursor",
        "_states",
        "_listeners",
        "_deferred",
        "_deferred_out",
        "_scheduler",
        "_strict",
        "_ext",
        "_lock",
        "_sealed",
    )

    def __init__(
        self,
        initial_state: StateID,
        initial_data: Any,
        listeners: Sequence[StateChangeListener] = (),
        scheduler: Optional[Scheduler] = None,
        strict: bool = False,
    ) -> None:
        """
        Build the machine shell. The state table is not known yet: states need a
        reference to this machine, so the builder attaches them through _install().

        :param initial_state: The state the machine starts in.
        :param initial_data: The data the machine starts with.
        :param listeners: State change listeners, in call order.
        :param scheduler: Where execute_out() callbacks run. Defaults to DefaultScheduler.
        :param strict: Reject transitions to undeclared states instead of failing later.
        """
        self._cursor: Tuple[StateID, Any] = (initial_state, initial_data)
        self._states: Mapping[StateID, State] = MappingProxyType({})
        self._listeners: Tuple[StateChangeListener, ...] = tuple(listeners)
        self._deferred = CallbackQueue()
        self._deferred_out = CallbackQueue()
        self._scheduler = scheduler or DefaultScheduler()
        self._strict = strict
        self._ext = Extensions()
        self._lock = threading.RLock()

    def __setattr__(self, name: str, value: Any) -> None:
        # fire() commits the (state, data) cell through object.__setattr__
        if getattr(self, "_sealed", False):
            raise SealedError(f"Cannot set '{name}' on a built machine", name)
        object.__setattr__(self, name, value)

    def __delattr__(self, name: str) -> None:
        if getattr(self, "_sealed", False):
            raise SealedError(f"Cannot delete '{name}' from a built machine", name)
        object.__delattr__(self, name)

    def _install(self, states: Mapping[StateID, State], extensions: Optional[Mapping[str, Any]] = None) -> None:
        """
        Attach the built states and extension members, then seal the machine.
        """
        self._states = MappingProxyType(dict(states))
        self._ext = Extensions(extensions)
        self._sealed = True

    @property
    def current_state(self) -> StateID:
        """Name of the active state."""
        return self._cursor[0]

    @property
    def current_data(self) -> Any:
        """Data attached to the active state. Never inspected by the engine."""
        return self._cursor[1]

    @property
    def states(self) -> Mapping[StateID, State]:
        """Read-only view of the declared states."""
        return self._states

    @property
    def listeners(self) -> Tuple[StateChangeListener, ...]:
        return self._listeners

    @property
    def ext(self) -> Extensions:
        """Extension members registered with MachineBuilder.extend()."""
        return self._ext

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def strict(self) -> bool:
        return self._strict

    def fire(self, *args: Any, **kwargs: Any) -> "Machine":
        """
        Dispatch an event to the current state's handler and commit its result.

        The first positional argument is the event name. The handler is called as
        handler(machine, current_data, *args[1:], **kwargs) and must return the
        next (state, data) pair. Listeners are told about a change of state
        name, then deferred callbacks are drained.

        Calling fire() again from a handler, listener or execute() callback is
        allowed and runs as a nested transaction on the same stack.

        :return: This machine, for chaining.
        :raises InvalidInvocationError: If no event name was given.
        :raises UnknownStateError: If the current state was never declared, or, in
            strict mode, if the handler names an undeclared state.
        :raises UnknownEventError: If the current state does not handle the event.
        :raises MalformedTransitionError: If the handler result is not a pair.
        """
        if not args:
            raise InvalidInvocationError("fire() must be called with at least the event name")
        event = args[0]

        with self._lock:
            old_state, data = self._cursor
            state = self._states.get(old_state)
            if state is None:
                raise UnknownStateError(
                    f'Cannot fire event "{event}": state "{old_state}" does not exist', old_state, event
                )

            logger.debug("Dispatching %r in state %r", event, old_state)
            result = state.fire(args, data, kwargs)
            new_state, new_data = self._validate_result(result, event, old_state)

            object.__setattr__(self, "_cursor", (new_state, new_data))

            if new_state != old_state:
                logger.debug("Transition %r -> %r on %r", old_state, new_state, event)
                for listener in self._listeners:
                    listener(old_state, new_state)

            self._drain()
        return self

    def _validate_result(self, result: Any, event: Any, state: StateID) -> Tuple[StateID, Any]:
        if not isinstance(result, (tuple, list)) or len(result) != 2:
            raise MalformedTransitionError(
                f'All event handlers must return the next state and data. Error for event "{event}" on state "{state}"',
                event,
                state,
                result,
            )
        target, data = result
        if self._strict and target not in self._states:
            raise UnknownStateError(
                f'Event "{event}" on state "{state}" leads to undeclared state "{target}"', target, event
            )
        return target, data

    def _drain(self) -> None:
        """
        Run the synchronous batch, then hand the asynchronous batch to the
        scheduler. Both queues are swapped out first so callbacks queued during
        the drain wait for the next fire().
        """
        batch = self._deferred.swap()
        out_batch = self._deferred_out.swap()
        try:
            if batch:
                logger.debug("Running %d deferred callback(s)", len(batch))
            for callback in batch:
                callback()
        finally:
            for callback in out_batch:
                self._scheduler.schedule(callback)

    def execute(self, callback: Callback) -> "Machine":
        """
        Run callback after the current transition, before fire() returns.

        Callbacks run in the order they were registered, on the same stack as
        fire(). A callback that calls execute() again is deferred to the next
        fire(). Calling fire() from a callback re-enters the dispatch on the same
        stack; use execute_out() for chains of events.

        :param callback: Zero-argument callable.
        :return: This machine, for chaining.
        """
        self._deferred.push(callback)
        return self

    def execute_out(self, callback: Callback) -> "Machine":
        """
        Run callback on a later turn of the scheduler, outside the current stack.

        There is no ordering guarantee between execute_out() callbacks or with
        respect to later fire() calls. Scheduled callbacks cannot be withdrawn.

        :param callback: Zero-argument callable.
        :return: This machine, for chaining.
        """
        self._deferred_out.push(callback)
        return self

    def describe(self, stringify: bool = True) -> Union[str, Mapping[str, Any]]:
        """
        Snapshot of the machine for diagnostics.

        :param stringify: Return indented JSON when True, otherwise a read-only
            structure. Current data is included as-is, not copied.
        """
        state, data = self._cursor
        states = [s.describe() for s in self._states.values()]
        if stringify:
            snapshot: Dict[str, Any] = {
                "current_state": {"state": state, "data": data},
                "state_changed_listeners": len(self._listeners),
                "states": states,
            }
            try:
                return json.dumps(snapshot, indent=1, default=repr)
            except (TypeError, ValueError):
                # Non-string keys or cycles in the data
                snapshot["current_state"]["data"] = repr(data)
                return json.dumps(snapshot, indent=1, default=repr)
        return MappingProxyType(
            {
                "current_state": MappingProxyType({"state": state, "data": data}),
                "state_changed_listeners": len(self._listeners),
                "states": tuple(
                    MappingProxyType({"name": s["name"], "handlers": tuple(s["handlers"])}) for s in states
                ),
            }
        )

    def __repr__(self) -> str:
        return f"<Machine state={self._cursor[0]!r} states={len(self._states)}>"
