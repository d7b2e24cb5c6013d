# kfsm/core/builder.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from kfsm.core.state_machine import Machine
from kfsm.core.states import State, StateBuilder
from kfsm.core.types import StateChangeListener, StateID
from kfsm.runtime.scheduler import Scheduler


class MachineBuilder:
    """
    Collects the configuration of a machine: initial state and data, states and
    their handlers, state change listeners, extension members and runtime options.

    The builder validates nothing about the state graph. An undeclared initial
    state or transition target only fails when an event is fired against it.
    """

    def __init__(self) -> None:
        self._initial_state: Optional[StateID] = None
        self._initial_data: Any = None
        self._states: Dict[StateID, StateBuilder] = {}
        self._listeners: List[StateChangeListener] = []
        self._extensions: Dict[str, Any] = {}
        self._scheduler: Optional[Scheduler] = None
        self._strict = False

    def start_with(self, state: StateID, data: Any = None) -> "MachineBuilder":
        """
        Set the initial state and data. The last call wins, and the state does not
        need to be declared (now or ever).

        :param state: Initial state name.
        :param data: Initial data.
        :return: This builder, for chaining.
        """
        self._initial_state = state
        self._initial_data = data
        return self

    def when(self, state: StateID, initializer: Callable[[StateBuilder], Any]) -> "MachineBuilder":
        """
        Declare a state. initializer receives a StateBuilder and registers the
        state's handlers on it. Declaring the same state again replaces it.

        :param state: State name.
        :param initializer: Called immediately with the new StateBuilder.
        :return: This builder, for chaining.
        """
        state_builder = StateBuilder(state)
        initializer(state_builder)
        self._states[state] = state_builder
        return self

    def on_state_changed(self, listener: StateChangeListener) -> "MachineBuilder":
        """
        Register a listener called with (old_state, new_state) whenever a
        transition changes the state name. No data is passed.

        :return: This builder, for chaining.
        """
        self._listeners.append(listener)
        return self

    def extend(self, name: Optional[str] = None, member: Any = None, **members: Any) -> "MachineBuilder":
        """
        Register extension members, reachable from handlers as machine.ext.<name>.

        Either extend("name", member) or extend(name=member, ...).

        Members are stored as given and are not bound to the machine. A member
        that needs to fire() or execute() takes the machine as an argument,
        which handlers pass along: machine.ext.retry(machine, ...).

        :raises ValueError: If a name is empty or starts with an underscore.
        :return: This builder, for chaining.
        """
        if name is not None:
            members[name] = member
        for key, value in members.items():
            if not key or key.startswith("_"):
                raise ValueError(f"Extension member names must not be empty or private: {key!r}")
            self._extensions[key] = value
        return self

    def use_scheduler(self, scheduler: Scheduler) -> "MachineBuilder":
        """
        Choose where execute_out() callbacks run.

        :return: This builder, for chaining.
        """
        self._scheduler = scheduler
        return self

    def strict(self, enabled: bool = True) -> "MachineBuilder":
        """
        Validate transition targets when they are committed instead of on the
        next fire().

        :return: This builder, for chaining.
        """
        self._strict = enabled
        return self

    def build(self) -> Machine:
        """
        Build and seal the machine.

        The machine shell is created first so each State can hold a reference
        to it; the finished state table is attached afterwards and the machine
        is sealed.
        """
        machine = Machine(
            self._initial_state,
            self._initial_data,
            self._listeners,
            scheduler=self._scheduler,
            strict=self._strict,
        )
        states: Dict[StateID, State] = {name: builder.build(machine) for name, builder in self._states.items()}
        machine._install(states, self._extensions)
        return machine


def create(initializer: Callable[[MachineBuilder], Any]) -> Machine:
    """
    Create a machine in one call.

    Example::

        machine = create(
            lambda fsm: fsm.start_with("off", 0)
            .when("off", lambda s: s.on("toggle", lambda m, n: ("on", n + 1)))
            .when("on", lambda s: s.on("toggle", lambda m, n: ("off", n)))
        )
        machine.fire("toggle")

    :param initializer: Receives a fresh MachineBuilder to configure.
    :return: The built, sealed machine.
    """
    builder = MachineBuilder()
    initializer(builder)
    return builder.build()
