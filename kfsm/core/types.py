# kfsm/core/types.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Any, Callable, Hashable, NamedTuple

StateID = Hashable
EventID = Hashable


class Transition(NamedTuple):
    """The (next state, next data) pair a handler returns."""

    state: StateID
    data: Any


# Callback Types
Handler = Callable[..., Any]
StateChangeListener = Callable[[StateID, StateID], None]
Callback = Callable[[], None]
