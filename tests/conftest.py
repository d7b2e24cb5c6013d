# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import threading
from unittest.mock import MagicMock

import pytest


def pytest_configure(config):
    """Register custom marks."""
    config.addinivalue_line("markers", "stress: mark test as a stress test")
    config.addinivalue_line("markers", "property: mark test as a property-based test")


def produce(machine, data, amount=1):
    return "producer", min(data + amount, 10)


def consume(machine, data, amount=1):
    next_data = data - amount
    return "consumer", data if next_data < 0 else next_data


def switch_to(target):
    return lambda machine, data: (target, data)


@pytest.fixture
def manual_scheduler():
    """A scheduler that only runs execute_out() callbacks when pumped."""
    from kfsm.runtime.scheduler import ManualScheduler

    return ManualScheduler()


@pytest.fixture
def listener():
    """A state change listener spy."""
    return MagicMock()


@pytest.fixture
def producer_consumer(manual_scheduler, listener):
    """The producer/consumer machine: capped at 10, floored at 0."""
    from kfsm import create

    return create(
        lambda fsm: fsm.start_with("producer", 0)
        .use_scheduler(manual_scheduler)
        .on_state_changed(listener)
        .when("producer", lambda s: s.on("produce", produce).on("switch", switch_to("consumer")))
        .when("consumer", lambda s: s.on("consume", consume).on("switch", switch_to("producer")))
    )


@pytest.fixture
def machine_factory(manual_scheduler):
    """Returns a factory building machines from a dict of {state: {event: handler}}."""
    from kfsm import create

    def _factory(initial="idle", data=None, states=None, listeners=(), strict=False, extensions=None):
        def init(fsm):
            fsm.start_with(initial, data).use_scheduler(manual_scheduler).strict(strict)
            for name, handlers in (states or {}).items():

                def declare(state_builder, handlers=handlers):
                    for event, handler in handlers.items():
                        state_builder.on(event, handler)

                fsm.when(name, declare)
            for registered in listeners:
                fsm.on_state_changed(registered)
            if extensions:
                fsm.extend(**extensions)

        return create(init)

    return _factory


@pytest.fixture(autouse=True)
def cleanup_threads():
    yield
    # ThreadScheduler callbacks run on timer threads; let them finish between tests
    for thread in threading.enumerate():
        if thread != threading.current_thread() and thread.is_alive() and thread.daemon:
            thread.join(timeout=1.0)
