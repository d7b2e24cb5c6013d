# tests/unit/core/test_fsm_errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""Test suite for error classes defined in errors.py."""

import pytest

from kfsm.core.errors import (
    FSMError,
    InvalidInvocationError,
    MalformedTransitionError,
    SealedError,
    UnknownEventError,
    UnknownStateError,
)


def test_fsm_error_basic():
    error = FSMError("test message")
    assert str(error) == "test message"
    assert error.message == "test message"
    assert error.details == {}

    details = {"key": "value"}
    error = FSMError("test message", details)
    assert error.details == details


@pytest.mark.parametrize(
    "error",
    [
        InvalidInvocationError("no event"),
        UnknownEventError("unknown", "go", "idle"),
        MalformedTransitionError("malformed", "go", "idle", None),
        UnknownStateError("missing", "nowhere", "go"),
        SealedError("sealed", "_states"),
    ],
)
def test_all_errors_are_fsm_errors(error):
    assert isinstance(error, FSMError)


def test_unknown_event_error_fields():
    error = UnknownEventError("unknown", "go", "idle", {"detail": "value"})
    assert error.event == "go"
    assert error.state == "idle"
    assert error.details == {"detail": "value"}


def test_malformed_transition_error_fields():
    error = MalformedTransitionError("malformed", "go", "idle", ("only",))
    assert error.event == "go"
    assert error.state == "idle"
    assert error.result == ("only",)


def test_unknown_state_error_fields():
    error = UnknownStateError("missing", "nowhere")
    assert error.state == "nowhere"
    assert error.event is None


def test_sealed_error_is_attribute_error():
    error = SealedError("sealed", "extra")
    assert isinstance(error, AttributeError)
    assert error.member == "extra"
    with pytest.raises(AttributeError):
        raise error
