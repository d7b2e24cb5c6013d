# tests/unit/runtime/test_scheduler.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import asyncio
import threading
from unittest.mock import MagicMock

import pytest

from kfsm.runtime.scheduler import AsyncioScheduler, DefaultScheduler, ManualScheduler, Scheduler, ThreadScheduler


def test_base_scheduler_is_abstract():
    with pytest.raises(NotImplementedError):
        Scheduler().schedule(MagicMock())


# -----------------------------------------------------------------------------
# MANUAL
# -----------------------------------------------------------------------------


def test_manual_scheduler_runs_only_when_pumped():
    scheduler = ManualScheduler()
    callback = MagicMock()

    scheduler.schedule(callback)
    callback.assert_not_called()
    assert scheduler.pending == 1

    assert scheduler.run_pending() == 1
    callback.assert_called_once_with()
    assert scheduler.pending == 0


def test_manual_scheduler_defers_callbacks_scheduled_while_running():
    scheduler = ManualScheduler()
    late = MagicMock()
    scheduler.schedule(lambda: scheduler.schedule(late))

    assert scheduler.run_pending() == 1
    late.assert_not_called()
    assert scheduler.run_pending() == 1
    late.assert_called_once_with()


# -----------------------------------------------------------------------------
# THREAD
# -----------------------------------------------------------------------------


def test_thread_scheduler_runs_off_caller_thread():
    done = threading.Event()
    seen = []

    def callback():
        seen.append(threading.get_ident())
        done.set()

    ThreadScheduler().schedule(callback)

    assert done.wait(timeout=2.0)
    assert seen and seen[0] != threading.get_ident()


def test_default_scheduler_falls_back_to_thread_without_loop():
    done = threading.Event()
    DefaultScheduler().schedule(done.set)
    assert done.wait(timeout=2.0)


# -----------------------------------------------------------------------------
# ASYNCIO
# -----------------------------------------------------------------------------


def test_asyncio_scheduler_requires_a_loop():
    with pytest.raises(RuntimeError):
        AsyncioScheduler().schedule(MagicMock())


@pytest.mark.asyncio
async def test_asyncio_scheduler_uses_running_loop():
    callback = MagicMock()
    AsyncioScheduler().schedule(callback)
    callback.assert_not_called()
    await asyncio.sleep(0)
    callback.assert_called_once_with()


@pytest.mark.asyncio
async def test_asyncio_scheduler_with_explicit_loop():
    loop = asyncio.get_running_loop()
    fired = asyncio.Event()
    AsyncioScheduler(loop).schedule(fired.set)
    await asyncio.wait_for(fired.wait(), timeout=1.0)


@pytest.mark.asyncio
async def test_default_scheduler_prefers_running_loop():
    seen = []
    DefaultScheduler().schedule(lambda: seen.append(threading.get_ident()))
    assert seen == []
    await asyncio.sleep(0)
    assert seen == [threading.get_ident()]


def test_asyncio_scheduler_wakes_loop_on_another_thread():
    loop = asyncio.new_event_loop()
    worker = threading.Thread(target=loop.run_forever, daemon=True)
    worker.start()
    ran = threading.Event()
    try:
        AsyncioScheduler(loop).schedule(ran.set)
        assert ran.wait(timeout=2.0)
    finally:
        loop.call_soon_threadsafe(loop.stop)
        worker.join(timeout=2.0)
        loop.close()
