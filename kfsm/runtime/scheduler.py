# kfsm/runtime/scheduler.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import asyncio
import logging
import threading
from typing import List, Optional

from kfsm.core.types import Callback

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Strategy deciding where execute_out() callbacks run.

    Implementations must never run the callback on the caller's stack: it has
    to happen on a later turn of whatever task queue the host provides. No
    ordering guarantee is required between scheduled callbacks.
    """

    def schedule(self, callback: Callback) -> None:
        """
        Arrange for callback to run exactly once, later.

        :param callback: Zero-argument callable.
        """
        raise NotImplementedError()


class AsyncioScheduler(Scheduler):
    """
    Schedules callbacks with loop.call_soon().

    Uses the given loop, or the loop running in the calling thread at the time
    schedule() is called. Without either, asyncio raises RuntimeError. A given
    loop may run on another thread, in which case call_soon_threadsafe() is
    used so the loop wakes up.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def schedule(self, callback: Callback) -> None:
        if self._loop is None:
            asyncio.get_running_loop().call_soon(callback)
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._loop.call_soon(callback)
        else:
            self._loop.call_soon_threadsafe(callback)


class ThreadScheduler(Scheduler):
    """
    Runs every callback on its own daemon timer thread with zero delay.
    """

    def __init__(self, delay: float = 0.0) -> None:
        self._delay = delay

    def schedule(self, callback: Callback) -> None:
        timer = threading.Timer(self._delay, callback)
        timer.daemon = True
        timer.start()


class DefaultScheduler(Scheduler):
    """
    Prefers the asyncio loop running in the calling thread and falls back to a
    ThreadScheduler when there is none.
    """

    def __init__(self) -> None:
        self._fallback = ThreadScheduler()

    def schedule(self, callback: Callback) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, scheduling %r on a thread", callback)
            self._fallback.schedule(callback)
        else:
            loop.call_soon(callback)


class ManualScheduler(Scheduler):
    """
    Holds callbacks until the host pumps them with run_pending().

    Suited to hosts that drive their own tick loop, and to tests that need
    deterministic control over when deferred work runs.
    """

    def __init__(self) -> None:
        self._pending: List[Callback] = []
        self._lock = threading.Lock()

    @property
    def pending(self) -> int:
        """Number of callbacks waiting to run."""
        with self._lock:
            return len(self._pending)

    def schedule(self, callback: Callback) -> None:
        with self._lock:
            self._pending.append(callback)

    def run_pending(self) -> int:
        """
        Run the callbacks scheduled so far. Callbacks scheduled while this runs
        wait for the next call.

        :return: The number of callbacks run.
        """
        with self._lock:
            batch = self._pending
            self._pending = []
        for callback in batch:
            callback()
        return len(batch)
