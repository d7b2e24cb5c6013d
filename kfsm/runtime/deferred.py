# kfsm/runtime/deferred.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import threading
from typing import List

from kfsm.core.types import Callback


class _QueueLock:
    """
    Internal context manager ensuring thread-safe access to a callback queue.
    """

    def __init__(self, lock: threading.Lock) -> None:
        self._lock = lock

    def __enter__(self) -> None:
        self._lock.acquire()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._lock.release()


class CallbackQueue:
    """
    Ordered queue of zero-argument callbacks waiting to run after a transition.

    The queue is never drained in place. swap() hands the pending batch to the
    caller and leaves an empty queue behind, so a callback that pushes onto the
    queue while its batch is running is picked up by the next drain, not the
    current one.
    """

    def __init__(self) -> None:
        self._pending: List[Callback] = []
        self._lock = threading.Lock()

    def push(self, callback: Callback) -> None:
        """
        Append a callback to the end of the queue.

        :param callback: Zero-argument callable.
        """
        with _QueueLock(self._lock):
            self._pending.append(callback)

    def swap(self) -> List[Callback]:
        """
        Remove and return every pending callback, in push order.
        """
        with _QueueLock(self._lock):
            batch = self._pending
            self._pending = []
        return batch

    def __len__(self) -> int:
        with _QueueLock(self._lock):
            return len(self._pending)

    def __bool__(self) -> bool:
        return len(self) > 0
