"""
Runtime package for deferred execution.

Architecture:
- CallbackQueue holds work queued by execute() and execute_out()
- Scheduler strategies decide where execute_out() work runs
"""

from .deferred import CallbackQueue
from .scheduler import AsyncioScheduler, DefaultScheduler, ManualScheduler, Scheduler, ThreadScheduler

__all__ = ["CallbackQueue", "Scheduler", "DefaultScheduler", "AsyncioScheduler", "ThreadScheduler", "ManualScheduler"]
