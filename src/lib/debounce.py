"""
Per-key debounce timers on the asyncio event loop

Used by the server to run one diagnostic pass per document after edits
settle. Scheduling again for the same key replaces the pending timer.
"""

import asyncio
from typing import Callable, Dict

from .log import LOG


class DebounceScheduler:
    """
    One pending callback per key

    Must be used from code running inside an event loop.
    """

    def __init__(self, delay_ms: int = 300) -> None:
        self.delay_ms = delay_ms
        self.timers: Dict[str, asyncio.TimerHandle] = {}

    def schedule(self, key: str, callback: Callable[[], None]) -> None:
        """Run *callback* after the delay unless rescheduled or cancelled first"""
        self.cancel(key)
        loop = asyncio.get_running_loop()

        def fire() -> None:
            self.timers.pop(key, None)
            callback()

        self.timers[key] = loop.call_later(self.delay_ms / 1000.0, fire)
        LOG(f"Scheduled {key} in {self.delay_ms} ms", level=3)

    def cancel(self, key: str) -> None:
        handle = self.timers.pop(key, None)
        if handle is not None:
            handle.cancel()

    def all_cancel(self) -> None:
        for handle in self.timers.values():
            handle.cancel()
        self.timers.clear()

    def pending_is(self, key: str) -> bool:
        return key in self.timers

    def dispose(self) -> None:
        self.all_cancel()
