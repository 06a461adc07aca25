"""Latest-value observable for publishing engine output.

WHY: Display consumers (overlay, WebSocket clients, the CLI) care about
what is on screen now, not about a backlog of every word emitted while
they were busy. A queue would let a slow consumer fall behind the reader;
a latest-value holder cannot.

HOW: Observable keeps one value and a list of subscriber callbacks.
set() stores the value and calls every subscriber synchronously.
watch() adapts that to an async iterator for coroutine consumers: each
watcher keeps only the newest value it has not yet yielded.

RULES:
- value always reflects the most recent set()
- Subscribers see only updates made after they subscribe (no replay)
- watch() conflates: a slow watcher skips to the newest value
- distinct=True suppresses notifications for equal consecutive values
- A failing subscriber is logged and skipped; set() never raises for it
- Safe to set() from any thread; watchers are woken on their own loop
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import AsyncIterator, Callable, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class Observable(Generic[T]):
    """A value that notifies subscribers when it changes."""

    def __init__(self, initial: T, distinct: bool = False) -> None:
        self._value = initial
        self._distinct = distinct
        self._subscribers: List[Callable[[T], None]] = []
        self._lock = threading.Lock()

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """Store ``value`` and notify subscribers."""
        with self._lock:
            if self._distinct and value == self._value:
                return
            self._value = value
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(value)
            except Exception:
                logger.exception("Observable subscriber %r failed", callback)

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register ``callback`` for future updates; returns an unsubscribe function."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    async def watch(self) -> AsyncIterator[T]:
        """Yield values set after this call, conflated to the newest one.

        WHY: WebSocket handlers and other coroutines want ``async for``
        over updates without blocking the setter.

        HOW: Subscribes a callback that records the newest value and sets
        an asyncio.Event on the watcher's own loop (thread-safely when the
        setter runs elsewhere). The iterator waits on the event.

        RULES:
        - Unsubscribes when the iterator is closed or cancelled
        """
        loop = asyncio.get_running_loop()
        changed = asyncio.Event()
        latest: List[T] = []

        def _mark(value: T) -> None:
            latest[:] = [value]
            changed.set()

        def _on_change(value: T) -> None:
            if _running_loop() is loop:
                _mark(value)
            else:
                loop.call_soon_threadsafe(_mark, value)

        unsubscribe = self.subscribe(_on_change)
        try:
            while True:
                await changed.wait()
                changed.clear()
                yield latest[0]
        finally:
            unsubscribe()
