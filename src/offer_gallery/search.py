"""Offer search: the pure filter and the input debouncer that schedules it."""

from __future__ import annotations

import asyncio
import inspect
from typing import Awaitable, Callable, List, Optional, Sequence, Union

from .models import Offer


def normalize_query(query: Optional[str]) -> str:
    return (query or "").strip().lower()


def filter_offers(offers: Sequence[Offer], query: Optional[str]) -> List[Offer]:
    """Return offers whose name contains the query, case-insensitively.

    An empty (or whitespace-only) query returns every offer in its original
    order. The relative order of matches is always preserved.
    """
    term = normalize_query(query)
    if not term:
        return list(offers)
    return [offer for offer in offers if term in offer.name.lower()]


Callback = Callable[[], Union[None, Awaitable[None]]]


class Debouncer:
    """Coalesce bursts of triggers into one delayed call.

    At most one timer is pending; each ``trigger`` cancels and restarts it.
    ``trigger`` returns a future that resolves to True once the callback has
    run, or to False if a later trigger (or ``cancel``) superseded it. Must be
    used from within a running event loop.
    """

    def __init__(self, delay: float = 0.3) -> None:
        self.delay = delay
        self._handle: Optional[asyncio.TimerHandle] = None
        self._callback: Optional[Callback] = None
        self._waiter: Optional[asyncio.Future] = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self, callback: Callback) -> asyncio.Future:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._callback = callback
        self._waiter = loop.create_future()
        self._handle = loop.call_later(self.delay, self._fire)
        return self._waiter

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        if self._waiter is not None and not self._waiter.done():
            self._waiter.set_result(False)
        self._handle = None
        self._callback = None
        self._waiter = None

    async def flush(self) -> bool:
        """Run the pending callback now; False if nothing was pending."""

        callback, waiter = self._take()
        if callback is None:
            return False
        await self._run(callback, waiter)
        return True

    def _take(self) -> tuple[Optional[Callback], Optional[asyncio.Future]]:
        callback, waiter = self._callback, self._waiter
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._callback = None
        self._waiter = None
        return callback, waiter

    def _fire(self) -> None:
        callback, waiter = self._take()
        if callback is None:
            return
        task = asyncio.ensure_future(self._run(callback, waiter))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @staticmethod
    async def _run(callback: Callback, waiter: Optional[asyncio.Future]) -> None:
        try:
            result = callback()
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            if waiter is not None and not waiter.done():
                waiter.set_exception(exc)
                return
            raise
        if waiter is not None and not waiter.done():
            waiter.set_result(True)


__all__ = ["Debouncer", "filter_offers", "normalize_query"]
