"""
Cancellation and deadline propagation for client calls.

A RequestContext is passed explicitly to every operation that can block
(HTTP requests, backoff waits). Each blocking operation checks the context
before starting and races it while running, so cancelling the context or
passing its deadline unblocks the caller promptly.

Usage:
    ctx = RequestContext.background().with_timeout(30)
    items = await client.get_prices(query, ctx)

    # From another task:
    ctx.cancel()
"""

import asyncio
import time
import weakref
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


class ContextCancelled(Exception):
    """The request context was cancelled by the caller."""

    def __init__(self, message: str = "context canceled"):
        super().__init__(message)


class DeadlineExceeded(TimeoutError):
    """The request context deadline passed before the operation completed."""

    def __init__(self, message: str = "context deadline exceeded"):
        super().__init__(message)


class RequestContext:
    """
    Cooperative cancellation token with an optional deadline.

    Deadlines are absolute values on the time.monotonic() clock. Children
    inherit the parent's deadline (or a tighter one) and are cancelled
    when the parent is cancelled.
    """

    def __init__(
        self,
        deadline: float | None = None,
        parent: "RequestContext | None" = None,
    ):
        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self.deadline = deadline
        self._parent = parent
        # Held weakly: a child nobody references any more drops out of the set
        self._children: weakref.WeakSet[RequestContext] = weakref.WeakSet()
        self._err: Exception | None = None
        self._done_event: asyncio.Event | None = None

        if parent is not None:
            parent._children.add(self)
            if parent._err is not None:
                self._finish(parent._err)

    @classmethod
    def background(cls) -> "RequestContext":
        """Root context: never cancelled, no deadline."""
        return cls()

    def with_cancel(self) -> "RequestContext":
        return RequestContext(parent=self)

    def with_deadline(self, deadline: float) -> "RequestContext":
        return RequestContext(deadline=deadline, parent=self)

    def with_timeout(self, seconds: float) -> "RequestContext":
        return RequestContext(deadline=time.monotonic() + seconds, parent=self)

    def cancel(self) -> None:
        """Cancel this context and all of its children. Safe to call repeatedly."""
        if self._err is None:
            self._finish(ContextCancelled())

    def err(self) -> Exception | None:
        """
        Return the reason this context ended, or None while it is live.

        The same exception instance is returned on every call.
        """
        if self._err is None and self.deadline is not None and time.monotonic() >= self.deadline:
            self._finish(DeadlineExceeded())
        return self._err

    @property
    def done(self) -> bool:
        return self.err() is not None

    def remaining(self) -> float | None:
        """Seconds until the deadline (never negative), or None without one."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    async def sleep(self, delay: float) -> None:
        """
        Wait for ``delay`` seconds unless the context ends first.

        Raises:
            ContextCancelled: The context was cancelled before or during the wait
            DeadlineExceeded: The deadline passed before or during the wait
        """
        self._raise_if_done()
        if delay <= 0:
            await asyncio.sleep(0)
            self._raise_if_done()
            return

        timeout = delay
        remaining = self.remaining()
        if remaining is not None:
            timeout = min(timeout, remaining)

        try:
            await asyncio.wait_for(self._event().wait(), timeout=timeout)
        except TimeoutError:
            pass

        if remaining is not None and remaining <= delay:
            self._expire()
        self._raise_if_done()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """
        Await ``awaitable``, abandoning it if the context ends first.

        The abandoned task is cancelled and the context error is raised.
        Errors raised by the awaitable itself propagate unchanged.
        """
        self._raise_if_done()

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event().wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter},
                timeout=self.remaining(),
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        await asyncio.wait({task})
        if self.err() is None:
            self._expire()
        raise self._err

    def _event(self) -> asyncio.Event:
        if self._done_event is None:
            self._done_event = asyncio.Event()
            if self._err is not None:
                self._done_event.set()
        return self._done_event

    def _raise_if_done(self) -> None:
        err = self.err()
        if err is not None:
            raise err

    def _expire(self) -> None:
        if self._err is None:
            self._finish(DeadlineExceeded())

    def _finish(self, err: Exception) -> None:
        if self._err is not None:
            return
        self._err = err
        if self._done_event is not None:
            self._done_event.set()
        children = list(self._children)
        self._children = weakref.WeakSet()
        for child in children:
            child._finish(err)
        if self._parent is not None:
            self._parent._children.discard(self)


def background() -> RequestContext:
    return RequestContext.background()


__all__ = [
    "ContextCancelled",
    "DeadlineExceeded",
    "RequestContext",
    "background",
]
