"""
Tests for RequestContext cancellation and deadline propagation.

Tests cover:
- Cancellation and deadline errors (cached, typed)
- Parent to child propagation
- sleep() and run() racing the context
"""

import asyncio
import gc
import time

import pytest

from azure_pricing.context import (
    ContextCancelled,
    DeadlineExceeded,
    RequestContext,
    background,
)
from azure_pricing.errors import PricingError


class TestContextState:
    """Tests for err(), cancel() and deadlines."""

    def test_background_is_live(self):
        ctx = background()
        assert ctx.err() is None
        assert ctx.done is False
        assert ctx.remaining() is None

    def test_cancel_sets_cached_error(self):
        ctx = RequestContext.background().with_cancel()
        ctx.cancel()

        err = ctx.err()
        assert isinstance(err, ContextCancelled)
        assert str(err) == "context canceled"
        assert ctx.err() is err
        # Second cancel keeps the first error
        ctx.cancel()
        assert ctx.err() is err

    def test_expired_deadline_reports_deadline_exceeded(self):
        ctx = background().with_deadline(time.monotonic() - 1)

        err = ctx.err()
        assert isinstance(err, DeadlineExceeded)
        assert isinstance(err, TimeoutError)
        assert str(err) == "context deadline exceeded"
        assert ctx.remaining() == 0.0

    def test_context_errors_are_not_pricing_errors(self):
        assert not issubclass(ContextCancelled, PricingError)
        assert not issubclass(DeadlineExceeded, PricingError)

    def test_parent_cancel_propagates_to_children(self):
        parent = background().with_cancel()
        child = parent.with_timeout(60)
        grandchild = child.with_cancel()

        parent.cancel()

        assert isinstance(child.err(), ContextCancelled)
        assert isinstance(grandchild.err(), ContextCancelled)

    def test_child_cancel_does_not_affect_parent(self):
        parent = background().with_cancel()
        child = parent.with_cancel()

        child.cancel()

        assert parent.err() is None

    def test_child_inherits_tighter_parent_deadline(self):
        parent = background().with_timeout(1)
        child = parent.with_timeout(60)
        assert child.deadline == parent.deadline

    def test_child_of_cancelled_parent_starts_cancelled(self):
        parent = background().with_cancel()
        parent.cancel()
        assert isinstance(parent.with_cancel().err(), ContextCancelled)

    def test_parent_does_not_retain_dropped_children(self):
        root = background()
        for _ in range(1000):
            root.with_timeout(30)
            root.with_cancel()

        gc.collect()
        assert len(root._children) == 0

    def test_live_child_still_cancelled_after_siblings_dropped(self):
        parent = background().with_cancel()
        for _ in range(100):
            parent.with_cancel()
        child = parent.with_timeout(30)
        gc.collect()

        parent.cancel()

        assert isinstance(child.err(), ContextCancelled)


class TestSleep:
    """Tests for RequestContext.sleep."""

    @pytest.mark.asyncio
    async def test_sleep_completes(self):
        ctx = background()
        start = time.monotonic()
        await ctx.sleep(0.01)
        assert time.monotonic() - start >= 0.009

    @pytest.mark.asyncio
    async def test_sleep_zero_returns_immediately(self):
        await background().sleep(0)

    @pytest.mark.asyncio
    async def test_cancel_interrupts_sleep(self):
        ctx = background().with_cancel()
        asyncio.get_running_loop().call_later(0.02, ctx.cancel)

        start = time.monotonic()
        with pytest.raises(ContextCancelled):
            await ctx.sleep(10)
        assert time.monotonic() - start < 1.0

    @pytest.mark.asyncio
    async def test_deadline_interrupts_sleep(self):
        ctx = background().with_timeout(0.02)

        start = time.monotonic()
        with pytest.raises(DeadlineExceeded):
            await ctx.sleep(10)
        assert time.monotonic() - start < 1.0

    @pytest.mark.asyncio
    async def test_sleep_on_cancelled_context_raises(self):
        ctx = background().with_cancel()
        ctx.cancel()
        with pytest.raises(ContextCancelled):
            await ctx.sleep(0)


class TestRun:
    """Tests for RequestContext.run."""

    @pytest.mark.asyncio
    async def test_returns_result(self):
        async def work():
            return 42

        assert await background().run(work()) == 42

    @pytest.mark.asyncio
    async def test_awaitable_errors_propagate_unchanged(self):
        async def work():
            raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            await background().run(work())

    @pytest.mark.asyncio
    async def test_deadline_abandons_and_cancels_work(self):
        cancelled = asyncio.Event()

        async def hang():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        ctx = background().with_timeout(0.02)
        with pytest.raises(DeadlineExceeded):
            await ctx.run(hang())
        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_cancel_abandons_work(self):
        ctx = background().with_cancel()
        asyncio.get_running_loop().call_later(0.02, ctx.cancel)

        with pytest.raises(ContextCancelled):
            await ctx.run(asyncio.sleep(10))

    @pytest.mark.asyncio
    async def test_cancelled_context_never_starts_work(self):
        started = False

        async def work():
            nonlocal started
            started = True

        ctx = background().with_cancel()
        ctx.cancel()
        coro = work()
        with pytest.raises(ContextCancelled):
            await ctx.run(coro)
        coro.close()
        assert started is False
