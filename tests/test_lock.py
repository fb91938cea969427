"""
Tests du verrou exclusif asynchrone.
"""

import asyncio

import pytest

from locale_sync.lock import ExclusiveLock


class TestExclusiveLock:
    """Tests pour ExclusiveLock."""

    @pytest.mark.asyncio
    async def test_run_exclusive_returns_body_result(self):
        lock = ExclusiveLock()

        async def body():
            assert lock.is_locked()
            return 42

        assert await lock.run_exclusive(body) == 42
        assert not lock.is_locked()

    @pytest.mark.asyncio
    async def test_bodies_never_overlap_and_run_in_fifo_order(self):
        """Un seul corps à la fois, dans l'ordre d'arrivée."""
        lock = ExclusiveLock()
        events = []

        def make_body(name):
            async def body():
                events.append(f"start {name}")
                await asyncio.sleep(0.01)
                events.append(f"end {name}")
                return name

            return body

        results = await asyncio.gather(
            *(lock.run_exclusive(make_body(name)) for name in ("a", "b", "c"))
        )

        assert results == ["a", "b", "c"]
        assert events == [
            "start a", "end a",
            "start b", "end b",
            "start c", "end c",
        ]
        assert not lock.is_locked()

    @pytest.mark.asyncio
    async def test_error_in_body_releases_lock(self):
        """L'erreur du corps remonte et le suivant obtient le verrou."""
        lock = ExclusiveLock()

        async def failing():
            raise RuntimeError("boom")

        async def succeeding():
            return "ok"

        first = asyncio.ensure_future(lock.run_exclusive(failing))
        second = asyncio.ensure_future(lock.run_exclusive(succeeding))

        with pytest.raises(RuntimeError, match="boom"):
            await first
        assert await second == "ok"
        assert not lock.is_locked()

    @pytest.mark.asyncio
    async def test_release_unheld_lock_raises(self):
        lock = ExclusiveLock()
        with pytest.raises(RuntimeError):
            lock.release()

    @pytest.mark.asyncio
    async def test_waiting_count(self):
        lock = ExclusiveLock()
        await lock.acquire()

        waiter = asyncio.ensure_future(lock.acquire())
        await asyncio.sleep(0)
        assert lock.waiting_count == 1

        lock.release()
        await waiter
        assert lock.is_locked()
        assert lock.waiting_count == 0
        lock.release()
        assert not lock.is_locked()

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_leak_lock(self):
        """Un attendant annulé ne bloque pas les suivants."""
        lock = ExclusiveLock()
        await lock.acquire()

        cancelled = asyncio.ensure_future(lock.acquire())
        later = asyncio.ensure_future(lock.acquire())
        await asyncio.sleep(0)

        cancelled.cancel()
        await asyncio.sleep(0)
        lock.release()

        await asyncio.wait_for(later, timeout=1)
        assert cancelled.cancelled()
        assert lock.is_locked()
        lock.release()
        assert not lock.is_locked()

    @pytest.mark.asyncio
    async def test_async_context_manager(self):
        lock = ExclusiveLock()
        async with lock:
            assert lock.is_locked()
        assert not lock.is_locked()
