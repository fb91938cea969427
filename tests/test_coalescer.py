"""
Tests du regroupement des sauvegardes (debounce + section exclusive).
"""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from locale_sync.coalescer import CoalescerState, SavedDocument, TaskCoalescer
from locale_sync.lock import ExclusiveLock
from locale_sync.locales.extractor import KeyExtractor
from locale_sync.progress import RecordingReporter

DEBOUNCE = 0.1


def doc(name, text, root="/project"):
    return SavedDocument(Path(root) / name, text, Path(root))


def make_coalescer(run_pass=None, extractor=None, reporter=None, lock=None, enabled=True):
    return TaskCoalescer(
        lock or ExclusiveLock(),
        extractor or KeyExtractor(),
        run_pass or AsyncMock(return_value=0),
        reporter=reporter,
        debounce_delay=DEBOUNCE,
        is_enabled=lambda: enabled,
    )


class TestCoalescing:
    """Une rafale de sauvegardes donne une seule passe."""

    @pytest.mark.asyncio
    async def test_burst_is_coalesced_into_one_pass(self):
        run_pass = AsyncMock(return_value=3)
        coalescer = make_coalescer(run_pass)

        results = await asyncio.gather(
            coalescer.handle_file_saved(doc("a.ts", "intl.t('一'); intl.t('二')")),
            coalescer.handle_file_saved(doc("b.ts", "intl.t('二'); intl.t('三')")),
            coalescer.handle_file_saved(doc("c.ts", "intl.t('一')")),
        )

        assert results == [3, 3, 3]
        run_pass.assert_awaited_once_with(["一", "二", "三"], Path("/project"))
        assert coalescer.state is CoalescerState.IDLE

    @pytest.mark.asyncio
    async def test_each_save_restarts_the_debounce(self):
        run_pass = AsyncMock(return_value=0)
        coalescer = make_coalescer(run_pass)

        first = coalescer.submit(doc("a.ts", "intl.t('一')"))
        await asyncio.sleep(DEBOUNCE * 0.6)
        second = coalescer.submit(doc("b.ts", "intl.t('二')"))
        await asyncio.sleep(DEBOUNCE * 0.6)

        # Plus d'un délai depuis la première sauvegarde, mais pas depuis la seconde
        run_pass.assert_not_awaited()
        assert coalescer.state is CoalescerState.ACCUMULATING
        assert coalescer.queued_count == 2

        await asyncio.gather(first, second)
        run_pass.assert_awaited_once_with(["一", "二"], Path("/project"))

    @pytest.mark.asyncio
    async def test_ignored_paths_and_keys(self):
        run_pass = AsyncMock(return_value=0)
        extractor = KeyExtractor(ignore_keys=["debug.*"], ignore_paths=["*/legacy/*"])
        coalescer = make_coalescer(run_pass, extractor)

        await asyncio.gather(
            coalescer.handle_file_saved(doc("legacy/old.ts", "intl.t('旧')")),
            coalescer.handle_file_saved(doc("new.ts", "intl.t('debug.x'); intl.t('新')")),
        )

        run_pass.assert_awaited_once_with(["新"], Path("/project"))

    @pytest.mark.asyncio
    async def test_disabled_engine_extracts_nothing(self):
        run_pass = AsyncMock(return_value=0)
        coalescer = make_coalescer(run_pass, enabled=False)

        await coalescer.handle_file_saved(doc("a.ts", "intl.t('一')"))

        run_pass.assert_awaited_once_with([], Path("/project"))

    @pytest.mark.asyncio
    async def test_extraction_error_only_affects_its_task(self):
        class FragileExtractor(KeyExtractor):
            def extract_keys(self, text):
                if text == "boom":
                    raise ValueError("unparsable")
                return super().extract_keys(text)

        run_pass = AsyncMock(return_value=1)
        coalescer = make_coalescer(run_pass, FragileExtractor())

        results = await asyncio.gather(
            coalescer.handle_file_saved(doc("a.ts", "boom")),
            coalescer.handle_file_saved(doc("b.ts", "intl.t('二')")),
        )

        assert results == [1, 1]
        run_pass.assert_awaited_once_with(["二"], Path("/project"))


class TestCompletion:
    @pytest.mark.asyncio
    async def test_pass_error_rejects_every_task(self):
        error = RuntimeError("disk full")
        coalescer = make_coalescer(AsyncMock(side_effect=error))

        results = await asyncio.gather(
            coalescer.handle_file_saved(doc("a.ts", "intl.t('一')")),
            coalescer.handle_file_saved(doc("b.ts", "intl.t('二')")),
            return_exceptions=True,
        )

        assert results == [error, error]
        assert not coalescer.lock.is_locked()
        assert coalescer.state is CoalescerState.IDLE

    @pytest.mark.asyncio
    async def test_tasks_submitted_while_draining_get_a_second_pass(self):
        calls = []
        release = asyncio.Event()

        async def run_pass(keys, workspace):
            calls.append(keys)
            if len(calls) == 1:
                assert coalescer.state is CoalescerState.DRAINING
                assert coalescer.pending_keys == keys
                await release.wait()
            return len(calls)

        coalescer = make_coalescer(run_pass)

        first = coalescer.submit(doc("a.ts", "intl.t('一')"))
        while not calls:
            await asyncio.sleep(0.01)

        second = coalescer.submit(doc("b.ts", "intl.t('二')"))
        release.set()

        assert await first == 1
        assert await second == 2
        assert calls == [["一"], ["二"]]

        await coalescer.wait_idle()
        assert coalescer.state is CoalescerState.IDLE
        assert coalescer.pending_keys == []

    @pytest.mark.asyncio
    async def test_queued_status_while_lock_is_held(self):
        lock = ExclusiveLock()
        reporter = RecordingReporter()
        run_pass = AsyncMock(return_value=0)
        coalescer = make_coalescer(run_pass, reporter=reporter, lock=lock)

        await lock.acquire()
        future = coalescer.submit(doc("a.ts", "intl.t('一')"))
        await asyncio.sleep(DEBOUNCE * 2)

        # La passe attend la fin de la synchronisation en cours
        run_pass.assert_not_awaited()
        assert len(reporter.active_statuses) == 1

        lock.release()
        await future

        run_pass.assert_awaited_once()
        assert reporter.active_statuses == []
        assert reporter.messages("status_end") == reporter.messages("status")

    @pytest.mark.asyncio
    async def test_wait_idle_without_tasks(self):
        coalescer = make_coalescer()
        await asyncio.wait_for(coalescer.wait_idle(), timeout=1)
