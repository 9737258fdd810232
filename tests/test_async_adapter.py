"""
Tests for the asyncio queue adapter and async observation.

Covers:
    - AsyncioAdapter: start/stop, drain, coroutine jobs, failures
    - QueueAdapterFault on misuse
    - aobserve / aassert_count / aassert_matches with async bodies
"""

from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio

from courier.jobs import Job


class PingJob(Job):
    seen = []

    async def perform(self, value):
        await asyncio.sleep(0)
        PingJob.seen.append(value)


class BoomJob(Job):
    def perform(self):
        raise RuntimeError("boom")


@pytest_asyncio.fixture
async def asyncio_adapter():
    from courier.jobs import AsyncioAdapter, set_queue_adapter
    PingJob.seen = []
    adapter = AsyncioAdapter(concurrency=2)
    await adapter.start()
    previous = set_queue_adapter(adapter)
    yield adapter
    set_queue_adapter(previous)
    await adapter.stop()


# ═══════════════════════════════════════════════════════════════════
# ADAPTER
# ═══════════════════════════════════════════════════════════════════

class TestAsyncioAdapter:
    """Tests for AsyncioAdapter."""

    @pytest.mark.asyncio
    async def test_drain_performs_jobs(self, asyncio_adapter):
        PingJob.perform_later(1)
        PingJob.perform_later(2)
        await asyncio_adapter.drain()
        assert sorted(PingJob.seen) == [1, 2]

    @pytest.mark.asyncio
    async def test_failures_are_recorded(self, asyncio_adapter):
        BoomJob.perform_later()
        PingJob.perform_later(3)
        await asyncio_adapter.drain()
        assert len(asyncio_adapter.failed_jobs) == 1
        descriptor, error = asyncio_adapter.failed_jobs[0]
        assert descriptor.job_kind == BoomJob.job_kind
        assert isinstance(error, RuntimeError)
        assert PingJob.seen == [3]

    @pytest.mark.asyncio
    async def test_enqueue_before_start_raises(self):
        from courier.jobs import AsyncioAdapter, QueueAdapterFault
        adapter = AsyncioAdapter()
        with pytest.raises(QueueAdapterFault) as exc_info:
            adapter.enqueue(PingJob.build_descriptor((1,)))
        assert exc_info.value.code == "QUEUE_ADAPTER_ERROR"

    @pytest.mark.asyncio
    async def test_drain_stopped_adapter_raises(self):
        from courier.jobs import AsyncioAdapter, QueueAdapterFault
        adapter = AsyncioAdapter()
        with pytest.raises(QueueAdapterFault):
            await adapter.drain()

    @pytest.mark.asyncio
    async def test_start_stop(self):
        from courier.jobs import AsyncioAdapter
        adapter = AsyncioAdapter()
        assert not adapter.running
        await adapter.start()
        assert adapter.running
        await adapter.stop()
        assert not adapter.running


# ═══════════════════════════════════════════════════════════════════
# ASYNC OBSERVATION
# ═══════════════════════════════════════════════════════════════════

class TestAsyncObservation:
    """Windows stay open across awaits and see worker-side events."""

    @pytest.mark.asyncio
    async def test_aobserve_performed(self, asyncio_adapter):
        from courier.jobs import JobEvent
        from courier.testing import aobserve

        async def body():
            PingJob.perform_later(5)
            await asyncio_adapter.drain()

        captured = await aobserve(asyncio_adapter, body, {JobEvent.PERFORMED})
        assert [d.positional_args for d in captured] == [(5,)]
        assert asyncio_adapter.listener_count == 0

    @pytest.mark.asyncio
    async def test_aassert_count(self, asyncio_adapter):
        from courier.jobs import JobEvent
        from courier.testing import CountMismatch, aassert_count

        async def body():
            PingJob.perform_later(1)
            PingJob.perform_later(2)
            await asyncio_adapter.drain()

        await aassert_count(2, body, source=asyncio_adapter, events={JobEvent.ENQUEUED})
        with pytest.raises(CountMismatch):
            await aassert_count(1, body, source=asyncio_adapter, events={JobEvent.PERFORMED})

    @pytest.mark.asyncio
    async def test_aassert_matches(self, asyncio_adapter):
        from courier.jobs import JobEvent
        from courier.testing import MatchCriteria, NoMatchFound, aassert_matches

        async def body():
            PingJob.perform_later(9)
            await asyncio_adapter.drain()

        matched = await aassert_matches(
            MatchCriteria(job_kind=PingJob, positional_args=[9]),
            body, source=asyncio_adapter, events={JobEvent.PERFORMED},
        )
        assert len(matched) == 1
        with pytest.raises(NoMatchFound):
            await aassert_matches(
                MatchCriteria(job_kind=PingJob, positional_args=[10]),
                body, source=asyncio_adapter, events={JobEvent.PERFORMED},
            )
