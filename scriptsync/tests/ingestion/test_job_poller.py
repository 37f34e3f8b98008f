"""Tests for the processing-clip poll loop."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from scriptsync.exceptions import DatabaseException
from scriptsync.ingestion import JobPoller
from scriptsync.models import Clip, ClipStatus


def _clip(clip_id: str) -> Clip:
    return Clip(
        id=clip_id,
        project_id="p1",
        user_id="u1",
        filename=f"{clip_id}.mp4",
        storage_path=f"u1/p1/{clip_id}.mp4",
        status=ClipStatus.PROCESSING,
    )


class TestPollOnce:
    """Tests for a single poll tick."""

    async def test_failure_isolated_per_clip(self):
        database = AsyncMock()
        database.fetch_processing_clips.return_value = [_clip("a"), _clip("b"), _clip("c")]
        handled = []

        async def handler(clip):
            handled.append(clip.id)
            if clip.id == "b":
                raise RuntimeError("boom")

        succeeded = await JobPoller(database, handler, batch_size=5).poll_once()

        assert handled == ["a", "b", "c"]
        assert succeeded == 2
        database.fetch_processing_clips.assert_awaited_once_with(5)

    async def test_empty_tick(self):
        database = AsyncMock()
        database.fetch_processing_clips.return_value = []
        handler = AsyncMock()

        assert await JobPoller(database, handler).poll_once() == 0
        handler.assert_not_awaited()

    async def test_oldest_first_and_batch_limit(self, database, make_clip):
        newest = await make_clip(order=30)
        oldest = await make_clip(order=10)
        middle = await make_clip(order=20)
        await make_clip(order=5, status=ClipStatus.READY)
        handled = []

        async def handler(clip):
            handled.append(clip.id)

        await JobPoller(database, handler, batch_size=2).poll_once()

        assert handled == [oldest.id, middle.id]
        assert newest.id not in handled

    async def test_overlapping_ticks_can_see_the_same_clip(self, database, make_clip):
        clip = await make_clip()
        release = asyncio.Event()
        handled = []

        async def slow_handler(c):
            handled.append(c.id)
            await release.wait()

        poller = JobPoller(database, slow_handler)
        first = asyncio.create_task(poller.poll_once())
        second = asyncio.create_task(poller.poll_once())
        while len(handled) < 2:
            await asyncio.sleep(0.01)
        release.set()
        await asyncio.gather(first, second)

        assert handled == [clip.id, clip.id]


class TestRun:
    """Tests for the long-running loop."""

    async def test_survives_poll_errors(self):
        database = AsyncMock()
        database.fetch_processing_clips.side_effect = [
            DatabaseException("connection reset"),
            [_clip("a")],
        ]
        handler = AsyncMock()

        await JobPoller(database, handler, interval_seconds=0.01).run(max_ticks=2)

        assert database.fetch_processing_clips.await_count == 2
        handler.assert_awaited_once()

    async def test_stop_ends_loop(self):
        database = AsyncMock()
        database.fetch_processing_clips.return_value = []
        poller = JobPoller(database, AsyncMock(), interval_seconds=30)

        task = asyncio.create_task(poller.run())
        await asyncio.sleep(0.05)
        poller.stop()
        await asyncio.wait_for(task, timeout=1)

        assert database.fetch_processing_clips.await_count == 1
