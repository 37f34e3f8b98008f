import asyncio
from typing import Awaitable, Callable, Optional

from loguru import logger

from ..models import Clip
from ..providers.base import DatabaseProvider
from ..utils.execution_timer import ExecutionTimer

ClipHandler = Callable[[Clip], Awaitable[object]]


class JobPoller:
    """
    Periodically claims ``processing`` clips (oldest first) and runs each one
    through ``handler`` sequentially.

    There is no per-clip lease. If a tick outlasts the interval in another
    process, the same clip can be discovered twice; runs are at-least-once.

    Args:
        database: Store to discover clips from
        handler: Async callable run per clip (usually a ClipPipeline)
        interval_seconds: Delay between the end of one tick and the next
        batch_size: Maximum clips per tick
    """

    def __init__(
        self,
        database: DatabaseProvider,
        handler: ClipHandler,
        interval_seconds: float = 5.0,
        batch_size: int = 5,
    ):
        self.database = database
        self.handler = handler
        self.interval_seconds = interval_seconds
        self.batch_size = batch_size
        self._stopping = asyncio.Event()

    async def poll_once(self) -> int:
        """Run one tick. Returns the number of clips that finished successfully."""
        clips = await self.database.fetch_processing_clips(self.batch_size)
        if not clips:
            return 0

        logger.info(f"Found {len(clips)} clip(s) to process")
        succeeded = 0
        for clip in clips:
            with ExecutionTimer() as timer:
                try:
                    await self.handler(clip)
                    succeeded += 1
                except Exception as e:
                    logger.error(f"Unhandled error for clip {clip.id}: {e}")
            logger.info(f"Clip {clip.id} finished in {timer.get_execution_time():.2f}s")
        return succeeded

    async def run(self, max_ticks: Optional[int] = None) -> None:
        """Poll until ``stop()`` is called (or ``max_ticks`` ticks have run)."""
        logger.info(f"Polling every {self.interval_seconds}s for clips with status=processing")
        ticks = 0
        while not self._stopping.is_set():
            try:
                await self.poll_once()
            except Exception as e:
                logger.error(f"Poll error: {e}")

            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break

            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass

        logger.info("Poller stopped")

    def stop(self) -> None:
        self._stopping.set()
