import asyncio
from typing import Awaitable, Callable, Set

from loguru import logger

from scriptsync.utils.execution_timer import ExecutionTimer

MatchCallable = Callable[[str], Awaitable[object]]


class MatchTaskRunner:
    """
    Fire-and-forget execution of matching runs.

    ``submit`` schedules the run on the current event loop and returns at
    once; the task is kept referenced until it finishes. Failures are logged
    and never reach the HTTP caller.
    """

    def __init__(self, match_project: MatchCallable):
        self.match_project = match_project
        self._tasks: Set[asyncio.Task] = set()

    def submit(self, project_id: str) -> asyncio.Task:
        task = asyncio.create_task(self._run(project_id), name=f"match-{project_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, project_id: str) -> None:
        with ExecutionTimer() as timer:
            try:
                await self.match_project(project_id)
            except Exception as e:
                logger.exception(f"Match processing failed for project {project_id}: {e}")
                return
        logger.info(f"Matching for project {project_id} finished in {timer.get_execution_time():.2f}s")

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every submitted run to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
