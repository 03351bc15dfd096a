"""
Concurrency-bounded pool of pipeline runs.

submit() schedules a run and returns at once; a semaphore keeps at most
`limit` runs executing, the rest wait for a slot. Runs of different
files have no ordering relative to each other.

Dependencies: asyncio
System role: Hard ceiling on simultaneous file analysis runs
"""

import asyncio
import logging
from typing import Awaitable, Callable

from filetable.core.document_processing.models import FileProcessEvent, PipelineResult
from filetable.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

RunFn = Callable[[FileProcessEvent], Awaitable[PipelineResult]]


class PipelineRunPool:
    """Run pipeline invocations with bounded concurrency."""

    def __init__(self, run: RunFn, limit: int = 3) -> None:
        """
        Initialize run pool.

        Args:
            run: Coroutine function executing one pipeline run
            limit: Maximum concurrent runs

        Raises:
            ValueError: When limit is not positive
        """
        if limit <= 0:
            raise ValueError("limit must be positive")
        self._run = run
        self._limit = limit
        self._semaphore = asyncio.Semaphore(limit)
        self._tasks: set[asyncio.Task] = set()
        self._active = 0

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def active(self) -> int:
        """Runs currently holding a slot."""
        return self._active

    @property
    def pending(self) -> int:
        """Runs submitted and not yet finished."""
        return len(self._tasks)

    def submit(self, event: FileProcessEvent) -> asyncio.Task:
        """
        Schedule a run without waiting for it.

        Returns:
            asyncio.Task: Task resolving to the run's PipelineResult
        """
        task = asyncio.create_task(self._guarded(event), name=f"file-analysis:{event.run_key}")
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    async def drain(self) -> list[PipelineResult | BaseException]:
        """Wait for every submitted run; failed runs yield their exception."""
        if not self._tasks:
            return []
        return await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _guarded(self, event: FileProcessEvent) -> PipelineResult:
        async with self._semaphore:
            self._active += 1
            try:
                return await self._run(event)
            finally:
                self._active -= 1

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            log_exception_with_context(
                logger,
                f"{__name__}:_on_done - Run failed",
                error,
                task=task.get_name(),
            )
