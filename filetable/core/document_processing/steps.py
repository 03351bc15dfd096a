"""
Step runner for the file analysis pipeline.

Steps do not write shared rows themselves. A step that changes
persisted state returns a StepOutcome (the next file status plus a list
of effects) and FileStatusUpdater applies it in one transaction.

Each step runs under a tenacity retry budget: errors flagged retryable
(provider and storage failures, unexpected exceptions) are retried,
fatal pipeline errors surface immediately. When a step exhausts its
budget the error leaves the run and the compensation handler registered
for the run key writes the file's error status.

Dependencies: tenacity
System role: Retry and compensation discipline for pipeline steps
"""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from filetable.core.document_processing.models.column_suggestion import (
    EnrichedColumnSuggestion,
)
from filetable.core.document_processing.models.file_status import FileStatus
from filetable.core.exceptions import FileTableException

logger = logging.getLogger(__name__)

T = TypeVar("T")
CompensationHandler = Callable[[BaseException], Awaitable[None]]


@dataclass(frozen=True)
class SetFileStatus:
    """Write a file's status string."""

    file_id: str
    status: FileStatus


@dataclass(frozen=True)
class MergeColumns:
    """Merge a file's suggestions into the workflow column list."""

    file_id: str
    suggestions: tuple[EnrichedColumnSuggestion, ...]


Effect = SetFileStatus | MergeColumns


@dataclass(frozen=True)
class StepOutcome:
    """Next status of the file plus the effects that produce it."""

    next_status: FileStatus
    effects: tuple[Effect, ...] = field(default_factory=tuple)


def status_outcome(file_id: str, status: FileStatus) -> StepOutcome:
    """Outcome of a step that only moves the file to another status."""
    return StepOutcome(next_status=status, effects=(SetFileStatus(file_id, status),))


def merge_outcome(
    file_id: str,
    suggestions: list[EnrichedColumnSuggestion],
) -> StepOutcome:
    """Outcome of the final step: merge suggestions, then mark the file Ready."""
    ready = FileStatus.ready()
    return StepOutcome(
        next_status=ready,
        effects=(MergeColumns(file_id, tuple(suggestions)), SetFileStatus(file_id, ready)),
    )


def is_retryable(exc: BaseException) -> bool:
    """Pipeline errors declare retryability; anything else is treated as transient."""
    if isinstance(exc, FileTableException):
        return exc.retryable
    return isinstance(exc, Exception)


class StepRunner:
    """Run pipeline steps with a bounded retry budget."""

    def __init__(self, retries: int = 1, wait_seconds: float = 2.0) -> None:
        """
        Initialize step runner.

        Args:
            retries: Retries after the first attempt
            wait_seconds: Initial exponential backoff between attempts
        """
        self._retries = retries
        self._wait_seconds = wait_seconds

    async def run(self, name: str, step: Callable[[], Awaitable[T]]) -> T:
        """
        Execute one step.

        step is called again from scratch on every attempt, so it must
        re-read whatever persisted state it depends on.

        Args:
            name: Step name for logs
            step: Zero-argument coroutine function

        Returns:
            Whatever the step returns

        Raises:
            Exception: The last error once the budget is spent, or a fatal error at once
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._retries + 1),
            wait=wait_exponential(multiplier=self._wait_seconds, max=30),
            retry=retry_if_exception(is_retryable),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                number = attempt.retry_state.attempt_number
                logger.debug(f"{__name__}:run - step={name} attempt={number}")
                return await step()
        raise RuntimeError(f"Step {name} did not run")  # pragma: no cover


class CompensationRegistry:
    """Failure handlers keyed by run key."""

    def __init__(self) -> None:
        self._handlers: dict[str, CompensationHandler] = {}

    def register(self, run_key: str, handler: CompensationHandler) -> None:
        self._handlers[run_key] = handler

    def unregister(self, run_key: str) -> None:
        self._handlers.pop(run_key, None)

    def is_registered(self, run_key: str) -> bool:
        return run_key in self._handlers

    async def compensate(self, run_key: str, error: BaseException) -> None:
        """
        Invoke the handler registered for run_key.

        Raises:
            KeyError: No handler registered for run_key
        """
        handler = self._handlers[run_key]
        logger.info(
            f"{__name__}:compensate - Running failure handler",
            extra={"run_key": run_key, "error_type": type(error).__name__},
        )
        await handler(error)
