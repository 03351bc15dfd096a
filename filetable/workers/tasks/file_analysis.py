"""
File analysis Celery task.

Task: process_workflow_file(payload)
Flow: validate event -> FileAnalysisPipeline.run() -> summary dict

Retries happen per pipeline step, so the Celery task itself is never
re-queued; a failed run has already marked its file with an error.

Dependencies: celery, filetable.core.document_processing, filetable.workers
System role: Fire-and-forget trigger for file analysis
"""

import asyncio
import logging
from typing import Any

from filetable.boundary.db.connection import get_async_engine, get_async_session_factory
from filetable.core.document_processing.entrypoint import FileAnalysisPipeline
from filetable.core.document_processing.models import FileProcessEvent, PipelineResult
from filetable.workers import FILE_ANALYSIS_TASK, celery_app, celery_config

logger = logging.getLogger(__name__)


async def run_file_analysis(event: FileProcessEvent) -> PipelineResult:
    """
    Run the pipeline for one event on a dedicated engine.

    Each task invocation runs in its own event loop, so the engine and its
    pooled connections are created and disposed inside it.
    """
    engine = get_async_engine()
    try:
        pipeline = FileAnalysisPipeline(get_async_session_factory(engine))
        return await pipeline.run(event)
    finally:
        await engine.dispose()


@celery_app.task(bind=True, name=FILE_ANALYSIS_TASK)
def process_workflow_file(self, payload: dict[str, Any]) -> dict[str, Any]:
    """
    Analyze one uploaded workflow file.

    Args:
        payload: FileProcessEvent as a dict ({workflowId, fileId})

    Returns:
        dict: PipelineResult fields
    """
    event = FileProcessEvent.model_validate(payload)
    logger.info(
        f"{__name__}:process_workflow_file - Received",
        extra={"run_key": event.run_key, "task_id": self.request.id},
    )
    result = asyncio.run(run_file_analysis(event))
    return result.model_dump()


def enqueue_file_analysis(event: FileProcessEvent) -> str:
    """
    Dispatch a file analysis run without waiting for it.

    Args:
        event: Workflow and file to analyze

    Returns:
        str: Celery task ID
    """
    async_result = process_workflow_file.apply_async(
        args=[event.model_dump(mode="json", by_alias=True)],
        queue=celery_config.file_analysis_queue,
    )
    logger.info(
        f"{__name__}:enqueue_file_analysis - Dispatched",
        extra={"run_key": event.run_key, "task_id": async_result.id},
    )
    return async_result.id
