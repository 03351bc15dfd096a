"""
Dependency injection container.

Factory functions for FastAPI dependencies. Analysis events go to the
Celery queue unless DOC_PIPELINE_DISPATCH_MODE=in_process, in which case
the API process runs them on its own bounded run pool.

Dependencies: filetable.configs, filetable.application, filetable.boundary
System role: DI container for service injection
"""

from functools import lru_cache

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from filetable.application.services import Dispatcher, WorkflowFileService, pool_dispatcher
from filetable.boundary.aws.s3_client import S3DocumentClient
from filetable.boundary.db import get_async_db
from filetable.boundary.db.connection import get_async_session_factory
from filetable.core.document_processing import (
    FileAnalysisPipeline,
    PipelineRunPool,
    get_pipeline_settings,
)


@lru_cache
def get_s3_document_client() -> S3DocumentClient:
    """
    Get S3 document client singleton.

    Returns:
        S3DocumentClient: Client for the documents bucket
    """
    return S3DocumentClient()


@lru_cache
def get_run_pool() -> PipelineRunPool:
    """Process-wide pool running pipelines at most run_concurrency at a time."""
    settings = get_pipeline_settings()
    pipeline = FileAnalysisPipeline(
        get_async_session_factory(),
        settings=settings,
        s3_client=get_s3_document_client(),
    )
    return PipelineRunPool(pipeline.run, limit=settings.run_concurrency)


def get_analysis_dispatcher() -> Dispatcher | None:
    """In-process pool dispatcher, or None for the Celery default."""
    if get_pipeline_settings().dispatch_mode == "in_process":
        return pool_dispatcher(get_run_pool())
    return None


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """
    Resolve the calling user.

    Authentication happens upstream; the gateway forwards the user ID
    in the X-User-Id header.

    Raises:
        HTTPException(401): Header missing
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id


def get_workflow_file_service(
    db: AsyncSession = Depends(get_async_db),
    s3_client: S3DocumentClient = Depends(get_s3_document_client),
    dispatcher: Dispatcher | None = Depends(get_analysis_dispatcher),
) -> WorkflowFileService:
    """
    Get workflow file service instance.

    Args:
        db: Async database session (injected via Depends)
        s3_client: Documents bucket client (injected via Depends)
        dispatcher: Analysis trigger (Celery when None)

    Returns:
        WorkflowFileService: Service bound to the request session
    """
    return WorkflowFileService(db=db, s3_client=s3_client, dispatcher=dispatcher)
