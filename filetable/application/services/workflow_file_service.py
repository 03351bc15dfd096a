"""
Workflow file service.

Uploads files into a workflow and triggers their analysis. Upload
stores the bytes in S3 under {uuid}-{filename}, records the SHA-256 on
the file entry and dispatches one analysis event per file after the
workflow row is committed. Callers poll get_files() for status.

Dependencies: sqlalchemy, filetable.boundary, filetable.workers
System role: Upload and re-trigger orchestration for workflow files
"""

import asyncio
import hashlib
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from filetable.boundary.aws.s3_client import S3DocumentClient
from filetable.boundary.db.CRUD.workflow_crud import workflow_crud
from filetable.boundary.db.models.workflow_model import FileTableWorkflowModel
from filetable.core.document_processing.database.file_status_updater import FileStatusUpdater
from filetable.core.document_processing.models import (
    FileProcessEvent,
    FileStatus,
    FileStatusKind,
    WorkflowColumn,
    WorkflowFile,
)
from filetable.core.document_processing.run_pool import PipelineRunPool
from filetable.core.exceptions import InvalidStatusTransitionError, NotFoundError
from filetable.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

Dispatcher = Callable[[FileProcessEvent], str]


@dataclass
class UploadedFile:
    """File received from the client."""

    filename: str
    data: bytes
    content_type: str = "application/pdf"


def default_dispatcher(event: FileProcessEvent) -> str:
    from filetable.workers.tasks.file_analysis import enqueue_file_analysis

    return enqueue_file_analysis(event)


def pool_dispatcher(pool: PipelineRunPool) -> Dispatcher:
    """Dispatcher that schedules runs on an in-process pool and returns the run's task name."""

    def dispatch(event: FileProcessEvent) -> str:
        return pool.submit(event).get_name()

    return dispatch


class WorkflowFileService:
    """Manage files of a file table workflow."""

    def __init__(
        self,
        db: AsyncSession,
        s3_client: S3DocumentClient | None = None,
        dispatcher: Dispatcher | None = None,
    ) -> None:
        """
        Initialize workflow file service.

        Args:
            db: AsyncSession for workflow rows
            s3_client: Documents bucket client (created if None)
            dispatcher: Sends analysis events (Celery by default)
        """
        self.db = db
        self._s3_client = s3_client
        self._dispatch = dispatcher or default_dispatcher

    @property
    def s3_client(self) -> S3DocumentClient:
        if self._s3_client is None:
            self._s3_client = S3DocumentClient()
        return self._s3_client

    async def create_workflow(self, user_id: str, name: str) -> FileTableWorkflowModel:
        workflow = await workflow_crud.create(
            self.db,
            user_id=user_id,
            name=name,
            files=[],
            suggested_columns=[],
        )
        await self.db.commit()
        return workflow

    async def _get_owned(self, workflow_id: UUID, user_id: str) -> FileTableWorkflowModel:
        workflow = await workflow_crud.get_for_user(self.db, workflow_id, user_id)
        if workflow is None:
            raise NotFoundError("Workflow", str(workflow_id))
        return workflow

    async def upload_files(
        self,
        workflow_id: UUID,
        user_id: str,
        files: list[UploadedFile],
    ) -> list[WorkflowFile]:
        """
        Store files and trigger their analysis.

        Args:
            workflow_id: Target workflow
            user_id: Caller; must own the workflow
            files: Files to upload

        Returns:
            list[WorkflowFile]: New file entries (status Uploaded)

        Raises:
            NotFoundError: Workflow missing or owned by another user
            StorageError: S3 upload failed
        """
        workflow = await self._get_owned(workflow_id, user_id)
        bucket = self.s3_client.bucket

        uploaded: list[WorkflowFile] = []
        for upload in files:
            file_id = str(uuid.uuid4())
            s3_key = f"{file_id}-{upload.filename}"
            content_hash = hashlib.sha256(upload.data).hexdigest()

            await asyncio.to_thread(
                self.s3_client.put_object,
                s3_key,
                upload.data,
                upload.content_type,
                None,
                {"originalFilename": upload.filename, "contentHash": content_hash},
            )
            uploaded.append(
                WorkflowFile(
                    id=file_id,
                    filename=upload.filename,
                    status=FileStatus.uploaded().to_string(),
                    content_hash=content_hash,
                    s3_bucket=bucket,
                    s3_key=s3_key,
                    size=len(upload.data),
                )
            )

        workflow = await workflow_crud.get_fresh(self.db, workflow_id, for_update=True)
        if workflow is None:
            raise NotFoundError("Workflow", str(workflow_id))
        workflow_crud.set_files(
            workflow,
            [*(workflow.files or []), *(entry.model_dump(by_alias=True) for entry in uploaded)],
        )
        await self.db.commit()

        uploaded = [await self._dispatch_or_fail(workflow_id, entry) for entry in uploaded]

        logger.info(
            f"{__name__}:upload_files - Files uploaded",
            extra={"workflow_id": str(workflow_id), "count": len(uploaded)},
        )
        return uploaded

    async def _dispatch_or_fail(self, workflow_id: UUID, entry: WorkflowFile) -> WorkflowFile:
        """
        Trigger analysis of a committed entry.

        When the event cannot be sent the entry is marked failed, so it can
        be re-triggered instead of staying Uploaded forever.
        """
        try:
            self._dispatch(FileProcessEvent(workflow_id=workflow_id, file_id=entry.id))
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:_dispatch_or_fail - Analysis dispatch failed",
                e,
                workflow_id=str(workflow_id),
                file_id=entry.id,
            )
            message = f"Analysis dispatch failed: {e}"
            await FileStatusUpdater(self.db).mark_failed(workflow_id, entry.id, message)
            return entry.model_copy(update={"status": FileStatus.error(message).to_string()})
        return entry

    async def get_files(self, workflow_id: UUID, user_id: str) -> list[WorkflowFile]:
        """Current file entries of a workflow, for status polling."""
        workflow = await self._get_owned(workflow_id, user_id)
        return [WorkflowFile.model_validate(entry) for entry in workflow.files or []]

    async def get_columns(self, workflow_id: UUID, user_id: str) -> list[WorkflowColumn]:
        """Suggested columns merged so far."""
        workflow = await self._get_owned(workflow_id, user_id)
        return [WorkflowColumn.model_validate(col) for col in workflow.suggested_columns or []]

    async def retry_file(
        self,
        workflow_id: UUID,
        user_id: str,
        file_id: str,
    ) -> WorkflowFile:
        """
        Re-trigger analysis of a failed file.

        Raises:
            NotFoundError: Workflow or file missing
            InvalidStatusTransitionError: File is not in an error state
        """
        workflow = await self._get_owned(workflow_id, user_id)
        entry = next((f for f in workflow.files or [] if f.get("id") == file_id), None)
        if entry is None:
            raise NotFoundError("File", file_id)

        file = WorkflowFile.model_validate(entry)
        status = FileStatus.parse(file.status)
        if status.kind is not FileStatusKind.ERROR:
            raise InvalidStatusTransitionError(
                status.to_string(), FileStatus.analyzing().to_string()
            )

        self._dispatch(FileProcessEvent(workflow_id=workflow_id, file_id=file_id))
        logger.info(
            f"{__name__}:retry_file - Analysis re-triggered",
            extra={"workflow_id": str(workflow_id), "file_id": file_id},
        )
        return file

    async def get_download_url(
        self,
        workflow_id: UUID,
        user_id: str,
        file_id: str,
    ) -> tuple[str, datetime]:
        """
        Presigned GET URL for an uploaded file.

        Returns:
            tuple[str, datetime]: (url, expires_at)

        Raises:
            NotFoundError: Workflow or file missing
        """
        workflow = await self._get_owned(workflow_id, user_id)
        entry = next((f for f in workflow.files or [] if f.get("id") == file_id), None)
        if entry is None:
            raise NotFoundError("File", file_id)

        file = WorkflowFile.model_validate(entry)
        return self.s3_client.generate_presigned_download_url(file.s3_key, bucket=file.s3_bucket)
