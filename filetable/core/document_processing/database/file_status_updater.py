"""
Workflow file status updater.

Applies step outcomes to the workflow row: file status changes and
suggestion merges. Every write re-fetches the row under
SELECT ... FOR UPDATE and commits once, so files of the same workflow
finishing concurrently do not overwrite each other's columns.

Uploaded -> Analyzing -> Suggesting columns -> Ready (or Error: <message>)

Dependencies: sqlalchemy
System role: Persistence of file status and suggested columns
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from filetable.boundary.db.CRUD.workflow_crud import workflow_crud
from filetable.boundary.db.models.workflow_model import FileTableWorkflowModel
from filetable.core.document_processing.models.column_suggestion import WorkflowColumn
from filetable.core.document_processing.models.file_status import FileStatus, transition
from filetable.core.document_processing.steps import (
    MergeColumns,
    SetFileStatus,
    StepOutcome,
)
from filetable.core.document_processing.tasks.column_suggestion_task import (
    merge_column_suggestions,
)
from filetable.core.exceptions import NotFoundError

logger = logging.getLogger(__name__)


def find_file(files: list[dict[str, Any]], file_id: str) -> dict[str, Any] | None:
    return next((entry for entry in files if entry.get("id") == file_id), None)


class FileStatusUpdater:
    """Write file status and merged columns on the workflow row."""

    def __init__(self, db_session: AsyncSession) -> None:
        """
        Initialize with database session.

        Args:
            db_session: AsyncSession used for every write
        """
        self.db = db_session

    async def _lock_workflow(self, workflow_id: UUID) -> FileTableWorkflowModel:
        workflow = await workflow_crud.get_fresh(self.db, workflow_id, for_update=True)
        if workflow is None:
            raise NotFoundError("Workflow", str(workflow_id))
        return workflow

    async def apply(
        self,
        workflow_id: UUID,
        file_id: str,
        outcome: StepOutcome,
    ) -> None:
        """
        Apply a step outcome in one transaction.

        Args:
            workflow_id: Parent workflow
            file_id: File the step ran for
            outcome: Next status and effects

        Raises:
            NotFoundError: Workflow or file missing
            InvalidStatusTransitionError: next_status is not reachable
        """
        try:
            workflow = await self._lock_workflow(workflow_id)
            files = [dict(entry) for entry in workflow.files or []]
            entry = find_file(files, file_id)
            if entry is None:
                raise NotFoundError("File", file_id)

            transition(FileStatus.parse(entry.get("status")), outcome.next_status)

            columns = [
                WorkflowColumn.model_validate(column)
                for column in workflow.suggested_columns or []
            ]
            columns_changed = False

            for effect in outcome.effects:
                if isinstance(effect, SetFileStatus):
                    target = find_file(files, effect.file_id)
                    if target is None:
                        raise NotFoundError("File", effect.file_id)
                    target["status"] = effect.status.to_string()
                elif isinstance(effect, MergeColumns):
                    columns = merge_column_suggestions(
                        columns, list(effect.suggestions), effect.file_id
                    )
                    columns_changed = True

            workflow_crud.set_files(workflow, files)
            if columns_changed:
                workflow_crud.set_suggested_columns(
                    workflow,
                    [column.model_dump(by_alias=True) for column in columns],
                )
            await self.db.commit()

            logger.info(
                f"{__name__}:apply - File status updated",
                extra={
                    "workflow_id": str(workflow_id),
                    "file_id": file_id,
                    "status": outcome.next_status.to_string(),
                    "effects": len(outcome.effects),
                },
            )

        except Exception as e:
            logger.error(f"{__name__}:apply - {type(e).__name__}: {e}")
            await self.db.rollback()
            raise

    async def mark_failed(
        self,
        workflow_id: UUID,
        file_id: str,
        error_message: str,
    ) -> None:
        """
        Mark one file as failed, leaving its siblings untouched.

        Args:
            workflow_id: Parent workflow
            file_id: Failed file
            error_message: Human-readable error (truncated to 2000 chars)

        Raises:
            NotFoundError: Workflow or file missing
        """
        status = FileStatus.error(error_message)
        try:
            workflow = await self._lock_workflow(workflow_id)
            files = [dict(entry) for entry in workflow.files or []]
            entry = find_file(files, file_id)
            if entry is None:
                raise NotFoundError("File", file_id)

            entry["status"] = status.to_string()
            workflow_crud.set_files(workflow, files)
            await self.db.commit()

            logger.info(
                f"{__name__}:mark_failed - File marked as failed",
                extra={
                    "workflow_id": str(workflow_id),
                    "file_id": file_id,
                    "error_message": status.message,
                },
            )

        except Exception as e:
            logger.error(f"{__name__}:mark_failed - {type(e).__name__}: {e}")
            await self.db.rollback()
            raise
