"""
Workflow CRUD operations.

Reads and rewrites the JSON file list and suggested columns of a
workflow row. Callers that read-modify-write lock the row first.

Dependencies: sqlalchemy, filetable.boundary.db.models
System role: Workflow persistence for the file analysis pipeline
"""

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from filetable.boundary.db.CRUD.base_crud import BaseCRUD
from filetable.boundary.db.models.workflow_model import FileTableWorkflowModel


class WorkflowCRUD(BaseCRUD[FileTableWorkflowModel]):
    """CRUD operations for FileTableWorkflowModel."""

    def __init__(self) -> None:
        """Initialize WorkflowCRUD with FileTableWorkflowModel."""
        super().__init__(FileTableWorkflowModel)

    async def get_fresh(
        self,
        session: AsyncSession,
        workflow_id: UUID,
        for_update: bool = False,
    ) -> FileTableWorkflowModel | None:
        """
        Load the latest persisted workflow row.

        populate_existing overwrites any copy already held in the
        session identity map.

        Args:
            session: Async database session
            workflow_id: Workflow UUID
            for_update: Take a row lock (SELECT ... FOR UPDATE)

        Returns:
            FileTableWorkflowModel if found, None otherwise
        """
        stmt = (
            select(FileTableWorkflowModel)
            .where(FileTableWorkflowModel.id == workflow_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_for_user(
        self,
        session: AsyncSession,
        workflow_id: UUID,
        user_id: str,
    ) -> FileTableWorkflowModel | None:
        """Workflow owned by user_id, or None."""
        stmt = select(FileTableWorkflowModel).where(
            FileTableWorkflowModel.id == workflow_id,
            FileTableWorkflowModel.user_id == user_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    def set_files(
        self,
        workflow: FileTableWorkflowModel,
        files: list[dict[str, Any]],
    ) -> None:
        """Replace the file list; a new list object marks the column dirty."""
        workflow.files = list(files)

    def set_suggested_columns(
        self,
        workflow: FileTableWorkflowModel,
        columns: list[dict[str, Any]],
    ) -> None:
        """Replace the suggested column list."""
        workflow.suggested_columns = list(columns)


workflow_crud = WorkflowCRUD()
