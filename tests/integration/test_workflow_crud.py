"""
Integration tests for workflow persistence and the file status updater.

System role: Verification of row-level status writes and column merges
"""

import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from filetable.boundary.db.CRUD.workflow_crud import workflow_crud
from filetable.core.document_processing.database.file_status_updater import (
    FileStatusUpdater,
    find_file,
)
from filetable.core.document_processing.models import EnrichedColumnSuggestion, FileStatus
from filetable.core.document_processing.steps import merge_outcome, status_outcome
from filetable.core.exceptions import InvalidStatusTransitionError, NotFoundError


def _suggestion(name: str, value: str) -> EnrichedColumnSuggestion:
    return EnrichedColumnSuggestion(
        name=name,
        confidence="medium",
        rationale="Looks like an invoice",
        why_useful="Useful",
        extracted_value=value,
    )


async def _files(session_factory, workflow_id) -> list[dict]:
    async with session_factory() as db:
        return (await workflow_crud.get_fresh(db, workflow_id)).files


class TestWorkflowCRUD:
    """Test suite for WorkflowCRUD."""

    @pytest.mark.asyncio
    async def test_create_and_get_for_user(self, test_async_db: AsyncSession) -> None:
        workflow = await workflow_crud.create(test_async_db, user_id="user-1", name="Receipts")
        await test_async_db.commit()

        assert await workflow_crud.get_for_user(test_async_db, workflow.id, "user-1") is not None
        assert await workflow_crud.get_for_user(test_async_db, workflow.id, "user-2") is None
        assert workflow.files == []
        assert workflow.suggested_columns == []

    @pytest.mark.asyncio
    async def test_get_fresh_missing(self, test_async_db: AsyncSession) -> None:
        assert await workflow_crud.get_fresh(test_async_db, uuid.uuid4()) is None

    @pytest.mark.asyncio
    async def test_set_files_persists(self, test_async_db: AsyncSession) -> None:
        workflow = await workflow_crud.create(test_async_db, user_id="user-1", name="W")
        workflow_crud.set_files(workflow, [{"id": "f1", "filename": "a.pdf", "s3Key": "k"}])
        await test_async_db.commit()

        fresh = await workflow_crud.get_fresh(test_async_db, workflow.id)

        assert find_file(fresh.files, "f1")["filename"] == "a.pdf"
        assert find_file(fresh.files, "nope") is None

    @pytest.mark.asyncio
    async def test_delete_by_id(self, test_async_db: AsyncSession) -> None:
        workflow = await workflow_crud.create(test_async_db, user_id="user-1", name="W")
        await test_async_db.commit()

        assert await workflow_crud.delete_by_id(test_async_db, workflow.id) is True
        assert await workflow_crud.get_by_id(test_async_db, workflow.id) is None


class TestFileStatusUpdater:
    """Test suite for FileStatusUpdater."""

    @pytest.mark.asyncio
    async def test_apply_status_outcome(self, session_factory, make_workflow) -> None:
        # Arrange
        workflow_id, file_id = await make_workflow(b"data")

        # Act
        async with session_factory() as db:
            await FileStatusUpdater(db).apply(
                workflow_id, file_id, status_outcome(file_id, FileStatus.analyzing())
            )

        # Assert
        files = await _files(session_factory, workflow_id)
        assert find_file(files, file_id)["status"] == "Analyzing"

    @pytest.mark.asyncio
    async def test_illegal_transition_is_rejected(self, session_factory, make_workflow) -> None:
        workflow_id, file_id = await make_workflow(b"data")

        async with session_factory() as db:
            with pytest.raises(InvalidStatusTransitionError):
                await FileStatusUpdater(db).apply(
                    workflow_id, file_id, status_outcome(file_id, FileStatus.ready())
                )

        files = await _files(session_factory, workflow_id)
        assert find_file(files, file_id)["status"] == "Uploaded"

    @pytest.mark.asyncio
    async def test_merge_outcome_writes_columns_and_ready(
        self, session_factory, make_workflow
    ) -> None:
        workflow_id, file_id = await make_workflow(b"data", status="Suggesting columns")
        outcome = merge_outcome(file_id, [_suggestion("Invoice Number", "INV-9")])

        async with session_factory() as db:
            await FileStatusUpdater(db).apply(workflow_id, file_id, outcome)

        async with session_factory() as db:
            workflow = await workflow_crud.get_fresh(db, workflow_id)
        assert find_file(workflow.files, file_id)["status"] == "Ready"
        assert workflow.suggested_columns == [
            {
                "name": "Invoice Number",
                "outputType": "text",
                "autoPopulate": False,
                "primary": False,
                "provenance": "llm-global",
                "confidence": "medium",
                "rationale": "Looks like an invoice",
                "whyUseful": "Useful",
                "extractedValues": {file_id: "INV-9"},
            }
        ]

    @pytest.mark.asyncio
    async def test_mark_failed_only_touches_one_file(self, session_factory, make_workflow) -> None:
        sibling = {"id": "other", "filename": "b.pdf", "status": "Analyzing", "s3Key": "k"}
        workflow_id, file_id = await make_workflow(b"data", extra_files=[sibling])

        async with session_factory() as db:
            await FileStatusUpdater(db).mark_failed(workflow_id, file_id, "Document is empty")

        files = await _files(session_factory, workflow_id)
        assert find_file(files, file_id)["status"] == "Error: Document is empty"
        assert find_file(files, "other")["status"] == "Analyzing"

    @pytest.mark.asyncio
    async def test_missing_workflow_and_file(self, session_factory, make_workflow) -> None:
        workflow_id, _ = await make_workflow(b"data")

        async with session_factory() as db:
            with pytest.raises(NotFoundError):
                await FileStatusUpdater(db).mark_failed(uuid.uuid4(), "f", "x")
            with pytest.raises(NotFoundError):
                await FileStatusUpdater(db).apply(
                    workflow_id, "missing", status_outcome("missing", FileStatus.analyzing())
                )
