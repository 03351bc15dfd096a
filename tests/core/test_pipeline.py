"""
Integration tests for FileAnalysisPipeline.

Runs the full eight-step pipeline against in-memory SQLite, an in-memory
object store, deterministic fake embeddings and a mocked chat model.

System role: End-to-end verification of file analysis
"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding

from conftest import make_llm_response
from filetable.boundary.db.CRUD.artifact_crud import artifact_crud
from filetable.boundary.db.CRUD.embedding_crud import embedding_crud
from filetable.boundary.db.CRUD.workflow_crud import workflow_crud
from filetable.core.document_processing import (
    DocumentPipelineSettings,
    FileAnalysisPipeline,
    FileProcessEvent,
)
from filetable.core.document_processing.steps import CompensationRegistry, StepRunner
from filetable.core.document_processing.tasks import (
    ArtifactCache,
    ColumnSuggestionTask,
    DocumentAnalyzer,
    EmbeddingTask,
)
from filetable.core.document_processing.tasks.parsing_task import ParsedDocument, ParsingTask
from filetable.core.exceptions import ContentMismatchError, NotFoundError, ProviderError


class FlakyEmbeddings:
    """Fake embeddings that fail while `failing` is set."""

    def __init__(self) -> None:
        self.failing = False
        self.calls = 0
        self._fake = DeterministicFakeEmbedding(size=8)

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.calls += 1
        if self.failing:
            raise RuntimeError("embedding provider unavailable")
        return self._fake.embed_documents(texts)


class FailOnceEmbeddings(FlakyEmbeddings):
    """Fake embeddings whose Nth call fails, every other call succeeds."""

    def __init__(self, fail_on_call: int) -> None:
        super().__init__()
        self.fail_on_call = fail_on_call

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.failing = self.calls + 1 == self.fail_on_call
        return super().embed_documents(texts)


@pytest.fixture
def parser() -> MagicMock:
    parser = MagicMock(spec=ParsingTask)
    parser.parse.return_value = ParsedDocument(
        page_texts=["ACME Corp Invoice INV-001", "Total due: $1,250.00"],
        info={"title": "Invoice INV-001"},
    )
    return parser


@pytest.fixture
def embeddings() -> FlakyEmbeddings:
    return FlakyEmbeddings()


@pytest.fixture
def compensations() -> CompensationRegistry:
    return CompensationRegistry()


@pytest.fixture
def pipeline(session_factory, s3_client, parser, embeddings, mock_llm, compensations):
    settings = DocumentPipelineSettings(step_retries=1, step_retry_wait_seconds=0)
    cache = ArtifactCache(s3_client)
    return FileAnalysisPipeline(
        session_factory,
        settings=settings,
        s3_client=s3_client,
        analyzer=DocumentAnalyzer(parser=parser, s3_client=s3_client),
        artifact_cache=cache,
        embedding_task=EmbeddingTask(embeddings, provider="google", model="fake-8"),
        suggestion_task=ColumnSuggestionTask(cache, model_id="gemini-test", llm=mock_llm),
        step_runner=StepRunner(retries=1, wait_seconds=0),
        compensations=compensations,
    )


async def _workflow(session_factory, workflow_id):
    async with session_factory() as db:
        return await workflow_crud.get_fresh(db, workflow_id)


def _status(workflow, file_id: str) -> str:
    return next(f["status"] for f in workflow.files if f["id"] == file_id)


class TestPipelineHappyPath:
    """Test suite for successful runs."""

    @pytest.mark.asyncio
    async def test_file_reaches_ready_with_columns(
        self, pipeline, make_workflow, session_factory, pdf_bytes
    ) -> None:
        # Arrange
        workflow_id, file_id = await make_workflow(pdf_bytes)

        # Act
        result = await pipeline.run(FileProcessEvent(workflow_id=workflow_id, file_id=file_id))

        # Assert
        workflow = await _workflow(session_factory, workflow_id)
        assert _status(workflow, file_id) == "Ready"
        assert [c["name"] for c in workflow.suggested_columns] == ["Invoice Number", "Total Amount"]
        assert workflow.suggested_columns[0]["extractedValues"] == {file_id: "INV-001"}
        assert workflow.suggested_columns[0]["provenance"] == "llm-global"
        assert result.cache_hit is False
        assert result.chunk_count == 1
        assert result.embeddings_created == 1
        assert result.suggestions_added == 2
        assert result.inferred_document_type == "Invoice"

    @pytest.mark.asyncio
    async def test_artifact_and_embeddings_are_persisted(
        self, pipeline, make_workflow, session_factory, pdf_bytes
    ) -> None:
        workflow_id, file_id = await make_workflow(pdf_bytes)

        result = await pipeline.run(FileProcessEvent(workflow_id=workflow_id, file_id=file_id))

        async with session_factory() as db:
            artifact = await artifact_crud.get_by_id(db, uuid.UUID(result.artifact_id))
            count = await embedding_crud.count_for_model(db, artifact.id, "google", "fake-8")
        assert artifact.analyzer_version == 1
        assert artifact.analyzer_metadata["title"] == "Invoice INV-001"
        assert artifact.analyzer_metadata["chunkCount"] == 1
        assert count == 1

    @pytest.mark.asyncio
    async def test_same_content_is_analyzed_once(
        self, pipeline, make_workflow, session_factory, parser, pdf_bytes
    ) -> None:
        """A second file with identical bytes reuses the cached artifact."""
        first_wf, first_file = await make_workflow(pdf_bytes)
        second_wf, second_file = await make_workflow(pdf_bytes)

        first = await pipeline.run(FileProcessEvent(workflow_id=first_wf, file_id=first_file))
        second = await pipeline.run(FileProcessEvent(workflow_id=second_wf, file_id=second_file))

        assert parser.parse.call_count == 1
        assert second.cache_hit is True
        assert second.artifact_id == first.artifact_id
        assert second.embeddings_created == 0
        assert _status(await _workflow(session_factory, second_wf), second_file) == "Ready"

    @pytest.mark.asyncio
    async def test_rerun_does_not_duplicate_columns(
        self, pipeline, make_workflow, session_factory, pdf_bytes
    ) -> None:
        workflow_id, file_id = await make_workflow(pdf_bytes)
        event = FileProcessEvent(workflow_id=workflow_id, file_id=file_id)

        await pipeline.run(event)
        once = (await _workflow(session_factory, workflow_id)).suggested_columns
        await pipeline.run(event)
        twice = (await _workflow(session_factory, workflow_id)).suggested_columns

        assert twice == once

    @pytest.mark.asyncio
    async def test_files_of_one_workflow_share_columns(
        self, pipeline, make_workflow, session_factory, s3_client, mock_llm, pdf_bytes
    ) -> None:
        other_id = "file-2"
        other_data = b"%PDF-1.4 second invoice"
        s3_client.put_object("file-2-other.pdf", other_data)
        other_entry = {
            "id": other_id,
            "filename": "other.pdf",
            "status": "Uploaded",
            "s3Key": "file-2-other.pdf",
            "size": len(other_data),
        }
        workflow_id, file_id = await make_workflow(pdf_bytes, extra_files=[other_entry])

        await pipeline.run(FileProcessEvent(workflow_id=workflow_id, file_id=file_id))
        mock_llm.structured.ainvoke.return_value = make_llm_response(
            [("Invoice number", "INV-002"), ("Vendor", "Globex")]
        )
        await pipeline.run(FileProcessEvent(workflow_id=workflow_id, file_id=other_id))

        columns = (await _workflow(session_factory, workflow_id)).suggested_columns
        assert [c["name"] for c in columns] == ["Invoice Number", "Total Amount", "Vendor"]
        assert columns[0]["extractedValues"] == {file_id: "INV-001", other_id: "INV-002"}

    @pytest.mark.asyncio
    async def test_transient_llm_failure_is_retried(
        self, pipeline, make_workflow, session_factory, mock_llm, pdf_bytes
    ) -> None:
        mock_llm.structured.ainvoke = AsyncMock(
            side_effect=[TimeoutError("deadline exceeded"), make_llm_response()]
        )
        workflow_id, file_id = await make_workflow(pdf_bytes)

        await pipeline.run(FileProcessEvent(workflow_id=workflow_id, file_id=file_id))

        assert mock_llm.structured.ainvoke.await_count == 2
        assert _status(await _workflow(session_factory, workflow_id), file_id) == "Ready"


class TestPipelineFailures:
    """Test suite for failing runs and compensation."""

    @pytest.mark.asyncio
    async def test_hash_mismatch_marks_file_failed(
        self, pipeline, make_workflow, session_factory, s3_client, parser, pdf_bytes
    ) -> None:
        workflow_id, file_id = await make_workflow(pdf_bytes)
        s3_client.put_object(f"{file_id}-doc.pdf", b"tampered bytes")

        with pytest.raises(ContentMismatchError):
            await pipeline.run(FileProcessEvent(workflow_id=workflow_id, file_id=file_id))

        status = _status(await _workflow(session_factory, workflow_id), file_id)
        assert status.startswith("Error: Content hash mismatch")
        parser.parse.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_leaves_sibling_files_untouched(
        self, pipeline, make_workflow, session_factory, s3_client, pdf_bytes
    ) -> None:
        sibling = {"id": "done", "filename": "a.pdf", "status": "Ready", "s3Key": "done-a.pdf"}
        workflow_id, file_id = await make_workflow(pdf_bytes, extra_files=[sibling])
        s3_client.put_object(f"{file_id}-doc.pdf", b"tampered bytes")

        with pytest.raises(ContentMismatchError):
            await pipeline.run(FileProcessEvent(workflow_id=workflow_id, file_id=file_id))

        assert _status(await _workflow(session_factory, workflow_id), "done") == "Ready"

    @pytest.mark.asyncio
    async def test_embedding_failure_then_retry_reuses_artifact(
        self, pipeline, make_workflow, session_factory, parser, embeddings, pdf_bytes
    ) -> None:
        """The artifact cached before the failure is reused without re-analysis."""
        workflow_id, file_id = await make_workflow(pdf_bytes)
        event = FileProcessEvent(workflow_id=workflow_id, file_id=file_id)
        embeddings.failing = True

        with pytest.raises(ProviderError):
            await pipeline.run(event)

        workflow = await _workflow(session_factory, workflow_id)
        assert _status(workflow, file_id).startswith("Error: Embedding batch 0 failed")
        assert embeddings.calls == 2

        embeddings.failing = False
        result = await pipeline.run(event)

        assert result.cache_hit is True
        assert result.embeddings_created == 1
        assert parser.parse.call_count == 1
        assert _status(await _workflow(session_factory, workflow_id), file_id) == "Ready"

    @pytest.mark.asyncio
    async def test_missing_file_raises_not_found(
        self, pipeline, make_workflow, pdf_bytes
    ) -> None:
        workflow_id, _ = await make_workflow(pdf_bytes)

        with pytest.raises(NotFoundError):
            await pipeline.run(FileProcessEvent(workflow_id=workflow_id, file_id="missing"))

    @pytest.mark.asyncio
    async def test_compensation_is_unregistered_after_run(
        self, pipeline, make_workflow, compensations, pdf_bytes
    ) -> None:
        workflow_id, file_id = await make_workflow(pdf_bytes)
        event = FileProcessEvent(workflow_id=workflow_id, file_id=file_id)

        await pipeline.run(event)

        assert not compensations.is_registered(event.run_key)

    @pytest.mark.asyncio
    async def test_ready_file_can_be_reanalyzed(
        self, pipeline, make_workflow, session_factory, pdf_bytes
    ) -> None:
        workflow_id, file_id = await make_workflow(pdf_bytes, status="Ready")

        result = await pipeline.run(FileProcessEvent(workflow_id=workflow_id, file_id=file_id))

        assert result.suggestions_added == 2
        assert _status(await _workflow(session_factory, workflow_id), file_id) == "Ready"

    @pytest.mark.asyncio
    async def test_mid_run_embedding_failure_is_completed_on_retry(
        self, session_factory, s3_client, parser, mock_llm, make_workflow, pdf_bytes
    ) -> None:
        """A later batch failing once still ends with every chunk embedded."""
        # Arrange
        parser.parse.return_value = ParsedDocument(page_texts=["w" * 2000])
        embeddings = FailOnceEmbeddings(fail_on_call=2)
        cache = ArtifactCache(s3_client)
        pipeline = FileAnalysisPipeline(
            session_factory,
            settings=DocumentPipelineSettings(chunk_size_tokens=125, chunk_overlap_ratio=0.0),
            s3_client=s3_client,
            analyzer=DocumentAnalyzer(parser=parser, s3_client=s3_client),
            artifact_cache=cache,
            embedding_task=EmbeddingTask(embeddings, "google", "fake-8", batch_size=1),
            suggestion_task=ColumnSuggestionTask(cache, model_id="gemini-test", llm=mock_llm),
            step_runner=StepRunner(retries=1, wait_seconds=0),
        )
        workflow_id, file_id = await make_workflow(pdf_bytes)

        # Act
        result = await pipeline.run(FileProcessEvent(workflow_id=workflow_id, file_id=file_id))

        # Assert
        async with session_factory() as db:
            stored = await embedding_crud.count_for_model(
                db, uuid.UUID(result.artifact_id), "google", "fake-8"
            )
        assert result.chunk_count == 4
        assert stored == 4
        assert result.embeddings_created == 3
        assert embeddings.calls == 5
        assert _status(await _workflow(session_factory, workflow_id), file_id) == "Ready"
