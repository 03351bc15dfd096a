"""
File analysis pipeline orchestrator.

Runs the eight steps for one uploaded workflow file:

    1. fetch workflow + file       5. ensure embeddings
    2. set Analyzing               6. set Suggesting columns
    3. artifact cache lookup       7. suggest columns
    4. analyze (miss) or reuse     8. merge suggestions + set Ready

Every step opens its own session and reads the workflow row fresh, so
a retried step acts on the latest persisted state. Any error escaping
a step is handed to the compensation handler registered for the run,
which writes Error: <message> on the file.

Dependencies: All task modules, configs, tenacity (via steps)
System role: Pipeline orchestration (coordinates only)
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import async_sessionmaker

from filetable.boundary.aws.s3_client import S3DocumentClient
from filetable.boundary.db.CRUD.workflow_crud import workflow_crud
from filetable.boundary.db.models.artifact_model import FileArtifactModel
from filetable.core.document_processing.configs import (
    DocumentPipelineSettings,
    get_pipeline_settings,
)
from filetable.core.document_processing.database.file_status_updater import (
    FileStatusUpdater,
    find_file,
)
from filetable.core.document_processing.embeddings_wrapper import build_embeddings
from filetable.core.document_processing.models import (
    AnalysisResult,
    ChunkingOptions,
    FileProcessEvent,
    FileStatus,
    PipelineResult,
    SuggestColumnsResult,
    WorkflowFile,
)
from filetable.core.document_processing.steps import (
    CompensationRegistry,
    StepRunner,
    merge_outcome,
    status_outcome,
)
from filetable.core.document_processing.tasks import (
    ArtifactCache,
    ChunkingTask,
    ColumnSuggestionTask,
    DocumentAnalyzer,
    EmbeddingTask,
)
from filetable.core.exceptions import NotFoundError
from filetable.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileContext:
    """Workflow owner and file entry read in step 1."""

    user_id: str
    file: WorkflowFile


@dataclass
class ArtifactState:
    """Artifact resolved in steps 3-4; analysis is set only on a cache miss."""

    artifact: FileArtifactModel
    cache_hit: bool
    analysis: AnalysisResult | None = None


class FileAnalysisPipeline:
    """Orchestrate analysis, embedding and column suggestion for one file."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        settings: DocumentPipelineSettings | None = None,
        s3_client: S3DocumentClient | None = None,
        analyzer: DocumentAnalyzer | None = None,
        artifact_cache: ArtifactCache | None = None,
        embedding_task: EmbeddingTask | None = None,
        suggestion_task: ColumnSuggestionTask | None = None,
        step_runner: StepRunner | None = None,
        compensations: CompensationRegistry | None = None,
    ) -> None:
        """
        Initialize pipeline with configuration.

        Collaborators default to instances built from settings.

        Args:
            session_factory: Factory for the per-step database sessions
            settings: Pipeline settings (uses defaults if None)
        """
        self._settings = settings or get_pipeline_settings()
        self._session_factory = session_factory
        self._s3_client = s3_client or S3DocumentClient()

        self._analyzer = analyzer or DocumentAnalyzer(
            chunker=ChunkingTask(
                chunk_size_tokens=self._settings.chunk_size_tokens,
                chunk_overlap_ratio=self._settings.chunk_overlap_ratio,
            ),
            s3_client=self._s3_client,
        )
        self._artifact_cache = artifact_cache or ArtifactCache(
            self._s3_client,
            prefix=self._settings.artifacts_prefix,
        )
        self._embedding_task = embedding_task or EmbeddingTask(
            build_embeddings(self._settings),
            provider=self._settings.embedding_provider,
            model=self._settings.embedding_model_id,
            batch_size=self._settings.embedding_batch_size,
        )
        self._suggestion_task = suggestion_task or ColumnSuggestionTask(
            self._artifact_cache,
            model_id=self._settings.llm_model_id,
            temperature=self._settings.llm_temperature,
            prompt_version=self._settings.prompt_version,
        )
        self._steps = step_runner or StepRunner(
            retries=self._settings.step_retries,
            wait_seconds=self._settings.step_retry_wait_seconds,
        )
        self._compensations = compensations or CompensationRegistry()

    async def run(self, event: FileProcessEvent) -> PipelineResult:
        """
        Process one workflow file end to end.

        Args:
            event: Trigger payload naming the workflow and file

        Returns:
            PipelineResult: Summary of the run

        Raises:
            Exception: Whatever ended the run, after the file was marked failed
        """
        run_key = event.run_key
        workflow_id, file_id = event.workflow_id, event.file_id
        start_time = time.perf_counter()

        async def on_failure(error: BaseException) -> None:
            await self._mark_failed(workflow_id, file_id, error)

        self._compensations.register(run_key, on_failure)
        logger.info(f"{__name__}:run - START", extra={"run_key": run_key})

        try:
            context = await self._steps.run(
                "fetch-file", lambda: self._fetch_file(workflow_id, file_id)
            )
            await self._steps.run(
                "set-analyzing",
                lambda: self._apply_status(workflow_id, file_id, FileStatus.analyzing()),
            )
            cached = await self._steps.run(
                "cache-lookup", lambda: self._lookup_artifact(context)
            )
            state = await self._steps.run(
                "analyze", lambda: self._resolve_artifact(context, cached)
            )
            embeddings_created = await self._steps.run(
                "ensure-embeddings", lambda: self._ensure_embeddings(state)
            )
            await self._steps.run(
                "set-suggesting-columns",
                lambda: self._apply_status(
                    workflow_id, file_id, FileStatus.suggesting_columns()
                ),
            )
            suggestions = await self._steps.run(
                "suggest-columns",
                lambda: self._suggest_columns(workflow_id, file_id, state.artifact.id),
            )
            await self._steps.run(
                "merge-columns",
                lambda: self._merge_and_finish(workflow_id, file_id, suggestions),
            )

        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:run - Pipeline failed",
                e,
                run_key=run_key,
            )
            try:
                await self._compensations.compensate(run_key, e)
            except Exception as compensation_error:
                log_exception_with_context(
                    logger,
                    f"{__name__}:run - Failure handler could not mark file",
                    compensation_error,
                    run_key=run_key,
                )
            raise

        finally:
            self._compensations.unregister(run_key)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        chunk_count = int((state.artifact.analyzer_metadata or {}).get("chunkCount", 0))
        logger.info(
            f"{__name__}:run - COMPLETE",
            extra={"run_key": run_key, "elapsed_ms": round(elapsed_ms, 2)},
        )
        return PipelineResult(
            workflow_id=str(workflow_id),
            file_id=file_id,
            artifact_id=str(state.artifact.id),
            cache_hit=state.cache_hit,
            chunk_count=chunk_count,
            embeddings_created=embeddings_created,
            suggestions_added=len(suggestions.suggestions),
            inferred_document_type=suggestions.inferred_document_type,
            processing_time_ms=elapsed_ms,
        )

    async def _fetch_file(self, workflow_id: UUID, file_id: str) -> FileContext:
        async with self._session_factory() as db:
            workflow = await workflow_crud.get_fresh(db, workflow_id)
            if workflow is None:
                raise NotFoundError("Workflow", str(workflow_id))
            entry = find_file(workflow.files or [], file_id)
            if entry is None:
                raise NotFoundError("File", file_id)
            return FileContext(
                user_id=workflow.user_id,
                file=WorkflowFile.model_validate(entry),
            )

    async def _apply_status(
        self,
        workflow_id: UUID,
        file_id: str,
        status: FileStatus,
    ) -> None:
        async with self._session_factory() as db:
            await FileStatusUpdater(db).apply(
                workflow_id, file_id, status_outcome(file_id, status)
            )

    async def _lookup_artifact(self, context: FileContext) -> FileArtifactModel | None:
        if not context.file.content_hash:
            return None
        async with self._session_factory() as db:
            return await self._artifact_cache.lookup(
                db,
                context.user_id,
                context.file.content_hash,
                self._settings.analyzer_version,
            )

    async def _resolve_artifact(
        self,
        context: FileContext,
        cached: FileArtifactModel | None,
    ) -> ArtifactState:
        """Reuse the cached artifact, or analyze the upload and cache the result."""
        if cached is not None:
            return ArtifactState(artifact=cached, cache_hit=True)

        analysis = await asyncio.to_thread(
            self._analyzer.analyze_from_storage,
            context.file.s3_key,
            context.file.s3_bucket,
            context.file.content_hash,
            ChunkingOptions(
                chunk_size_tokens=self._settings.chunk_size_tokens,
                chunk_overlap_ratio=self._settings.chunk_overlap_ratio,
            ),
        )

        async with self._session_factory() as db:
            # the upload may not have recorded a hash; look up by the computed one
            existing = await self._artifact_cache.lookup(
                db,
                context.user_id,
                analysis.metadata.content_hash,
                self._settings.analyzer_version,
            )
            if existing is not None:
                return ArtifactState(artifact=existing, cache_hit=True)

            artifact = await self._artifact_cache.store(
                db,
                context.user_id,
                analysis,
                self._settings.analyzer_version,
            )
        return ArtifactState(artifact=artifact, cache_hit=False, analysis=analysis)

    async def _ensure_embeddings(self, state: ArtifactState) -> int:
        chunk_count = (state.artifact.analyzer_metadata or {}).get("chunkCount")
        async with self._session_factory() as db:
            # fully embedded cached artifacts skip the blob download
            if state.analysis is None and chunk_count is not None:
                if await self._embedding_task.has_embeddings(
                    db, state.artifact.id, int(chunk_count)
                ):
                    return 0
            if state.analysis is None:
                state.analysis = await self._artifact_cache.load(state.artifact)
            return await self._embedding_task.ensure_embeddings(
                db, state.artifact.id, state.analysis.chunks
            )

    async def _suggest_columns(
        self,
        workflow_id: UUID,
        file_id: str,
        artifact_id: UUID,
    ) -> SuggestColumnsResult:
        async with self._session_factory() as db:
            workflow = await workflow_crud.get_fresh(db, workflow_id)
            if workflow is None:
                raise NotFoundError("Workflow", str(workflow_id))
            existing_columns = [
                {
                    "name": column.get("name", ""),
                    "outputType": column.get("outputType", "text"),
                }
                for column in workflow.suggested_columns or []
            ]
            return await self._suggestion_task.suggest(
                db,
                artifact_id,
                existing_columns=existing_columns,
                file_id=file_id,
            )

    async def _merge_and_finish(
        self,
        workflow_id: UUID,
        file_id: str,
        suggestions: SuggestColumnsResult,
    ) -> None:
        async with self._session_factory() as db:
            await FileStatusUpdater(db).apply(
                workflow_id,
                file_id,
                merge_outcome(file_id, suggestions.suggestions),
            )

    async def _mark_failed(
        self,
        workflow_id: UUID,
        file_id: str,
        error: BaseException,
    ) -> None:
        message = str(error) or type(error).__name__
        async with self._session_factory() as db:
            await FileStatusUpdater(db).mark_failed(workflow_id, file_id, message)
