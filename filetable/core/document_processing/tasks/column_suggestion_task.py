"""
Column suggestion engine.

Asks a chat model for the document type and 3-6 table columns with a
concrete value extracted from the document. Suggestions whose value is
empty or a placeholder ("N/A", "Not found", ...) are dropped after the
call, and names are normalized before they are merged into the
workflow's column list.

Dependencies: langchain_google_genai, langchain_core, langfuse
System role: Column suggestion stage of file analysis
"""

import logging
import re
from typing import Any
from uuid import UUID

from langchain_core.language_models import BaseChatModel
from langchain_google_genai import ChatGoogleGenerativeAI
from sqlalchemy.ext.asyncio import AsyncSession

from filetable.boundary.db.CRUD.artifact_crud import artifact_crud
from filetable.core.document_processing.models.analysis import AnalyzerMetadata
from filetable.core.document_processing.models.column_suggestion import (
    EnrichedColumnSuggestion,
    LLMColumnSuggestionResponse,
    SuggestColumnsResult,
    WorkflowColumn,
)
from filetable.core.document_processing.tasks.artifact_cache import ArtifactCache
from filetable.core.document_processing.tasks.column_suggestion_prompt import (
    COLUMN_SUGGESTION_PROMPT,
    PROMPT_VERSION,
    build_prompt_inputs,
)
from filetable.core.exceptions import ExtractionError, NotFoundError, ProviderError
from filetable.observability.langfuse_tracer import get_langfuse_callbacks

logger = logging.getLogger(__name__)

PLACEHOLDER_VALUES = frozenset({
    "n/a",
    "na",
    "none",
    "null",
    "nil",
    "unknown",
    "not found",
    "not available",
    "not specified",
    "not provided",
    "not applicable",
    "not mentioned",
    "not stated",
    "tbd",
    "tba",
    "-",
    "--",
    "?",
    "...",
})
_PLACEHOLDER_BRACKETS = re.compile(r"^[\[<({].*[\]>)}]$")


def is_placeholder_value(value: str | None) -> bool:
    """
    Whether an extracted value is empty or placeholder-like.

    Bracketed template text such as "[Name]" or "<date>" also counts.
    """
    if value is None:
        return True
    cleaned = value.strip().strip(".").strip()
    if not cleaned:
        return True
    if cleaned.lower() in PLACEHOLDER_VALUES:
        return True
    return bool(_PLACEHOLDER_BRACKETS.match(cleaned))


def normalize_column_name(name: str) -> str:
    """
    Normalize casing of a column name.

    All-caps words of two or more characters (acronyms) are kept, every
    other word is capitalized.
    """
    words = name.split()
    if not words:
        return "Untitled Column"
    normalized = []
    for word in words:
        if len(word) > 1 and word == word.upper():
            normalized.append(word)
        else:
            normalized.append(word[:1].upper() + word[1:].lower())
    return " ".join(normalized)


def merge_column_suggestions(
    existing: list[WorkflowColumn],
    new: list[EnrichedColumnSuggestion],
    file_id: str,
) -> list[WorkflowColumn]:
    """
    Merge one file's suggestions into the workflow column list.

    Names match case-insensitively. A match records the file's value on
    the existing column, otherwise a new column is appended. Applying the
    same suggestions twice yields the same list.

    Args:
        existing: Current workflow columns (not mutated)
        new: Suggestions produced for file_id
        file_id: Workflow file the values were extracted from

    Returns:
        list[WorkflowColumn]: Merged column list
    """
    merged = [column.model_copy(deep=True) for column in existing]
    by_name = {column.name.lower(): column for column in merged}

    for suggestion in new:
        key = suggestion.name.lower()
        column = by_name.get(key)
        if column is not None:
            column.extracted_values[file_id] = suggestion.extracted_value
            continue

        column = WorkflowColumn(
            name=suggestion.name,
            output_type=suggestion.output_type,
            auto_populate=suggestion.auto_populate,
            primary=suggestion.primary,
            provenance=suggestion.provenance,
            confidence=suggestion.confidence,
            rationale=suggestion.rationale,
            why_useful=suggestion.why_useful,
            extracted_values={file_id: suggestion.extracted_value},
        )
        merged.append(column)
        by_name[key] = column

    return merged


class ColumnSuggestionTask:
    """Suggest table columns for an analyzed artifact."""

    def __init__(
        self,
        artifact_cache: ArtifactCache,
        model_id: str = "gemini-2.5-flash",
        temperature: float = 0.2,
        llm: BaseChatModel | None = None,
        prompt_version: str = PROMPT_VERSION,
    ) -> None:
        """
        Initialize column suggestion task.

        Args:
            artifact_cache: Cache used to load the analysis blob
            model_id: Chat model ID
            temperature: Sampling temperature
            llm: Preconfigured chat model, mainly for tests
            prompt_version: Tag recorded on every result
        """
        self._artifact_cache = artifact_cache
        self._model_id = model_id
        self._prompt_version = prompt_version
        self._llm = llm or ChatGoogleGenerativeAI(model=model_id, temperature=temperature)
        self._structured_llm = self._llm.with_structured_output(LLMColumnSuggestionResponse)

    async def suggest(
        self,
        db: AsyncSession,
        artifact_id: UUID,
        existing_columns: list[dict[str, Any]] | None = None,
        file_id: str | None = None,
    ) -> SuggestColumnsResult:
        """
        Generate column suggestions for an artifact.

        Args:
            db: Async database session
            artifact_id: Analyzed artifact
            existing_columns: Columns already on the workflow ({name, outputType})
            file_id: Workflow file, used for log context only

        Returns:
            SuggestColumnsResult: Validated, normalized suggestions

        Raises:
            NotFoundError: Artifact row missing
            ExtractionError: Artifact has no chunks
            ProviderError: Model call failed or returned an invalid object
        """
        artifact = await artifact_crud.get_by_id(db, artifact_id)
        if artifact is None:
            raise NotFoundError("Artifact", str(artifact_id))

        analysis = await self._artifact_cache.load(artifact)
        if not analysis.chunks:
            raise ExtractionError(f"No chunks found for artifact {artifact_id}")

        metadata = self._merge_metadata(analysis.metadata, artifact.analyzer_metadata)
        messages = COLUMN_SUGGESTION_PROMPT.invoke(
            build_prompt_inputs(metadata, analysis.chunks, existing_columns)
        ).to_messages()

        try:
            response = await self._structured_llm.ainvoke(
                messages,
                config={"callbacks": get_langfuse_callbacks()},
            )
        except Exception as e:
            raise ProviderError(
                f"Column suggestion failed: {e}",
                provider="google",
                details={"model": self._model_id},
            ) from e

        if not isinstance(response, LLMColumnSuggestionResponse):
            raise ProviderError(
                "Column suggestion returned no structured output",
                provider="google",
                details={"model": self._model_id},
            )

        suggestions = self._enrich(response)
        logger.info(
            f"{__name__}:suggest - Suggestions generated",
            extra={
                "artifact_id": str(artifact_id),
                "file_id": file_id,
                "document_type": response.inferred_document_type,
                "returned": len(response.column_suggestions),
                "kept": len(suggestions),
            },
        )

        return SuggestColumnsResult(
            suggestions=suggestions,
            inferred_document_type=response.inferred_document_type,
            rationale=response.rationale,
            prompt_version=self._prompt_version,
            model=self._model_id,
        )

    @staticmethod
    def _merge_metadata(
        blob_metadata: AnalyzerMetadata,
        row_metadata: dict[str, Any] | None,
    ) -> AnalyzerMetadata:
        """Blob metadata wins; row metadata fills fields the blob lacks."""
        combined = {**(row_metadata or {}), **blob_metadata.summary_fields()}
        return AnalyzerMetadata.model_validate(combined)

    @staticmethod
    def _enrich(response: LLMColumnSuggestionResponse) -> list[EnrichedColumnSuggestion]:
        enriched = []
        for suggestion in response.column_suggestions:
            if is_placeholder_value(suggestion.extracted_value):
                logger.info(
                    f"{__name__}:_enrich - Dropping placeholder suggestion",
                    extra={"column": suggestion.name, "value": suggestion.extracted_value},
                )
                continue
            enriched.append(
                EnrichedColumnSuggestion(
                    name=normalize_column_name(suggestion.name),
                    confidence=suggestion.confidence,
                    rationale=response.rationale,
                    why_useful=suggestion.why_useful,
                    extracted_value=suggestion.extracted_value.strip(),
                )
            )
        return enriched
