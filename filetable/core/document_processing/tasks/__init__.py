"""
Task modules for the file analysis pipeline.

Exports: ChunkingTask, ParsingTask, DocumentAnalyzer, ArtifactCache,
EmbeddingTask, ColumnSuggestionTask
"""

from .analysis_task import DocumentAnalyzer, compute_content_hash
from .artifact_cache import ArtifactCache, artifact_key
from .byte_offsets import compute_char_to_byte_offsets
from .chunking_task import ChunkingTask, chunk_document_text, process_pages_into_chunks
from .column_suggestion_task import (
    ColumnSuggestionTask,
    merge_column_suggestions,
    normalize_column_name,
)
from .embedding_task import EmbeddingTask
from .parsing_task import ParsedDocument, ParsingTask

__all__ = [
    "DocumentAnalyzer",
    "compute_content_hash",
    "ArtifactCache",
    "artifact_key",
    "compute_char_to_byte_offsets",
    "ChunkingTask",
    "chunk_document_text",
    "process_pages_into_chunks",
    "ColumnSuggestionTask",
    "merge_column_suggestions",
    "normalize_column_name",
    "EmbeddingTask",
    "ParsedDocument",
    "ParsingTask",
]
