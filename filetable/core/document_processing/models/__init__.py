"""
Models for the file analysis pipeline.

Exports: chunk and analysis models, column suggestion schemas,
FileStatus, trigger event and workflow file schemas
"""

from .analysis import AnalysisResult, AnalyzerMetadata, ChunkingOptions
from .chunk import ByteRange, CharRange, DocumentChunk, PageRange, PageSummary
from .column_suggestion import (
    EnrichedColumnSuggestion,
    LLMColumnSuggestion,
    LLMColumnSuggestionResponse,
    SuggestColumnsResult,
    WorkflowColumn,
)
from .file_status import FileStatus, FileStatusKind
from .pipeline_result import PipelineResult
from .workflow_event import FileProcessEvent, WorkflowFile

__all__ = [
    "AnalysisResult",
    "AnalyzerMetadata",
    "ChunkingOptions",
    "ByteRange",
    "CharRange",
    "DocumentChunk",
    "PageRange",
    "PageSummary",
    "EnrichedColumnSuggestion",
    "LLMColumnSuggestion",
    "LLMColumnSuggestionResponse",
    "SuggestColumnsResult",
    "WorkflowColumn",
    "FileStatus",
    "FileStatusKind",
    "PipelineResult",
    "FileProcessEvent",
    "WorkflowFile",
]
