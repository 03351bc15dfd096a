"""
Analysis result models.

AnalysisResult is produced once per unique (content, analyzer version)
pair and persisted as a single JSON blob in object storage.

Dependencies: pydantic
System role: Output contract of the document analyzer
"""

from typing import Any

from pydantic import Field

from .chunk import DocumentChunk, FrozenCamelModel, PageSummary


class ChunkingOptions(FrozenCamelModel):
    """Caller-supplied chunk sizing; None falls back to pipeline defaults."""

    chunk_size_tokens: int | None = Field(default=None, gt=0)
    chunk_overlap_ratio: float | None = Field(default=None, ge=0.0, lt=1.0)


class AnalyzerMetadata(FrozenCamelModel):
    """File-level metadata extracted alongside the text."""

    content_hash: str = Field(description="SHA-256 hex digest of the raw bytes")
    file_size_bytes: int = Field(ge=0)
    page_count: int = Field(ge=0)
    title: str | None = None
    author: str | None = None
    subject: str | None = None
    keywords: str | None = None
    creator: str | None = None
    producer: str | None = None
    creation_date: str | None = None
    modification_date: str | None = None

    def summary_fields(self) -> dict[str, Any]:
        """Metadata stored on the artifact row (no None values)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class AnalysisResult(FrozenCamelModel):
    """Pages, chunks and metadata for one analyzed document."""

    pages: list[PageSummary] = Field(default_factory=list)
    chunks: list[DocumentChunk] = Field(default_factory=list)
    full_text: str = ""
    metadata: AnalyzerMetadata

    def to_blob(self) -> bytes:
        """Serialize for object storage."""
        return self.model_dump_json(by_alias=True).encode("utf-8")

    @classmethod
    def from_blob(cls, data: bytes) -> "AnalysisResult":
        """Deserialize a blob written by to_blob()."""
        return cls.model_validate_json(data)
