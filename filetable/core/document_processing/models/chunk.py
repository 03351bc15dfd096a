"""
Chunk domain models for the document analysis pipeline.

Represents page summaries and overlapping document chunks with
character, byte and page provenance. Chunks are immutable once built.
Serialized with camelCase aliases so cached artifacts stay readable
by the rest of the product.

Dependencies: pydantic
System role: Data structure for document chunks in the analysis pipeline
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class FrozenCamelModel(BaseModel):
    """Immutable model serialized with camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class CharRange(FrozenCamelModel):
    """Half-open character span [start, end) in the assembled document text."""

    start: int = Field(ge=0)
    end: int = Field(ge=0)


class ByteRange(FrozenCamelModel):
    """Half-open UTF-8 byte span matching a CharRange."""

    start: int = Field(ge=0)
    end: int = Field(ge=0)


class PageRange(FrozenCamelModel):
    """Pages covered by a chunk."""

    start_index: int = Field(ge=0)
    end_index: int = Field(ge=0)
    indices: list[int] = Field(description="Covered page indices, ascending")


class DocumentChunk(FrozenCamelModel):
    """Overlapping token-bounded slice of a document's full text."""

    index: int = Field(ge=0, description="Position of the chunk in the document")
    text: str = Field(description="Chunk text content")
    token_estimate: int = Field(ge=0, description="Approximate token count (chars / 4)")
    char_range: CharRange
    byte_range: ByteRange
    page_range: PageRange

    @model_validator(mode="after")
    def _check_provenance(self) -> "DocumentChunk":
        if self.char_range.end <= self.char_range.start:
            raise ValueError("char_range.end must be greater than char_range.start")
        if self.byte_range.end < self.byte_range.start:
            raise ValueError("byte_range must not decrease")
        indices = self.page_range.indices
        if not indices or indices != sorted(indices):
            raise ValueError("page_range.indices must be non-empty and ascending")
        return self


class PageSummary(FrozenCamelModel):
    """Normalized text of one physical page."""

    index: int = Field(ge=0)
    text: str
    char_count: int = Field(ge=0)
    token_estimate: int = Field(ge=0)
