"""
Overlapping window chunking with page and byte provenance.

Splits the assembled document text into token-bounded windows. Token
counts are a coarse estimate (characters / 4), not the output of a real
tokenizer; they size windows and report approximate chunk cost only.

Dependencies: filetable.core.document_processing.models
System role: Second stage of file analysis
"""

import logging
import re
from dataclasses import dataclass

from filetable.core.document_processing.models.analysis import ChunkingOptions
from filetable.core.document_processing.models.chunk import (
    ByteRange,
    CharRange,
    DocumentChunk,
    PageRange,
    PageSummary,
)
from filetable.core.document_processing.tasks.byte_offsets import (
    compute_char_to_byte_offsets,
)

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE_TOKENS = 1200
DEFAULT_CHUNK_OVERLAP_RATIO = 0.1
AVG_CHARS_PER_TOKEN = 4
MIN_CHUNK_CHARS = 500
PAGE_SEPARATOR = "\n\n"

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class PageBoundary:
    index: int
    start: int
    end: int


@dataclass(frozen=True)
class ChunkingResult:
    pages: list[PageSummary]
    chunks: list[DocumentChunk]
    full_text: str


def estimate_tokens(text: str) -> int:
    """Approximate token count; 0 for empty text, at least 1 otherwise."""
    if not text:
        return 0
    return max(1, round(len(text) / AVG_CHARS_PER_TOKEN))


def normalize_page_text(text: str) -> str:
    """
    Collapse whitespace runs to a single space and trim.

    Lone surrogates from broken text extraction become "?", so the
    analysis can always be serialized as UTF-8 JSON.
    """
    text = text.encode("utf-8", "replace").decode("utf-8")
    return _WHITESPACE.sub(" ", text).strip()


def assemble_document_text(page_texts: list[str]) -> str:
    """Join non-empty pages with the page separator."""
    return PAGE_SEPARATOR.join(text for text in page_texts if text)


def compute_page_boundaries(page_texts: list[str]) -> list[PageBoundary]:
    """
    Locate each page inside the assembled text.

    Empty pages are not present in the assembled text and get a
    zero-width boundary, so they are never reported as covered.
    """
    boundaries: list[PageBoundary] = []
    cursor = 0
    placed = False
    for index, text in enumerate(page_texts):
        if not text:
            boundaries.append(PageBoundary(index, cursor, cursor))
            continue
        if placed:
            cursor += len(PAGE_SEPARATOR)
        boundaries.append(PageBoundary(index, cursor, cursor + len(text)))
        cursor += len(text)
        placed = True
    return boundaries


def determine_page_indices(
    char_range: CharRange,
    boundaries: list[PageBoundary],
) -> list[int]:
    """
    Pages whose [start, end) span overlaps char_range.

    A range that falls entirely inside a separator is attributed to the
    nearest preceding page.
    """
    indices: list[int] = []
    preceding: int | None = None
    for boundary in boundaries:
        if boundary.start == boundary.end:
            continue
        if char_range.end <= boundary.start:
            break
        if char_range.start >= boundary.end:
            preceding = boundary.index
            continue
        indices.append(boundary.index)

    if not indices:
        indices = [preceding if preceding is not None else 0]
    return indices


def create_page_summaries(page_texts: list[str]) -> list[PageSummary]:
    return [
        PageSummary(
            index=index,
            text=text,
            char_count=len(text),
            token_estimate=estimate_tokens(text),
        )
        for index, text in enumerate(page_texts)
    ]


def chunk_document_text(
    text: str,
    chunk_size_tokens: int,
    chunk_overlap_ratio: float,
    byte_offsets: list[int],
    page_texts: list[str],
) -> list[DocumentChunk]:
    """
    Slide an overlapping window over text.

    The window is chunk_size_tokens * 4 characters with a floor of 500.
    Consecutive windows share round(window * overlap_ratio) characters,
    and the last window ends exactly at len(text).

    Args:
        text: Assembled document text
        chunk_size_tokens: Target chunk size in estimated tokens
        chunk_overlap_ratio: Fraction of the window shared with the next chunk
        byte_offsets: Output of compute_char_to_byte_offsets(text)
        page_texts: Normalized page texts text was assembled from

    Returns:
        list[DocumentChunk]: Chunks in index order; empty for empty text

    Raises:
        ValueError: byte_offsets does not match text
    """
    if not text:
        return []
    if len(byte_offsets) != len(text) + 1:
        raise ValueError(
            f"byte_offsets has {len(byte_offsets)} entries, expected {len(text) + 1}"
        )

    window = max(MIN_CHUNK_CHARS, round(chunk_size_tokens * AVG_CHARS_PER_TOKEN))
    # keep the stride positive so the loop always advances
    overlap = min(round(window * chunk_overlap_ratio), window - 1)
    boundaries = compute_page_boundaries(page_texts)

    chunks: list[DocumentChunk] = []
    start = 0
    while start < len(text):
        end = min(start + window, len(text))
        chunk_text = text[start:end]
        char_range = CharRange(start=start, end=end)
        indices = determine_page_indices(char_range, boundaries)

        chunks.append(
            DocumentChunk(
                index=len(chunks),
                text=chunk_text,
                token_estimate=estimate_tokens(chunk_text),
                char_range=char_range,
                byte_range=ByteRange(start=byte_offsets[start], end=byte_offsets[end]),
                page_range=PageRange(
                    start_index=indices[0],
                    end_index=indices[-1],
                    indices=indices,
                ),
            )
        )

        if end >= len(text):
            break
        start = max(0, end - overlap)

    return chunks


def process_pages_into_chunks(
    page_texts: list[str],
    options: ChunkingOptions | None = None,
) -> ChunkingResult:
    """
    Normalize pages, assemble the full text and chunk it.

    Args:
        page_texts: Raw page texts ordered by page number
        options: Optional sizing overrides (defaults: 1200 tokens, 0.1 overlap)

    Returns:
        ChunkingResult: Page summaries, chunks and assembled text
    """
    options = options or ChunkingOptions()
    chunk_size_tokens = options.chunk_size_tokens or DEFAULT_CHUNK_SIZE_TOKENS
    chunk_overlap_ratio = (
        options.chunk_overlap_ratio
        if options.chunk_overlap_ratio is not None
        else DEFAULT_CHUNK_OVERLAP_RATIO
    )

    normalized = [normalize_page_text(text or "") for text in page_texts]
    full_text = assemble_document_text(normalized)
    chunks = chunk_document_text(
        full_text,
        chunk_size_tokens=chunk_size_tokens,
        chunk_overlap_ratio=chunk_overlap_ratio,
        byte_offsets=compute_char_to_byte_offsets(full_text),
        page_texts=normalized,
    )

    logger.info(
        f"{__name__}:process_pages_into_chunks - Chunked document",
        extra={"pages": len(normalized), "chunks": len(chunks), "chars": len(full_text)},
    )

    return ChunkingResult(
        pages=create_page_summaries(normalized),
        chunks=chunks,
        full_text=full_text,
    )


class ChunkingTask:
    """Chunk page texts with configured sizing."""

    def __init__(
        self,
        chunk_size_tokens: int = DEFAULT_CHUNK_SIZE_TOKENS,
        chunk_overlap_ratio: float = DEFAULT_CHUNK_OVERLAP_RATIO,
    ) -> None:
        """
        Initialize chunking task with default sizing.

        Args:
            chunk_size_tokens: Target chunk size in estimated tokens
            chunk_overlap_ratio: Overlap between consecutive chunks
        """
        self._defaults = ChunkingOptions(
            chunk_size_tokens=chunk_size_tokens,
            chunk_overlap_ratio=chunk_overlap_ratio,
        )

    def chunk(
        self,
        page_texts: list[str],
        options: ChunkingOptions | None = None,
    ) -> ChunkingResult:
        """
        Chunk pages, letting options override the task defaults.

        Args:
            page_texts: Raw page texts ordered by page number
            options: Optional per-call sizing

        Returns:
            ChunkingResult: Page summaries, chunks and full text
        """
        merged = self._defaults
        if options is not None:
            merged = ChunkingOptions(
                chunk_size_tokens=options.chunk_size_tokens or merged.chunk_size_tokens,
                chunk_overlap_ratio=(
                    options.chunk_overlap_ratio
                    if options.chunk_overlap_ratio is not None
                    else merged.chunk_overlap_ratio
                ),
            )
        return process_pages_into_chunks(page_texts, merged)
