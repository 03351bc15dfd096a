"""
Document analyzer.

Verifies the content hash of the raw bytes, extracts page text and info
through ParsingTask and chunks the result into an AnalysisResult.

Dependencies: hashlib, filetable.boundary.aws.s3_client
System role: Produces the artifact contents cached per content hash
"""

import hashlib
import logging

from filetable.boundary.aws.s3_client import S3DocumentClient
from filetable.core.document_processing.models.analysis import (
    AnalysisResult,
    AnalyzerMetadata,
    ChunkingOptions,
)
from filetable.core.document_processing.tasks.chunking_task import ChunkingTask
from filetable.core.document_processing.tasks.parsing_task import ParsingTask
from filetable.core.exceptions import ContentMismatchError

logger = logging.getLogger(__name__)


def compute_content_hash(data: bytes) -> str:
    """SHA-256 hex digest of data."""
    return hashlib.sha256(data).hexdigest()


class DocumentAnalyzer:
    """Analyze PDF bytes into pages, chunks and metadata."""

    def __init__(
        self,
        parser: ParsingTask | None = None,
        chunker: ChunkingTask | None = None,
        s3_client: S3DocumentClient | None = None,
    ) -> None:
        self._parser = parser or ParsingTask()
        self._chunker = chunker or ChunkingTask()
        self._s3_client = s3_client

    def analyze(
        self,
        data: bytes,
        expected_content_hash: str | None = None,
        options: ChunkingOptions | None = None,
        key: str | None = None,
    ) -> AnalysisResult:
        """
        Analyze a document.

        The hash check runs before any parsing so corrupted or substituted
        uploads fail without extraction work.

        Args:
            data: Raw document bytes
            expected_content_hash: Hash recorded at upload time, if any
            options: Chunk sizing overrides
            key: Storage key, used in error messages

        Returns:
            AnalysisResult: Pages, chunks, full text and metadata

        Raises:
            ContentMismatchError: Bytes do not match expected_content_hash
            ExtractionError: Bytes are not a readable document
        """
        content_hash = compute_content_hash(data)
        if expected_content_hash and expected_content_hash != content_hash:
            raise ContentMismatchError(expected_content_hash, content_hash, key=key)

        parsed = self._parser.parse(data)
        chunked = self._chunker.chunk(parsed.page_texts, options)

        metadata = AnalyzerMetadata(
            content_hash=content_hash,
            file_size_bytes=len(data),
            page_count=len(parsed.page_texts),
            **parsed.info,
        )

        logger.info(
            f"{__name__}:analyze - Analysis complete",
            extra={
                "content_hash": content_hash,
                "pages": metadata.page_count,
                "chunks": len(chunked.chunks),
            },
        )

        return AnalysisResult(
            pages=chunked.pages,
            chunks=chunked.chunks,
            full_text=chunked.full_text,
            metadata=metadata,
        )

    def analyze_from_storage(
        self,
        key: str,
        bucket: str | None = None,
        expected_content_hash: str | None = None,
        options: ChunkingOptions | None = None,
    ) -> AnalysisResult:
        """
        Download a document from object storage and analyze it.

        Args:
            key: Object key of the uploaded document
            bucket: Bucket override (defaults to the documents bucket)
            expected_content_hash: Hash recorded at upload time
            options: Chunk sizing overrides

        Returns:
            AnalysisResult: Analysis of the stored bytes
        """
        if self._s3_client is None:
            self._s3_client = S3DocumentClient()
        obj = self._s3_client.get_object(key, bucket=bucket)
        return self.analyze(
            obj.data,
            expected_content_hash=expected_content_hash,
            options=options,
            key=key,
        )
