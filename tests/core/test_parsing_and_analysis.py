"""
Test suite for PDF parsing and the document analyzer.

PyPDFLoader is patched so the tests exercise page ordering, info
extraction and hash verification without real PDF files.

System role: Verification of the first analysis stages
"""

import hashlib
from unittest.mock import MagicMock, patch

import pytest
from langchain_core.documents import Document

from filetable.core.document_processing.models import AnalysisResult, ChunkingOptions
from filetable.core.document_processing.tasks.analysis_task import (
    DocumentAnalyzer,
    compute_content_hash,
)
from filetable.core.document_processing.tasks.parsing_task import (
    ParsedDocument,
    ParsingTask,
    clean_info_value,
    extract_info,
)
from filetable.core.exceptions import ContentMismatchError, ExtractionError, StorageError

LOADER_PATH = "filetable.core.document_processing.tasks.parsing_task.PyPDFLoader"


def _documents() -> list[Document]:
    info = {
        "source": "/tmp/x.pdf",
        "title": "  Invoice 42 ",
        "author": "ACME Corp",
        "creationdate": "2024-03-01T10:00:00+00:00",
        "producer": "",
    }
    return [
        Document(page_content="Second page text", metadata={**info, "page": 1}),
        Document(page_content="First page text", metadata={**info, "page": 0}),
    ]


class TestParsingTask:
    """Test suite for ParsingTask."""

    def test_empty_bytes_raise_extraction_error(self) -> None:
        with pytest.raises(ExtractionError):
            ParsingTask().parse(b"")

    def test_pages_are_ordered_by_page_number(self, pdf_bytes: bytes) -> None:
        # Arrange
        with patch(LOADER_PATH) as loader_cls:
            loader_cls.return_value.load.return_value = _documents()

            # Act
            parsed = ParsingTask().parse(pdf_bytes)

        # Assert
        assert parsed.page_texts == ["First page text", "Second page text"]
        loader_cls.assert_called_once()

    def test_info_fields_are_trimmed_and_renamed(self, pdf_bytes: bytes) -> None:
        with patch(LOADER_PATH) as loader_cls:
            loader_cls.return_value.load.return_value = _documents()

            parsed = ParsingTask().parse(pdf_bytes)

        assert parsed.info == {
            "title": "Invoice 42",
            "author": "ACME Corp",
            "creation_date": "2024-03-01T10:00:00+00:00",
        }

    def test_loader_failure_becomes_extraction_error(self, pdf_bytes: bytes) -> None:
        with patch(LOADER_PATH) as loader_cls:
            loader_cls.return_value.load.side_effect = ValueError("EOF marker not found")

            with pytest.raises(ExtractionError) as exc_info:
                ParsingTask().parse(pdf_bytes)

        assert "EOF marker not found" in str(exc_info.value)
        assert exc_info.value.retryable is False

    def test_clean_info_value(self) -> None:
        assert clean_info_value("  x ") == "x"
        assert clean_info_value("   ") is None
        assert clean_info_value(42) is None

    def test_extract_info_handles_no_documents(self) -> None:
        assert extract_info([]) == {}


class TestDocumentAnalyzer:
    """Test suite for DocumentAnalyzer."""

    @pytest.fixture
    def parser(self) -> MagicMock:
        parser = MagicMock(spec=ParsingTask)
        parser.parse.return_value = ParsedDocument(
            page_texts=["Invoice  INV-001\nTotal: $1,250.00", "Thank you"],
            info={"title": "Invoice"},
        )
        return parser

    def test_compute_content_hash_is_sha256(self) -> None:
        assert compute_content_hash(b"abc") == hashlib.sha256(b"abc").hexdigest()

    def test_hash_mismatch_raises_before_parsing(self, parser: MagicMock) -> None:
        """A substituted upload fails without any extraction work."""
        analyzer = DocumentAnalyzer(parser=parser)

        with pytest.raises(ContentMismatchError) as exc_info:
            analyzer.analyze(b"payload", expected_content_hash="0" * 64, key="f-doc.pdf")

        parser.parse.assert_not_called()
        assert "f-doc.pdf" in str(exc_info.value)

    def test_analyze_builds_result(self, parser: MagicMock) -> None:
        data = b"%PDF-fake"
        analyzer = DocumentAnalyzer(parser=parser)

        result = analyzer.analyze(data, expected_content_hash=compute_content_hash(data))

        assert result.metadata.content_hash == compute_content_hash(data)
        assert result.metadata.file_size_bytes == len(data)
        assert result.metadata.page_count == 2
        assert result.metadata.title == "Invoice"
        assert result.full_text == "Invoice INV-001 Total: $1,250.00\n\nThank you"
        assert len(result.chunks) == 1
        assert result.chunks[0].page_range.indices == [0, 1]

    def test_lone_surrogate_in_extracted_text_still_serializes(self, parser: MagicMock) -> None:
        """Broken extractor output is replaced, so the artifact blob can be written."""
        parser.parse.return_value = ParsedDocument(page_texts=["a\ud800b"])

        result = DocumentAnalyzer(parser=parser).analyze(b"data")

        assert result.full_text == "a?b"
        assert AnalysisResult.from_blob(result.to_blob()).full_text == "a?b"
        assert result.chunks[0].byte_range.end == 3

    def test_analyze_without_expected_hash_skips_check(self, parser: MagicMock) -> None:
        result = DocumentAnalyzer(parser=parser).analyze(b"anything")

        assert result.metadata.content_hash == compute_content_hash(b"anything")

    def test_chunking_options_are_applied(self, parser: MagicMock) -> None:
        parser.parse.return_value = ParsedDocument(page_texts=["x" * 1500])

        result = DocumentAnalyzer(parser=parser).analyze(
            b"data", options=ChunkingOptions(chunk_size_tokens=125, chunk_overlap_ratio=0.0)
        )

        assert len(result.chunks) == 3

    def test_analyze_from_storage_reads_object(self, parser: MagicMock, s3_client) -> None:
        s3_client.put_object("k-doc.pdf", b"stored")
        analyzer = DocumentAnalyzer(parser=parser, s3_client=s3_client)

        result = analyzer.analyze_from_storage(
            "k-doc.pdf", expected_content_hash=compute_content_hash(b"stored")
        )

        assert s3_client.get_calls == ["k-doc.pdf"]
        parser.parse.assert_called_once_with(b"stored")
        assert result.metadata.file_size_bytes == 6

    def test_analyze_from_storage_missing_object(self, parser: MagicMock, s3_client) -> None:
        analyzer = DocumentAnalyzer(parser=parser, s3_client=s3_client)

        with pytest.raises(StorageError):
            analyzer.analyze_from_storage("missing.pdf")
