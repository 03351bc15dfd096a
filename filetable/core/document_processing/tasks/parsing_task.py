"""
PDF parsing task using LangChain PyPDFLoader.

Converts raw PDF bytes into page-ordered text plus document info.

Dependencies: langchain_community.document_loaders
System role: First stage of file analysis
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from typing import Any

from langchain_community.document_loaders import PyPDFLoader
from langchain_core.documents import Document

from filetable.core.exceptions import ExtractionError

logger = logging.getLogger(__name__)

# loader metadata key -> analyzer metadata field
INFO_FIELDS: dict[str, str] = {
    "title": "title",
    "author": "author",
    "subject": "subject",
    "keywords": "keywords",
    "creator": "creator",
    "producer": "producer",
    "creationdate": "creation_date",
    "moddate": "modification_date",
}


@dataclass
class ParsedDocument:
    """Page texts ordered by page number and trimmed document info."""

    page_texts: list[str]
    info: dict[str, str] = field(default_factory=dict)


def clean_info_value(value: Any) -> str | None:
    """Trimmed string value, or None when missing or blank."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def extract_info(documents: list[Document]) -> dict[str, str]:
    """Collect PDF info fields from the first loaded page."""
    if not documents:
        return {}
    raw = {
        key.lstrip("/").lower(): value
        for key, value in documents[0].metadata.items()
    }
    info: dict[str, str] = {}
    for source_key, target in INFO_FIELDS.items():
        value = clean_info_value(raw.get(source_key))
        if value is not None:
            info[target] = value
    return info


class ParsingTask:
    """Parse PDF bytes into page texts."""

    def parse(self, data: bytes) -> ParsedDocument:
        """
        Parse a PDF document.

        Args:
            data: Raw PDF bytes

        Returns:
            ParsedDocument: One text per page, ordered by page number

        Raises:
            ExtractionError: When the bytes are not a readable PDF
        """
        if not data:
            raise ExtractionError("Document is empty", file_type="pdf")

        fd, path = tempfile.mkstemp(suffix=".pdf")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)

            try:
                documents = PyPDFLoader(path).load()
            except Exception as e:
                raise ExtractionError(f"Failed to parse PDF: {e}", file_type="pdf") from e
        finally:
            os.unlink(path)

        documents = sorted(documents, key=lambda doc: doc.metadata.get("page", 0))
        logger.info(
            f"{__name__}:parse - Parsed PDF",
            extra={"pages": len(documents), "bytes": len(data)},
        )
        return ParsedDocument(
            page_texts=[doc.page_content or "" for doc in documents],
            info=extract_info(documents),
        )
