"""
Column suggestion prompt.

The prompt carries document metadata plus only the first and last chunk,
so its size stays bounded regardless of document length.

Dependencies: langchain_core.prompts
System role: Prompt template for the column suggestion engine
"""

from langchain_core.prompts import ChatPromptTemplate

from filetable.core.document_processing.models.analysis import AnalyzerMetadata
from filetable.core.document_processing.models.chunk import DocumentChunk

PROMPT_VERSION = "v1.0.0"

SYSTEM_PROMPT = (
    "You are an expert document analyzer specialized in extracting structured data "
    "and suggesting useful database columns."
)

HUMAN_PROMPT = """Analyze this document and suggest columns for a table that will store information extracted from this and similar documents.

## Document Metadata:
{metadata_summary}

## Document Content (First and Last Chunks):
{chunks_summary}
{existing_columns_summary}

## Your Task:
1. **Infer the document type** based on the content and structure. Examples: Resume, Invoice, Receipt, Contract, Research Paper, Report. Be specific and accurate.

2. **Provide a brief rationale** (1-2 sentences) explaining why you classified it as this document type.

3. **Suggest columns ONLY if you can clearly extract a value from this document**. This is critical:
   - **DO NOT suggest a column** if you cannot find a clear, extractable value in the document
   - **DO NOT use placeholders** like "N/A", "Not found", "Unknown", or similar
   - **ONLY suggest columns** where you can provide an actual extracted value from the document content
   - The `extracted_value` field must contain the actual value found in the document, verbatim or normalized appropriately

Focus on columns that would be valuable for organizing and extracting information from this type of document:
   - **Identifiers**: Names, IDs, reference numbers
   - **Key facts**: Important data points specific to this document type
   - **Totals/Amounts**: Financial figures, quantities
   - **Parties**: People, organizations involved
   - **Dates**: Key dates relevant to the document
   - **Status/Categories**: Document state, type classifications
   - **Relationships**: Links to other documents or entities

For each column:
- Give it a clear, descriptive name
- Provide the actual extracted value from this document (required)
- Explain why this column would be useful (1 sentence)
- Rate your confidence: high (very confident this is useful and extractable), medium (probably useful and extractable), or low (might be useful but extraction is uncertain)

**Important**: Quality over quantity. It's better to suggest fewer columns with clear values than many columns with missing or unclear values.

**Note**: All columns will use the 'text' output type for now. The document has {chunk_count} total chunks.

Avoid suggesting columns that are already in the existing columns list unless you have high confidence they should be reconsidered."""

COLUMN_SUGGESTION_PROMPT = ChatPromptTemplate.from_messages([
    ("system", SYSTEM_PROMPT),
    ("human", HUMAN_PROMPT),
])


def format_metadata_summary(metadata: AnalyzerMetadata, chunk_count: int) -> str:
    lines = []
    if metadata.title:
        lines.append(f"Title: {metadata.title}")
    if metadata.author:
        lines.append(f"Author: {metadata.author}")
    lines.append(f"Pages: {metadata.page_count or chunk_count}")
    if metadata.file_size_bytes:
        lines.append(f"Size: {round(metadata.file_size_bytes / 1024)}KB")
    if metadata.creation_date:
        lines.append(f"Created: {metadata.creation_date}")
    return "\n".join(lines)


def format_chunks_summary(chunks: list[DocumentChunk]) -> str:
    """First chunk, plus the last one when it is a different chunk."""
    first = chunks[0]
    parts = [
        f"### First Chunk (Beginning of document, page {first.page_range.start_index + 1}):\n"
        f"{first.text}"
    ]
    last = chunks[-1]
    if last.index != first.index:
        parts.append(
            f"### Last Chunk (End of document, page {last.page_range.start_index + 1}):\n"
            f"{last.text}"
        )
    return "\n\n".join(parts)


def format_existing_columns(existing_columns: list[dict[str, str]] | None) -> str:
    if not existing_columns:
        return ""
    lines = "\n".join(
        f"- {col['name']} ({col.get('outputType', 'text')})" for col in existing_columns
    )
    return f"\n\nExisting columns already suggested:\n{lines}"


def build_prompt_inputs(
    metadata: AnalyzerMetadata,
    chunks: list[DocumentChunk],
    existing_columns: list[dict[str, str]] | None = None,
) -> dict[str, str]:
    """
    Template variables for COLUMN_SUGGESTION_PROMPT.

    Args:
        metadata: Analyzer metadata of the document
        chunks: All chunks of the document (non-empty)
        existing_columns: Columns already on the workflow ({name, outputType})

    Returns:
        dict[str, str]: Variables keyed by template placeholder
    """
    return {
        "metadata_summary": format_metadata_summary(metadata, len(chunks)),
        "chunks_summary": format_chunks_summary(chunks),
        "existing_columns_summary": format_existing_columns(existing_columns),
        "chunk_count": str(len(chunks)),
    }
