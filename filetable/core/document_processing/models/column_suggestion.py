"""
Column suggestion schemas.

Defines the structured output schema requested from the LLM and the
enriched suggestion shapes persisted on the workflow row.

Dependencies: pydantic
System role: Column suggestion contracts
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ConfidenceLevel = Literal["high", "medium", "low"]
CONFIDENCE_LEVELS: tuple[str, ...] = ("high", "medium", "low")


class LLMColumnSuggestion(BaseModel):
    """One column proposed by the model."""

    name: str = Field(description="The column name")
    why_useful: str = Field(description="A brief explanation of why this column is useful")
    confidence: ConfidenceLevel = Field(description="Confidence level: high, medium, or low")
    extracted_value: str = Field(
        description=(
            "The actual value extracted from the document. Must be a real value found in "
            'the document, not a placeholder like "N/A" or "Not found". Only suggest the '
            "column if you can extract a clear value."
        )
    )


class LLMColumnSuggestionResponse(BaseModel):
    """Structured output schema for the column suggestion call."""

    inferred_document_type: str = Field(
        description='The inferred document type (e.g., "Resume", "Invoice", "Contract")'
    )
    rationale: str = Field(
        description="Brief explanation of why the document was classified as this type"
    )
    column_suggestions: list[LLMColumnSuggestion] = Field(
        description="3-6 suggested columns for this document type"
    )


class CamelModel(BaseModel):
    """Model persisted with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EnrichedColumnSuggestion(CamelModel):
    """Normalized suggestion for a single file."""

    name: str
    output_type: str = "text"
    auto_populate: bool = False
    primary: bool = False
    provenance: Literal["llm-global"] = "llm-global"
    confidence: ConfidenceLevel
    rationale: str
    why_useful: str
    extracted_value: str


class WorkflowColumn(CamelModel):
    """Suggested column accumulated across every file of a workflow."""

    name: str
    output_type: str = "text"
    auto_populate: bool = False
    primary: bool = False
    provenance: str = "llm-global"
    confidence: ConfidenceLevel = "medium"
    rationale: str = ""
    why_useful: str = ""
    extracted_values: dict[str, str] = Field(
        default_factory=dict,
        description="File ID -> value extracted from that file",
    )


class SuggestColumnsResult(BaseModel):
    """Result of one column suggestion run."""

    suggestions: list[EnrichedColumnSuggestion]
    inferred_document_type: str
    rationale: str
    prompt_version: str
    model: str
