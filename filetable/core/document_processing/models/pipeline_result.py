"""
Pipeline result model for file analysis.

Represents the outcome of one pipeline run for a workflow file.

Dependencies: pydantic
System role: Return type for FileAnalysisPipeline.run()
"""

from pydantic import BaseModel, Field


class PipelineResult(BaseModel):
    """Result of a successful file analysis run."""

    workflow_id: str = Field(description="Parent workflow identifier")
    file_id: str = Field(description="Workflow file identifier")
    artifact_id: str = Field(description="Artifact the file resolved to")
    cache_hit: bool = Field(description="Whether analysis was served from the artifact cache")
    chunk_count: int = Field(description="Number of chunks in the artifact")
    embeddings_created: int = Field(description="Embedding rows written during this run")
    suggestions_added: int = Field(description="Column suggestions produced for this file")
    inferred_document_type: str = Field(description="Document type reported by the model")
    processing_time_ms: float = Field(description="Total processing time in milliseconds")
