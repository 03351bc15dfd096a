"""
Configuration settings for the file analysis pipeline.

Provides environment-based configuration for chunking, artifact caching,
embedding, column suggestion and step retries.

Dependencies: pydantic, pydantic_settings
System role: Centralized pipeline configuration
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DocumentPipelineSettings(BaseSettings):
    """Settings for the file analysis pipeline."""

    model_config = SettingsConfigDict(
        env_prefix="DOC_PIPELINE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Chunking settings
    chunk_size_tokens: int = Field(
        default=1200,
        description="Target chunk size in estimated tokens",
    )
    chunk_overlap_ratio: float = Field(
        default=0.1,
        ge=0.0,
        lt=1.0,
        description="Fraction of the chunk window shared with the next chunk",
    )

    # Artifact cache settings
    analyzer_version: int = Field(
        default=1,
        description="Bump to invalidate every cached analysis artifact",
    )
    artifacts_prefix: str = Field(
        default="artifacts",
        description="Key prefix for analysis artifacts in the documents bucket",
    )

    # Embedding settings
    embedding_provider: str = Field(
        default="google",
        description="Embedding provider name recorded on every embedding row",
    )
    embedding_model_id: str = Field(
        default="models/gemini-embedding-001",
        description="Google embedding model ID",
    )
    embedding_dimension: int = Field(
        default=1024,
        description="Output dimensionality requested from the provider",
    )
    embedding_batch_size: int = Field(
        default=100,
        gt=0,
        description="Chunks sent per embedding provider call",
    )

    # Column suggestion settings
    llm_model_id: str = Field(
        default="gemini-2.5-flash",
        description="Chat model used for column suggestions",
    )
    llm_temperature: float = Field(
        default=0.2,
        description="Sampling temperature for column suggestions",
    )
    prompt_version: str = Field(
        default="v1.0.0",
        description="Version tag recorded with every suggestion result",
    )

    # Orchestration settings
    step_retries: int = Field(
        default=1,
        ge=0,
        description="Retries per pipeline step after the first attempt",
    )
    step_retry_wait_seconds: float = Field(
        default=2.0,
        ge=0.0,
        description="Initial backoff between step attempts",
    )
    run_concurrency: int = Field(
        default=3,
        gt=0,
        description="Maximum concurrent runs in the in-process run pool",
    )
    dispatch_mode: Literal["celery", "in_process"] = Field(
        default="celery",
        description="Send analysis events to the Celery queue or run them in the API process",
    )


@lru_cache
def get_pipeline_settings() -> DocumentPipelineSettings:
    """
    Get cached pipeline settings instance.

    Returns:
        DocumentPipelineSettings: Singleton settings loaded from environment
    """
    return DocumentPipelineSettings()
