"""
Gemini chunk embeddings at a fixed vector size.

GoogleGenerativeAIEmbeddings accepts output_dimensionality only per
call, not in its constructor. This subclass pins it so every vector
stored under one (provider, model) pair has the same length.

Dependencies: langchain_google_genai
System role: Embedding provider for chunk embeddings
"""

import logging

from langchain_google_genai import GoogleGenerativeAIEmbeddings

from filetable.core.document_processing.configs import DocumentPipelineSettings

logger = logging.getLogger(__name__)


class FixedDimensionEmbeddings(GoogleGenerativeAIEmbeddings):
    """Embeddings client that sends the same output_dimensionality on every batch."""

    _output_dimensionality: int = 1024

    def __init__(self, model: str, output_dimensionality: int, **kwargs) -> None:
        super().__init__(model=model, **kwargs)
        self._output_dimensionality = output_dimensionality
        logger.info(
            f"{__name__}:__init__ - Embedding client ready",
            extra={"model": model, "dimension": output_dimensionality},
        )

    def embed_documents(self, texts: list[str], **kwargs) -> list[list[float]]:
        """One vector per text, in input order, at the pinned dimension."""
        kwargs["output_dimensionality"] = self._output_dimensionality
        return super().embed_documents(texts, **kwargs)


def build_embeddings(settings: DocumentPipelineSettings) -> FixedDimensionEmbeddings:
    return FixedDimensionEmbeddings(
        model=settings.embedding_model_id,
        output_dimensionality=settings.embedding_dimension,
    )
