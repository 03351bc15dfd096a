"""
Embedding batcher for analyzed chunks.

Embeds chunks in fixed-size batches, one provider call per batch, and
upserts one row per chunk keyed by (artifact, chunk index, provider,
model). Each batch commits on its own, so a failure keeps the batches
before it and a retry embeds only the chunks still missing.

Dependencies: langchain_core.embeddings, sqlalchemy
System role: Embedding stage of file analysis
"""

import asyncio
import logging
from uuid import UUID

from langchain_core.embeddings import Embeddings
from sqlalchemy.ext.asyncio import AsyncSession

from filetable.boundary.db.CRUD.embedding_crud import embedding_crud
from filetable.core.document_processing.models.chunk import DocumentChunk
from filetable.core.exceptions import ProviderError

logger = logging.getLogger(__name__)


def batched(chunks: list[DocumentChunk], size: int) -> list[list[DocumentChunk]]:
    """Split chunks into consecutive batches of at most size items."""
    return [chunks[i:i + size] for i in range(0, len(chunks), size)]


class EmbeddingTask:
    """Generate and persist chunk embeddings."""

    def __init__(
        self,
        embeddings: Embeddings,
        provider: str,
        model: str,
        batch_size: int = 100,
    ) -> None:
        """
        Initialize embedding task.

        Args:
            embeddings: LangChain embeddings client
            provider: Provider name recorded on every row
            model: Model ID recorded on every row
            batch_size: Chunks per provider call

        Raises:
            ValueError: When batch_size is not positive
        """
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._embeddings = embeddings
        self._provider = provider
        self._model = model
        self._batch_size = batch_size

    async def has_embeddings(self, db: AsyncSession, artifact_id: UUID, chunk_count: int) -> bool:
        """Whether all chunk_count chunks have a row for this provider and model."""
        stored = await embedding_crud.count_for_model(db, artifact_id, self._provider, self._model)
        return stored >= chunk_count

    async def ensure_embeddings(
        self,
        db: AsyncSession,
        artifact_id: UUID,
        chunks: list[DocumentChunk],
    ) -> int:
        """
        Embed the chunks that have no row yet for this artifact and model.

        A run interrupted after some batches committed resumes with the
        missing chunk indices only.

        Returns:
            int: Rows written (0 when every chunk was already embedded)
        """
        stored = await embedding_crud.indices_for_model(
            db, artifact_id, self._provider, self._model
        )
        missing = [chunk for chunk in chunks if chunk.index not in stored]
        if not missing:
            logger.info(
                f"{__name__}:ensure_embeddings - Embeddings present, skipping",
                extra={"artifact_id": str(artifact_id)},
            )
            return 0
        if stored:
            logger.info(
                f"{__name__}:ensure_embeddings - Resuming partial embeddings",
                extra={
                    "artifact_id": str(artifact_id),
                    "stored": len(stored),
                    "missing": len(missing),
                },
            )
        return await self.embed_chunks(db, artifact_id, missing)

    async def embed_chunks(
        self,
        db: AsyncSession,
        artifact_id: UUID,
        chunks: list[DocumentChunk],
    ) -> int:
        """
        Embed and upsert chunks batch by batch.

        Args:
            db: Async database session (committed after every batch)
            artifact_id: Artifact the chunks belong to
            chunks: Chunks in index order

        Returns:
            int: Rows written

        Raises:
            ProviderError: Provider call failed or returned the wrong vector count
        """
        written = 0
        for batch_number, batch in enumerate(batched(chunks, self._batch_size)):
            vectors = await self._embed_batch(batch, batch_number)
            rows = [
                {
                    "artifact_id": artifact_id,
                    "chunk_index": chunk.index,
                    "embedding": vector,
                    "byte_start": chunk.byte_range.start,
                    "byte_end": chunk.byte_range.end,
                    "token_count": chunk.token_estimate,
                    "provider": self._provider,
                    "model": self._model,
                }
                for chunk, vector in zip(batch, vectors)
            ]
            try:
                written += await embedding_crud.upsert_many(db, rows)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info(
            f"{__name__}:embed_chunks - Embeddings stored",
            extra={"artifact_id": str(artifact_id), "rows": written},
        )
        return written

    async def _embed_batch(
        self,
        batch: list[DocumentChunk],
        batch_number: int,
    ) -> list[list[float]]:
        texts = [chunk.text for chunk in batch]
        try:
            vectors = await asyncio.to_thread(self._embeddings.embed_documents, texts)
        except Exception as e:
            raise ProviderError(
                f"Embedding batch {batch_number} failed: {e}",
                provider=self._provider,
                details={"model": self._model, "batch": batch_number},
            ) from e

        if len(vectors) != len(batch):
            raise ProviderError(
                f"Embedding batch {batch_number} returned {len(vectors)} vectors "
                f"for {len(batch)} chunks",
                provider=self._provider,
            )
        return [list(vector) for vector in vectors]
