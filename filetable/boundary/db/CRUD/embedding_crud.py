"""
Chunk embedding CRUD operations.

Embedding rows are written with INSERT ... ON CONFLICT DO UPDATE so
re-running a batch overwrites instead of duplicating.

Dependencies: sqlalchemy, filetable.boundary.db.models
System role: Embedding persistence
"""

import uuid
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from filetable.boundary.db.base import utc_now
from filetable.boundary.db.CRUD.base_crud import BaseCRUD
from filetable.boundary.db.models.embedding_model import ChunkEmbeddingModel

CONFLICT_COLUMNS = ["artifact_id", "chunk_index", "provider", "model"]
UPDATE_COLUMNS = ["embedding", "byte_start", "byte_end", "token_count", "updated_at"]


class EmbeddingCRUD(BaseCRUD[ChunkEmbeddingModel]):
    """CRUD operations for ChunkEmbeddingModel."""

    def __init__(self) -> None:
        super().__init__(ChunkEmbeddingModel)

    def _model_filter(self, artifact_id: UUID, provider: str, model: str):
        return (
            ChunkEmbeddingModel.artifact_id == artifact_id,
            ChunkEmbeddingModel.provider == provider,
            ChunkEmbeddingModel.model == model,
        )

    async def count_for_model(
        self,
        session: AsyncSession,
        artifact_id: UUID,
        provider: str,
        model: str,
    ) -> int:
        """Number of chunk rows stored for the artifact and model."""
        stmt = select(func.count(ChunkEmbeddingModel.id)).where(
            *self._model_filter(artifact_id, provider, model)
        )
        result = await session.execute(stmt)
        return result.scalar_one()

    async def indices_for_model(
        self,
        session: AsyncSession,
        artifact_id: UUID,
        provider: str,
        model: str,
    ) -> set[int]:
        """Chunk indices that already have a row for the artifact and model."""
        stmt = select(ChunkEmbeddingModel.chunk_index).where(
            *self._model_filter(artifact_id, provider, model)
        )
        result = await session.execute(stmt)
        return set(result.scalars().all())

    async def upsert_many(
        self,
        session: AsyncSession,
        rows: list[dict[str, Any]],
    ) -> int:
        """
        Insert embedding rows, overwriting rows with the same key.

        Args:
            session: Async database session
            rows: Column value dicts (embedding, byte_start, ... model)

        Returns:
            int: Number of rows written
        """
        if not rows:
            return 0

        dialect = session.get_bind().dialect.name
        insert = pg_insert if dialect == "postgresql" else sqlite_insert
        # multi-row VALUES skips Python-side column defaults
        now = utc_now()
        values = [
            {"id": uuid.uuid4(), "created_at": now, "updated_at": now, **row}
            for row in rows
        ]
        stmt = insert(ChunkEmbeddingModel).values(values)
        stmt = stmt.on_conflict_do_update(
            index_elements=CONFLICT_COLUMNS,
            set_={column: stmt.excluded[column] for column in UPDATE_COLUMNS},
        )
        await session.execute(stmt)
        return len(rows)


embedding_crud = EmbeddingCRUD()
