"""
Chunk embedding ORM model.

One row per chunk per (provider, model). The vector is stored as a JSON
array of floats.

Dependencies: sqlalchemy, filetable.boundary.db.base
System role: Embedding persistence for analyzed artifacts
"""

import uuid

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from filetable.boundary.db.base import Base, JSONType, TimestampMixin, UUIDMixin


class ChunkEmbeddingModel(Base, UUIDMixin, TimestampMixin):
    """
    Embedding ORM model.

    Constraints:
        (artifact_id, chunk_index, provider, model): UNIQUE; writes upsert
    """

    __tablename__ = "chunk_embeddings"
    __table_args__ = (
        UniqueConstraint(
            "artifact_id",
            "chunk_index",
            "provider",
            "model",
            name="uq_chunk_embeddings_artifact_chunk_model",
        ),
    )

    artifact_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("file_artifacts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    embedding: Mapped[list[float]] = mapped_column(JSONType, nullable=False)
    byte_start: Mapped[int] = mapped_column(Integer, nullable=False)
    byte_end: Mapped[int] = mapped_column(Integer, nullable=False)
    token_count: Mapped[int] = mapped_column(Integer, nullable=False)
    provider: Mapped[str] = mapped_column(String(50), nullable=False)
    model: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<ChunkEmbeddingModel(artifact={self.artifact_id}, chunk={self.chunk_index})>"
