"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Async connection management
  - FileTableWorkflowModel, FileArtifactModel, ChunkEmbeddingModel: Domain entities
  - workflow_crud, artifact_crud, embedding_crud: CRUD operation singletons

Dependencies: sqlalchemy, filetable.configs
System role: Database adapter for workflows, cached artifacts and embeddings
"""

from filetable.boundary.db.base import Base, TimestampMixin, UUIDMixin
from filetable.boundary.db.connection import (
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from filetable.boundary.db.models import (
    ChunkEmbeddingModel,
    FileArtifactModel,
    FileTableWorkflowModel,
)
from filetable.boundary.db.CRUD import (
    ArtifactCRUD,
    BaseCRUD,
    EmbeddingCRUD,
    WorkflowCRUD,
    artifact_crud,
    embedding_crud,
    workflow_crud,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    "FileTableWorkflowModel",
    "FileArtifactModel",
    "ChunkEmbeddingModel",
    "BaseCRUD",
    "WorkflowCRUD",
    "ArtifactCRUD",
    "EmbeddingCRUD",
    "workflow_crud",
    "artifact_crud",
    "embedding_crud",
]
