"""
Database models package.

Exports:
  - FileTableWorkflowModel: Workflow with its files and suggested columns
  - FileArtifactModel: Cached analysis artifact
  - ChunkEmbeddingModel: Per-chunk embedding vector

Dependencies: sqlalchemy, filetable.boundary.db.base
System role: Database model definitions for domain entities
"""

from filetable.boundary.db.models.artifact_model import FileArtifactModel
from filetable.boundary.db.models.embedding_model import ChunkEmbeddingModel
from filetable.boundary.db.models.workflow_model import FileTableWorkflowModel

__all__ = [
    "FileTableWorkflowModel",
    "FileArtifactModel",
    "ChunkEmbeddingModel",
]
