"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from filetable.boundary.db.CRUD import workflow_crud, artifact_crud

    workflow = await workflow_crud.get_fresh(db, workflow_id)
"""

from filetable.boundary.db.CRUD.artifact_crud import ArtifactCRUD, artifact_crud
from filetable.boundary.db.CRUD.base_crud import BaseCRUD
from filetable.boundary.db.CRUD.embedding_crud import EmbeddingCRUD, embedding_crud
from filetable.boundary.db.CRUD.workflow_crud import WorkflowCRUD, workflow_crud

__all__ = [
    "BaseCRUD",
    "WorkflowCRUD",
    "workflow_crud",
    "ArtifactCRUD",
    "artifact_crud",
    "EmbeddingCRUD",
    "embedding_crud",
]
