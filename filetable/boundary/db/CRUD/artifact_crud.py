"""
Artifact CRUD operations.

Dependencies: sqlalchemy, filetable.boundary.db.models
System role: Artifact cache persistence
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from filetable.boundary.db.CRUD.base_crud import BaseCRUD
from filetable.boundary.db.models.artifact_model import FileArtifactModel


class ArtifactCRUD(BaseCRUD[FileArtifactModel]):
    """CRUD operations for FileArtifactModel."""

    def __init__(self) -> None:
        super().__init__(FileArtifactModel)

    async def get_by_key(
        self,
        session: AsyncSession,
        user_id: str,
        content_hash: str,
        analyzer_version: int,
    ) -> FileArtifactModel | None:
        """
        Retrieve the artifact for a cache key.

        Args:
            session: Async database session
            user_id: Artifact owner
            content_hash: SHA-256 of the analyzed bytes
            analyzer_version: Analyzer version

        Returns:
            FileArtifactModel if cached, None otherwise
        """
        stmt = select(FileArtifactModel).where(
            FileArtifactModel.user_id == user_id,
            FileArtifactModel.content_hash == content_hash,
            FileArtifactModel.analyzer_version == analyzer_version,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


artifact_crud = ArtifactCRUD()
