"""
Shared persistence helpers for the file table models.

WorkflowCRUD, ArtifactCRUD and EmbeddingCRUD inherit the primary-key
operations below and add the lookups their callers need. Nothing here
commits: the caller's session owns the transaction.

Dependencies: sqlalchemy
System role: Primary-key persistence shared by model CRUD classes
"""

from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from filetable.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """Insert, fetch and remove rows of one mapped class by UUID key."""

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, **values) -> ModelT:
        """
        Insert a row and flush it.

        Unique-constraint violations surface as IntegrityError at the
        flush, so callers racing on the same natural key can roll back
        and re-read the winner.

        Returns:
            The persisted instance with key and timestamps populated
        """
        row = self.model(**values)
        session.add(row)
        await session.flush()
        await session.refresh(row)
        return row

    async def get_by_id(self, session: AsyncSession, row_id: UUID) -> ModelT | None:
        result = await session.execute(select(self.model).where(self.model.id == row_id))
        return result.scalar_one_or_none()

    async def delete_by_id(self, session: AsyncSession, row_id: UUID) -> bool:
        """Remove one row. False when no row had this key."""
        result = await session.execute(delete(self.model).where(self.model.id == row_id))
        return result.rowcount > 0
