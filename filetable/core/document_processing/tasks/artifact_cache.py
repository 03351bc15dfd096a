"""
Artifact cache for analysis results.

Analysis results are keyed by (user, content hash, analyzer version).
The blob lives in object storage under
artifacts/{content_hash}-v{analyzer_version}.json and the row in
file_artifacts points at it. Bumping analyzer_version makes every
existing entry a miss.

Dependencies: sqlalchemy, filetable.boundary.aws.s3_client
System role: Skips re-analysis of content that was already analyzed
"""

import asyncio
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from filetable.boundary.aws.s3_client import S3DocumentClient
from filetable.boundary.db.CRUD.artifact_crud import artifact_crud
from filetable.boundary.db.models.artifact_model import FileArtifactModel
from filetable.core.document_processing.models.analysis import AnalysisResult

logger = logging.getLogger(__name__)


def artifact_key(content_hash: str, analyzer_version: int, prefix: str = "artifacts") -> str:
    """Object key of the blob for a cache entry."""
    return f"{prefix}/{content_hash}-v{analyzer_version}.json"


class ArtifactCache:
    """Content-addressed cache of AnalysisResult blobs."""

    def __init__(
        self,
        s3_client: S3DocumentClient,
        prefix: str = "artifacts",
    ) -> None:
        """
        Initialize artifact cache.

        Args:
            s3_client: Client for the documents bucket
            prefix: Key prefix for artifact blobs
        """
        self._s3_client = s3_client
        self._prefix = prefix

    async def lookup(
        self,
        db: AsyncSession,
        user_id: str,
        content_hash: str,
        analyzer_version: int,
    ) -> FileArtifactModel | None:
        """
        Find a cached artifact.

        Returns:
            FileArtifactModel on hit, None on miss
        """
        artifact = await artifact_crud.get_by_key(db, user_id, content_hash, analyzer_version)
        logger.info(
            f"{__name__}:lookup - Cache {'hit' if artifact else 'miss'}",
            extra={"content_hash": content_hash, "analyzer_version": analyzer_version},
        )
        return artifact

    async def store(
        self,
        db: AsyncSession,
        user_id: str,
        analysis: AnalysisResult,
        analyzer_version: int,
    ) -> FileArtifactModel:
        """
        Persist an analysis result and insert its cache row.

        The blob key depends only on content hash and version, so a
        concurrent writer overwrites it with identical bytes. A concurrent
        row insert fails the unique constraint and resolves to the row the
        other writer committed.

        Args:
            db: Async database session (committed by this call)
            user_id: Artifact owner
            analysis: Result to cache
            analyzer_version: Analyzer version that produced it

        Returns:
            FileArtifactModel: The inserted or already existing row
        """
        content_hash = analysis.metadata.content_hash
        key = artifact_key(content_hash, analyzer_version, self._prefix)

        await asyncio.to_thread(
            self._s3_client.put_object,
            key,
            analysis.to_blob(),
            "application/json",
        )

        try:
            artifact = await artifact_crud.create(
                db,
                user_id=user_id,
                content_hash=content_hash,
                analyzer_version=analyzer_version,
                artifact_pointer=key,
                analyzer_metadata={
                    **analysis.metadata.summary_fields(),
                    "chunkCount": len(analysis.chunks),
                },
            )
            await db.commit()
        except IntegrityError:
            await db.rollback()
            existing = await artifact_crud.get_by_key(db, user_id, content_hash, analyzer_version)
            if existing is None:
                raise
            logger.info(
                f"{__name__}:store - Artifact inserted concurrently, reusing",
                extra={"artifact_id": str(existing.id)},
            )
            return existing

        logger.info(
            f"{__name__}:store - Artifact stored",
            extra={"artifact_id": str(artifact.id), "key": key},
        )
        return artifact

    async def load(self, artifact: FileArtifactModel) -> AnalysisResult:
        """
        Read the analysis blob an artifact points at.

        Raises:
            StorageError: Blob missing or unreadable
        """
        obj = await asyncio.to_thread(self._s3_client.get_object, artifact.artifact_pointer)
        return AnalysisResult.from_blob(obj.data)
