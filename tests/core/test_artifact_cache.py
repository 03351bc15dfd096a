"""
Test suite for the content-addressed artifact cache.

System role: Verification of cache hits, misses and version invalidation
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import artifact_versions
from filetable.core.document_processing.models import AnalysisResult, AnalyzerMetadata
from filetable.core.document_processing.tasks.artifact_cache import ArtifactCache, artifact_key
from filetable.core.document_processing.tasks.chunking_task import process_pages_into_chunks

CONTENT_HASH = "a" * 64


def _analysis(content_hash: str = CONTENT_HASH) -> AnalysisResult:
    chunked = process_pages_into_chunks(["Invoice INV-001", "Total due $1,250.00"])
    return AnalysisResult(
        pages=chunked.pages,
        chunks=chunked.chunks,
        full_text=chunked.full_text,
        metadata=AnalyzerMetadata(
            content_hash=content_hash,
            file_size_bytes=2048,
            page_count=2,
            title="Invoice",
        ),
    )


class TestArtifactKey:
    """Test suite for artifact_key()."""

    def test_key_layout(self) -> None:
        assert artifact_key("abc", 3) == "artifacts/abc-v3.json"

    def test_custom_prefix(self) -> None:
        assert artifact_key("abc", 1, prefix="cache") == "cache/abc-v1.json"


class TestArtifactCache:
    """Test suite for ArtifactCache."""

    @pytest.mark.asyncio
    async def test_lookup_misses_empty_cache(self, test_async_db: AsyncSession, s3_client) -> None:
        cache = ArtifactCache(s3_client)

        assert await cache.lookup(test_async_db, "user-1", CONTENT_HASH, 1) is None

    @pytest.mark.asyncio
    async def test_store_writes_blob_and_row(self, test_async_db: AsyncSession, s3_client) -> None:
        # Arrange
        cache = ArtifactCache(s3_client)
        analysis = _analysis()

        # Act
        artifact = await cache.store(test_async_db, "user-1", analysis, 1)

        # Assert
        assert artifact.artifact_pointer == f"artifacts/{CONTENT_HASH}-v1.json"
        assert (s3_client.bucket, artifact.artifact_pointer) in s3_client.objects
        assert artifact.analyzer_metadata["contentHash"] == CONTENT_HASH
        assert artifact.analyzer_metadata["pageCount"] == 2
        assert artifact.analyzer_metadata["chunkCount"] == len(analysis.chunks)
        assert "author" not in artifact.analyzer_metadata

    @pytest.mark.asyncio
    async def test_store_then_lookup_hits(self, test_async_db: AsyncSession, s3_client) -> None:
        cache = ArtifactCache(s3_client)
        stored = await cache.store(test_async_db, "user-1", _analysis(), 1)

        found = await cache.lookup(test_async_db, "user-1", CONTENT_HASH, 1)

        assert found is not None
        assert found.id == stored.id

    @pytest.mark.asyncio
    async def test_lookup_is_scoped_to_user(self, test_async_db: AsyncSession, s3_client) -> None:
        cache = ArtifactCache(s3_client)
        await cache.store(test_async_db, "user-1", _analysis(), 1)

        assert await cache.lookup(test_async_db, "user-2", CONTENT_HASH, 1) is None

    @pytest.mark.asyncio
    async def test_version_bump_invalidates(self, test_async_db: AsyncSession, s3_client) -> None:
        """Entries cached under an older analyzer version are misses."""
        cache = ArtifactCache(s3_client)
        await cache.store(test_async_db, "user-1", _analysis(), 1)

        assert await cache.lookup(test_async_db, "user-1", CONTENT_HASH, 2) is None

        v2 = await cache.store(test_async_db, "user-1", _analysis(), 2)
        assert v2.artifact_pointer == f"artifacts/{CONTENT_HASH}-v2.json"
        versions = await artifact_versions(test_async_db, "user-1", CONTENT_HASH)
        assert [a.analyzer_version for a in versions] == [1, 2]

    @pytest.mark.asyncio
    async def test_duplicate_store_reuses_existing_row(
        self, test_async_db: AsyncSession, s3_client
    ) -> None:
        """A second writer for the same key resolves to the committed row."""
        cache = ArtifactCache(s3_client)
        first = await cache.store(test_async_db, "user-1", _analysis(), 1)
        first_id = first.id

        second = await cache.store(test_async_db, "user-1", _analysis(), 1)

        assert second.id == first_id
        versions = await artifact_versions(test_async_db, "user-1", CONTENT_HASH)
        assert len(versions) == 1

    @pytest.mark.asyncio
    async def test_load_round_trips_analysis(self, test_async_db: AsyncSession, s3_client) -> None:
        cache = ArtifactCache(s3_client)
        analysis = _analysis()
        artifact = await cache.store(test_async_db, "user-1", analysis, 1)

        loaded = await cache.load(artifact)

        assert loaded == analysis
