"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory SQLite database, in-memory S3 client, fake embedding
and chat models, workflow factories
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite, langchain_core
System role: Test infrastructure and fixture management
"""

import hashlib
import uuid
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding

from filetable.core.document_processing.models import (
    LLMColumnSuggestion,
    LLMColumnSuggestionResponse,
)
from filetable.core.exceptions import StorageError


class InMemoryS3Client:
    """Dict-backed stand-in for S3DocumentClient."""

    def __init__(self, bucket: str = "test-bucket") -> None:
        self.bucket = bucket
        self.objects: dict[tuple[str, str], bytes] = {}
        self.metadata: dict[tuple[str, str], dict[str, str]] = {}
        self.get_calls: list[str] = []

    def put_object(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        bucket: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> None:
        self.objects[(bucket or self.bucket, key)] = data
        self.metadata[(bucket or self.bucket, key)] = metadata or {}

    def get_object(self, key: str, bucket: str | None = None):
        from filetable.boundary.aws.s3_client import S3Object

        self.get_calls.append(key)
        data = self.objects.get((bucket or self.bucket, key))
        if data is None:
            raise StorageError(f"Object not found in S3: {key}", key=key)
        return S3Object(data=data, content_length=len(data))


async def artifact_versions(db, user_id: str, content_hash: str) -> list:
    """Cached artifacts for one content hash, ordered by analyzer version."""
    from sqlalchemy import select

    from filetable.boundary.db.models.artifact_model import FileArtifactModel

    result = await db.execute(
        select(FileArtifactModel)
        .where(
            FileArtifactModel.user_id == user_id,
            FileArtifactModel.content_hash == content_hash,
        )
        .order_by(FileArtifactModel.analyzer_version)
    )
    return list(result.scalars().all())


async def embedding_rows(db, artifact_id) -> list:
    """Embedding rows of an artifact, ordered by chunk index."""
    from sqlalchemy import select

    from filetable.boundary.db.models.embedding_model import ChunkEmbeddingModel

    result = await db.execute(
        select(ChunkEmbeddingModel)
        .where(ChunkEmbeddingModel.artifact_id == artifact_id)
        .order_by(ChunkEmbeddingModel.chunk_index)
    )
    return list(result.scalars().all())


@pytest.fixture
async def db_engine():
    """
    Create in-memory SQLite async engine with all tables.

    Yields:
        AsyncEngine: Engine sharing one connection (StaticPool)
    """
    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.pool import StaticPool

    from filetable.boundary.db import models  # noqa: F401
    from filetable.boundary.db.base import Base

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Session factory bound to the test engine."""
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_async_db(session_factory):
    """
    Create in-memory SQLite async database session for testing.

    Yields:
        AsyncSession: Test database session
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def s3_client() -> InMemoryS3Client:
    return InMemoryS3Client()


@pytest.fixture
def fake_embeddings() -> DeterministicFakeEmbedding:
    return DeterministicFakeEmbedding(size=8)


def make_llm_response(
    suggestions: list[tuple[str, str]] | None = None,
    document_type: str = "Invoice",
) -> LLMColumnSuggestionResponse:
    """Structured response with (name, value) suggestions."""
    suggestions = suggestions or [("invoice number", "INV-001"), ("Total Amount", "$1,250.00")]
    return LLMColumnSuggestionResponse(
        inferred_document_type=document_type,
        rationale="Contains line items and a total due.",
        column_suggestions=[
            LLMColumnSuggestion(
                name=name,
                why_useful="Identifies the document",
                confidence="high",
                extracted_value=value,
            )
            for name, value in suggestions
        ],
    )


@pytest.fixture
def mock_llm() -> MagicMock:
    """
    Chat model mock whose structured runnable returns an invoice response.

    Returns:
        MagicMock: llm.with_structured_output(...).ainvoke is an AsyncMock
    """
    llm = MagicMock()
    structured = MagicMock()
    structured.ainvoke = AsyncMock(return_value=make_llm_response())
    llm.with_structured_output.return_value = structured
    llm.structured = structured
    return llm


@pytest.fixture
def pdf_bytes() -> bytes:
    return b"%PDF-1.4\n1 0 obj\n<< >>\nendobj\n%%EOF"


@pytest.fixture
def make_workflow(session_factory, s3_client):
    """
    Factory creating a workflow with one uploaded file.

    Returns:
        Callable: async (data, status="Uploaded", user_id="user-1") -> (workflow_id, file_id)
    """
    from filetable.boundary.db.models.workflow_model import FileTableWorkflowModel

    async def _make(
        data: bytes,
        status: str = "Uploaded",
        user_id: str = "user-1",
        extra_files: list[dict[str, Any]] | None = None,
    ) -> tuple[uuid.UUID, str]:
        file_id = str(uuid.uuid4())
        key = f"{file_id}-doc.pdf"
        s3_client.put_object(key, data)
        entry = {
            "id": file_id,
            "filename": "doc.pdf",
            "status": status,
            "contentHash": hashlib.sha256(data).hexdigest(),
            "s3Bucket": s3_client.bucket,
            "s3Key": key,
            "size": len(data),
        }
        async with session_factory() as db:
            workflow = FileTableWorkflowModel(
                user_id=user_id,
                name="Invoices",
                files=[entry, *(extra_files or [])],
                suggested_columns=[],
            )
            db.add(workflow)
            await db.commit()
            return workflow.id, file_id

    return _make
