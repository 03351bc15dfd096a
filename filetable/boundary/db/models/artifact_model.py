"""
File artifact ORM model.

Cache entry pointing at a persisted analysis result. One row per
(user_id, content_hash, analyzer_version); rows are never updated.

Dependencies: sqlalchemy, filetable.boundary.db.base
System role: Artifact cache persistence
"""

from typing import Any

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from filetable.boundary.db.base import Base, JSONType, TimestampMixin, UUIDMixin


class FileArtifactModel(Base, UUIDMixin, TimestampMixin):
    """
    Artifact ORM model.

    Attributes:
        id: UUID primary key
        user_id: Owner of the analyzed content
        content_hash: SHA-256 of the analyzed bytes
        analyzer_version: Analyzer version that produced the blob
        artifact_pointer: Object key of the AnalysisResult blob
        analyzer_metadata: AnalyzerMetadata fields (camelCase)
    """

    __tablename__ = "file_artifacts"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "content_hash",
            "analyzer_version",
            name="uq_file_artifacts_user_hash_version",
        ),
    )

    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    content_hash: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    analyzer_version: Mapped[int] = mapped_column(Integer, nullable=False)
    artifact_pointer: Mapped[str] = mapped_column(String(1024), nullable=False)
    analyzer_metadata: Mapped[dict[str, Any]] = mapped_column(
        JSONType,
        nullable=False,
        default=dict,
    )

    def __repr__(self) -> str:
        return (
            f"<FileArtifactModel(id={self.id}, hash={self.content_hash[:12]}, "
            f"v={self.analyzer_version})>"
        )
