"""
File table workflow ORM model.

A workflow owns an ordered list of uploaded files (JSON) and the running
list of suggested columns merged from every analyzed file.

Dependencies: sqlalchemy, filetable.boundary.db.base
System role: Workflow persistence for the file analysis pipeline
"""

from typing import Any

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from filetable.boundary.db.base import Base, JSONType, TimestampMixin, UUIDMixin


class FileTableWorkflowModel(Base, UUIDMixin, TimestampMixin):
    """
    Workflow ORM model.

    Attributes:
        id: UUID primary key (auto-generated)
        user_id: Owner of the workflow
        name: Display name
        files: WorkflowFile entries serialized with camelCase keys
        suggested_columns: WorkflowColumn entries serialized with camelCase keys
    """

    __tablename__ = "file_table_workflows"

    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="Untitled workflow")
    files: Mapped[list[dict[str, Any]]] = mapped_column(JSONType, nullable=False, default=list)
    suggested_columns: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONType,
        nullable=False,
        default=list,
    )

    def __repr__(self) -> str:
        return f"<FileTableWorkflowModel(id={self.id}, files={len(self.files or [])})>"
