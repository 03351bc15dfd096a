"""Service orchestrators."""

from .workflow_file_service import (
    Dispatcher,
    UploadedFile,
    WorkflowFileService,
    pool_dispatcher,
)

__all__ = [
    "Dispatcher",
    "UploadedFile",
    "WorkflowFileService",
    "pool_dispatcher",
]
