"""API dependencies."""

from .dependencies import (
    get_analysis_dispatcher,
    get_current_user_id,
    get_run_pool,
    get_s3_document_client,
    get_workflow_file_service,
)

__all__ = [
    "get_analysis_dispatcher",
    "get_current_user_id",
    "get_run_pool",
    "get_s3_document_client",
    "get_workflow_file_service",
]
