"""
Workflow file and trigger event schemas.

FileProcessEvent is the payload dispatched once per uploaded file.
WorkflowFile is one entry of the workflow row's JSON file list.

Dependencies: pydantic
System role: Data validation and contract definition for the trigger
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

FILE_PROCESS_EVENT_NAME = "workflow/file-table-workflow-file.process"


class FileProcessEvent(BaseModel):
    """Trigger payload for analyzing one workflow file."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "workflowId": "550e8400-e29b-41d4-a716-446655440000",
                "fileId": "550e8400-e29b-41d4-a716-446655440001",
            }
        },
    )

    workflow_id: UUID = Field(..., description="Parent workflow ID")
    file_id: str = Field(..., description="File entry ID inside the workflow")

    @property
    def run_key(self) -> str:
        """Identifies a pipeline run for logging and compensation."""
        return f"{self.workflow_id}:{self.file_id}"


class WorkflowFile(BaseModel):
    """Uploaded file tracked on a workflow."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    filename: str
    status: str = "Uploaded"
    content_hash: str | None = None
    s3_bucket: str | None = None
    s3_key: str
    size: int = 0
