"""
Workflow file API endpoints.

Routes:
    POST /workflows
    POST /workflows/{workflow_id}/files
    GET  /workflows/{workflow_id}/files
    GET  /workflows/{workflow_id}/columns
    POST /workflows/{workflow_id}/files/{file_id}/retry
    GET  /workflows/{workflow_id}/files/{file_id}/download-url

Analysis is fire-and-forget: upload and retry return immediately and
the client polls the file list for status.

Dependencies: filetable.application.services, filetable.api.deps
System role: Workflow file HTTP API
"""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from filetable.api.deps import get_current_user_id, get_workflow_file_service
from filetable.application.services import UploadedFile, WorkflowFileService
from filetable.core.document_processing.models import WorkflowColumn, WorkflowFile
from filetable.core.exceptions import (
    InvalidStatusTransitionError,
    NotFoundError,
    StorageError,
)

router = APIRouter(prefix="/workflows", tags=["workflows"])


class CreateWorkflowRequest(BaseModel):
    name: str = Field(default="Untitled workflow", min_length=1, max_length=255)


class WorkflowResponse(BaseModel):
    id: UUID
    name: str


class DownloadUrlResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url: str
    expires_at: datetime


def _raise_http(error: Exception) -> None:
    if isinstance(error, NotFoundError):
        raise HTTPException(status_code=404, detail=str(error)) from error
    if isinstance(error, InvalidStatusTransitionError):
        raise HTTPException(status_code=409, detail=str(error)) from error
    if isinstance(error, StorageError):
        raise HTTPException(status_code=502, detail=str(error)) from error
    raise error


@router.post("", response_model=WorkflowResponse, status_code=status.HTTP_201_CREATED)
async def create_workflow(
    request: CreateWorkflowRequest,
    user_id: str = Depends(get_current_user_id),
    service: WorkflowFileService = Depends(get_workflow_file_service),
) -> WorkflowResponse:
    """Create an empty workflow."""
    workflow = await service.create_workflow(user_id, request.name)
    return WorkflowResponse(id=workflow.id, name=workflow.name)


@router.post(
    "/{workflow_id}/files",
    response_model=list[WorkflowFile],
    response_model_by_alias=True,
    status_code=status.HTTP_202_ACCEPTED,
)
async def upload_files(
    workflow_id: UUID,
    files: list[UploadFile] = File(...),
    user_id: str = Depends(get_current_user_id),
    service: WorkflowFileService = Depends(get_workflow_file_service),
) -> list[WorkflowFile]:
    """
    Upload files and queue their analysis.

    Args:
        workflow_id: Target workflow UUID
        files: Multipart file parts

    Returns:
        list[WorkflowFile]: New entries with status "Uploaded"

    Raises:
        HTTPException(400): A part has no filename
        HTTPException(404): Workflow not found
        HTTPException(502): Object storage upload failed
    """
    uploads = []
    for part in files:
        if not part.filename:
            raise HTTPException(status_code=400, detail="Every file needs a filename")
        uploads.append(
            UploadedFile(
                filename=part.filename,
                data=await part.read(),
                content_type=part.content_type or "application/octet-stream",
            )
        )

    try:
        return await service.upload_files(workflow_id, user_id, uploads)
    except (NotFoundError, StorageError) as e:
        _raise_http(e)


@router.get(
    "/{workflow_id}/files",
    response_model=list[WorkflowFile],
    response_model_by_alias=True,
)
async def get_files(
    workflow_id: UUID,
    user_id: str = Depends(get_current_user_id),
    service: WorkflowFileService = Depends(get_workflow_file_service),
) -> list[WorkflowFile]:
    """List files with their current status for polling."""
    try:
        return await service.get_files(workflow_id, user_id)
    except NotFoundError as e:
        _raise_http(e)


@router.get(
    "/{workflow_id}/columns",
    response_model=list[WorkflowColumn],
    response_model_by_alias=True,
)
async def get_columns(
    workflow_id: UUID,
    user_id: str = Depends(get_current_user_id),
    service: WorkflowFileService = Depends(get_workflow_file_service),
) -> list[WorkflowColumn]:
    """List columns suggested so far."""
    try:
        return await service.get_columns(workflow_id, user_id)
    except NotFoundError as e:
        _raise_http(e)


@router.post(
    "/{workflow_id}/files/{file_id}/retry",
    response_model=WorkflowFile,
    response_model_by_alias=True,
    status_code=status.HTTP_202_ACCEPTED,
)
async def retry_file(
    workflow_id: UUID,
    file_id: str,
    user_id: str = Depends(get_current_user_id),
    service: WorkflowFileService = Depends(get_workflow_file_service),
) -> WorkflowFile:
    """Re-trigger analysis of a file in an error state."""
    try:
        return await service.retry_file(workflow_id, user_id, file_id)
    except (NotFoundError, InvalidStatusTransitionError) as e:
        _raise_http(e)


@router.get(
    "/{workflow_id}/files/{file_id}/download-url",
    response_model=DownloadUrlResponse,
    response_model_by_alias=True,
)
async def get_download_url(
    workflow_id: UUID,
    file_id: str,
    user_id: str = Depends(get_current_user_id),
    service: WorkflowFileService = Depends(get_workflow_file_service),
) -> DownloadUrlResponse:
    """Presigned URL for viewing an uploaded file."""
    try:
        url, expires_at = await service.get_download_url(workflow_id, user_id, file_id)
    except NotFoundError as e:
        _raise_http(e)
    return DownloadUrlResponse(url=url, expires_at=expires_at)
