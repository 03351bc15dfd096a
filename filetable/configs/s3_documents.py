"""
Bucket settings for uploaded workflow files and cached artifacts.

Read from S3_DOCUMENTS_* variables. endpoint_url points boto3 at
LocalStack during development.

Dependencies: pydantic_settings
System role: Document bucket configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class S3DocumentsSettings(BaseSettings):
    """Bucket, region and download link lifetime for the document store."""

    model_config = SettingsConfigDict(
        env_prefix="S3_DOCUMENTS_",
        case_sensitive=False,
        extra="ignore",
    )

    bucket: str = Field(default="filetable-dev-documents")
    region: str = Field(default="us-east-1")
    endpoint_url: str | None = Field(default=None)
    presigned_url_expiry: int = Field(
        default=3600,
        gt=0,
        description="Seconds a presigned download link stays valid",
    )
