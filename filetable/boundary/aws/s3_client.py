"""
S3 client for the documents bucket.

Stores uploaded workflow files and cached analysis artifacts, and
generates presigned download URLs for the file list.

Dependencies: boto3
System role: Object storage boundary
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from filetable.configs import get_settings
from filetable.core.exceptions import StorageError

logger = logging.getLogger(__name__)


@dataclass
class S3Object:
    """Downloaded object body and headers."""

    data: bytes
    content_length: int
    content_type: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)


class S3DocumentClient:
    """S3 client for document bucket operations."""

    def __init__(
        self,
        bucket: str | None = None,
        region: str | None = None,
        endpoint_url: str | None = None,
        client=None,
    ) -> None:
        """
        Initialize S3 client for the documents bucket.

        Args:
            bucket: Default bucket (settings value when None)
            region: AWS region (settings value when None)
            endpoint_url: Custom endpoint such as LocalStack
            client: Preconfigured boto3 client, mainly for tests
        """
        settings = get_settings().s3_documents
        self._bucket = bucket or settings.bucket
        self._region = region or settings.region
        self._s3_client = client or boto3.client(
            "s3",
            region_name=self._region,
            endpoint_url=endpoint_url or settings.endpoint_url,
        )

    @property
    def bucket(self) -> str:
        return self._bucket

    def put_object(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        bucket: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> None:
        """
        Upload bytes under key.

        Args:
            key: Object key
            data: Object body
            content_type: MIME type stored with the object
            bucket: Bucket override
            metadata: User metadata stored with the object

        Raises:
            StorageError: When the upload fails
        """
        target = bucket or self._bucket
        try:
            self._s3_client.put_object(
                Bucket=target,
                Key=key,
                Body=data,
                ContentType=content_type,
                Metadata=metadata or {},
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to upload {key}: {e}", key=key) from e

        logger.info(
            f"{__name__}:put_object - Uploaded object",
            extra={"bucket": target, "key": key, "bytes": len(data)},
        )

    def get_object(self, key: str, bucket: str | None = None) -> S3Object:
        """
        Download an object.

        Args:
            key: Object key
            bucket: Bucket override

        Returns:
            S3Object: Body, length and content type

        Raises:
            StorageError: When the object is missing or the download fails
        """
        target = bucket or self._bucket
        try:
            response = self._s3_client.get_object(Bucket=target, Key=key)
            data = response["Body"].read()
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("404", "NoSuchKey"):
                raise StorageError(f"Object not found in S3: {key}", key=key) from e
            raise StorageError(f"S3 download failed ({error_code}): {key}", key=key) from e
        except BotoCoreError as e:
            raise StorageError(f"S3 download failed: {e}", key=key) from e

        return S3Object(
            data=data,
            content_length=response.get("ContentLength", len(data)),
            content_type=response.get("ContentType"),
            metadata=response.get("Metadata", {}),
        )

    def generate_presigned_download_url(
        self,
        key: str,
        expires_in: int | None = None,
        bucket: str | None = None,
    ) -> tuple[str, datetime]:
        """
        Generate presigned URL for downloading/viewing an object.

        Args:
            key: Object key
            expires_in: URL expiry in seconds (settings value when None)
            bucket: Bucket override

        Returns:
            tuple[str, datetime]: (presigned_url, expires_at)
        """
        expires_in = expires_in or get_settings().s3_documents.presigned_url_expiry
        presigned_url = self._s3_client.generate_presigned_url(
            ClientMethod="get_object",
            Params={"Bucket": bucket or self._bucket, "Key": key},
            ExpiresIn=expires_in,
        )
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        return presigned_url, expires_at
