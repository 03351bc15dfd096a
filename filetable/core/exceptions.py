"""
Exception hierarchy for the file table workflow pipeline.

Each pipeline error declares whether a failing step may be retried:
fatal errors (content mismatch, unparsable input, missing rows) surface
immediately as a file error, provider errors consume the step retry budget.

Dependencies: None (pure domain layer)
System role: Error types shared by the pipeline, services and API
"""

from typing import Any


class FileTableException(Exception):
    """Base exception for all file table workflow errors."""

    retryable: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return the bare message; it is what ends up in the file status."""
        return self.message


class ContentMismatchError(FileTableException):
    """Raised when uploaded bytes do not match the expected content hash."""

    def __init__(
        self,
        expected_hash: str,
        actual_hash: str,
        key: str | None = None,
    ) -> None:
        """
        Initialize content mismatch error.

        Args:
            expected_hash: Hash recorded at upload time
            actual_hash: Hash of the bytes actually read
            key: Object key the bytes were read from, if any
        """
        source = f" for {key}" if key else ""
        super().__init__(
            f"Content hash mismatch{source}. Expected {expected_hash}, received {actual_hash}",
            {"expected_hash": expected_hash, "actual_hash": actual_hash, "key": key},
        )


class ExtractionError(FileTableException):
    """Raised when the binary document cannot be parsed."""

    def __init__(
        self,
        message: str,
        file_type: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if file_type:
            details["file_type"] = file_type
        super().__init__(message, details)


class ProviderError(FileTableException):
    """Raised when an LLM or embedding provider call fails."""

    retryable = True

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize provider error.

        Args:
            message: Error message
            provider: Provider name (google, anthropic, ...)
            details: Additional context
        """
        details = details or {}
        if provider:
            details["provider"] = provider
        super().__init__(message, details)


class StorageError(FileTableException):
    """Raised when object storage reads or writes fail."""

    retryable = True

    def __init__(
        self,
        message: str,
        key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if key:
            details["key"] = key
        super().__init__(message, details)


class NotFoundError(FileTableException):
    """Raised when a workflow, file or artifact row is missing."""

    def __init__(self, resource: str, resource_id: str) -> None:
        """
        Initialize not found error.

        Args:
            resource: Resource kind (Workflow, File, Artifact)
            resource_id: Identifier of the missing row
        """
        super().__init__(
            f"{resource} {resource_id} not found",
            {"resource": resource, "resource_id": resource_id},
        )


class InvalidStatusTransitionError(FileTableException):
    """Raised when a file status change is not a legal transition."""

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(
            f"Illegal file status transition: {current} -> {requested}",
            {"current": current, "requested": requested},
        )
