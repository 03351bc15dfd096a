"""
Core business logic module.

Contains the exception hierarchy and the file analysis pipeline.
"""

from filetable.core.exceptions import (
    ContentMismatchError,
    ExtractionError,
    FileTableException,
    InvalidStatusTransitionError,
    NotFoundError,
    ProviderError,
    StorageError,
)

__all__ = [
    "FileTableException",
    "ContentMismatchError",
    "ExtractionError",
    "ProviderError",
    "StorageError",
    "NotFoundError",
    "InvalidStatusTransitionError",
]
