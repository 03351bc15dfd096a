"""
Helpers for logging pipeline failures with bounded context.

Dependencies: logging (stdlib)
System role: Structured error logging for pipeline failure paths
"""

import logging
from typing import Any


def safe_log_value(value: Any, max_length: int = 500) -> str:
    """
    Short string for a log `extra` field.

    Collections are summarized by size; long text is cut at max_length.
    """
    if value is None:
        return "None"
    if isinstance(value, dict):
        rendered = f"dict({len(value)} keys)"
    elif isinstance(value, (list, tuple)):
        rendered = f"{type(value).__name__}({len(value)} items)"
    else:
        rendered = value if isinstance(value, str) else str(value)

    if len(rendered) <= max_length:
        return rendered
    return f"{rendered[:max_length]}... (truncated, {len(rendered)} total)"


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context,
) -> None:
    """Log exc at ERROR with its type, text and workflow_id/file_id/step context."""
    extra = {key: safe_log_value(val) for key, val in context.items()}
    extra["error_type"] = type(exc).__name__
    extra["error_msg"] = safe_log_value(str(exc))
    logger.error(message, extra=extra, exc_info=exc)
