"""
Observability module.

Provides logging configuration, structured logging helpers and
Langfuse tracing for LLM calls.
"""

from filetable.observability.log_utils import log_exception_with_context
from filetable.observability.logger import configure_logging

__all__ = ["configure_logging", "log_exception_with_context"]
