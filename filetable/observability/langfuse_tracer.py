"""
Langfuse tracing integration.

Builds the LangChain callback handler that reports LLM calls to
Langfuse. Tracing is active only when both keys are configured.

Dependencies: langfuse, filetable.configs
System role: LLM call tracing for column suggestions
"""

import logging
from functools import lru_cache

from langfuse import Langfuse
from langfuse.langchain import CallbackHandler

from filetable.configs import get_settings

logger = logging.getLogger(__name__)


@lru_cache
def _get_langfuse_client() -> Langfuse:
    obs_settings = get_settings().observability
    client = Langfuse(
        public_key=obs_settings.public_key,
        secret_key=obs_settings.secret_key,
        host=obs_settings.host,
    )
    logger.info(f"{__name__}:_get_langfuse_client - Langfuse initialized: host={obs_settings.host}")
    return client


def get_langfuse_callbacks() -> list[CallbackHandler]:
    """
    Callback handlers for a traced LLM call.

    Returns:
        list[CallbackHandler]: One handler when tracing is configured, else empty
    """
    obs_settings = get_settings().observability
    if not obs_settings.tracing_configured:
        return []
    _get_langfuse_client()
    return [CallbackHandler(public_key=obs_settings.public_key)]
