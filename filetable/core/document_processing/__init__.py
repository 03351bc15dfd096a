"""
File analysis pipeline.

Analyzes uploaded workflow files into cached artifacts, embeds their
chunks and suggests table columns from their content.

Dependencies: langchain_community, langchain_google_genai, sqlalchemy, tenacity, pydantic
System role: File analysis pipeline entrypoint
"""

from .configs import (
    DocumentPipelineSettings,
    get_pipeline_settings,
)
from .entrypoint import FileAnalysisPipeline
from .models import FileProcessEvent, FileStatus, PipelineResult
from .run_pool import PipelineRunPool

__all__ = [
    "FileAnalysisPipeline",
    "PipelineRunPool",
    "DocumentPipelineSettings",
    "get_pipeline_settings",
    "FileProcessEvent",
    "FileStatus",
    "PipelineResult",
]
