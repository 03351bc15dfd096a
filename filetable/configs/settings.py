"""
Process-wide settings object.

One Settings instance groups the database, tracing, document bucket and
task queue sections. The API and the Celery worker both read it through
get_settings, so .env is parsed once per process.

Dependencies: pydantic_settings, filetable.configs sections
System role: Entry point for all configuration lookups
"""

from functools import lru_cache

from filetable.configs.base import BaseSettings
from filetable.configs.celery_config import CelerySettings
from filetable.configs.database import DatabaseSettings
from filetable.configs.observability import ObservabilitySettings
from filetable.configs.s3_documents import S3DocumentsSettings


class Settings(BaseSettings):
    """Base fields plus one attribute per configuration section."""

    database: DatabaseSettings = DatabaseSettings()
    observability: ObservabilitySettings = ObservabilitySettings()
    s3_documents: S3DocumentsSettings = S3DocumentsSettings()
    celery: CelerySettings = CelerySettings()


@lru_cache
def get_settings() -> Settings:
    """Settings parsed once per process."""
    return Settings()
