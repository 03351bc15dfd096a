"""
PostgreSQL settings for the workflow, artifact and embedding tables.

Read from POSTGRES_* variables. The pool fields feed the single async
engine each API or worker process creates.

Dependencies: pydantic, pydantic_settings
System role: Connection parameters for the async SQLAlchemy engine
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from filetable.configs.base import BaseSettings


class DatabaseSettings(BaseSettings):
    """Where the file table database lives and how the engine pools it."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="POSTGRES_",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = Field(default="localhost")
    port: int = Field(default=5432)
    user: str = Field(default="postgres")
    password: str = Field(default="postgres")
    db: str = Field(default="filetable", description="Database holding workflows and artifacts")

    pool_size: int = Field(default=10, description="Persistent connections kept by the engine")
    max_overflow: int = Field(default=20, description="Extra connections allowed under burst load")
    pool_timeout: int = Field(default=30, description="Seconds to wait for a free connection")
    echo_sql: bool = Field(default=False, description="Log every emitted SQL statement")

    ssl: bool = Field(default=False, description="Append ssl=require to the asyncpg URL")

    @property
    def async_database_url(self) -> str:
        """asyncpg URL for create_async_engine."""
        query = "?ssl=require" if self.ssl else ""
        return (
            f"postgresql+asyncpg://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.db}{query}"
        )
