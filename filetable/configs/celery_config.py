"""
Broker, result backend and queue settings for the analysis worker.

Read from CELERY_* variables. RabbitMQ carries analysis requests on the
file-analysis queue and Redis keeps task results. The worker's
concurrency is the ceiling on pipeline runs per worker process.

Dependencies: pydantic, pydantic_settings
System role: Task queue configuration for file analysis
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CelerySettings(BaseSettings):
    """Where analysis requests are queued and how many run at once."""

    model_config = SettingsConfigDict(
        env_prefix="CELERY_",
        case_sensitive=False,
        extra="ignore",
    )

    broker_host: str = Field(default="localhost")
    broker_port: int = Field(default=5672)
    broker_user: str = Field(default="guest")
    broker_password: str = Field(default="guest")
    broker_vhost: str = Field(default="/")

    result_backend_host: str = Field(default="localhost")
    result_backend_port: int = Field(default=6379)
    result_backend_db: int = Field(default=1, description="Redis logical database for results")

    # Payloads are {"workflowId", "fileId"} dicts
    task_serializer: str = Field(default="json")
    result_serializer: str = Field(default="json")
    accept_content: list[str] = Field(default_factory=lambda: ["json"])
    timezone: str = Field(default="UTC")

    file_analysis_queue: str = Field(
        default="file-analysis",
        description="Queue the analysis worker consumes",
    )
    file_analysis_concurrency: int = Field(
        default=3,
        ge=1,
        description="Pipeline runs one worker executes at the same time",
    )

    @property
    def broker_url(self) -> str:
        """amqp:// URL of the RabbitMQ broker."""
        credentials = f"{self.broker_user}:{self.broker_password}"
        return f"amqp://{credentials}@{self.broker_host}:{self.broker_port}/{self.broker_vhost}"

    @property
    def result_backend_url(self) -> str:
        """redis:// URL of the result backend."""
        return (
            f"redis://{self.result_backend_host}:{self.result_backend_port}"
            f"/{self.result_backend_db}"
        )
