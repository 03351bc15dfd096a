"""
Langfuse settings for tracing column suggestion calls.

Read from LANGFUSE_* variables. Without both keys the suggestion step
runs untraced.

Dependencies: pydantic_settings
System role: Tracing configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ObservabilitySettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LANGFUSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    public_key: str | None = Field(default=None)
    secret_key: str | None = Field(default=None)
    host: str = Field(default="http://localhost:3000", description="Langfuse server URL")
    enable_tracing: bool = Field(default=True, description="Attach the Langfuse callback to LLM calls")

    @property
    def tracing_configured(self) -> bool:
        """Tracing runs only when enabled and both keys are present."""
        return bool(self.enable_tracing and self.public_key and self.secret_key)
