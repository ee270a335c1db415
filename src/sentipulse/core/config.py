"""Configuration management for Sentipulse."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import BatchConstants


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OpenAI API
    openai_api_key: str = Field("", description="OpenAI API key")
    OPENAI_API_KEY: str = Field("", description="OpenAI API key (alternative naming)")
    openai_model: str = Field("gpt-4o-mini", description="Chat model used for classification")

    @property
    def effective_openai_key(self) -> str:
        """Get the effective OpenAI API key from either field."""
        return self.openai_api_key or self.OPENAI_API_KEY

    # Logging
    log_level: str = Field("INFO", description="Logging level")

    # Batch settings
    batch_size: int = Field(BatchConstants.DEFAULT_BATCH_SIZE, description="Records per classifier request")
    delay_ms: int = Field(BatchConstants.DEFAULT_DELAY_MS, description="Delay between batches in milliseconds")

    # Classifier settings
    classifier_max_attempts: int = Field(1, description="Attempts per batch before falling back to neutral")
    retry_delay: float = Field(1.0, description="Base retry delay in seconds")
    retry_backoff: float = Field(2.0, description="Retry backoff multiplier")
    request_timeout: float = Field(60.0, description="Classifier request timeout in seconds")

    # Storage
    cache_dir: str = Field(".cache/classifier", description="Classifier response cache directory")
    projects_dir: str = Field(".sentipulse/projects", description="Saved project store directory")

    @field_validator("batch_size")
    @classmethod
    def _check_batch_size(cls, value: int) -> int:
        if not BatchConstants.MIN_BATCH_SIZE <= value <= BatchConstants.MAX_BATCH_SIZE:
            raise ValueError(
                f"batch_size must be between {BatchConstants.MIN_BATCH_SIZE} "
                f"and {BatchConstants.MAX_BATCH_SIZE}"
            )
        return value

    @field_validator("delay_ms")
    @classmethod
    def _check_delay(cls, value: int) -> int:
        if value < 0:
            raise ValueError("delay_ms must be >= 0")
        return value

    @field_validator("classifier_max_attempts")
    @classmethod
    def _check_attempts(cls, value: int) -> int:
        return max(1, value)


# Global settings instance
settings = Settings()
