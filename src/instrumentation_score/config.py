"""
Centralized configuration for instrumentation scoring.

Uses Pydantic BaseSettings for environment variable integration
and validation.

Configuration sources (in order of precedence):
1. Explicit constructor arguments
2. Environment variables (INSTRUMENTATION_SCORE_*)
3. .env file
4. Default values

Example:
    from instrumentation_score.config import get_config

    config = get_config()
    print(config.elasticsearch_endpoint)

    # Override at runtime
    config = get_config(elasticsearch_endpoint="https://es.internal:9200")
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LOGS_INDEX = "logs-*-otel-*"
DEFAULT_METRICS_INDEX = "metrics-*-otel-*"


class InstrumentationScoreConfig(BaseSettings):
    """
    Central configuration for instrumentation scoring.

    All settings can be overridden via environment variables
    prefixed with INSTRUMENTATION_SCORE_.

    Example:
        export INSTRUMENTATION_SCORE_ELASTICSEARCH_ENDPOINT=http://es:9200
        export INSTRUMENTATION_SCORE_ELASTICSEARCH_API_KEY=...
    """

    model_config = SettingsConfigDict(
        env_prefix="INSTRUMENTATION_SCORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    backend: Literal["elasticsearch"] = Field(
        default="elasticsearch",
        description="Telemetry backend to score",
    )

    # Elasticsearch
    elasticsearch_endpoint: str = Field(
        default="http://localhost:9200",
        description="Elasticsearch base URL",
    )
    elasticsearch_api_key: Optional[str] = Field(
        default=None,
        description="Encoded Elasticsearch API key",
    )
    logs_index: str = Field(
        default=DEFAULT_LOGS_INDEX,
        description="Index pattern holding OTel log records",
    )
    metrics_index: str = Field(
        default=DEFAULT_METRICS_INDEX,
        description="Index pattern holding OTel metric data points",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for each backend query",
    )

    # Rule thresholds
    metric_cardinality_threshold: int = Field(
        default=10000,
        ge=0,
        description="Highest tolerated distinct values per metric attribute key",
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log output format (json for Loki, text for console)",
    )

    @field_validator("elasticsearch_endpoint")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


# Global singleton
_config: Optional[InstrumentationScoreConfig] = None


def get_config(**overrides) -> InstrumentationScoreConfig:
    """
    Get the global configuration instance.

    Creates a singleton on first call. Subsequent calls return
    the same instance unless overrides are provided.
    """
    global _config

    if overrides or _config is None:
        _config = InstrumentationScoreConfig(**overrides)

    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
