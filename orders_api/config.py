"""Application settings using Pydantic for environment-based configuration."""
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OpenTelemetry Configuration
    otel_exporter_otlp_endpoint: str = Field(
        default="http://localhost:4318", description="OTLP/HTTP collector base URL"
    )
    otel_service_name: str = Field(default="orders-api", description="service.name resource attribute")
    metric_export_interval_ms: int = Field(
        default=10000, gt=0, description="Periodic metric export interval (milliseconds)"
    )
    prometheus_enabled: bool = Field(
        default=False, description="Expose a Prometheus scrape endpoint at /metrics"
    )

    # Application Configuration
    environment: str = Field(default="development", description="deployment.environment resource attribute")
    log_level: str = Field(default="INFO", description="Logging level")

    # API Configuration
    host: str = Field(default="0.0.0.0", description="API host")
    port: int = Field(default=3000, description="API port")
    allowed_origins: str = Field(default="*", description="CORS allowed origins (comma-separated)")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("otel_exporter_otlp_endpoint")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Exporter paths are appended as /v1/<signal>."""
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v.upper()

    def get_allowed_origins_list(self) -> List[str]:
        """Parse allowed origins from comma-separated string."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
