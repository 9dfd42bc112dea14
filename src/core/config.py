"""Centralized configuration management with environment-aware defaults.

This module implements the configuration system using Pydantic Settings,
providing type-safe configuration with validation and environment variable
support.

Features:
- **Type safety**: All configuration values are validated and typed
- **Environment variables**: Supports .env files and environment overrides
- **Nested configuration**: Uses __ delimiter for complex config structures
- **Caching**: Configuration is cached for performance

Configuration sources (in order of precedence):
1. Environment variables
2. .env file in project root
3. Default values in model definitions
"""

import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Statuses that are expected during normal operation and never reported
DEFAULT_IGNORED_STATUS_CODES = [301, 307, 308, 401, 402, 403, 404, 405, 409, 418, 422]


class LogConfig(BaseModel):
    """Logging and error reporting configuration."""

    log_level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = (
        Field(default="INFO", description="Logging level")
    )
    log_formatter_type: Literal["console", "json"] | None = Field(
        default=None,
        description="Log output formatter. Auto-detected if not specified.",
    )
    excluded_paths: list[str] = Field(
        default_factory=lambda: ["/health-check"],
        description="Paths to exclude from request logging",
    )
    slow_request_threshold_ms: int = Field(
        default=1000,
        gt=0,
        description="Threshold for slow request warnings (milliseconds)",
    )
    sensitive_fields: list[str] = Field(
        default_factory=lambda: [
            "password",
            "token",
            "secret",
            "api_key",
            "authorization",
        ],
        description="Field names to redact",
    )
    ignored_status_codes: list[int] = Field(
        default_factory=lambda: list(DEFAULT_IGNORED_STATUS_CODES),
        description="Error statuses that are not reported to logs and telemetry",
    )


class AuthConfig(BaseModel):
    """Bearer token verification settings for guarded routes."""

    secret: str = Field(
        default="change-me",
        description="Shared secret used to verify HS256 signatures",
    )
    audience: str | None = Field(
        default=None,
        description="Expected 'aud' claim. Not checked when unset.",
    )
    issuer: str | None = Field(
        default=None,
        description="Expected 'iss' claim. Not checked when unset.",
    )
    algorithm: Literal["HS256"] = Field(
        default="HS256",
        description="Signature algorithm; only HS256 is accepted",
    )
    leeway_seconds: int = Field(
        default=0,
        ge=0,
        description="Clock skew tolerated when checking exp/nbf claims",
    )

    @field_validator("audience", "issuer", mode="before")
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for nullable fields."""
        if v == "":
            return None
        return v


class ObservabilityConfig(BaseModel):
    """OpenTelemetry configuration."""

    enable_tracing: bool = Field(
        default=True,
        description="Enable OpenTelemetry tracing",
    )
    exporter_type: Literal["console", "otlp", "none"] = Field(
        default="console",
        description="Trace exporter type. Defaults to console for development.",
    )
    exporter_endpoint: str | None = Field(
        default=None,
        description="OTLP exporter endpoint",
    )
    trace_sample_rate: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Trace sampling rate (0.0 to 1.0)",
    )

    @field_validator("exporter_endpoint", mode="before")
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for nullable fields."""
        if v == "":
            return None
        return v


class Settings(BaseSettings):
    """Main settings class for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Application settings
    app_name: str = Field(default="Routekit", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Literal["development", "staging", "production", "test"] = Field(
        default="development",
        description="Environment the application is running in",
    )
    debug: bool = Field(default=False, description="Debug mode flag")

    # API settings
    api_host: str = Field(default="localhost", description="API host")
    api_port: int = Field(default=7050, description="API port")
    api_prefix: str = Field(
        default="",
        description="Path prefix applied to every registered route",
    )
    ssl_certfile: str | None = Field(default=None, description="TLS certificate")
    ssl_keyfile: str | None = Field(default=None, description="TLS private key")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to make credentialed cross-origin requests",
    )
    docs_url: str | None = Field(
        default="/docs", description="Swagger UI path, None to disable"
    )
    redoc_url: str | None = Field(
        default="/redoc", description="ReDoc path, None to disable"
    )
    openapi_url: str | None = Field(
        default="/openapi.json", description="OpenAPI schema path, None to disable"
    )

    log_config: LogConfig = Field(
        default_factory=LogConfig, description="Logging configuration"
    )
    auth_config: AuthConfig = Field(
        default_factory=AuthConfig, description="Authentication configuration"
    )
    observability_config: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig, description="Observability configuration"
    )

    def model_post_init(self, __context: object) -> None:
        """Post initialization to set environment-based defaults."""
        super().model_post_init(__context)

        if self.log_config.log_formatter_type is None:
            self.log_config.log_formatter_type = (
                "console" if self.environment in ("development", "test") else "json"
            )

        if (
            self.environment == "production"
            and self.observability_config.trace_sample_rate == 1.0
        ):
            self.observability_config.trace_sample_rate = 0.1

    @field_validator("api_prefix", mode="after")
    @classmethod
    def normalize_prefix(cls, v: str) -> str:
        """Ensure the prefix starts with a slash and never ends with one."""
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            v = f"/{v}"
        return v

    @field_validator(
        "ssl_certfile",
        "ssl_keyfile",
        "docs_url",
        "redoc_url",
        "openapi_url",
        mode="before",
    )
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for nullable fields."""
        if v == "":
            return None
        return v

    @property
    def tls_enabled(self) -> bool:
        """Whether uvicorn should serve over TLS."""
        return bool(self.ssl_certfile and self.ssl_keyfile)

    @property
    def base_url(self) -> str:
        """Public URL of the service, derived from host, port and TLS files."""
        protocol = "https://" if self.tls_enabled else "http://"
        port = int(os.environ.get("PORT", self.api_port))
        return f"{protocol}{self.api_host or 'localhost'}:{port}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
