"""Pydantic configuration models with validation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/extract/logging).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(
        default="hubcloud-extractor", description="Application name."
    )
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # Outbound HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Timeout in seconds for each upstream request.",
    )
    http_max_redirects: int = Field(
        default=5,
        validation_alias=AliasChoices(
            "http_max_redirects",
            AliasPath("http", "max_redirects"),
        ),
        description="Maximum redirect hops followed for page fetches.",
    )
    http_max_connections: int = Field(
        default=20,
        validation_alias=AliasChoices(
            "http_max_connections",
            AliasPath("http", "max_connections"),
        ),
        description="Upper bound on concurrent outbound connections.",
    )

    # Extraction pipeline (YAML section: extract.*)
    extract_timeout_seconds: float = Field(
        default=60.0,
        validation_alias=AliasChoices(
            "extract_timeout_seconds",
            AliasPath("extract", "timeout_seconds"),
        ),
        description=(
            "Deadline for a whole extraction; when it elapses the request is "
            "cancelled and yields no links. 0 disables the deadline."
        ),
    )
    extract_max_concurrent_resolves: int = Field(
        default=5,
        validation_alias=AliasChoices(
            "extract_max_concurrent_resolves",
            AliasPath("extract", "max_concurrent_resolves"),
        ),
        description="Max candidates classified in parallel per extraction.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @field_validator("http_max_redirects")
    @classmethod
    def _validate_max_redirects(cls, v: int) -> int:
        if v < 0:
            raise ValueError("http_max_redirects must be >= 0")
        return v

    @field_validator("http_max_connections", "extract_max_concurrent_resolves")
    @classmethod
    def _validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("value must be > 0")
        return v

    @field_validator("extract_timeout_seconds")
    @classmethod
    def _validate_extract_timeout(cls, v: float) -> float:
        if v < 0:
            raise ValueError("extract_timeout_seconds must be >= 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "max_redirects": self.http_max_redirects,
                "max_connections": self.http_max_connections,
            },
            "extract": {
                "timeout_seconds": self.extract_timeout_seconds,
                "max_concurrent_resolves": self.extract_max_concurrent_resolves,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    load.py creates EnvOverrides() to read HUBCLOUD_* variables, converts
    the set values to a dict and merges it over YAML/defaults before the
    final AppConfig validation.

    Supported env var examples (flat, explicit):
    - HUBCLOUD_HTTP_TIMEOUT_SECONDS
    - HUBCLOUD_EXTRACT_MAX_CONCURRENT_RESOLVES
    - HUBCLOUD_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="HUBCLOUD_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_max_redirects: Optional[int] = None
    http_max_connections: Optional[int] = None

    extract_timeout_seconds: Optional[float] = None
    extract_max_concurrent_resolves: Optional[int] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
