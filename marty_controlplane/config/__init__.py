"""
Configuration management for the Marty control plane.

This module provides a unified configuration system that supports:
- YAML configuration files
- Environment variable overrides
- Type validation and conversion
"""

from enum import Enum
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..exceptions import ConfigurationError
from ..resilience import AttemptStrategy

DEFAULT_ENV_PREFIX = "CONTROLPLANE_"


class Environment(str, Enum):
    """Supported deployment environments."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ClusterConfig(BaseModel):
    """Cluster configuration read by the endpoint locator."""

    name: str = Field(default="default", description="Cluster name")
    uuid: Optional[str] = Field(default=None, description="Cluster identity")
    ca_cert: Optional[str] = Field(
        default=None, description="PEM encoded CA certificate of the API servers"
    )
    api_port: int = Field(default=17070, description="Control plane API port")
    state_port: int = Field(default=37017, description="State store port")

    @field_validator("api_port", "state_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError(f"port {v} out of range")
        return v

    @property
    def has_ca_cert(self) -> bool:
        return bool(self.ca_cert)

    @property
    def has_uuid(self) -> bool:
        return bool(self.uuid)

    def ca_cert_bytes(self) -> Optional[bytes]:
        """Return the CA certificate as bytes, or None when it is not set."""
        if not self.ca_cert:
            return None
        return self.ca_cert.encode()


class AttemptConfig(BaseModel):
    """Attempt strategy configuration."""

    total: float = Field(default=180.0, description="Total duration in seconds")
    delay: float = Field(default=1.0, description="Delay between attempts in seconds")
    min_attempts: int = Field(default=0, description="Attempts made regardless of total")

    @model_validator(mode="after")
    def validate_schedule(self) -> "AttemptConfig":
        if self.total < 0 or self.delay < 0 or self.min_attempts < 0:
            raise ValueError("attempt settings must not be negative")
        if self.delay > self.total:
            raise ValueError("attempt delay must not exceed total")
        if self.total > 0 and self.delay == 0:
            raise ValueError("attempt delay must be positive when total is set")
        return self

    def to_strategy(self) -> AttemptStrategy:
        return AttemptStrategy(
            total=self.total, delay=self.delay, min_attempts=self.min_attempts
        )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    service_name: str = Field(default="marty-controlplane", description="Service name")
    level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    format: str = Field(default="json", description="Log format (json|console)")
    log_file: Optional[str] = Field(default=None, description="Optional log file")

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v not in ("json", "console"):
            raise ValueError("log format must be 'json' or 'console'")
        return v


class ControlPlaneConfig(BaseSettings):
    """Main control plane configuration class."""

    model_config = SettingsConfigDict(
        env_prefix=DEFAULT_ENV_PREFIX,
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    environment: Environment = Field(default=Environment.DEVELOPMENT)
    cluster: ClusterConfig = Field(default_factory=ClusterConfig)
    addresses_refresh: AttemptConfig = Field(default_factory=AttemptConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, file_path: str | Path) -> "ControlPlaneConfig":
        """Load configuration from YAML file."""
        try:
            with open(file_path) as f:
                data = yaml.safe_load(f) or {}
            return cls(**data)
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {file_path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML configuration: {e}")
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}")

    @classmethod
    def from_env(cls, env_prefix: str = DEFAULT_ENV_PREFIX) -> "ControlPlaneConfig":
        """Load configuration from environment variables."""
        try:
            return cls(_env_prefix=env_prefix)
        except ValidationError as e:
            raise ConfigurationError(
                f"Environment configuration validation failed: {e}"
            )

    def to_yaml(self, file_path: str | Path) -> None:
        """Save configuration to YAML file."""
        try:
            with open(file_path, "w") as f:
                yaml.safe_dump(
                    self.model_dump(mode="json"), f, default_flow_style=False, indent=2
                )
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration: {e}")


def load_config(
    yaml_file: str | Path | None = None,
    env_prefix: str = DEFAULT_ENV_PREFIX,
    environment: Environment | None = None,
) -> ControlPlaneConfig:
    """
    Load configuration with automatic source detection.

    Priority order:
    1. YAML file (if provided and present)
    2. Environment variables
    3. Defaults
    """
    if yaml_file and Path(yaml_file).exists():
        config = ControlPlaneConfig.from_yaml(yaml_file)
    else:
        config = ControlPlaneConfig.from_env(env_prefix)

    if environment:
        config.environment = environment

    return config


__all__ = [
    "AttemptConfig",
    "ClusterConfig",
    "ControlPlaneConfig",
    "Environment",
    "LogLevel",
    "LoggingConfig",
    "load_config",
]
