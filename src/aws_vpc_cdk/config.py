"""Configuration management using Pydantic.

This module provides type-safe configuration with validation.
Settings are automatically loaded from .env file without needing load_dotenv().
The per-environment network layout lives in config.yaml and is validated into
the frozen models below.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Literal, Optional

from aws_cdk import aws_logs as logs
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Find .env file in project root (parent of src/)
_PACKAGE_DIR = Path(__file__).parent
_PROJECT_ROOT = _PACKAGE_DIR.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"
_CONFIG_FILE = _PROJECT_ROOT / "config.yaml"


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class TracingConfig(BaseModel):
    """OpenTelemetry tracing configuration."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    service_name: str = "aws_vpc_cdk"
    otlp_endpoint: Optional[str] = None


class EndpointsConfig(BaseModel):
    """Gateway endpoints to attach to the VPC route tables."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    s3: bool = False
    dynamodb: bool = False

    @property
    def any_enabled(self) -> bool:
        return self.s3 or self.dynamodb


class FlowLogsConfig(BaseModel):
    """VPC flow logging to CloudWatch Logs."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = False
    traffic_type: Literal["ALL", "ACCEPT", "REJECT"] = "ALL"
    # Member name of aws_logs.RetentionDays
    retention: str = "ONE_WEEK"

    @field_validator("retention")
    @classmethod
    def validate_retention(cls, v: str) -> str:
        """Reject retention names CloudWatch Logs does not offer."""
        if v not in logs.RetentionDays.__members__:
            raise ValueError(f"retention must be an aws_logs.RetentionDays member name, got {v!r}")
        return v


class VpcConfig(BaseModel):
    """Network layout for a single VPC."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    description: str
    base_cidr: str
    availability_zones: list[str] = Field(min_length=1)
    zone_name: Optional[str] = None
    base_tags: dict[str, str] = Field(default_factory=dict)
    endpoints: EndpointsConfig = Field(default_factory=EndpointsConfig)
    flow_logs: FlowLogsConfig = Field(default_factory=FlowLogsConfig)

    @field_validator("availability_zones")
    @classmethod
    def validate_unique_zones(cls, v: list[str]) -> list[str]:
        """Reject duplicated availability zone names."""
        if len(set(v)) != len(v):
            raise ValueError("availability_zones must not contain duplicates")
        return v

    @field_validator("zone_name", mode="before")
    @classmethod
    def blank_zone_name_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings are loaded from:
    1. Environment variables (highest priority)
    2. .env file in project root (if it exists)
    3. Default values (lowest priority)

    The .env file is located at: <project_root>/.env
    """

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Basic settings
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False
    log_level: LogLevel = LogLevel.INFO

    # Application metadata
    app_name: str = "AWS VPC CDK"
    app_version: str = "0.1.0"

    # Deployment target: an upper-case environment block in config.yaml
    deploy_environment: str = "DEV"
    config_path: Path = _CONFIG_FILE

    # Tracing
    tracing: TracingConfig = Field(default_factory=TracingConfig)

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: Any) -> Environment:
        """Validate and convert environment string."""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @field_validator("deploy_environment", mode="before")
    @classmethod
    def upper_deploy_environment(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == Environment.PRODUCTION
