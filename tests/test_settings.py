"""Tests for settings and configuration."""

from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
from pydantic import ValidationError

from aws_vpc_cdk.config import (
    EndpointsConfig,
    Environment,
    FlowLogsConfig,
    LogLevel,
    Settings,
    TracingConfig,
    VpcConfig,
)
from aws_vpc_cdk.settings import get_settings


class TestSettings:
    """Test suite for Settings class."""

    def test_settings_defaults(self) -> None:
        """Test that settings have correct defaults."""
        settings = Settings()
        assert settings.environment == Environment.DEVELOPMENT
        assert settings.debug is False
        assert settings.log_level == LogLevel.INFO
        assert settings.app_name == "AWS VPC CDK"
        assert settings.deploy_environment == "DEV"
        assert settings.config_path.name == "config.yaml"
        assert settings.tracing.enabled is False

    def test_settings_from_env_vars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that settings can be loaded from environment variables."""
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("DEBUG", "true")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("DEPLOY_ENVIRONMENT", "prod")

        settings = Settings()

        assert settings.environment == Environment.PRODUCTION
        assert settings.debug is True
        assert settings.log_level == LogLevel.DEBUG
        assert settings.deploy_environment == "PROD"

    def test_settings_from_env_file(self) -> None:
        """Test that settings can be loaded from .env file."""
        with TemporaryDirectory() as tmpdir:
            env_file = Path(tmpdir) / ".env"
            env_file.write_text(
                "ENVIRONMENT=staging\n"
                "LOG_LEVEL=WARNING\n"
                "CONFIG_PATH=/etc/aws-vpc/config.yaml\n"
            )

            settings = Settings(_env_file=str(env_file))

            assert settings.environment == Environment.STAGING
            assert settings.log_level == LogLevel.WARNING
            assert settings.config_path == Path("/etc/aws-vpc/config.yaml")

    def test_settings_env_vars_override_env_file(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that environment variables override .env file values."""
        with TemporaryDirectory() as tmpdir:
            env_file = Path(tmpdir) / ".env"
            env_file.write_text("ENVIRONMENT=staging\n")

            monkeypatch.setenv("ENVIRONMENT", "production")

            settings = Settings(_env_file=str(env_file))

            assert settings.environment == Environment.PRODUCTION

    def test_settings_nested_tracing_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test nested configuration with double underscore delimiter."""
        monkeypatch.setenv("TRACING__ENABLED", "true")
        monkeypatch.setenv("TRACING__OTLP_ENDPOINT", "http://collector:4317")

        settings = Settings()

        assert settings.tracing.enabled is True
        assert settings.tracing.otlp_endpoint == "http://collector:4317"

    def test_settings_invalid_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "moon")

        with pytest.raises(ValidationError):
            Settings()

    def test_is_production(self) -> None:
        assert Settings(environment=Environment.PRODUCTION).is_production is True


class TestGetSettings:
    """Test suite for get_settings function."""

    def test_get_settings_caching(self) -> None:
        assert get_settings() is get_settings()

    def test_get_settings_with_env_changes(self, monkeypatch: pytest.MonkeyPatch) -> None:
        get_settings.cache_clear()
        monkeypatch.setenv("DEPLOY_ENVIRONMENT", "staging")

        assert get_settings().deploy_environment == "STAGING"


class TestVpcConfig:
    """Test suite for the network configuration models."""

    def test_minimal(self) -> None:
        config = VpcConfig(
            description="Test",
            base_cidr="10.0.0.0/16",
            availability_zones=["us-east-1a"],
        )

        assert config.zone_name is None
        assert config.base_tags == {}
        assert config.endpoints == EndpointsConfig()
        assert config.endpoints.any_enabled is False
        assert config.flow_logs == FlowLogsConfig()

    def test_blank_zone_name_means_no_zone(self) -> None:
        config = VpcConfig(
            description="Test",
            base_cidr="10.0.0.0/16",
            availability_zones=["us-east-1a"],
            zone_name="  ",
        )
        assert config.zone_name is None

    def test_requires_zones(self) -> None:
        with pytest.raises(ValidationError):
            VpcConfig(description="Test", base_cidr="10.0.0.0/16", availability_zones=[])

    def test_rejects_duplicate_zones(self) -> None:
        with pytest.raises(ValidationError, match="duplicates"):
            VpcConfig(
                description="Test",
                base_cidr="10.0.0.0/16",
                availability_zones=["us-east-1a", "us-east-1a"],
            )

    def test_rejects_unknown_keys(self) -> None:
        with pytest.raises(ValidationError):
            VpcConfig(
                description="Test",
                base_cidr="10.0.0.0/16",
                availability_zones=["us-east-1a"],
                nat_gateways=1,
            )

    def test_flow_log_traffic_type(self) -> None:
        assert FlowLogsConfig(traffic_type="REJECT").traffic_type == "REJECT"
        with pytest.raises(ValidationError):
            FlowLogsConfig(traffic_type="SOME")

    def test_flow_log_retention(self) -> None:
        assert FlowLogsConfig(retention="ONE_MONTH").retention == "ONE_MONTH"
        with pytest.raises(ValidationError, match="RetentionDays"):
            FlowLogsConfig(retention="FOREVER")

    def test_models_are_frozen(self) -> None:
        endpoints = EndpointsConfig(s3=True)

        with pytest.raises(ValidationError):
            endpoints.s3 = False

        with pytest.raises(ValidationError):
            TracingConfig().enabled = True
