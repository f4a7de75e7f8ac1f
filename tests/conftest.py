"""Shared pytest fixtures for AWS VPC CDK."""

from pathlib import Path
from typing import Any

import pytest


@pytest.fixture
def project_root() -> Path:
    """Return the repository root (where config.yaml lives)."""
    return Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset environment variables and settings cache for each test."""
    from aws_vpc_cdk.settings import get_settings

    for var in ("ENVIRONMENT", "DEBUG", "LOG_LEVEL", "DEPLOY_ENVIRONMENT", "CONFIG_PATH"):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()


@pytest.fixture
def env_config() -> dict[str, Any]:
    """A single environment block as found in config.yaml."""
    return {
        "account": "123456789012",
        "region": "us-east-1",
        "vpc": {
            "description": "Test",
            "base_cidr": "10.0.0.0/16",
            "availability_zones": ["us-east-1a", "us-east-1b"],
        },
        "tags": {
            "Environment": "test",
            "Project": "aws-vpc",
        },
    }
