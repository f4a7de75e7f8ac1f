"""CDK application assembly: config.yaml loading, validation and stack wiring."""

from pathlib import Path
from typing import Any, Optional

import aws_cdk as cdk
import yaml
from pydantic import ValidationError as PydanticValidationError

from .config import VpcConfig
from .exceptions import ConfigurationError
from .logger import LogContext, get_logger, log_function_call
from .project_settings import stack_name
from .stacks.vpc_stack import VPCStack

logger = get_logger(__name__)

REQUIRED_KEYS = ["account", "region", "vpc", "tags"]


def load_config(config_path: Path) -> dict[str, Any]:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to config.yaml

    Returns:
        Loaded configuration dictionary

    Raises:
        ConfigurationError: If the file is missing, not valid YAML, or empty
    """
    if not config_path.exists():
        raise ConfigurationError(
            "Configuration file not found", path=str(config_path)
        )

    try:
        with open(config_path, encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file: {e}", path=str(config_path)) from e

    if not config:
        raise ConfigurationError("Configuration file is empty", path=str(config_path))
    if not isinstance(config, dict):
        raise ConfigurationError("Configuration must be a mapping", path=str(config_path))

    return config


def validate_environment_config(config: dict[str, Any], environment: str) -> None:
    """Validate that the environment block exists and is well formed.

    Args:
        config: Full configuration dictionary
        environment: Environment name (e.g., 'DEV')

    Raises:
        ConfigurationError: If the environment block is missing or invalid
    """
    if environment not in config:
        available = [k for k in config.keys() if isinstance(k, str) and k.isupper()]
        raise ConfigurationError(
            f"Environment '{environment}' not found in config.yaml",
            available=", ".join(available) or "-",
        )

    env_config = config[environment]
    if not isinstance(env_config, dict):
        raise ConfigurationError(
            f"Configuration for {environment} must be a mapping",
            found=type(env_config).__name__,
        )

    missing_keys = [key for key in REQUIRED_KEYS if key not in env_config]
    if missing_keys:
        raise ConfigurationError(
            f"Missing required configuration keys for {environment}",
            missing=", ".join(missing_keys),
            required=", ".join(REQUIRED_KEYS),
        )

    if not isinstance(env_config["tags"], dict) or "Environment" not in env_config["tags"]:
        raise ConfigurationError(
            f"tags.Environment is required for {environment}"
        )

    try:
        VpcConfig.model_validate(env_config["vpc"])
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid vpc configuration for {environment}: {e.error_count()} error(s)",
            errors="; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
            ),
        ) from e


@log_function_call()
def build_app(
    config: dict[str, Any],
    environment: str,
    app: Optional[cdk.App] = None,
) -> cdk.App:
    """Create the CDK app holding the VPC stack for ``environment``.

    Args:
        config: Full configuration dictionary
        environment: Environment block to deploy
        app: Existing app to add the stack to (a new one by default)

    Returns:
        The CDK app, ready for ``synth()``
    """
    validate_environment_config(config, environment)
    env_config = config[environment]
    if app is None:
        app = cdk.App()

    env = cdk.Environment(
        account=str(env_config["account"]),
        region=env_config["region"],
    )

    name = stack_name(environment, "vpc")
    with LogContext(logger, stack=name, region=env_config["region"]) as log:
        log.info("stack_configuring", zones=len(env_config["vpc"]["availability_zones"]))
        VPCStack(
            app,
            name,
            env=env,
            config=env_config,
            description=f"{env_config['vpc']['description']} VPC network",
        )
        log.info("stack_configured")

    for key, value in env_config["tags"].items():
        cdk.Tags.of(app).add(key, str(value))

    return app


__all__ = ["build_app", "load_config", "validate_environment_config"]
