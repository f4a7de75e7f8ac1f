"""Project-wide naming and tagging helpers.

Constants in CAPS; every name derived here is deterministic so that reruns
never rename (and therefore replace) existing resources.
"""
from collections.abc import Mapping

from aws_cdk import CfnTag

PROJECT_NAME = "aws-vpc"

# Public and private route tables both send everything else here
DEFAULT_ROUTE_CIDR = "0.0.0.0/0"

FLOW_LOG_TRAFFIC_TYPES = ("ALL", "ACCEPT", "REJECT")


def stack_name(environment: str, component: str) -> str:
    """Generate deterministic stack name.

    Args:
        environment: Environment name (e.g., 'dev')
        component: Component name (e.g., 'vpc')

    Returns:
        Formatted stack name
    """
    return f"{PROJECT_NAME}-{environment.lower()}-{component}"


def resource_name(environment: str, resource_type: str, suffix: str = "") -> str:
    """Generate deterministic resource name.

    Args:
        environment: Environment name
        resource_type: Type of resource (e.g., 'vpc', 'flow-logs')
        suffix: Optional suffix for additional specificity

    Returns:
        Formatted resource name
    """
    base = f"{PROJECT_NAME}-{environment.lower()}-{resource_type}"
    return f"{base}-{suffix}" if suffix else base


def merge_tags(base: Mapping[str, str], overrides: Mapping[str, str]) -> dict[str, str]:
    """Merge two tag maps into a new dict; ``overrides`` wins on conflict."""
    merged = dict(base)
    merged.update(overrides)
    return merged


def to_cfn_tags(tags: Mapping[str, str]) -> list[CfnTag]:
    """Render a tag map as CloudFormation tags, sorted by key."""
    return [CfnTag(key=key, value=tags[key]) for key in sorted(tags)]
