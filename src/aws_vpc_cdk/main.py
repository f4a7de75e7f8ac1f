"""Command line entry point for inspecting subnet plans.

Usage:
    python -m aws_vpc_cdk.main plan 10.0.0.0/16 3
    python -m aws_vpc_cdk.main plan 10.0.0.0/16 3 --json
"""

import argparse
import json
import sys
from typing import Optional, Sequence

from . import logging_config  # noqa: F401  configures structlog
from .exceptions import ValidationError
from .logger import get_logger
from .subnets import PartitionResult, partition

logger = get_logger(__name__)


def format_plan(result: PartitionResult) -> str:
    lines = [
        f"base={result.base} subnet_prefix=/{result.subnet_prefix_length} "
        f"reserved_tiles={result.reserved_tiles}"
    ]
    for zone in result.zones:
        lines.append(f"zone {zone.zone_index}: private={zone.private} public={zone.public}")
    return "\n".join(lines)


def plan_as_dict(result: PartitionResult) -> dict:
    return {
        "base": str(result.base),
        "subnet_prefix_length": result.subnet_prefix_length,
        "reserved_tiles": result.reserved_tiles,
        "zones": [
            {"zone_index": zone.zone_index, "private": str(zone.private), "public": str(zone.public)}
            for zone in result.zones
        ],
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aws-vpc-cdk", description="Zoned VPC subnet tools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    plan = subparsers.add_parser("plan", help="Show the private/public subnets for each zone")
    plan.add_argument("base_cidr", help="VPC CIDR block, e.g. 10.0.0.0/16")
    plan.add_argument("zones", type=int, help="Number of availability zones")
    plan.add_argument("--json", action="store_true", help="Print the plan as JSON")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI and return the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        result = partition(args.base_cidr, args.zones)
    except ValidationError as e:
        logger.warning("plan_rejected", error=str(e), error_type=type(e).__name__)
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(plan_as_dict(result), indent=2))
    else:
        print(format_plan(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
