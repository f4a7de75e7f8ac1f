"""AWS VPC CDK: zoned VPC provisioning with deterministic subnet partitioning."""

__version__ = "0.1.0"
