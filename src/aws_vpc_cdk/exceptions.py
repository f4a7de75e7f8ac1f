"""Custom exception hierarchy and error handling patterns.

This module defines application-specific exceptions with context support.
"""

from typing import Any


class AwsVpcCdkError(Exception):
    """Base exception for AWS VPC CDK.

    All custom exceptions should inherit from this class.
    Supports additional context via keyword arguments.
    """

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize exception with message and context.

        Args:
            message: Error message
            **context: Additional context as key-value pairs
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """String representation including context."""
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message


class ValidationError(AwsVpcCdkError):
    """Raised when validation fails."""

    pass


class InvalidAddressError(ValidationError):
    """Raised when a CIDR literal is not a valid IPv4 network."""

    pass


class InvalidArgumentError(ValidationError):
    """Raised when an argument is outside its accepted range."""

    pass


class CapacityError(ValidationError):
    """Raised when a base block cannot hold the requested subnets."""

    pass


class ConfigurationError(AwsVpcCdkError):
    """Raised when configuration is invalid."""

    pass


class ProvisioningError(AwsVpcCdkError):
    """Raised when a provisioning step fails unexpectedly."""

    pass
