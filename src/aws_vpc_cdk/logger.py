"""Logger utilities and helpers."""

from functools import wraps
from time import perf_counter
from typing import Any, Callable, TypeVar

import structlog

F = TypeVar("F", bound=Callable[..., Any])


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger instance.

    Args:
        name: Logger name (defaults to calling module)

    Returns:
        Configured structlog logger

    Example:
        >>> from aws_vpc_cdk.logger import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("subnets_partitioned", zone_count=3)
    """
    return structlog.get_logger(name)


def log_function_call(logger: Any | None = None) -> Callable[[F], F]:
    """Decorator to log function calls with execution time.

    Failures are logged and re-raised unchanged.

    Args:
        logger: Optional logger instance (creates one if not provided)

    Returns:
        Decorated function
    """

    def decorator(func: F) -> F:
        nonlocal logger
        if logger is None:
            logger = get_logger(func.__module__)

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start = perf_counter()
            logger.debug(
                "function_call_start",
                function=func.__name__,
                args_count=len(args),
                kwargs_keys=list(kwargs.keys()),
            )

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    "function_call_error",
                    function=func.__name__,
                    error=str(e),
                    error_type=type(e).__name__,
                    duration_ms=round((perf_counter() - start) * 1000, 2),
                )
                raise
            logger.debug(
                "function_call_success",
                function=func.__name__,
                duration_ms=round((perf_counter() - start) * 1000, 2),
            )
            return result

        return wrapper  # type: ignore

    return decorator


class LogContext:
    """Context manager binding structured context to a logger.

    Example:
        >>> logger = get_logger(__name__)
        >>> with LogContext(logger, stack="dev-vpc") as ctx_logger:
        ...     ctx_logger.info("stack_synthesizing")
    """

    def __init__(self, logger: Any, **context: Any) -> None:
        self.logger = logger
        self.context = context
        self.bound_logger: Any = None

    def __enter__(self) -> Any:
        self.bound_logger = self.logger.bind(**self.context)
        return self.bound_logger

    def __exit__(self, *args: Any) -> None:
        pass


__all__ = ["get_logger", "log_function_call", "LogContext"]
