"""
Graceful failure utilities.

This module provides reusable context managers for handling non-critical
operations that should not block the main execution flow. It centralizes
the common "graceful degradation" pattern of:
1. Attempting an operation
2. Logging any exceptions with context
3. Continuing execution without raising

Usage:
    from iqscalar.core.graceful_failure import graceful_failure

    # Using as a context manager:
    with graceful_failure("fetch question bank", logger):
        document = fetch_document(source)

    # With custom log level (default is WARNING):
    with graceful_failure("record test history", logger, log_level=logging.ERROR):
        recorder.add_result(user_id, result)
"""

import logging
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Generator, Optional, TypeVar


# Type variable for decorator return type preservation
T = TypeVar("T")


@contextmanager
def graceful_failure(
    operation_name: str,
    logger: logging.Logger,
    *,
    log_level: int = logging.WARNING,
    exc_info: bool = False,
    context: Optional[dict[str, Any]] = None,
) -> Generator[None, None, None]:
    """Context manager for non-critical operations that should not block execution.

    Execute the wrapped code; on exception, log the error with context and
    continue. Use this where failure is acceptable and the main flow should
    carry on (e.g., remote bank fetch with a built-in fallback, history
    recording after a result has been scored).

    Args:
        operation_name: Human-readable name of the operation for logging
            (e.g., "fetch question bank").
        logger: The logger instance to use for logging errors.
        log_level: Logging level for error messages. Defaults to WARNING.
        exc_info: Whether to include exception traceback in log. Defaults to False.
        context: Optional dictionary of additional context to include in log message
            (e.g., {"source": "https://...", "user_id": "u1"}).

    Yields:
        None - the context manager is used for its side effects only.
    """
    try:
        yield
    except Exception as e:
        if context:
            context_str = ", ".join(f"{k}={v}" for k, v in context.items())
            message = f"Failed to {operation_name} ({context_str}): {e}"
        else:
            message = f"Failed to {operation_name}: {e}"

        logger.log(log_level, message, exc_info=exc_info)


class GracefulFailureDecorator:
    """Decorator class for handling non-critical operations in functions.

    Swallows exceptions and returns a default value on failure (None by default).

    Usage:
        @graceful_failure_decorator("load cached statistics", default={})
        def load_statistics(user_id: str) -> dict:
            ...
    """

    def __init__(
        self,
        operation_name: str,
        *,
        logger: Optional[logging.Logger] = None,
        log_level: int = logging.WARNING,
        exc_info: bool = False,
        default: Any = None,
    ):
        """Initialize the decorator.

        Args:
            operation_name: Human-readable name of the operation.
            logger: Logger to use. If None, uses the module's logger of the
                decorated function.
            log_level: Logging level for errors. Defaults to WARNING.
            exc_info: Whether to include stack trace. Defaults to False.
            default: Default value to return on failure. Defaults to None.
        """
        self.operation_name = operation_name
        self._logger = logger
        self.log_level = log_level
        self.exc_info = exc_info
        self.default = default

    def __call__(self, func: Callable[..., T]) -> Callable[..., Optional[T]]:
        """Decorate the function with graceful failure handling."""

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Optional[T]:
            logger = self._logger or logging.getLogger(func.__module__)

            with graceful_failure(
                self.operation_name,
                logger,
                log_level=self.log_level,
                exc_info=self.exc_info,
            ):
                return func(*args, **kwargs)

            # If we get here, an exception occurred and was swallowed
            return self.default

        return wrapper


# Convenience alias for the decorator
graceful_failure_decorator = GracefulFailureDecorator
