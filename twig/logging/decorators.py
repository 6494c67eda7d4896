"""
Decorators for automatic logging of repository operations.

These decorators enable traceability without cluttering engine logic.
"""

import functools
import time
from typing import Callable, Any
from .logger import get_twig_logger, log_repository_operation


def track_operation(operation_type: str, component: str = "repository") -> Callable:
    """
    Decorator to track a repository command.

    Logs the start, completion and failure of the command with elapsed time.
    Failures are re-raised unchanged.

    Args:
        operation_type: Command name (e.g., "commit", "merge")
        component: Component the log records are bound to

    Example:
        >>> @track_operation("commit")
        ... def commit(self, message: str) -> str:
        ...     ...
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            log = get_twig_logger(component)
            log_repository_operation(log, operation_type, event="start")

            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                elapsed_ms = (time.perf_counter() - start_time) * 1000
                log.info(
                    "Operation {} failed: {}",
                    operation_type,
                    e,
                    operation=operation_type,
                    error_type=type(e).__name__,
                    elapsed_ms=elapsed_ms,
                )
                raise

            elapsed_ms = (time.perf_counter() - start_time) * 1000
            log_repository_operation(
                log, operation_type, event="complete", elapsed_ms=elapsed_ms
            )
            return result

        return wrapper

    return decorator
