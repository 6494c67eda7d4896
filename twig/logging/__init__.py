"""
Logging infrastructure for twig.

Provides structured loguru logging and decorators for tracking commands.
"""

from .logger import (
    TwigLogger,
    get_twig_logger,
    initialize_logging,
    get_logger_instance,
    log_repository_operation,
)

from .decorators import track_operation

__all__ = [
    # Logger
    "TwigLogger",
    "get_twig_logger",
    "initialize_logging",
    "get_logger_instance",
    "log_repository_operation",
    # Decorators
    "track_operation",
]
