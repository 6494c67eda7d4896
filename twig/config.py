"""
Configuration management for twig.

This module provides centralized configuration for:
- Repository layout and defaults
- Logging settings
"""

import os
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class RepositoryConfig(BaseModel):
    """Configuration for repository layout and defaults."""

    dir_name: str = Field(
        default=".twig", description="Name of the metadata directory in the work tree"
    )
    default_branch: str = Field(
        default="master", description="Branch created by init"
    )
    initial_message: str = Field(
        default="initial commit", description="Message of the root commit"
    )


class LogConfig(BaseModel):
    """Configuration for logging system."""

    level: LogLevel = Field(default="WARNING", description="Logging level")
    rotation: str = Field(default="10 MB", description="Log file rotation size")
    retention: str = Field(default="1 month", description="Log file retention period")
    log_dir: str = Field(default="logs", description="Directory for log files")
    enable_file_logging: bool = Field(
        default=False, description="Whether to enable file logging"
    )
    enable_console_logging: bool = Field(
        default=True, description="Whether to enable console logging"
    )


class Config(BaseModel):
    """Main configuration object for twig."""

    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    logging: LogConfig = Field(default_factory=LogConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        return cls(
            repository=RepositoryConfig(
                dir_name=os.getenv("TWIG_DIR", ".twig"),
                default_branch=os.getenv("TWIG_DEFAULT_BRANCH", "master"),
                initial_message=os.getenv("TWIG_INITIAL_MESSAGE", "initial commit"),
            ),
            logging=LogConfig(
                level=cast(LogLevel, os.getenv("TWIG_LOG_LEVEL", "WARNING")),
                log_dir=os.getenv("TWIG_LOG_DIR", "logs"),
                enable_file_logging=os.getenv("TWIG_LOG_TO_FILE", "").lower()
                in ("1", "true", "yes"),
            ),
        )


# Global configuration instance
config = Config.from_env()
