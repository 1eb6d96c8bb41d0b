"""Configuration for commentctl: YAML file + COMMENTCTL_* environment."""

from commentctl.config.loader import ConfigLoadError, config_path, load_config, read_config_file
from commentctl.config.models import (
    CommentCtlConfig,
    DatabaseConfig,
    LoggingConfig,
    OutputConfig,
)

__all__ = [
    "CommentCtlConfig",
    "ConfigLoadError",
    "DatabaseConfig",
    "LoggingConfig",
    "OutputConfig",
    "config_path",
    "load_config",
    "read_config_file",
]
