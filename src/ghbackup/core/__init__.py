# src/ghbackup/core/__init__.py
"""Core infrastructure: Configuration, Logging, Checkpoints, Budget."""

from ghbackup.core.config import (
    BackupSettings,
    GitHubSettings,
    LoggingSettings,
    RequestPacingSettings,
    load_settings,
)
from ghbackup.core.logging import (
    configure_logging,
    get_logger,
)

__all__ = [
    "BackupSettings",
    "GitHubSettings",
    "LoggingSettings",
    "RequestPacingSettings",
    "configure_logging",
    "get_logger",
    "load_settings",
]
