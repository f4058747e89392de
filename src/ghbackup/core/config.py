# src/ghbackup/core/config.py
"""
Configuration schema and loading for ghbackup runs.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

import re
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

# owner/name, as accepted by the GitHub API
_REPOSITORY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


class GitHubSettings(BaseModel):
    """Connection and target configuration for the GitHub remote.

    Example YAML:
        github:
          token: ghp_xxx
          user: octocat
          repository: octocat/hello-world
    """

    model_config = {"frozen": True}

    api_url: str = Field(
        default="https://api.github.com",
        description="Base URL of the GitHub REST API",
    )
    login: str | None = Field(
        default=None,
        description="User name sent alongside the token for basic authentication",
    )
    token: str | None = Field(
        default=None,
        description="Personal access token (raises the hourly limit from 60 to 5000)",
    )
    user: str | None = Field(
        default=None,
        description="GitHub user to back up",
    )
    repository: str | None = Field(
        default=None,
        description="Repository to back up as owner/name (defaults to the origin remote)",
    )
    timeout_seconds: float = Field(
        default=30.0, gt=0, description="Per-request timeout"
    )
    per_page: int = Field(
        default=100, gt=0, le=100, description="Page size for list endpoints"
    )

    @field_validator("repository")
    @classmethod
    def validate_repository(cls, v: str | None) -> str | None:
        """Repository must be given as owner/name."""
        if v is None:
            return v
        if not _REPOSITORY_PATTERN.match(v):
            raise ValueError(f"repository '{v}' must be in owner/name form")
        return v


class RequestPacingSettings(BaseModel):
    """Client-side request pacing.

    Pacing only spaces requests out; it never changes the per-run access
    budget, which comes from the remote's reported quota.
    """

    model_config = {"frozen": True}

    enabled: bool = Field(default=True, description="Throttle outgoing requests")
    requests_per_second: int = Field(
        default=10, gt=0, description="Maximum requests per second"
    )
    requests_per_minute: int | None = Field(
        default=None, gt=0, description="Optional maximum requests per minute"
    )


class LoggingSettings(BaseModel):
    """Logging output configuration."""

    model_config = {"frozen": True}

    level: Literal["debug", "info", "warning", "error"] = "info"
    json_output: bool = False


class BackupSettings(BaseModel):
    """Top-level ghbackup configuration.

    This is the single source of truth for a backup run.
    All settings are validated and frozen after construction.
    """

    model_config = {"frozen": True}

    git_dir: str | None = Field(
        default=None,
        description="Local git repository to store backups in (defaults to the cwd)",
    )
    clean: bool = Field(
        default=False,
        description="Discard any pending resume marker and run a full backup",
    )
    marker_file: str = Field(
        default="RESUME_FILE",
        description="Name of the resume marker file at the repository root",
    )
    branch_prefix: str = Field(
        default="backup-",
        description="Prefix for per-target backup branches",
    )
    github: GitHubSettings = Field(
        default_factory=GitHubSettings,
        description="GitHub connection and target",
    )
    pacing: RequestPacingSettings = Field(
        default_factory=RequestPacingSettings,
        description="Request pacing configuration",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    @field_validator("marker_file")
    @classmethod
    def validate_marker_file(cls, v: str) -> str:
        """Marker file must be a bare file name at the repository root."""
        if not v or "/" in v or "\\" in v:
            raise ValueError("marker_file must be a plain file name")
        return v

    def resolved_git_dir(self) -> Path:
        """Absolute path of the local repository."""
        if self.git_dir is None:
            return Path.cwd().resolve()
        return Path(self.git_dir).expanduser().resolve()


def _lower_keys(value: Any) -> Any:
    """Recursively lowercase mapping keys (Dynaconf upper-cases them)."""
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge overrides into base, ignoring None override values."""
    merged = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> BackupSettings:
    """Load settings from an optional YAML file, the environment and overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Explicit overrides (CLI flags) - highest priority
    2. Environment variables (GHBACKUP_*)
    3. Config file
    4. Defaults from Pydantic schema - lowest priority

    Environment variable format: GHBACKUP_GITHUB__TOKEN for nested keys.

    Args:
        config_path: Optional path to a YAML configuration file
        overrides: Nested dict of values that win over every other source;
            None values are ignored

    Returns:
        Validated BackupSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config_path is given but doesn't exist
    """
    from dynaconf import Dynaconf

    # Explicit check for file existence (Dynaconf silently accepts missing files)
    if config_path is not None and not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="GHBACKUP",
        settings_files=[str(config_path)] if config_path is not None else [],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = _lower_keys(
        {
            k: v
            for k, v in dynaconf_settings.as_dict().items()
            if k not in internal_keys
        }
    )
    return BackupSettings(**_merge(raw_config, overrides or {}))
