"""Configuration loading for the envguard server."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field


DEFAULT_DATA_DIR = Path.home() / ".envguard"

DEFAULT_EXCLUDE_DIRS = ["node_modules", ".git", "dist", "build"]
DEFAULT_EXCLUDE_GLOBS = ["*.min.js", "*.lock"]


class ServerConfig(BaseModel):
    """Server-level configuration."""
    # Tools may pass their own root; this is the fallback
    workspace_root: Path | None = None

    env_file_name: str = ".env"
    ignore_file_name: str = ".gitignore"

    # When False, scans report nothing
    enabled: bool = True

    # Bulk scan exclusions (env file variants are always excluded)
    exclude_dirs: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))
    exclude_globs: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_GLOBS))
    max_file_bytes: int = Field(default=1_000_000, ge=1)

    # How many leading lines to search for existing imports
    import_scan_lines: int = Field(default=200, ge=1)

    # Tool naming: strict by default (fail if SDK doesn't support canonical names)
    allow_noncanonical_tool_names: bool = False

    # Logging configuration
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR
    structured_logging: bool = True  # JSON format vs human-readable
    log_file: str | None = None  # Optional file path for logs


def load_config(config_path: Path | None = None) -> ServerConfig:
    """Load server configuration from YAML file.

    Args:
        config_path: Path to config file. Defaults to ~/.envguard/config.yaml

    Returns:
        ServerConfig instance
    """
    if config_path is None:
        config_path = DEFAULT_DATA_DIR / "config.yaml"

    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        return ServerConfig(**data)

    return ServerConfig()
