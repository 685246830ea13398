"""
Path resolution for command-filter.

Optional environment variables:
- $COMMAND_FILTER_HOME: Log directory (default: ~/.command-filter)
- $COMMAND_FILTER_CONFIG: Config file (default: $COMMAND_FILTER_HOME/config.yaml)
"""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_DIRNAME = ".command-filter"
LATEST_NAME = "latest.log"
CONFIG_NAME = "config.yaml"


def get_root_dir() -> Path:
    """
    Get the log root directory.

    Returns:
        Path: $COMMAND_FILTER_HOME if set, else ~/.command-filter.
        The directory is not created here.
    """
    root = os.environ.get("COMMAND_FILTER_HOME")
    if root:
        return Path(root).expanduser()
    return Path.home() / DEFAULT_DIRNAME


def get_config_path() -> Path:
    """Get config file path ($COMMAND_FILTER_CONFIG or <root>/config.yaml)."""
    config = os.environ.get("COMMAND_FILTER_CONFIG")
    if config:
        return Path(config).expanduser()
    return get_root_dir() / CONFIG_NAME


def get_latest_path(root: Path | None = None) -> Path:
    """Get the latest.log pointer path."""
    return (root or get_root_dir()) / LATEST_NAME


def display_path(path: Path) -> str:
    """Render a path for humans, abbreviating the home directory to ~."""
    try:
        return "~/" + path.relative_to(Path.home()).as_posix()
    except ValueError:
        return str(path)
