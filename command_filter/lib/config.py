"""
Configuration loading for command-filter.

Precedence (highest first):
1. Environment variables (COMMAND_FILTER_DISABLED, COMMAND_FILTER_LOG_LEVEL)
2. YAML config file ($COMMAND_FILTER_CONFIG or <root>/config.yaml)
3. Built-in defaults

Example config.yaml:

    enabled: true
    max_summary_length: 500
    disabled_categories: [kubectl]
    rules:
      - pattern: "^bazel (build|test)"
        category: make
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from command_filter.lib.classifier import build_rules
from command_filter.lib.executor import DEFAULT_SHELL
from command_filter.lib.paths import get_config_path
from command_filter.lib.rules import Category, ClassifierRule

logger = logging.getLogger(__name__)

TRUTHY = {"1", "true", "yes", "on"}


class FilterConfig(BaseModel):
    """Validated command-filter settings."""

    enabled: bool = True
    rules: list[ClassifierRule] = Field(default_factory=list)
    disabled_categories: list[Category] = Field(default_factory=list)
    max_summary_length: int = Field(default=500, ge=80)
    tail_lines: int = Field(default=3, ge=1)
    shell: str = DEFAULT_SHELL
    log_level: str = "WARNING"

    def effective_rules(self) -> list[ClassifierRule]:
        """User rules followed by the defaults, minus disabled categories."""
        return build_rules(self.rules, self.disabled_categories)

    def log_level_number(self) -> int:
        """log_level as a logging constant; unknown names mean WARNING."""
        return logging.getLevelNamesMapping().get(self.log_level.upper(), logging.WARNING)


def load_config(path: Path | None = None) -> FilterConfig:
    """
    Load configuration from YAML file, then apply environment overrides.

    Args:
        path: Config file (defaults to get_config_path())

    Returns:
        FilterConfig. Defaults if the file is missing, unreadable or invalid.
    """
    path = path or get_config_path()
    config = FilterConfig()

    if path.exists():
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError(f"expected a mapping, got {type(data).__name__}")
            config = FilterConfig.model_validate(data)
        except (OSError, yaml.YAMLError, ValueError, ValidationError) as e:
            logger.warning(f"Ignoring invalid config {path}: {e}")

    disabled = os.environ.get("COMMAND_FILTER_DISABLED", "")
    if disabled.strip().lower() in TRUTHY:
        config.enabled = False

    level = os.environ.get("COMMAND_FILTER_LOG_LEVEL")
    if level:
        config.log_level = level

    return config
