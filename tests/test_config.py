"""Tests for configuration loading and path resolution."""

import logging
from pathlib import Path

import pytest

from command_filter.lib.classifier import classify
from command_filter.lib.config import FilterConfig, load_config
from command_filter.lib.paths import display_path, get_config_path, get_latest_path, get_root_dir
from command_filter.lib.rules import Category


def test_defaults_when_config_missing(log_root: Path) -> None:
    config = load_config()
    assert config == FilterConfig()
    assert config.enabled is True
    assert config.max_summary_length == 500
    assert config.tail_lines == 3
    assert not log_root.exists()


def test_loads_yaml_config(write_config) -> None:
    write_config(
        """
enabled: true
max_summary_length: 300
tail_lines: 5
disabled_categories: [kubectl]
rules:
  - pattern: "^bazel (build|test)"
    category: make
"""
    )
    config = load_config()
    assert config.max_summary_length == 300
    assert config.tail_lines == 5

    rules = config.effective_rules()
    assert classify("bazel build //...", rules) == Category.MAKE
    assert classify("kubectl logs web", rules) == Category.NONE
    assert classify("npm install", rules) == Category.NPM


def test_config_file_under_root_is_found(log_root: Path) -> None:
    log_root.mkdir(parents=True)
    (log_root / "config.yaml").write_text("enabled: false\n")
    assert load_config().enabled is False


@pytest.mark.parametrize(
    "text",
    [
        "enabled: [unclosed\n",
        "- just\n- a list\n",
        "rules:\n  - pattern: '^x'\n    category: not-a-category\n",
        "rules:\n  - pattern: '^(bad'\n    category: make\n",
        "max_summary_length: 10\n",
    ],
)
def test_invalid_config_falls_back_to_defaults(write_config, text: str, caplog) -> None:
    write_config(text)
    with caplog.at_level(logging.WARNING):
        config = load_config()
    assert config == FilterConfig()
    assert "Ignoring invalid config" in caplog.text


def test_empty_config_file_is_defaults(write_config) -> None:
    write_config("")
    assert load_config() == FilterConfig()


@pytest.mark.parametrize("value", ["1", "true", "YES", "on"])
def test_env_disables(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("COMMAND_FILTER_DISABLED", value)
    assert load_config().enabled is False


def test_env_disable_ignores_falsy(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COMMAND_FILTER_DISABLED", "0")
    assert load_config().enabled is True


def test_env_log_level_overrides_file(write_config, monkeypatch: pytest.MonkeyPatch) -> None:
    write_config("log_level: INFO\n")
    monkeypatch.setenv("COMMAND_FILTER_LOG_LEVEL", "debug")
    config = load_config()
    assert config.log_level_number() == logging.DEBUG


def test_unknown_log_level_means_warning() -> None:
    assert FilterConfig(log_level="chatty").log_level_number() == logging.WARNING


def test_paths_follow_environment(log_root: Path, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    assert get_root_dir() == log_root
    assert get_latest_path() == log_root / "latest.log"
    assert get_config_path() == log_root / "config.yaml"

    monkeypatch.setenv("COMMAND_FILTER_CONFIG", str(tmp_path / "other.yaml"))
    assert get_config_path() == tmp_path / "other.yaml"

    monkeypatch.delenv("COMMAND_FILTER_HOME")
    assert get_root_dir() == Path.home() / ".command-filter"


def test_display_path_abbreviates_home() -> None:
    assert display_path(Path.home() / ".command-filter" / "latest.log") == "~/.command-filter/latest.log"


def test_display_path_keeps_paths_outside_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    assert display_path(tmp_path / "elsewhere" / "latest.log") == str(tmp_path / "elsewhere" / "latest.log")
