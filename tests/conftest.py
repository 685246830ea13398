"""Shared fixtures for command-filter tests."""

import io
import json
import sys
from pathlib import Path
from typing import Any

import pytest

from command_filter.hooks import smart_bash
from command_filter.lib.log_store import LogStore


@pytest.fixture(autouse=True)
def log_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point command-filter at a per-test log directory (not created yet)."""
    root = tmp_path / "command-filter"
    monkeypatch.setenv("COMMAND_FILTER_HOME", str(root))
    monkeypatch.delenv("COMMAND_FILTER_CONFIG", raising=False)
    monkeypatch.delenv("COMMAND_FILTER_DISABLED", raising=False)
    monkeypatch.delenv("COMMAND_FILTER_LOG_LEVEL", raising=False)
    return root


@pytest.fixture
def store(log_root: Path) -> LogStore:
    return LogStore(log_root)


@pytest.fixture
def write_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Write a YAML config file and point COMMAND_FILTER_CONFIG at it."""

    def _write(text: str) -> Path:
        path = tmp_path / "config.yaml"
        path.write_text(text)
        monkeypatch.setenv("COMMAND_FILTER_CONFIG", str(path))
        return path

    return _write


@pytest.fixture
def run_hook(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]):
    """Run the hook's main() with a stdin payload; return (stdout, parsed JSON or None)."""

    def _run(payload: dict[str, Any] | str) -> tuple[str, dict[str, Any] | None]:
        text = payload if isinstance(payload, str) else json.dumps(payload)
        monkeypatch.setattr(sys, "stdin", io.StringIO(text))
        with pytest.raises(SystemExit) as exc_info:
            smart_bash.main()
        assert exc_info.value.code == 0
        out = capsys.readouterr().out
        return out, (json.loads(out) if out.strip() else None)

    return _run
