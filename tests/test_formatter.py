"""Tests for the PreToolUse response envelope."""

import json
import subprocess

import pytest

from command_filter.hooks.formatter import (
    DECISION_REASON,
    echo_command,
    format_response,
    quote_for_echo,
    render,
)


def test_response_envelope_shape() -> None:
    payload = json.loads(render(format_response("Build succeeded. (View full: cat x)")))
    assert payload == {
        "hookSpecificOutput": {
            "hookEventName": "PreToolUse",
            "permissionDecision": "allow",
            "permissionDecisionReason": DECISION_REASON,
            "updatedInput": {"command": 'echo "Build succeeded. (View full: cat x)"'},
        }
    }


def test_hook_event_name_is_echoed() -> None:
    output = format_response("ok", hook_event_name="BeforeTool")
    assert output.hookSpecificOutput.hookEventName == "BeforeTool"


def test_quote_for_echo_escapes_shell_specials() -> None:
    assert quote_for_echo('say "hi" \\ $HOME `id`') == 'say \\"hi\\" \\\\ \\$HOME \\`id\\`'


@pytest.mark.parametrize(
    "summary",
    [
        "plain text",
        'quotes "inside" here',
        "dollar $HOME and ${PATH}",
        "backticks `whoami` and $(id)",
        "backslash \\ and \\n literal",
        "single 'quotes' and ! bang",
    ],
)
def test_echo_command_prints_summary_verbatim(summary: str) -> None:
    result = subprocess.run(
        ["/bin/bash", "-c", echo_command(summary)], capture_output=True, text=True
    )
    assert result.returncode == 0
    assert result.stdout == summary + "\n"
